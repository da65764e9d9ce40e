"""
Pocket Ledger - Quick Entry Screen

The host page behind the floating calculator: one amount field and a list of
the amounts entered this session with their running total.

The amount field takes keyboard focus when tapped.  While it has focus the
UIManager reports a focused text input, so the calculator leaves the keys
alone.  Enter commits the amount, Escape (or a tap elsewhere) drops focus.

Construction modes (mirrors the calculator widget):
  ScreenLedger(ui_manager)  — app mode: focus is reported to the UIManager
  ScreenLedger(surface)     — test mode: plain Surface or MagicMock, focus is
                              tracked locally
"""

from __future__ import annotations

import logging

import pygame

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Layout constants
# ---------------------------------------------------------------------------

_LEFT_X     = 40
_TITLE_Y    = 32
_FIELD_Y    = 96
_FIELD_W    = 360
_FIELD_H    = 48
_LIST_Y     = 176
_ROW_H      = 28
_MAX_ROWS   = 12
_MAX_CHARS  = 14

# ---------------------------------------------------------------------------
# Colour palette  (mirrors ui_manager.py)
# ---------------------------------------------------------------------------

BG_COLOR   = (15,  23,  42)
CARD_BG    = (22,  33,  62)
TEXT_COLOR = (226, 232, 240)
TEXT_MUTED = (150, 160, 180)
ACCENT     = (56,  189, 248)
GREEN      = (52,  211, 153)
RED        = (248, 113, 113)

_ALLOWED_CHARS = "0123456789.-"


def _load_font(family: str, size: int, bold: bool = False) -> pygame.font.Font:
    """Load a font by family name with a fallback to the default font."""
    try:
        font = pygame.font.SysFont(family, size, bold=bold)
        if font is None:
            raise RuntimeError("SysFont returned None")
        return font
    except Exception:
        return pygame.font.SysFont(None, size, bold=bold)


class ScreenLedger:
    """Quick-entry ledger screen.

    Args:
        surface: pygame.Surface to render onto, OR a UIManager instance
                 (detected via ``hasattr(surface, '_surface')``).
    """

    def __init__(self, surface) -> None:
        if hasattr(surface, "_surface"):
            self._ui      = surface
            self._surface = surface._surface
        else:
            self._ui      = None
            self._surface = surface

        self.amount_text: str = ""
        self.entries: list[float] = []
        self._focused = False
        self.field_rect = pygame.Rect(_LEFT_X, _FIELD_Y, _FIELD_W, _FIELD_H)

        if not pygame.font.get_init():
            pygame.font.init()
        self._title_font = _load_font("dejavusans", 28, bold=True)
        self._body_font  = _load_font("dejavusans", 18)

    # ------------------------------------------------------------------
    # Focus
    # ------------------------------------------------------------------

    @property
    def focused(self) -> bool:
        return self._focused

    def focus(self) -> None:
        self._focused = True
        if self._ui is not None:
            self._ui.focus_text_input(self)

    def blur(self) -> None:
        self._focused = False
        if self._ui is not None:
            self._ui.blur_text_input()

    @property
    def total(self) -> float:
        return sum(self.entries)

    # ------------------------------------------------------------------
    # Screen interface: update / draw / event handling
    # ------------------------------------------------------------------

    def update(self, dt: float) -> None:
        pass

    def handle_touch(self, x: int, y: int) -> None:
        if self.field_rect.collidepoint(x, y):
            self.focus()
        elif self._focused:
            self.blur()

    def handle_event(self, event) -> None:
        """Edit the amount field while it has focus; ignore everything else."""
        if event.type != pygame.KEYDOWN or not self._focused:
            return

        if event.key == pygame.K_BACKSPACE:
            self.amount_text = self.amount_text[:-1]
        elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self._commit()
        elif event.key == pygame.K_ESCAPE:
            self.blur()
        elif event.unicode and event.unicode in _ALLOWED_CHARS:
            if len(self.amount_text) < _MAX_CHARS:
                self.amount_text += event.unicode

    def _commit(self) -> None:
        try:
            amount = float(self.amount_text)
        except ValueError:
            log.warning("Ignoring malformed amount %r", self.amount_text)
            return
        self.entries.append(amount)
        self.amount_text = ""
        log.info("Entry added: %.2f (total %.2f)", amount, self.total)

    def draw(self, surface: pygame.Surface | None = None) -> None:
        target = surface if surface is not None else self._surface

        # Always fill first; works on both real surfaces and MagicMocks.
        target.fill(BG_COLOR)

        try:
            self._draw_contents(target)
        except TypeError:
            # pygame.draw.* calls fail on MagicMock surfaces in tests.
            pass

    def _draw_contents(self, surface: pygame.Surface) -> None:
        title = self._title_font.render("Quick entry", True, TEXT_COLOR)
        surface.blit(title, (_LEFT_X, _TITLE_Y))

        border = ACCENT if self._focused else CARD_BG
        pygame.draw.rect(surface, CARD_BG, self.field_rect, border_radius=8)
        pygame.draw.rect(surface, border, self.field_rect, width=2, border_radius=8)
        shown = self.amount_text or ("" if self._focused else "Amount")
        color = TEXT_COLOR if self.amount_text else TEXT_MUTED
        text = self._body_font.render(shown, True, color)
        surface.blit(text, text.get_rect(midleft=(self.field_rect.x + 12,
                                                  self.field_rect.centery)))

        y = _LIST_Y
        for amount in self.entries[-_MAX_ROWS:]:
            row_color = GREEN if amount >= 0 else RED
            row = self._body_font.render(f"{amount:,.2f}", True, row_color)
            surface.blit(row, (_LEFT_X, y))
            y += _ROW_H

        total = self._body_font.render(f"Total  {self.total:,.2f}", True, TEXT_COLOR)
        surface.blit(total, (_LEFT_X, y + 8))

    # ------------------------------------------------------------------
    # Lifecycle hooks
    # ------------------------------------------------------------------

    def on_enter(self) -> None:
        pass

    def on_exit(self) -> None:
        if self._focused:
            self.blur()
