"""
Pocket Ledger - Floating Calculator Widget

A draggable, resizable calculator window drawn on the host's overlay layer.

Layout (all rects derived from the current WindowGeometry):

  HEADER   (top 36 px)      "CALCULATOR" title + close control; drag region
  DISPLAY  (flexible)       equation sub-line above the main display; drag region
  KEYPAD   (bottom)         4 × 5 button grid
  HANDLE   (20 × 20)        bottom-right corner; resize region

Pointer presses are routed in priority order: resize handle, close control,
keypad, then header / display (drag).  Keyboard input is routed through
keymap.KeyRouter and is ignored while a host text field has focus.

Construction modes (mirrors the host's other screens):
  CalculatorWidget(ui_manager, on_close)   — app mode: surface, pointer
                                             listeners and focus probe are
                                             taken from the UIManager
  CalculatorWidget(surface, on_close, listeners=..., text_input_focused=...)
                                           — test / preview mode
"""

from __future__ import annotations

import logging
from typing import Callable

import pygame

import config
from calc_engine import (
    ADD, DIV, MUL, SUB, OPERATORS,
    CalculatorState, Backspace, Clear, DecimalPoint, Digit, Equals, Percent,
    PressOperator, ToggleSign,
    active_operator, dispatch, equation_line, is_idle_at_zero,
)
from keymap import KeyRouter
from window_controller import WindowController

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Layout constants
# ---------------------------------------------------------------------------

HEADER_H      = 36
PAD           = 12      # inner padding around keypad and display
GAP           = 8       # gap between keypad buttons
MIN_DISPLAY_H = 96
CLOSE_SIZE    = 24
WINDOW_RADIUS = 24

# ---------------------------------------------------------------------------
# Colour palette
# ---------------------------------------------------------------------------

WINDOW_BG     = (28,  28,  30)
WINDOW_BORDER = (52,  52,  55)
TEXT_COLOR    = (255, 255, 255)
TEXT_MUTED    = (142, 142, 147)
HANDLE_COLOR  = (90,  90,  95)

_FUNC_STYLE = ((165, 165, 165), (0,   0,   0))    # AC ⌫ %
_OP_STYLE   = ((255, 159, 10),  (255, 255, 255))  # ÷ × − + =
_NUM_STYLE  = ((51,  51,  51),  (255, 255, 255))  # digits . ±

# ---------------------------------------------------------------------------
# Keypad layout definition
# Row 0: AC ⌫ % ÷
# Row 1: 7  8 9 ×
# Row 2: 4  5 6 −
# Row 3: 1  2 3 +
# Row 4: ±  0 . =
# ---------------------------------------------------------------------------

CLEAR_KEY = "AC"
BACKSPACE_KEY = "⌫"
SIGN_KEY = "±"

_KEYPAD_LAYOUT = [
    [CLEAR_KEY, BACKSPACE_KEY, "%", DIV],
    ["7",       "8",           "9", MUL],
    ["4",       "5",           "6", SUB],
    ["1",       "2",           "3", ADD],
    [SIGN_KEY,  "0",           ".", "="],
]

_FUNC_KEYS = (CLEAR_KEY, BACKSPACE_KEY, "%")


def action_for_label(label: str):
    """Map a keypad label to a calculator action."""
    if label.isdigit():
        return Digit(label)
    if label in OPERATORS:
        return PressOperator(label)
    actions = {
        ".":           DecimalPoint(),
        "=":           Equals(),
        CLEAR_KEY:     Clear(),
        BACKSPACE_KEY: Backspace(),
        "%":           Percent(),
        SIGN_KEY:      ToggleSign(),
    }
    return actions[label]


def _key_style(label: str) -> tuple:
    if label in _FUNC_KEYS:
        return _FUNC_STYLE
    if label in OPERATORS or label == "=":
        return _OP_STYLE
    return _NUM_STYLE


# ---------------------------------------------------------------------------
# Derived sizes
# ---------------------------------------------------------------------------

def display_font_size(display: str) -> int:
    """Shrink the main display font as the text grows."""
    for min_len, size in config.DISPLAY_FONT_TIERS:
        if len(display) > min_len:
            return size
    return config.DISPLAY_FONT_TIERS[-1][1]


def button_font_size(window_width: int) -> int:
    return 20 if window_width < config.BUTTON_FONT_SMALL_BELOW_W else 24


# ---------------------------------------------------------------------------
# Font helpers  (module-level cache, safe to call multiple times)
# ---------------------------------------------------------------------------

_FONT_CACHE: dict[tuple[int, bool], pygame.font.Font] = {}


def _load_font(family: str, size: int, bold: bool = False) -> pygame.font.Font:
    """Load a font by family name with a fallback to the default font."""
    try:
        font = pygame.font.SysFont(family, size, bold=bold)
        if font is None:
            raise RuntimeError("SysFont returned None")
        return font
    except Exception:
        return pygame.font.SysFont(None, size, bold=bold)


def _font(size: int, bold: bool = False) -> pygame.font.Font:
    key = (size, bold)
    if key not in _FONT_CACHE:
        if not pygame.font.get_init():
            pygame.font.init()
        _FONT_CACHE[key] = _load_font("dejavusans", size, bold=bold)
    return _FONT_CACHE[key]


def _draw_text(
    surface: pygame.Surface,
    text: str,
    font: pygame.font.Font,
    color: tuple,
    x: int,
    y: int,
    anchor: str = "topleft",
) -> pygame.Rect:
    """Render *text* onto *surface* at the given anchor position."""
    surf = font.render(text, True, color)
    rect = surf.get_rect()
    setattr(rect, anchor, (x, y))
    surface.blit(surf, rect)
    return rect


# ---------------------------------------------------------------------------
# CalculatorWidget
# ---------------------------------------------------------------------------

class CalculatorWidget:
    """Floating calculator: arithmetic engine + drag/resize window.

    Args:
        surface:            pygame.Surface to draw onto, OR a UIManager
                            (detected via ``hasattr(surface, '_surface')``).
        on_close:           Called with no arguments when the user asks to
                            close the calculator.
        listeners:          Global pointer listener registry; required when
                            *surface* is a plain Surface.
        text_input_focused: Focus probe; defaults to "never focused".
    """

    def __init__(
        self,
        surface,
        on_close: Callable[[], None],
        listeners=None,
        text_input_focused: Callable[[], bool] | None = None,
    ) -> None:
        if hasattr(surface, "_surface"):
            # App mode: UIManager passed as 'surface'
            self._surface = surface._surface
            if listeners is None:
                listeners = surface.pointer_listeners
            if text_input_focused is None:
                text_input_focused = surface.is_text_input_focused
        else:
            self._surface = surface

        if listeners is None:
            raise ValueError("CalculatorWidget needs a pointer listener registry")

        self._on_close = on_close
        self.state = CalculatorState()
        self.window = WindowController(listeners, self._surface.get_size())
        self.keys = KeyRouter(self.apply, text_input_focused or (lambda: False))

        # Pressed key tracking for visual feedback (label string or None)
        self._pressed_key: str | None = None

        if not pygame.font.get_init():
            pygame.font.init()

    # ------------------------------------------------------------------
    # Engine
    # ------------------------------------------------------------------

    def apply(self, action) -> None:
        self.state = dispatch(self.state, action)

    @property
    def clear_label(self) -> str:
        return "AC" if is_idle_at_zero(self.state) else "C"

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    @property
    def rect(self) -> pygame.Rect:
        return self.window.geometry.rect

    def header_rect(self) -> pygame.Rect:
        r = self.rect
        return pygame.Rect(r.x, r.y, r.width, HEADER_H)

    def close_rect(self) -> pygame.Rect:
        r = self.rect
        return pygame.Rect(r.right - PAD - CLOSE_SIZE,
                           r.y + (HEADER_H - CLOSE_SIZE) // 2,
                           CLOSE_SIZE, CLOSE_SIZE)

    def handle_rect(self) -> pygame.Rect:
        r = self.rect
        size = config.RESIZE_HANDLE
        return pygame.Rect(r.right - size, r.bottom - size, size, size)

    def _button_size(self) -> tuple[int, int]:
        r = self.rect
        cols, rows = 4, len(_KEYPAD_LAYOUT)
        bw = (r.width - 2 * PAD - (cols - 1) * GAP) // cols
        room = r.height - HEADER_H - MIN_DISPLAY_H - PAD - (rows - 1) * GAP
        bh = max(1, min(bw, room // rows))
        return bw, bh

    def keypad_rect(self) -> pygame.Rect:
        r = self.rect
        bw, bh = self._button_size()
        rows = len(_KEYPAD_LAYOUT)
        height = rows * bh + (rows - 1) * GAP
        return pygame.Rect(r.x + PAD, r.bottom - PAD - height,
                           r.width - 2 * PAD, height)

    def display_rect(self) -> pygame.Rect:
        r = self.rect
        top = r.y + HEADER_H
        return pygame.Rect(r.x, top, r.width, self.keypad_rect().top - top)

    def _layout_keypad(self) -> list[tuple[str, pygame.Rect]]:
        pad = self.keypad_rect()
        bw, bh = self._button_size()
        rects = []
        for row_idx, row in enumerate(_KEYPAD_LAYOUT):
            for col_idx, label in enumerate(row):
                x = pad.x + col_idx * (bw + GAP)
                y = pad.y + row_idx * (bh + GAP)
                rects.append((label, pygame.Rect(x, y, bw, bh)))
        return rects

    def key_rect(self, label: str) -> pygame.Rect:
        """Screen rect of the keypad button labelled *label*.

        Raises:
            KeyError: If there is no such button.
        """
        for key, rect in self._layout_keypad():
            if key == label:
                return rect
        raise KeyError(f"No keypad button {label!r}")

    # ------------------------------------------------------------------
    # Screen interface: update / draw / event handling
    # ------------------------------------------------------------------

    def update(self, dt: float) -> None:
        """No-op: the calculator has no time-based animation."""
        pass

    def handle_event(self, event) -> bool:
        """Process one pygame event addressed to the overlay.

        Returns:
            ``True`` if the calculator consumed the event.
        """
        if event.type == pygame.KEYDOWN:
            return self.keys.handle_key(event)
        if event.type == pygame.MOUSEBUTTONDOWN:
            return self.handle_press(event.pos, event.button)
        if event.type == pygame.MOUSEBUTTONUP:
            self._pressed_key = None
        return False

    def handle_touch(self, x: int, y: int) -> bool:
        """Primary-button press at pixel coordinates (*x*, *y*)."""
        return self.handle_press((x, y), 1)

    def handle_press(self, pos: tuple[int, int], button: int = 1) -> bool:
        """Route a pointer press.

        Returns:
            ``False`` if *pos* lies outside the window, so the host may treat
            it as an outside click; ``True`` otherwise.
        """
        if not self.rect.collidepoint(pos):
            return False
        if button != 1:
            return True

        # The handle sits on top of the keypad corner; it must win.
        if self.handle_rect().collidepoint(pos):
            self.window.begin_resize(pos, button)
            return True

        if self.close_rect().collidepoint(pos):
            self.close()
            return True

        for label, rect in self._layout_keypad():
            if rect.collidepoint(pos):
                self._pressed_key = label
                self.apply(action_for_label(label))
                return True

        if self.header_rect().collidepoint(pos) or self.display_rect().collidepoint(pos):
            self.window.begin_drag(pos, button)
        return True

    def close(self) -> None:
        """Signal the host that the user asked to close the calculator."""
        log.info("Calculator close requested")
        self._on_close()

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def draw(self, surface: pygame.Surface | None = None) -> None:
        """Render the calculator window onto *surface* (default: own surface).

        The window is composed on an off-screen panel and blitted in one go,
        so the target only ever sees a single ``blit``.
        """
        target = surface if surface is not None else self._surface
        rect = self.rect

        panel = pygame.Surface(rect.size, pygame.SRCALPHA)
        outline = panel.get_rect()
        pygame.draw.rect(panel, WINDOW_BG, outline, border_radius=WINDOW_RADIUS)
        pygame.draw.rect(panel, WINDOW_BORDER, outline, width=1,
                         border_radius=WINDOW_RADIUS)
        self._draw_header(panel)
        self._draw_display(panel)
        self._draw_keypad(panel)
        self._draw_handle(panel)

        target.blit(panel, rect.topleft)

    def _local(self, r: pygame.Rect) -> pygame.Rect:
        """Translate a screen rect into panel coordinates."""
        return r.move(-self.rect.x, -self.rect.y)

    def _draw_header(self, panel: pygame.Surface) -> None:
        header = self._local(self.header_rect())
        _draw_text(panel, "CALCULATOR", _font(12, bold=True), TEXT_MUTED,
                   header.x + PAD + 4, header.centery, anchor="midleft")
        close = self._local(self.close_rect())
        _draw_text(panel, "×", _font(20), TEXT_MUTED,
                   close.centerx, close.centery, anchor="center")

    def _draw_display(self, panel: pygame.Surface) -> None:
        area = self._local(self.display_rect())
        right = area.right - PAD * 2
        value_font = _font(display_font_size(self.state.display))
        value_rect = _draw_text(panel, self.state.display, value_font,
                                TEXT_COLOR, right, area.bottom - 8,
                                anchor="bottomright")
        sub_line = equation_line(self.state)
        if sub_line:
            _draw_text(panel, sub_line, _font(14), TEXT_MUTED,
                       right, value_rect.top - 4, anchor="bottomright")

    def _draw_keypad(self, panel: pygame.Surface) -> None:
        """Draw the button grid, highlighting the pending operator."""
        font = _font(button_font_size(self.rect.width))
        highlighted = active_operator(self.state)

        for label, screen_rect in self._layout_keypad():
            rect = self._local(screen_rect)
            bg_col, fg_col = _key_style(label)
            if label == highlighted:
                bg_col, fg_col = fg_col, bg_col
            if self._pressed_key == label:
                bg_col = tuple(min(255, int(c * 1.3) + 20) for c in bg_col)

            pygame.draw.rect(panel, bg_col, rect,
                             border_radius=min(rect.width, rect.height) // 2)
            text = self.clear_label if label == CLEAR_KEY else label
            _draw_text(panel, text, font, fg_col,
                       rect.centerx, rect.centery, anchor="center")

    def _draw_handle(self, panel: pygame.Surface) -> None:
        h = self._local(self.handle_rect()).inflate(-6, -6)
        pygame.draw.line(panel, HANDLE_COLOR, (h.right, h.top), (h.right, h.bottom), 2)
        pygame.draw.line(panel, HANDLE_COLOR, (h.left, h.bottom), (h.right, h.bottom), 2)
        pygame.draw.line(panel, HANDLE_COLOR, (h.centerx, h.bottom), (h.right, h.centery), 2)

    # ------------------------------------------------------------------
    # Lifecycle hooks
    # ------------------------------------------------------------------

    def set_viewport(self, width: int, height: int) -> None:
        """Host window was resized; keep the calculator on screen."""
        self.window.set_viewport(width, height)

    def on_mount(self) -> None:
        log.debug("Calculator mounted at %s", self.rect)

    def on_unmount(self) -> None:
        """Release any in-flight drag / resize so no listener outlives us."""
        self.window.release()
        self._pressed_key = None
        log.debug("Calculator unmounted")


# ---------------------------------------------------------------------------
# Standalone preview
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import sys

    from ui_manager import PointerListeners

    pygame.init()
    window = pygame.display.set_mode((config.SCREEN_W, config.SCREEN_H))
    pygame.display.set_caption("Calculator - preview")
    clock = pygame.time.Clock()

    listeners = PointerListeners()
    running = True

    def _stop() -> None:
        global running
        running = False

    calc = CalculatorWidget(window, _stop, listeners=listeners)

    while running:
        dt = clock.tick(config.FPS) / 1000.0
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            listeners.dispatch(event)
            calc.handle_event(event)
        calc.update(dt)
        window.fill((15, 23, 42))
        calc.draw(window)
        pygame.display.flip()

    calc.on_unmount()
    pygame.quit()
    sys.exit()
