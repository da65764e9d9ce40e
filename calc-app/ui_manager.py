from __future__ import annotations

"""
Pocket Ledger - Pygame Display Manager

Manages pygame initialisation, screen transitions, the nav bar, the overlay
layer that hosts the floating calculator, and the main render loop.

The UIManager can be constructed in two modes:

  1. Desktop mode (no surface argument):
       mgr = UIManager()
     pygame.init() is called, a SCREEN_W × SCREEN_H window is created, and
     the clock and fonts are set up.

  2. Headless / test mode (surface provided):
       mgr = UIManager(surface)
     pygame is NOT re-initialised.  The supplied surface is used directly.
     Clock and display-flip calls are skipped so the class works with a
     MagicMock surface under SDL dummy mode.

Event routing, per event:

  1. global pointer listeners (an active drag / resize session)
  2. the overlay (calculator keys and presses inside its window)
  3. the nav bar
  4. the active screen
"""

import logging

import pygame

import config
from widget_calculator import CalculatorWidget

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Layout constants
# ---------------------------------------------------------------------------

SCREEN_W  = config.SCREEN_W
SCREEN_H  = config.SCREEN_H
NAV_H     = 48                  # nav bar height, pinned to bottom

# ---------------------------------------------------------------------------
# Colour palette
# ---------------------------------------------------------------------------

BG_COLOR    = (15,  23,  42)   # dark blue-gray, main background
TEXT_COLOR  = (226, 232, 240)  # near-white, primary text
ACCENT      = (56,  189, 248)  # cyan: focused field / active nav
NAV_BG      = (8,   15,  30)   # nav bar background, darker than BG_COLOR
NAV_BORDER  = (30,  41,  59)   # 1-px top border on the nav bar

# ---------------------------------------------------------------------------
# Nav bar configuration
# ---------------------------------------------------------------------------

CALCULATOR_KEY = "calculator"   # toggles the overlay instead of switching screens

_NAV_LABELS = ["Ledger", "Calculator"]
_NAV_KEYS   = ["ledger", CALCULATOR_KEY]


# ---------------------------------------------------------------------------
# PointerListeners
# ---------------------------------------------------------------------------

class PointerListeners:
    """Document-level pointer listeners, keyed by pygame event type.

    Drag and resize sessions register a MOUSEMOTION and a MOUSEBUTTONUP
    callback here for their lifetime so they keep receiving the pointer even
    when it leaves the calculator window.
    """

    def __init__(self) -> None:
        self._listeners: dict[int, list] = {}

    def add(self, kind: int, fn) -> None:
        self._listeners.setdefault(kind, []).append(fn)

    def remove(self, kind: int, fn) -> None:
        """Unregister *fn*; unknown callbacks are ignored."""
        fns = self._listeners.get(kind, [])
        if fn in fns:
            fns.remove(fn)

    def dispatch(self, event) -> None:
        # Copy: a MOUSEBUTTONUP callback removes itself while we iterate.
        for fn in list(self._listeners.get(event.type, ())):
            fn(event)

    def count(self, kind: int | None = None) -> int:
        """Number of registered callbacks (for *kind*, or in total)."""
        if kind is not None:
            return len(self._listeners.get(kind, []))
        return sum(len(fns) for fns in self._listeners.values())


# ---------------------------------------------------------------------------
# UIManager
# ---------------------------------------------------------------------------

class UIManager:
    """Manages registered screens, the overlay layer, and event dispatch.

    Screens are registered by name and activated via switch_to().  Only the
    active screen receives update() and draw() calls.  At most one overlay
    (the calculator) is mounted at a time; it is drawn above the screen and
    nav bar and sees events before them.

    Construction:
        UIManager()          – desktop mode: calls pygame.init(), creates
                               the application window.
        UIManager(surface)   – test/headless mode: uses the provided surface,
                               skips pygame init and display management.

    Args:
        surface: Optional pygame.Surface for headless / test mode.
    """

    # ------------------------------------------------------------------
    # Initialisation
    # ------------------------------------------------------------------

    def __init__(self, surface=None) -> None:
        self._test_mode = surface is not None

        if self._test_mode:
            # Headless path: use the supplied mock/real surface as-is.
            # Initialise only the font subsystem (no display required).
            pygame.font.init()
            self._surface = surface
            self.screen   = surface
            self.clock    = None
            self._init_fonts_safe()
        else:
            pygame.init()
            self.screen = pygame.display.set_mode((SCREEN_W, SCREEN_H), pygame.RESIZABLE)
            pygame.display.set_caption(config.TITLE)
            self._surface = self.screen
            self.clock = pygame.time.Clock()
            self._init_fonts_safe()

        # Screen registry
        self._screens: dict[str, object] = {}
        self._active: str | None = None
        self.current_screen: str | None = None

        # Nav hit-rects are built lazily in draw_nav_bar(); initialise to []
        # so _nav_hit() never crashes before the first draw.
        self._nav_rects: list[pygame.Rect] = []

        # Overlay layer + document-level pointer listeners
        self.overlay = None
        self.pointer_listeners = PointerListeners()

        # Host text field that currently owns the keyboard (or None)
        self._focused_input = None

    # ------------------------------------------------------------------
    # Font loading
    # ------------------------------------------------------------------

    def _init_fonts_safe(self) -> None:
        """Load DejaVu Sans at each needed size, falling back to the default font."""
        def _load(family: str, size: int, bold: bool = False) -> pygame.font.Font:
            try:
                font = pygame.font.SysFont(family, size, bold=bold)
                # SysFont can return None in dummy SDL environments
                if font is None:
                    raise RuntimeError("SysFont returned None")
                return font
            except Exception:
                return pygame.font.SysFont(None, size, bold=bold)

        self.title_font   = _load("dejavusans", 32, bold=True)
        self.heading_font = _load("dejavusans", 22, bold=True)
        self.body_font    = _load("dejavusans", 16)

    # ------------------------------------------------------------------
    # Screen registry
    # ------------------------------------------------------------------

    def register_screen(self, name: str, screen_obj) -> None:
        """Add a screen to the registry under the given name.

        Args:
            name:       Unique string key (e.g. ``'ledger'``).
            screen_obj: Object implementing the Screen interface contract
                        (update, draw, handle_event, optionally on_enter/on_exit).
        """
        self._screens[name] = screen_obj

    def switch_to(self, name: str) -> None:
        """Activate the named screen.

        Raises:
            KeyError: If *name* has not been registered.
        """
        if name not in self._screens:
            raise KeyError(f"Unknown screen: {name!r}")
        if self._active is not None and self._active != name:
            old = self._screens[self._active]
            if hasattr(old, "on_exit"):
                old.on_exit()
        self._active = name
        self.current_screen = name
        new = self._screens[name]
        if hasattr(new, "on_enter"):
            new.on_enter()

    # ------------------------------------------------------------------
    # Overlay layer
    # ------------------------------------------------------------------

    def mount_overlay(self, widget) -> None:
        """Attach *widget* to the overlay layer.

        Raises:
            RuntimeError: If an overlay is already mounted.
        """
        if self.overlay is not None:
            raise RuntimeError("An overlay is already mounted")
        self.overlay = widget
        if hasattr(widget, "on_mount"):
            widget.on_mount()
        log.info("Overlay mounted: %s", type(widget).__name__)

    def unmount_overlay(self) -> None:
        """Detach the current overlay, if any.  Safe to call twice."""
        widget, self.overlay = self.overlay, None
        if widget is None:
            return
        if hasattr(widget, "on_unmount"):
            widget.on_unmount()
        log.info("Overlay unmounted: %s", type(widget).__name__)

    def toggle_calculator(self) -> None:
        """Open the calculator, or close it if it is already open."""
        if self.overlay is not None:
            self.unmount_overlay()
        else:
            self.mount_overlay(CalculatorWidget(self, on_close=self.unmount_overlay))

    # ------------------------------------------------------------------
    # Text-input focus
    # ------------------------------------------------------------------

    def focus_text_input(self, field) -> None:
        self._focused_input = field

    def blur_text_input(self) -> None:
        self._focused_input = None

    def is_text_input_focused(self) -> bool:
        """Focus probe handed to the calculator's keyboard router."""
        return self._focused_input is not None

    # ------------------------------------------------------------------
    # Main-loop hooks
    # ------------------------------------------------------------------

    def handle_event(self, event) -> bool:
        """Route a single pygame event.

        Returns:
            ``False`` if the application should quit (QUIT, or Escape with
            nothing else claiming it), ``True`` otherwise.
        """
        if event.type == pygame.QUIT:
            return False

        self.pointer_listeners.dispatch(event)

        if event.type == pygame.VIDEORESIZE:
            if self.overlay is not None and hasattr(self.overlay, "set_viewport"):
                self.overlay.set_viewport(event.w, event.h)
            return True

        if self.overlay is not None and self._route_to_overlay(event):
            return True

        if (event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE
                and not self.is_text_input_focused()):
            return False

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self._nav_hit(event.pos) is not None:
                return True
            if self._active is not None:
                screen = self._screens[self._active]
                if hasattr(screen, "handle_touch"):
                    screen.handle_touch(event.pos[0], event.pos[1])
                    return True

        if self._active is not None:
            self._screens[self._active].handle_event(event)
        return True

    def _route_to_overlay(self, event) -> bool:
        """Offer *event* to the overlay; ``True`` means it was consumed."""
        if self.overlay.handle_event(event):
            return True
        is_outside_press = (
            event.type == pygame.MOUSEBUTTONDOWN
            and event.button == 1
            and config.CLOSE_ON_OUTSIDE_CLICK
        )
        if is_outside_press:
            log.debug("Outside click at %s closes the calculator", event.pos)
            self.unmount_overlay()
            return True
        return False

    def handle_events(self) -> bool:
        """Drain the pygame event queue.

        Returns:
            ``False`` if the application should quit, ``True`` otherwise.
        """
        for event in pygame.event.get():
            if not self.handle_event(event):
                return False
        return True

    def update(self, dt: float) -> None:
        """Advance the active screen and the overlay by *dt* seconds."""
        if self._active is not None:
            self._screens[self._active].update(dt)
        if self.overlay is not None:
            self.overlay.update(dt)

    def draw(self) -> None:
        """Render the active screen, the nav bar, then the overlay on top."""
        if self._active is not None:
            self._screens[self._active].draw(self._surface)

        if not self._test_mode:
            # Only draw nav bar and flip in desktop mode to avoid
            # calling pygame.draw on a MagicMock surface.
            self.draw_nav_bar()

        if self.overlay is not None:
            self.overlay.draw(self._surface)

        if not self._test_mode:
            pygame.display.flip()
            if self.clock is not None:
                self.clock.tick(config.FPS)

    # ------------------------------------------------------------------
    # Nav bar
    # ------------------------------------------------------------------

    def draw_nav_bar(self) -> None:
        """Draw the bottom nav bar and rebuild ``self._nav_rects``."""
        width, height = self._surface.get_size()
        nav_y = height - NAV_H
        btn_w = width // len(_NAV_KEYS)

        pygame.draw.rect(self._surface, NAV_BG, (0, nav_y, width, NAV_H))
        pygame.draw.line(self._surface, NAV_BORDER,
                         (0, nav_y), (width - 1, nav_y), 1)

        self._nav_rects = []
        for i, (label, key) in enumerate(zip(_NAV_LABELS, _NAV_KEYS)):
            rect = pygame.Rect(i * btn_w, nav_y + 1, btn_w, NAV_H - 1)
            self._nav_rects.append(rect)

            if key == CALCULATOR_KEY:
                is_active = self.overlay is not None
            else:
                is_active = key == self._active
            fill_color = ACCENT if is_active else NAV_BG
            label_color = BG_COLOR if is_active else TEXT_COLOR

            pygame.draw.rect(self._surface, fill_color, rect)
            self.draw_text(label, self.body_font, label_color,
                           rect.centerx, rect.centery, anchor="center")

    def _nav_hit(self, pos) -> str | None:
        """Test *pos* against nav bar rects.

        A hit on a registered screen calls ``switch_to()``; a hit on the
        calculator tab toggles the overlay.

        Returns:
            The nav key if a nav button was hit, else ``None``.
        """
        for rect, key in zip(self._nav_rects, _NAV_KEYS):
            if rect.collidepoint(pos):
                if key == CALCULATOR_KEY:
                    self.toggle_calculator()
                elif key in self._screens:
                    self.switch_to(key)
                return key
        return None

    # ------------------------------------------------------------------
    # Drawing helpers
    # ------------------------------------------------------------------

    def draw_text(
        self,
        text: str,
        font: pygame.font.Font,
        color: tuple,
        x: int,
        y: int,
        anchor: str = "topleft",
    ) -> pygame.Rect:
        """Render *text* onto ``self.screen`` at the given anchor position.

        Args:
            text:   String to render.
            font:   pygame.font.Font instance.
            color:  RGB colour tuple.
            x, y:   Pixel coordinates for the anchor point.
            anchor: One of the pygame.Rect attributes (e.g. ``'topleft'``,
                    ``'center'``, ``'midleft'``).

        Returns:
            The blit rect of the rendered text.
        """
        surf = font.render(text, True, color)
        rect = surf.get_rect()
        setattr(rect, anchor, (x, y))
        self.screen.blit(surf, rect)
        return rect
