"""
Pocket Ledger - Calculator Window Interaction Controller

Owns the floating calculator's geometry (position + size) and turns pointer
press / motion / release sequences into clamped geometry updates.

Two session kinds exist and they are mutually exclusive:

  DragSession    started from the header or display region; moves the window,
                 keeping it fully inside the viewport.
  ResizeSession  started from the bottom-right handle; grows or shrinks the
                 window within fixed width / height bounds.

While a session is active it owns a MOUSEMOTION and a MOUSEBUTTONUP listener
on the host's global ``PointerListeners`` registry.  Both are removed exactly
once, either on pointer release or when ``release()`` is called at unmount.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import pygame

import config

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

def clamp(value: int, low: int, high: int) -> int:
    """Saturate *value* into [low, high]; *low* wins if the range is empty."""
    return max(low, min(value, high))


@dataclass
class WindowGeometry:
    x: int
    y: int
    width: int = config.CALC_DEFAULT_W
    height: int = config.CALC_DEFAULT_H

    @property
    def rect(self) -> pygame.Rect:
        return pygame.Rect(self.x, self.y, self.width, self.height)


def default_geometry(viewport_w: int, viewport_h: int) -> WindowGeometry:
    """Default-sized window centred in the viewport."""
    w, h = config.CALC_DEFAULT_W, config.CALC_DEFAULT_H
    return WindowGeometry(
        x=max(0, viewport_w // 2 - w // 2),
        y=max(0, viewport_h // 2 - h // 2),
        width=w,
        height=h,
    )


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NoSession:
    pass


@dataclass(frozen=True)
class DragSession:
    offset_x: int
    offset_y: int


@dataclass(frozen=True)
class ResizeSession:
    start_x: int
    start_y: int
    start_w: int
    start_h: int


IDLE = NoSession()


# ---------------------------------------------------------------------------
# WindowController
# ---------------------------------------------------------------------------

class WindowController:
    """Drag / resize state machine for the calculator window.

    Args:
        listeners: Host registry with ``add(kind, fn)`` / ``remove(kind, fn)``,
                   where *kind* is ``pygame.MOUSEMOTION`` or
                   ``pygame.MOUSEBUTTONUP``.
        viewport:  ``(width, height)`` of the host surface.
        geometry:  Starting geometry; defaults to the centred window.
    """

    def __init__(self, listeners, viewport: tuple[int, int],
                 geometry: WindowGeometry | None = None) -> None:
        self._listeners = listeners
        self.viewport_w, self.viewport_h = viewport
        self.geometry = geometry or default_geometry(*viewport)
        self.session = IDLE

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def is_dragging(self) -> bool:
        return isinstance(self.session, DragSession)

    @property
    def is_resizing(self) -> bool:
        return isinstance(self.session, ResizeSession)

    @property
    def is_idle(self) -> bool:
        return isinstance(self.session, NoSession)

    # ------------------------------------------------------------------
    # Session start
    # ------------------------------------------------------------------

    def begin_drag(self, pos: tuple[int, int], button: int = 1) -> bool:
        """Start a drag session from a press at *pos*.

        Returns:
            ``True`` if the session started; ``False`` for a non-primary
            button or when another session is already active.
        """
        if button != 1 or not self.is_idle:
            return False
        g = self.geometry
        self.session = DragSession(pos[0] - g.x, pos[1] - g.y)
        self._acquire()
        log.debug("Drag started at %s (offset %d,%d)",
                  pos, self.session.offset_x, self.session.offset_y)
        return True

    def begin_resize(self, pos: tuple[int, int], button: int = 1) -> bool:
        """Start a resize session from a press on the handle at *pos*."""
        if button != 1 or not self.is_idle:
            return False
        g = self.geometry
        self.session = ResizeSession(pos[0], pos[1], g.width, g.height)
        self._acquire()
        log.debug("Resize started at %s from %dx%d", pos, g.width, g.height)
        return True

    # ------------------------------------------------------------------
    # Global listeners
    # ------------------------------------------------------------------

    def on_pointer_move(self, event) -> None:
        x, y = event.pos
        session = self.session
        g = self.geometry

        if isinstance(session, DragSession):
            g.x = clamp(x - session.offset_x, 0, self.viewport_w - g.width)
            g.y = clamp(y - session.offset_y, 0, self.viewport_h - g.height)

        elif isinstance(session, ResizeSession):
            # Never grow past the viewport edge; the minimum still wins.
            max_w = min(config.CALC_MAX_W, self.viewport_w - g.x)
            max_h = min(config.CALC_MAX_H, self.viewport_h - g.y)
            g.width = clamp(session.start_w + (x - session.start_x),
                            config.CALC_MIN_W, max_w)
            g.height = clamp(session.start_h + (y - session.start_y),
                             config.CALC_MIN_H, max_h)

    def on_pointer_up(self, event) -> None:
        self.release()

    def release(self) -> None:
        """End the active session (if any) and drop its listeners.

        Safe to call repeatedly; the listeners are removed only once.
        """
        if self.is_idle:
            return
        kind = type(self.session).__name__
        self.session = IDLE
        self._listeners.remove(pygame.MOUSEMOTION, self.on_pointer_move)
        self._listeners.remove(pygame.MOUSEBUTTONUP, self.on_pointer_up)
        g = self.geometry
        log.debug("%s ended at (%d,%d) %dx%d", kind, g.x, g.y, g.width, g.height)

    def _acquire(self) -> None:
        self._listeners.add(pygame.MOUSEMOTION, self.on_pointer_move)
        self._listeners.add(pygame.MOUSEBUTTONUP, self.on_pointer_up)

    # ------------------------------------------------------------------
    # Host window changes
    # ------------------------------------------------------------------

    def set_viewport(self, width: int, height: int) -> None:
        """Adopt a new viewport size and pull the window back inside it."""
        self.viewport_w, self.viewport_h = width, height
        g = self.geometry
        g.x = clamp(g.x, 0, width - g.width)
        g.y = clamp(g.y, 0, height - g.height)
