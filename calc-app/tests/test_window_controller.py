"""
Tests for the calculator window drag / resize controller.

Pointer events are MagicMocks carrying only ``type`` and ``pos``; the global
listener registry is the real ui_manager.PointerListeners.
"""

import unittest
from unittest.mock import MagicMock

import pygame

from ui_manager import PointerListeners
from window_controller import WindowController, WindowGeometry, clamp

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

VIEWPORT = (1280, 800)


def _motion(x, y):
    event = MagicMock()
    event.type = pygame.MOUSEMOTION
    event.pos = (x, y)
    return event


def _release(x=0, y=0, button=1):
    event = MagicMock()
    event.type = pygame.MOUSEBUTTONUP
    event.pos = (x, y)
    event.button = button
    return event


class _ControllerTestCase(unittest.TestCase):

    viewport = VIEWPORT

    def setUp(self):
        self.listeners = PointerListeners()
        self.ctl = WindowController(self.listeners, self.viewport)

    def move(self, x, y):
        self.listeners.dispatch(_motion(x, y))

    def release(self, x=0, y=0):
        self.listeners.dispatch(_release(x, y))


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

class TestGeometry(_ControllerTestCase):

    def test_clamp(self):
        self.assertEqual(clamp(-5, 0, 10), 0)
        self.assertEqual(clamp(15, 0, 10), 10)
        self.assertEqual(clamp(7, 0, 10), 7)

    def test_clamp_empty_range_prefers_low(self):
        self.assertEqual(clamp(50, 0, -100), 0)

    def test_default_geometry_is_centred(self):
        g = self.ctl.geometry
        self.assertEqual((g.x, g.y, g.width, g.height), (480, 150, 320, 500))

    def test_default_geometry_in_small_viewport_stays_at_origin(self):
        ctl = WindowController(self.listeners, (200, 200))
        self.assertEqual((ctl.geometry.x, ctl.geometry.y), (0, 0))

    def test_rect_matches_geometry(self):
        self.assertEqual(self.ctl.geometry.rect, pygame.Rect(480, 150, 320, 500))

    def test_set_viewport_pulls_window_back_inside(self):
        self.ctl.geometry = WindowGeometry(960, 150)
        self.ctl.set_viewport(800, 600)
        self.assertEqual((self.ctl.geometry.x, self.ctl.geometry.y), (480, 100))


# ---------------------------------------------------------------------------
# Drag
# ---------------------------------------------------------------------------

class TestDrag(_ControllerTestCase):

    def test_drag_keeps_pointer_offset(self):
        self.assertTrue(self.ctl.begin_drag((500, 160)))
        self.move(700, 300)
        self.assertEqual((self.ctl.geometry.x, self.ctl.geometry.y), (680, 290))

    def test_drag_clamps_to_top_left(self):
        self.ctl.begin_drag((500, 160))
        self.move(-500, -500)
        self.assertEqual((self.ctl.geometry.x, self.ctl.geometry.y), (0, 0))

    def test_drag_clamps_to_bottom_right(self):
        self.ctl.begin_drag((500, 160))
        self.move(5000, 5000)
        self.assertEqual((self.ctl.geometry.x, self.ctl.geometry.y), (960, 300))

    def test_drag_from_edge_pushing_outward_stays_inside(self):
        self.ctl.geometry = WindowGeometry(960, 300)
        self.ctl.begin_drag((970, 310))
        for step in range(1, 20):
            self.move(970 + step * 37, 310 + step * 29)
            g = self.ctl.geometry
            self.assertTrue(0 <= g.x <= VIEWPORT[0] - g.width)
            self.assertTrue(0 <= g.y <= VIEWPORT[1] - g.height)

    def test_drag_does_not_change_size(self):
        self.ctl.begin_drag((500, 160))
        self.move(100, 100)
        self.assertEqual((self.ctl.geometry.width, self.ctl.geometry.height), (320, 500))

    def test_release_commits_last_position(self):
        self.ctl.begin_drag((500, 160))
        self.move(600, 260)
        self.release(600, 260)
        self.move(900, 500)
        self.assertEqual((self.ctl.geometry.x, self.ctl.geometry.y), (580, 250))
        self.assertTrue(self.ctl.is_idle)

    def test_non_primary_button_does_not_start(self):
        self.assertFalse(self.ctl.begin_drag((500, 160), button=3))
        self.assertTrue(self.ctl.is_idle)
        self.assertEqual(self.listeners.count(), 0)


# ---------------------------------------------------------------------------
# Resize
# ---------------------------------------------------------------------------

class TestResize(_ControllerTestCase):

    viewport = (4000, 4000)

    def setUp(self):
        super().setUp()
        self.ctl.geometry = WindowGeometry(100, 100)   # handle near (410, 590)

    def test_resize_follows_pointer_delta(self):
        self.ctl.begin_resize((410, 590))
        self.move(450, 640)
        self.assertEqual((self.ctl.geometry.width, self.ctl.geometry.height), (360, 550))

    def test_resize_clamps_to_maximum(self):
        self.ctl.begin_resize((410, 590))
        self.move(10_000, 10_000)
        self.assertEqual((self.ctl.geometry.width, self.ctl.geometry.height), (560, 900))

    def test_resize_clamps_to_minimum(self):
        self.ctl.begin_resize((410, 590))
        self.move(-10_000, -10_000)
        self.assertEqual((self.ctl.geometry.width, self.ctl.geometry.height), (280, 440))

    def test_resize_never_moves_window(self):
        self.ctl.begin_resize((410, 590))
        self.move(300, 300)
        self.move(900, 900)
        self.assertEqual((self.ctl.geometry.x, self.ctl.geometry.y), (100, 100))

    def test_resize_stops_at_viewport_edge(self):
        ctl = WindowController(self.listeners, VIEWPORT, WindowGeometry(900, 250))
        ctl.begin_resize((1210, 740))
        self.move(5000, 5000)
        self.assertEqual((ctl.geometry.width, ctl.geometry.height), (380, 550))


# ---------------------------------------------------------------------------
# Exclusivity + listener scoping
# ---------------------------------------------------------------------------

class TestSessions(_ControllerTestCase):

    def test_session_registers_two_listeners(self):
        self.ctl.begin_drag((500, 160))
        self.assertEqual(self.listeners.count(pygame.MOUSEMOTION), 1)
        self.assertEqual(self.listeners.count(pygame.MOUSEBUTTONUP), 1)

    def test_pointer_up_removes_listeners(self):
        self.ctl.begin_resize((790, 640))
        self.release()
        self.assertEqual(self.listeners.count(), 0)

    def test_second_start_is_ignored(self):
        self.assertTrue(self.ctl.begin_drag((500, 160)))
        self.assertFalse(self.ctl.begin_resize((790, 640)))
        self.assertTrue(self.ctl.is_dragging)
        self.assertFalse(self.ctl.is_resizing)
        self.assertEqual(self.listeners.count(), 2)

    def test_new_session_allowed_after_release(self):
        self.ctl.begin_drag((500, 160))
        self.release()
        self.assertTrue(self.ctl.begin_resize((790, 640)))
        self.assertTrue(self.ctl.is_resizing)

    def test_release_without_pointer_up(self):
        self.ctl.begin_drag((500, 160))
        self.ctl.release()
        self.assertTrue(self.ctl.is_idle)
        self.assertEqual(self.listeners.count(), 0)

    def test_release_is_idempotent(self):
        listeners = MagicMock()
        ctl = WindowController(listeners, VIEWPORT)
        ctl.begin_drag((500, 160))
        ctl.release()
        ctl.release()
        self.assertEqual(listeners.remove.call_count, 2)   # one MOTION, one UP

    def test_exactly_one_state_holds(self):
        for start in (None, "drag", "resize"):
            ctl = WindowController(PointerListeners(), VIEWPORT)
            if start == "drag":
                ctl.begin_drag((500, 160))
            elif start == "resize":
                ctl.begin_resize((790, 640))
            flags = [ctl.is_idle, ctl.is_dragging, ctl.is_resizing]
            self.assertEqual(flags.count(True), 1)


if __name__ == "__main__":
    unittest.main()
