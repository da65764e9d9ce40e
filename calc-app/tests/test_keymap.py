"""
Tests for calculator keyboard routing.
"""

import unittest
from unittest.mock import MagicMock

import pygame

from calc_engine import (
    ADD, DIV, MUL, SUB,
    Backspace, Clear, DecimalPoint, Digit, Equals, Percent, PressOperator,
)
from keymap import KeyRouter, action_for_key


def _keydown(key=None, unicode_char=""):
    """Build a minimal pygame KEYDOWN event mock."""
    event = MagicMock()
    event.type = pygame.KEYDOWN
    event.key = key if key is not None else 0
    event.unicode = unicode_char
    return event


class TestActionForKey(unittest.TestCase):

    def test_digits(self):
        for ch in "0123456789":
            self.assertEqual(action_for_key(_keydown(unicode_char=ch)), Digit(ch))

    def test_operators_map_to_display_symbols(self):
        expected = {"+": ADD, "-": SUB, "*": MUL, "/": DIV}
        for ch, op in expected.items():
            self.assertEqual(action_for_key(_keydown(unicode_char=ch)),
                             PressOperator(op))

    def test_equals_keys(self):
        self.assertEqual(action_for_key(_keydown(unicode_char="=")), Equals())
        self.assertEqual(action_for_key(_keydown(key=pygame.K_RETURN)), Equals())
        self.assertEqual(action_for_key(_keydown(key=pygame.K_KP_ENTER)), Equals())

    def test_editing_keys(self):
        self.assertEqual(action_for_key(_keydown(key=pygame.K_BACKSPACE)), Backspace())
        self.assertEqual(action_for_key(_keydown(key=pygame.K_ESCAPE)), Clear())
        self.assertEqual(action_for_key(_keydown(unicode_char=".")), DecimalPoint())
        self.assertEqual(action_for_key(_keydown(unicode_char="%")), Percent())

    def test_unmapped_keys(self):
        for ch in "abc!@ ":
            self.assertIsNone(action_for_key(_keydown(unicode_char=ch)))

    def test_non_ascii_digits_are_ignored(self):
        self.assertIsNone(action_for_key(_keydown(unicode_char="٣")))

    def test_non_keydown_events(self):
        event = MagicMock()
        event.type = pygame.KEYUP
        self.assertIsNone(action_for_key(event))


class TestKeyRouter(unittest.TestCase):

    def setUp(self):
        self.apply = MagicMock()
        self.focused = False
        self.router = KeyRouter(self.apply, lambda: self.focused)

    def test_mapped_key_is_applied_and_consumed(self):
        self.assertTrue(self.router.handle_key(_keydown(unicode_char="7")))
        self.apply.assert_called_once_with(Digit("7"))

    def test_unmapped_key_is_not_consumed(self):
        self.assertFalse(self.router.handle_key(_keydown(unicode_char="q")))
        self.apply.assert_not_called()

    def test_focused_text_input_wins(self):
        self.focused = True
        self.assertFalse(self.router.handle_key(_keydown(unicode_char="7")))
        self.apply.assert_not_called()


if __name__ == "__main__":
    unittest.main()
