"""
Pocket Ledger - Calculator Keyboard Routing

Translates pygame KEYDOWN events into calculator actions:

  0-9            digit
  .              decimal point
  + - * /        + − × ÷
  Enter / =      equals          (keypad Enter too)
  Backspace      backspace
  Escape         clear
  %              percent

Keys are captured globally while the calculator is mounted, but the router
steps aside whenever the host reports that one of its own text fields has
focus, so typing an amount into the ledger never also drives the calculator.
"""

from __future__ import annotations

from typing import Callable

import pygame

from calc_engine import (
    ADD, DIV, MUL, SUB,
    Backspace, Clear, DecimalPoint, Digit, Equals, Percent, PressOperator,
)

# Keys recognised by keycode (their unicode is empty or unreliable)
_KEY_ACTIONS = {
    pygame.K_RETURN:    Equals(),
    pygame.K_KP_ENTER:  Equals(),
    pygame.K_BACKSPACE: Backspace(),
    pygame.K_ESCAPE:    Clear(),
}

# Keys recognised by the character they type
_CHAR_ACTIONS = {
    ".": DecimalPoint(),
    "+": PressOperator(ADD),
    "-": PressOperator(SUB),
    "*": PressOperator(MUL),
    "/": PressOperator(DIV),
    "=": Equals(),
    "%": Percent(),
}


def action_for_key(event):
    """Return the calculator action for *event*, or ``None`` if unmapped."""
    if event.type != pygame.KEYDOWN:
        return None
    if event.key in _KEY_ACTIONS:
        return _KEY_ACTIONS[event.key]
    ch = getattr(event, "unicode", "") or ""
    if len(ch) == 1 and ch.isdigit() and ch.isascii():
        return Digit(ch)
    return _CHAR_ACTIONS.get(ch)


class KeyRouter:
    """Feeds mapped keys to *apply* unless a host text input has focus.

    Args:
        apply:              Callable taking one calculator action.
        text_input_focused: Zero-argument focus probe supplied by the host.
    """

    def __init__(self, apply: Callable[[object], None],
                 text_input_focused: Callable[[], bool]) -> None:
        self._apply = apply
        self._text_input_focused = text_input_focused

    def handle_key(self, event) -> bool:
        """Route one event.

        Returns:
            ``True`` if the key was consumed by the calculator.
        """
        if self._text_input_focused():
            return False
        action = action_for_key(event)
        if action is None:
            return False
        self._apply(action)
        return True
