"""
Pocket Ledger - Calculator Arithmetic Engine

A left-to-right running-total calculator expressed as pure transitions over an
immutable ``CalculatorState``.  There is no operator precedence: pressing a
second operator resolves the pending one first, so ``2 + 3 × 4`` gives 20.

Every public operation takes the current state and returns a new one.  None
of them raise for any input order; the only error surface is the display
itself, which shows ``"Error"`` for non-finite results.

Typical use (the widget and keyboard router both go through ``dispatch``)::

    state = CalculatorState()
    for action in (Digit("6"), PressOperator(SUB), Digit("2"), Equals()):
        state = dispatch(state, action)
    state.display          # '4'
    state.equation_trace   # '6 − 2 ='
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from decimal import Decimal

import config

# ---------------------------------------------------------------------------
# Operator symbols (as shown on the keypad and in the equation line)
# ---------------------------------------------------------------------------

ADD = "+"
SUB = "\u2212"
MUL = "\u00d7"
DIV = "\u00f7"

OPERATORS = (ADD, SUB, MUL, DIV)

ERROR_TEXT = "Error"

_DIGITS = "0123456789"


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CalculatorState:
    """Snapshot of the calculator.

    ``pending_operator`` and ``previous_operand`` are always set and cleared
    together.  ``equation_trace`` is only non-empty while ``just_completed``.
    """

    display: str = "0"
    previous_operand: float | None = None
    pending_operator: str | None = None
    awaiting_new_operand: bool = False
    just_completed: bool = False
    left_operand_text: str = ""
    equation_trace: str = ""


FRESH = CalculatorState()


# ---------------------------------------------------------------------------
# Number helpers
# ---------------------------------------------------------------------------

def _plain(value: float) -> str:
    """Render a finite float in positional notation with no trailing zeros."""
    if value == 0:
        return "0"   # also folds -0.0
    return format(Decimal(repr(value)).normalize(), "f")


def fmt(value: float) -> str:
    """Format a computed value for the display.

    Rounds to 10 decimal places; when that is still longer than the display
    cap, falls back to 8 significant digits.  Non-finite values become
    ``"Error"``.
    """
    if not math.isfinite(value):
        return ERROR_TEXT
    text = _plain(round(value, 10))
    if len(text) > config.DISPLAY_MAX_CHARS:
        text = _plain(float(f"{value:.8g}"))
    return text


def parse_display(text: str) -> float:
    """Numeric value of *text*, or NaN when it is not a number (``"Error"``)."""
    try:
        return float(text)
    except ValueError:
        return math.nan


def apply_operator(op: str | None, a: float, b: float) -> float:
    """Evaluate ``a op b``.  Division by zero yields +inf instead of raising."""
    if op == ADD:
        return a + b
    if op == SUB:
        return a - b
    if op == MUL:
        return a * b
    if op == DIV:
        return math.inf if b == 0 else a / b
    return b


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def digit(state: CalculatorState, d: str) -> CalculatorState:
    """Type a single digit character."""
    if len(d) != 1 or d not in _DIGITS:
        raise ValueError(f"Not a digit: {d!r}")

    if state.awaiting_new_operand or state.just_completed:
        return replace(
            state,
            display=d,
            awaiting_new_operand=False,
            just_completed=False,
            equation_trace="",
        )
    if state.display == "0":
        return replace(state, display=d)
    if len(state.display) >= config.DISPLAY_MAX_CHARS:
        return state
    return replace(state, display=state.display + d)


def decimal_point(state: CalculatorState) -> CalculatorState:
    """Type a decimal point; a second point in the same operand is ignored."""
    if state.awaiting_new_operand or state.just_completed:
        return replace(
            state,
            display="0.",
            awaiting_new_operand=False,
            just_completed=False,
            equation_trace="",
        )
    if "." in state.display:
        return state
    return replace(state, display=state.display + ".")


def clear(state: CalculatorState | None = None) -> CalculatorState:
    """Return the fresh state, whatever came before."""
    return FRESH


def backspace(state: CalculatorState) -> CalculatorState:
    """Drop the last display character, falling back to ``"0"``.

    A remainder with no digits left (``"-"``, or what is left of
    ``"Error"``) also falls back to ``"0"``.
    """
    rest = state.display[:-1]
    if not any(ch in _DIGITS for ch in rest):
        rest = "0"
    return replace(state, display=rest)


def toggle_sign(state: CalculatorState) -> CalculatorState:
    value = parse_display(state.display)
    if math.isnan(value):
        return state
    return replace(state, display=fmt(-value))


def percent(state: CalculatorState) -> CalculatorState:
    value = parse_display(state.display)
    if math.isnan(value):
        return state
    return replace(state, display=fmt(value / 100))


def press_operator(state: CalculatorState, op: str) -> CalculatorState:
    """Select *op*, first resolving a pending operation if a new operand was typed."""
    if op not in OPERATORS:
        raise ValueError(f"Unknown operator: {op!r}")

    chained = (
        state.previous_operand is not None
        and not state.awaiting_new_operand
        and not state.just_completed
    )
    if chained:
        result = fmt(apply_operator(
            state.pending_operator,
            state.previous_operand,
            parse_display(state.display),
        ))
        display = result
        previous = parse_display(result)
        left_text = result
    else:
        display = state.display
        previous = parse_display(state.display)
        left_text = state.display

    return replace(
        state,
        display=display,
        previous_operand=previous,
        pending_operator=op,
        awaiting_new_operand=True,
        just_completed=False,
        left_operand_text=left_text,
        equation_trace="",
    )


def equals(state: CalculatorState) -> CalculatorState:
    """Resolve the pending operation; a no-op when nothing is pending."""
    if state.pending_operator is None or state.previous_operand is None:
        return state

    result = apply_operator(
        state.pending_operator,
        state.previous_operand,
        parse_display(state.display),
    )
    return CalculatorState(
        display=fmt(result),
        just_completed=True,
        equation_trace=(
            f"{state.left_operand_text} {state.pending_operator} "
            f"{state.display} ="
        ),
    )


# ---------------------------------------------------------------------------
# Derived values for rendering
# ---------------------------------------------------------------------------

def equation_line(state: CalculatorState) -> str:
    """The small line above the main display."""
    if state.just_completed:
        return state.equation_trace
    if state.pending_operator is not None:
        return f"{state.left_operand_text} {state.pending_operator}"
    return ""


def is_idle_at_zero(state: CalculatorState) -> bool:
    """True when the clear key should read "AC" rather than "C"."""
    return state.display == "0" and state.previous_operand is None


def active_operator(state: CalculatorState) -> str | None:
    """Operator whose key is highlighted while waiting for the right operand."""
    if state.awaiting_new_operand:
        return state.pending_operator
    return None


# ---------------------------------------------------------------------------
# Tagged actions + reducer
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Digit:
    value: str


@dataclass(frozen=True)
class DecimalPoint:
    pass


@dataclass(frozen=True)
class Clear:
    pass


@dataclass(frozen=True)
class Backspace:
    pass


@dataclass(frozen=True)
class ToggleSign:
    pass


@dataclass(frozen=True)
class Percent:
    pass


@dataclass(frozen=True)
class PressOperator:
    op: str


@dataclass(frozen=True)
class Equals:
    pass


def dispatch(state: CalculatorState, action) -> CalculatorState:
    """Apply one tagged action to *state*.

    Raises:
        TypeError: If *action* is not one of the action classes above.
    """
    if isinstance(action, Digit):
        return digit(state, action.value)
    if isinstance(action, PressOperator):
        return press_operator(state, action.op)
    if isinstance(action, DecimalPoint):
        return decimal_point(state)
    if isinstance(action, Equals):
        return equals(state)
    if isinstance(action, Clear):
        return clear(state)
    if isinstance(action, Backspace):
        return backspace(state)
    if isinstance(action, ToggleSign):
        return toggle_sign(state)
    if isinstance(action, Percent):
        return percent(state)
    raise TypeError(f"Unknown calculator action: {action!r}")
