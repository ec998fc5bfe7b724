# ExpressionBuffer.py
"""""
Editable text buffer holding the expression the user is composing.

Besides plain edits (append, delete, clear) the buffer works on the *entry*,
the trailing number of the text, and on the top-level operator in front of
it. Both are found by scanning the text backwards:

- A '-' directly before an entry is the entry's sign if it starts the text or
  follows one of ``+-*/^(%``; otherwise it is a subtraction.
- Operators inside parentheses are skipped by tracking the nesting depth.

Buffer operations never raise; failures come back as Outcome(ok=False) and
leave the text untouched.
"""""

import logging
import string
from dataclasses import dataclass
from decimal import Decimal, DecimalException, InvalidOperation
from enum import Enum, auto
from typing import Optional

from . import config_manager as config_manager
from . import MathEngine as MathEngine
from .History import History

logger = logging.getLogger(__name__)

ENTRY_CHARS = frozenset(string.ascii_letters + string.digits + ".")

# Characters after which a '-' is a sign (entry scan / operator scan)
ENTRY_SIGN_CONTEXT = "+-*/^(%"
OPERATOR_SIGN_CONTEXT = "+-*/("

TOP_LEVEL_OPERATORS = "+-*/"


# -----------------------------
# Backward scanning
# -----------------------------

class ScanState(Enum):
    SKIPPING_SPACE = auto()
    IN_ENTRY = auto()
    AT_SIGN_CANDIDATE = auto()
    DONE = auto()


def is_sign(text, index, sign_context):
    """True if text[index] is a '-' used as a sign rather than a subtraction."""
    return text[index] == "-" and (index == 0 or text[index - 1] in sign_context)


def last_entry_bounds(text):
    """Return (start, end) of the trailing entry, or None if the text does not end in one."""
    state = ScanState.SKIPPING_SPACE
    i = len(text) - 1
    start = end = None

    while state is not ScanState.DONE:
        if state is ScanState.SKIPPING_SPACE:
            if i < 0 or (text[i] != " " and text[i] not in ENTRY_CHARS):
                return None
            if text[i] == " ":
                i -= 1
            else:
                end = i + 1
                state = ScanState.IN_ENTRY

        elif state is ScanState.IN_ENTRY:
            if i >= 0 and text[i] in ENTRY_CHARS:
                i -= 1
            else:
                start = i + 1
                state = ScanState.AT_SIGN_CANDIDATE

        elif state is ScanState.AT_SIGN_CANDIDATE:
            if i >= 0 and is_sign(text, i, ENTRY_SIGN_CONTEXT):
                start = i
            state = ScanState.DONE

    return start, end


def find_top_level_operator(text, limit):
    """Index of the nearest binary + - * / at nesting depth 0 before ``limit``, or -1."""
    depth = 0
    for i in range(limit - 1, -1, -1):
        char = text[i]
        if char == ")":
            depth += 1
            continue
        if char == "(" and depth > 0:
            depth -= 1
            continue
        if depth == 0 and char in TOP_LEVEL_OPERATORS:
            if is_sign(text, i, OPERATOR_SIGN_CONTEXT):
                continue
            return i
    return -1


def extract_operand_before(text, op_index):
    """The sub-expression directly in front of the operator at ``op_index``."""
    if op_index <= 0:
        return None
    end = op_index - 1
    while end >= 0 and text[end].isspace():
        end -= 1
    if end < 0:
        return None

    depth = 0
    start = end
    while start >= 0:
        char = text[start]
        if char == ")":
            depth += 1
        elif char == "(":
            if depth == 0:
                break
            depth -= 1
        elif depth == 0 and char in TOP_LEVEL_OPERATORS:
            if not is_sign(text, start, OPERATOR_SIGN_CONTEXT):
                break
        start -= 1

    return text[start + 1:op_index]


def parse_decimal(segment):
    if not segment:
        return None
    try:
        value = Decimal(segment)
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def to_text(value):
    """Plain (exponent free) text form of a Decimal for insertion into the buffer."""
    return format(value, "f")


# -----------------------------
# Buffer
# -----------------------------

@dataclass
class Outcome:
    ok: bool
    error: Optional[str] = None
    code: Optional[str] = None
    expression: Optional[str] = None
    value: Optional[Decimal] = None
    formatted: Optional[str] = None
    rounded: bool = False
    cleared: bool = False
    should_clear_result: bool = False


def _failure(message, code):
    logger.debug("Buffer operation failed with %s: %s", code, message)
    return Outcome(ok=False, error=message, code=code)


class ExpressionBuffer:
    """One session's expression text, last result and memory register."""

    def __init__(self, preferences=None, history=None):
        self.preferences = preferences or config_manager.Preferences()
        self.history = history if history is not None else History(self.preferences.max_history)
        self.text = ""
        self.last_result = None
        self.memory_value = None

    def set_preferences(self, preferences):
        self.preferences = preferences
        self.history.resize(preferences.max_history)

    # --- plain edits ---

    def set_expression(self, text):
        self.text = str(text or "")
        self.last_result = None

    def append(self, token):
        self.last_result = None
        self.text += token

    def delete_last(self):
        self.last_result = None
        self.text = self.text[:-1]

    def clear(self):
        self.text = ""
        self.last_result = None

    def clear_entry(self):
        self.last_result = None
        bounds = last_entry_bounds(self.text)
        if bounds is None:
            self.clear()
            return
        self.text = self.text[:bounds[0]]

    def set_last_result(self, value):
        self.last_result = None if value is None else Decimal(value)

    # --- entry edits ---

    def _replace_last_entry(self, bounds, replacement):
        start, end = bounds
        self.last_result = None
        self.text = self.text[:start] + replacement + self.text[end:]
        logger.debug("Buffer is now %r", self.text)

    def toggle_last_number_sign(self):
        self.last_result = None
        bounds = last_entry_bounds(self.text)
        if bounds is None:
            return False
        segment = self.text[bounds[0]:bounds[1]]
        toggled = segment[1:] if segment.startswith("-") else "-" + segment
        self._replace_last_entry(bounds, toggled)
        return True

    def _evaluate_base(self, op_index):
        operand = extract_operand_before(self.text, op_index)
        if not operand or not MathEngine.is_valid_expression(operand):
            return None
        result = MathEngine.calculate(operand, self.preferences)
        return result.value if result.ok else None

    def apply_percent(self):
        """Turn the entry into a percentage of the operand before the nearest operator."""
        bounds = last_entry_bounds(self.text)
        if bounds is None:
            return _failure("No convertible number.", "4001")

        percent_value = parse_decimal(self.text[bounds[0]:bounds[1]])
        if percent_value is None:
            return _failure("Entry can not be converted to a percentage.", "4002")

        op_index = find_top_level_operator(self.text, bounds[0])
        base_value = self._evaluate_base(op_index) if op_index != -1 else None

        try:
            with MathEngine.engine_context(self.preferences):
                if base_value is None:
                    replacement = percent_value / 100
                else:
                    replacement = base_value * percent_value / 100
        except DecimalException:
            return _failure("Entry can not be converted to a percentage.", "4002")

        self._replace_last_entry(bounds, to_text(replacement))
        return Outcome(ok=True, expression=self.text)

    # --- evaluation ---

    def current_entry_decimal(self):
        """Last result, else the entry, else the whole buffer evaluated; None if nothing resolves."""
        if self.last_result is not None:
            return self.last_result

        bounds = last_entry_bounds(self.text)
        if bounds is not None:
            parsed = parse_decimal(self.text[bounds[0]:bounds[1]])
            if parsed is not None:
                return parsed

        expression = MathEngine.format_expression(self.text)
        if expression and MathEngine.is_valid_expression(expression):
            result = MathEngine.calculate(expression, self.preferences)
            if result.ok:
                return result.value
        return None

    def evaluate(self):
        """Evaluate the whole buffer, cache the result and record it in the history."""
        expression = MathEngine.format_expression(self.text)
        result = MathEngine.calculate(expression, self.preferences)
        if not result.ok:
            return Outcome(ok=False, error=result.error, code=result.code, expression=self.text)

        formatted, rounded = MathEngine.cleanup(result.value, self.preferences.display_digits)
        self.last_result = result.value
        self.history.add(expression, formatted)
        return Outcome(ok=True, expression=self.text, value=result.value,
                       formatted=formatted, rounded=rounded)

    # --- memory ---

    def handle_memory_action(self, action):
        handlers = {
            "memory-clear": self._memory_clear,
            "memory-store": self._memory_store,
            "memory-plus": self._memory_plus,
            "memory-minus": self._memory_minus,
            "memory-recall": self._memory_recall,
        }
        handler = handlers.get(action)
        if handler is None:
            return _failure(f"Unknown memory action: {action}", "4007")
        return handler()

    def _memory_clear(self):
        self.memory_value = None
        return Outcome(ok=True, cleared=True)

    def _memory_store(self):
        value = self.current_entry_decimal()
        if value is None:
            return _failure("No value to store.", "4003")
        self.memory_value = value
        return Outcome(ok=True)

    def _memory_plus(self):
        value = self.current_entry_decimal()
        if value is None:
            return _failure("No value to add to memory.", "4004")
        try:
            with MathEngine.engine_context(self.preferences):
                total = value if self.memory_value is None else self.memory_value + value
        except DecimalException:
            return _failure("Memory value out of range.", "4008")
        self.memory_value = total
        return Outcome(ok=True)

    def _memory_minus(self):
        value = self.current_entry_decimal()
        if value is None:
            return _failure("No value to subtract from memory.", "4005")
        try:
            with MathEngine.engine_context(self.preferences):
                total = -value if self.memory_value is None else self.memory_value - value
        except DecimalException:
            return _failure("Memory value out of range.", "4008")
        self.memory_value = total
        return Outcome(ok=True)

    def _memory_recall(self):
        if self.memory_value is None:
            return _failure("Memory is empty.", "4006")

        replacement = to_text(self.memory_value)
        should_clear_result = False
        if self.last_result is not None:
            self.text = replacement
            self.last_result = None
            should_clear_result = True
        else:
            bounds = last_entry_bounds(self.text)
            if bounds is not None:
                self._replace_last_entry(bounds, replacement)
            else:
                self.append(replacement)
        return Outcome(ok=True, expression=self.text, should_clear_result=should_clear_result)
