# test_error.py

import re
from pathlib import Path

import pytest

from CalcEngine import error as E
from CalcEngine.ExpressionBuffer import ExpressionBuffer
from CalcEngine.MathEngine import calculate, validate_expression
from CalcEngine.config_manager import Preferences

SOURCE_DIR = Path(E.__file__).resolve().parent


def raised_codes():
    codes = set()
    for path in SOURCE_DIR.glob("*.py"):
        if path.name == "error.py":
            continue
        codes.update(re.findall(r'"([2-9]\d{3})"', path.read_text(encoding="utf-8")))
    return codes


def test_every_raised_code_is_catalogued():
    codes = raised_codes()
    assert codes
    assert codes <= set(E.ERROR_MESSAGES)

def test_every_code_has_an_area():
    for code in E.ERROR_MESSAGES:
        assert code[0] in E.Error_Dictionary


@pytest.mark.parametrize("expr", [
    "foo(1)", "ln(0)", "log(-1)", "inv(0)", "sqrt(-4)", "root(8, 0)",
    "root(-8, 2)", "fact(-1)", "2.5!", "(-8)^(1/3)", "pow(2)",
    "1 $ 2", "1 +", "1/0", "1 % 0", "(1", "sin(1", "sin 1", "1 2",
    "* 2", "sin()", "10^1000000", "asin(2)",
])
def test_raised_message_starts_with_catalogue_text(expr):
    result = calculate(expr)
    assert not result.ok
    assert result.error.startswith(E.ERROR_MESSAGES[result.code])

def test_failed_calculation_carries_equation():
    result = calculate("  1/0 ")
    assert result.equation == "1/0"
    assert validate_expression("1 +").equation == "1 +"

@pytest.mark.parametrize("kwargs", [
    {"angle_unit": "turns"}, {"precision": "high"}, {"mode": "x"},
])
def test_config_message_starts_with_catalogue_text(kwargs):
    with pytest.raises(E.ConfigError) as e:
        Preferences(**kwargs)
    assert e.value.message.startswith(E.ERROR_MESSAGES[e.value.code])

def test_buffer_message_starts_with_catalogue_text():
    outcome = ExpressionBuffer().handle_memory_action("memory-swap")
    assert outcome.error.startswith(E.ERROR_MESSAGES[outcome.code])
