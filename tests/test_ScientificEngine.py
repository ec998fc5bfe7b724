# test_ScientificEngine.py

from decimal import Decimal, localcontext

import pytest

from CalcEngine import ScientificEngine
from CalcEngine.MathEngine import calculate
from CalcEngine.config_manager import Preferences

TOLERANCE = Decimal("1e-20")


def value_of(expression, **preferences):
    result = calculate(expression, Preferences(**preferences))
    assert result.ok, result.error
    return result.value


@pytest.mark.parametrize("expr,expected", [
    ("tenpow(3)", "1000"),
    ("log(100)", "2"),
    ("exp(0)", "1"),
    ("abs(-3)", "3"),
    ("square(4)", "16"),
    ("cube(-2)", "-8"),
    ("inv(4)", "0.25"),
    ("sqrt(16)", "4"),
    ("cbrt(27)", "3"),
    ("cbrt(-8)", "-2"),
    ("pow(2, 10)", "1024"),
    ("pow(4, 0.5)", "2"),
    ("fact(10)", "3628800"),
])
def test_exact_results(expr, expected):
    assert value_of(expr) == Decimal(expected)

def test_tenpow_is_exact():
    assert str(value_of("tenpow(3)")) == "1000"

def test_ln_of_e():
    assert abs(value_of("ln(e)") - 1) < TOLERANCE

@pytest.mark.parametrize("expr,expected", [
    ("root(27, 3)", "3"),
    ("root(16, 4)", "2"),
    ("root(-27, 3)", "-3"),
    ("root(2, 0.5)", "4"),
])
def test_root(expr, expected):
    assert abs(value_of(expr) - Decimal(expected)) < TOLERANCE

@pytest.mark.parametrize("expr,code", [
    ("ln(0)", "2002"),
    ("ln(-1)", "2002"),
    ("log(0)", "2003"),
    ("inv(0)", "2004"),
    ("sqrt(-1)", "2005"),
    ("root(8, 0)", "2006"),
    ("root(-8, 2)", "2007"),
    ("fact(-1)", "2008"),
    ("2.5!", "2009"),
    ("pow(2)", "2011"),
    ("root(8)", "2011"),
])
def test_domain_errors(expr, code):
    result = calculate(expr)
    assert not result.ok
    assert result.code == code

def test_extra_arguments_are_ignored():
    assert value_of("sqrt(9, 100)") == 3

def test_angle_conversion():
    pi = ScientificEngine.pi()
    assert abs(ScientificEngine.to_radians(Decimal(180), "deg") - pi) < TOLERANCE
    assert abs(ScientificEngine.to_radians(Decimal(200), "grad") - pi) < TOLERANCE
    assert ScientificEngine.to_radians(Decimal("1.5"), "rad") == Decimal("1.5")
    assert abs(ScientificEngine.from_radians(pi, "deg") - 180) < TOLERANCE
    assert ScientificEngine.from_radians(Decimal("1.5"), "rad") == Decimal("1.5")

def test_factorial_loop():
    assert ScientificEngine.factorial(Decimal(0)) == 1
    assert ScientificEngine.factorial(Decimal(1)) == 1
    assert ScientificEngine.factorial(Decimal(6)) == 720

def test_power_of_zero_exponent():
    assert ScientificEngine.power(Decimal(0), Decimal(0)) == 1

def test_every_function_is_callable_through_the_parser():
    for name in ScientificEngine.FUNCTIONS:
        result = calculate(f"{name}(1, 1)", Preferences(angle_unit="rad"))
        assert result.ok, (name, result.error)

def test_pi_is_computed_once_per_precision():
    ScientificEngine._pi_at.cache_clear()
    with localcontext() as context:
        context.prec = 40
        first = ScientificEngine.pi()
        assert ScientificEngine.pi() is first
        assert len(first.as_tuple().digits) == 40
        context.prec = 60
        assert len(ScientificEngine.pi().as_tuple().digits) == 60
    assert ScientificEngine._pi_at.cache_info().misses == 2

def test_trig_reuses_cached_pi():
    ScientificEngine._pi_at.cache_clear()
    value_of("sin(30) + cos(60) + tan(45)")
    assert ScientificEngine._pi_at.cache_info().misses == 1
