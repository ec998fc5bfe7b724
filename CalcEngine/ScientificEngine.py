# ScientificEngine.py
"""""
Math function library for the calculator engine.

Every function takes its first argument as a Decimal, the active Preferences,
and any further arguments positionally. Domain checks run before computing and
raise error.DomainError with a specific message.

Trigonometry and cube roots are not part of the decimal module; they are
computed with mpmath at the active decimal precision (plus guard digits) and
converted back through a decimal string, so no machine float is involved.
"""""

from decimal import Decimal, getcontext
from functools import lru_cache

import mpmath as mp

from . import error as E

# Extra digits mpmath works with before rounding back to the decimal context
GUARD_DIGITS = 10

# Unit factor for "value * pi / factor" (deg, grad); rad is the identity
ANGLE_FACTORS = {"deg": 180, "grad": 200}


# -----------------------------
# Decimal <-> mpmath bridge
# -----------------------------

def _to_mpf(value):
    if value.is_nan():
        return mp.nan
    if value.is_infinite():
        return -mp.inf if value.is_signed() else mp.inf
    return mp.mpf(str(value))


def _to_decimal(value):
    # asin/acos outside [-1, 1] yield complex numbers: not representable here
    if isinstance(value, mp.mpc):
        return Decimal("NaN")
    return Decimal(mp.nstr(value, getcontext().prec))


def _mp_call(function, *arguments):
    with mp.workdps(getcontext().prec + GUARD_DIGITS):
        result = function(*[_to_mpf(argument) for argument in arguments])
        return _to_decimal(result)


# -----------------------------
# Constants
# -----------------------------

@lru_cache(maxsize=None)
def _pi_at(precision):
    with mp.workdps(precision + GUARD_DIGITS):
        return Decimal(mp.nstr(+mp.pi, precision))


def pi():
    """Pi at the active decimal precision, computed once per precision."""
    return _pi_at(getcontext().prec)


def e():
    """Euler's number at the active decimal precision."""
    return Decimal(1).exp()


CONSTANTS = {"pi": pi, "e": e}


# -----------------------------
# Angle conversion
# -----------------------------

def to_radians(value, angle_unit):
    factor = ANGLE_FACTORS.get(angle_unit)
    if factor is None:
        return value
    return value * pi() / factor


def from_radians(value, angle_unit):
    factor = ANGLE_FACTORS.get(angle_unit)
    if factor is None:
        return value
    return value * factor / pi()


# -----------------------------
# Helpers shared with the evaluator
# -----------------------------

def power(base, exponent):
    """Decimal power; supports non-integer and negative exponents."""
    # decimal refuses 0 ** 0, the calculator defines it as 1
    if exponent == 0:
        return Decimal(1)
    return base ** exponent


def factorial(n):
    """Iterative factorial by repeated decimal multiplication. No upper bound."""
    if not n.is_finite() or n < 0:
        raise E.DomainError("Factorial needs a finite, non-negative number.", code="2008")
    if n != n.to_integral_value():
        raise E.DomainError("Factorial needs an integer.", code="2009")

    result = Decimal(1)
    i = Decimal(2)
    while i <= n:
        result = result * i
        i += 1
    return result


def _require(argument, name):
    if argument is None:
        raise E.DomainError(f"Missing argument for function: {name}", code="2011")
    return argument


# -----------------------------
# Function table
# -----------------------------

def sin(x, preferences, *_):
    return _mp_call(mp.sin, to_radians(x, preferences.angle_unit))

def cos(x, preferences, *_):
    return _mp_call(mp.cos, to_radians(x, preferences.angle_unit))

def tan(x, preferences, *_):
    return _mp_call(mp.tan, to_radians(x, preferences.angle_unit))

def asin(x, preferences, *_):
    return from_radians(_mp_call(mp.asin, x), preferences.angle_unit)

def acos(x, preferences, *_):
    return from_radians(_mp_call(mp.acos, x), preferences.angle_unit)

def atan(x, preferences, *_):
    return from_radians(_mp_call(mp.atan, x), preferences.angle_unit)


def ln(x, preferences, *_):
    if x <= 0:
        raise E.DomainError("ln is only defined for x > 0.", code="2002")
    return x.ln()

def log(x, preferences, *_):
    if x <= 0:
        raise E.DomainError("log is only defined for x > 0.", code="2003")
    return x.log10()

def exp(x, preferences, *_):
    return x.exp()

def tenpow(x, preferences, *_):
    return power(Decimal(10), x)


def absolute(x, preferences, *_):
    return abs(x)

def square(x, preferences, *_):
    return x * x

def cube(x, preferences, *_):
    return x * x * x

def inv(x, preferences, *_):
    if x == 0:
        raise E.DomainError("Reciprocal of zero.", code="2004")
    return Decimal(1) / x


def sqrt(x, preferences, *_):
    if x < 0:
        raise E.DomainError("Square root of a negative number.", code="2005")
    return x.sqrt()

def cbrt(x, preferences, *_):
    # mpmath returns the complex principal root for negatives; use the real one
    root_value = _mp_call(mp.cbrt, abs(x))
    return -root_value if x < 0 else root_value

def pow_(x, preferences, y=None, *_):
    return power(x, _require(y, "pow"))

def root(x, preferences, n=None, *_):
    n = _require(n, "root")
    if n == 0:
        raise E.DomainError("Zeroth root is undefined.", code="2006")
    if x < 0 and n % 2 == 0:
        raise E.DomainError("Even root of a negative number.", code="2007")
    if x < 0 and n == n.to_integral_value():
        # odd integer degree: real negative root
        return -power(-x, Decimal(1) / n)
    return power(x, Decimal(1) / n)

def fact(x, preferences, *_):
    return factorial(x)


FUNCTIONS = {
    "sin": sin,
    "cos": cos,
    "tan": tan,
    "asin": asin,
    "acos": acos,
    "atan": atan,
    "ln": ln,
    "log": log,
    "exp": exp,
    "tenpow": tenpow,
    "abs": absolute,
    "square": square,
    "cube": cube,
    "inv": inv,
    "sqrt": sqrt,
    "cbrt": cbrt,
    "pow": pow_,
    "root": root,
    "fact": fact,
}
