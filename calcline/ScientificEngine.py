# ScientificEngine
"""Evaluation scope: constants, log family, angle-unit aware trigonometry,
numeric integration and the constant-embed lookup."""

import cmath
import logging
import math
import numbers
import sys
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum

from . import error as E
from . import ImplicitSyntax
from . import LatexTranslator
from . import MathEngine

logger = logging.getLogger(__name__)

DEFAULT_INTEGRATION_STEPS = 1000
MIN_INTEGRATION_STEPS = 10

# ln of the largest finite float
LOG_FLOAT_MAX = math.log(sys.float_info.max)

LAST_ANSWER_NAMES = ("ans", "Ans")


class AngleUnit(str, Enum):
    RADIANS = "radians"
    DEGREES = "degrees"

    @classmethod
    def parse(cls, value):
        """Accept an AngleUnit, 'rad'/'radians' or 'deg'/'degrees'."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        if text in ("rad", "radian", "radians"):
            return cls.RADIANS
        if text in ("deg", "degree", "degrees"):
            return cls.DEGREES
        raise E.ConfigurationError(f"{value!r}", code="5001")


# -----------------------------
# Plain functions
# -----------------------------

def _as_int(value):
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, int):
        return value
    raise ValueError(f"{value!r} is not an integer")


def ln(x):
    return math.log(x)


def log(x, base=None):
    """log(x) is base 10; log(x, base) uses the given base."""
    if base is None:
        return math.log10(x)
    return math.log(x, base)


def sqrt(x):
    if isinstance(x, complex) or x < 0:
        return cmath.sqrt(x)
    return math.sqrt(x)


def round_half_up(x, digits=0):
    """round(2.5) is 3, like a calculator, not banker's rounding."""
    pattern = Decimal(1).scaleb(-_as_int(digits))
    return float(Decimal(repr(float(x))).quantize(pattern, rounding=ROUND_HALF_UP))


def mod(x, y):
    return x % y


def gcd(*values):
    return math.gcd(*(_as_int(v) for v in values))


def lcm(*values):
    return math.lcm(*(_as_int(v) for v in values))


def _bounded_count(count, log_size, n, k):
    """Float result of a counting function; inf past the float range, like 171!."""
    if 0 <= k <= n and log_size() > LOG_FLOAT_MAX:
        return math.inf
    try:
        return float(count(n, k))
    except OverflowError:
        return math.inf


def combinations(n, k):
    n, k = _as_int(n), _as_int(k)
    return _bounded_count(
        math.comb,
        lambda: math.lgamma(n + 1) - math.lgamma(k + 1) - math.lgamma(n - k + 1),
        n, k)


def permutations(n, k=None):
    n = _as_int(n)
    k = n if k is None else _as_int(k)
    return _bounded_count(
        math.perm,
        lambda: math.lgamma(n + 1) - math.lgamma(n - k + 1),
        n, k)


def total(*values):
    return sum(values)


def product(*values):
    return math.prod(values)


# -----------------------------
# Angle-unit dependent bindings
# -----------------------------

def trig_functions(angle_unit):
    """sin/cos/tan, their inverses and reciprocals for the given angle unit.

    In degrees the argument is converted to radians before the call and the
    inverse functions convert their radian result back by 180/π.
    """
    if AngleUnit.parse(angle_unit) is AngleUnit.DEGREES:
        def sin(x):
            return math.sin(math.radians(x))

        def cos(x):
            return math.cos(math.radians(x))

        def tan(x):
            return math.tan(math.radians(x))

        def asin(x):
            return math.asin(x) * (180 / math.pi)

        def acos(x):
            return math.acos(x) * (180 / math.pi)

        def atan(x):
            return math.atan(x) * (180 / math.pi)
    else:
        sin, cos, tan = math.sin, math.cos, math.tan
        asin, acos, atan = math.asin, math.acos, math.atan

    return {
        "sin": sin,
        "cos": cos,
        "tan": tan,
        "sec": lambda x: 1 / cos(x),
        "csc": lambda x: 1 / sin(x),
        "cot": lambda x: 1 / tan(x),
        "asin": asin,
        "acos": acos,
        "atan": atan,
    }


def make_integral(scope):
    """int(f, a, b[, n]): composite trapezoid rule over n steps (at least 10).

    f is a function value (int(sin, 0, pi)) or an expression string in x
    (int("x^2", 0, 1)), evaluated under the same scope.
    """
    def integral(f, a, b, n=DEFAULT_INTEGRATION_STEPS):
        if callable(f):
            fn = f
        else:
            text = LatexTranslator.normalize_expression(str(f))
            text = ImplicitSyntax.insert_implicit_function_calls(text)
            text = ImplicitSyntax.insert_implicit_multiplication(text)
            tree = MathEngine.ast(text)
            local_scope = dict(scope)

            def fn(x):
                local_scope["x"] = x
                return tree.evaluate(local_scope)

        steps = max(MIN_INTEGRATION_STEPS, math.floor(n))
        h = (b - a) / steps
        acc = 0.5 * (fn(a) + fn(b))
        for k in range(1, steps):
            acc += fn(a + k * h)
        return acc * h

    return integral


def valid_constants(constants):
    """Keep entries whose key passes the embed-key check and whose value is a number."""
    accepted = {}
    for key, value in (constants or {}).items():
        if not LatexTranslator.is_valid_embed_key(key):
            logger.debug(f"Skipping constant with invalid key: {key!r}")
            continue
        if isinstance(value, bool) or not isinstance(value, numbers.Number):
            logger.debug(f"Skipping constant {key!r} with non-numeric value: {value!r}")
            continue
        accepted[str(key)] = value
    return accepted


def constant_lookup(constants):
    """The __const(key) marker function; only embed-inserted keys reach it."""
    def __const(key):
        name = str(key)
        if name not in constants:
            raise E.UnknownConstantError(name, code="3032")
        return constants[name]
    return __const


def build_scope(angle_unit=AngleUnit.RADIANS, constants=None):
    """Assemble the bindings one evaluation pass runs against."""
    scope = {
        "pi": math.pi,
        "e": math.e,
        "tau": math.tau,
        "phi": (1 + math.sqrt(5)) / 2,
        "i": 1j,
        "Infinity": math.inf,
        "NaN": math.nan,

        "ln": ln,
        "log": log,
        "log10": math.log10,
        "log2": math.log2,
        "exp": math.exp,
        "sqrt": sqrt,

        "sinh": math.sinh,
        "cosh": math.cosh,
        "tanh": math.tanh,
        "asinh": math.asinh,
        "acosh": math.acosh,
        "atanh": math.atanh,

        "abs": abs,
        "floor": math.floor,
        "ceil": math.ceil,
        "round": round_half_up,
        "mod": mod,
        "gcd": gcd,
        "lcm": lcm,
        "factorial": MathEngine.factorial,
        "combinations": combinations,
        "permutations": permutations,
        "sum": total,
        "prod": product,
    }
    scope.update(trig_functions(angle_unit))
    scope["int"] = make_integral(scope)
    scope["__const"] = constant_lookup(valid_constants(constants))
    for name in LAST_ANSWER_NAMES:
        scope[name] = 0
    return scope


def set_last_answer(scope, value):
    for name in LAST_ANSWER_NAMES:
        scope[name] = value
