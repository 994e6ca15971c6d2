# ImplicitSyntax.py
"""
Calculator shorthand expansion on normalized expression strings.

Order is fixed: implicit function calls first, implicit multiplication
second. 2sin3 therefore becomes 2sin(3) and then 2*sin(3).
"""

import logging
import re

from . import literals

logger = logging.getLogger(__name__)

# Shared by both passes: a name in this table gets implicit call parentheses
# and never gets an implicit '*' before its argument list.
FUNCTION_NAMES = [
    # Constant embeds compile to __const("key"); it must stay a call.
    "__const",
    "asin",
    "acos",
    "atan",
    "asinh",
    "acosh",
    "atanh",
    "sinh",
    "cosh",
    "tanh",
    "sin",
    "cos",
    "tan",
    "sec",
    "csc",
    "cot",
    "sqrt",
    "sum",
    "prod",
    "int",
    "ln",
    "log",
    "log10",
    "log2",
    "exp",
    "abs",
    "floor",
    "ceil",
    "round",
    "mod",
    "gcd",
    "lcm",
    "factorial",
    "combinations",
    "permutations",
]

CONSTANT_NAMES = ["pi", "tau", "phi", "e", "i"]

_FUNCTION_SET = frozenset(FUNCTION_NAMES)
_FN_ALT = "|".join(re.escape(name) for name in sorted(FUNCTION_NAMES, key=len, reverse=True))
_CONST_ALT = "|".join(CONSTANT_NAMES)

NUMBER = r"(?:\d+(?:\.\d*)?|\.\d+)(?:e[+-]?\d+)?"
# A number token must not be the tail of an identifier (log2, x1) or of another number.
_NUMBER_START = r"(?<![\w.])"

_FN_ARG = rf"(?:-?{NUMBER}|(?:{_CONST_ALT})(?![A-Za-z_])|[A-Za-z_]\w*)"
# Atomic group: once sinh matched, sinh( must not fall back to sin + "h".
_FN_CALL_WITH_ARG = re.compile(rf"(?<![A-Za-z_])((?>{_FN_ALT}))(?!\()({_FN_ARG})")

_MUL_BEFORE_PAREN = re.compile(rf"({_NUMBER_START}{NUMBER}|\)|\b(?:{_CONST_ALT})\b)(?=\()")
_MUL_AFTER_PAREN = re.compile(r"\)(?=\w)")
_MUL_NUMBER_IDENT = re.compile(rf"({_NUMBER_START}{NUMBER})(?!e[+-]?\d)(?=[A-Za-z_])")
_MUL_IDENT_PAREN = re.compile(r"(?<!\w)([A-Za-z_]\w*)(?=\()")


def _wrap_calls(text):
    return _FN_CALL_WITH_ARG.sub(r"\1(\2)", text)


def insert_implicit_function_calls(expr):
    """sin1 → sin(1), sqrt9 → sqrt(9), sinsin1 → sin(sin(1)).

    Only the next token (signed number, constant name or identifier) becomes
    the argument. Runs to a bounded fixed point.
    """
    out = literals.map_outside_strings(expr, lambda chunk: literals.fixed_point(_wrap_calls, chunk))
    if out != expr:
        logger.debug(f"insert_implicit_function_calls: {expr!r} -> {out!r}")
    return out


def _multiply(chunk):
    # 1) number, ')' or constant before '('
    chunk = _MUL_BEFORE_PAREN.sub(r"\1*", chunk)
    # 2) ')' before a digit or identifier
    chunk = _MUL_AFTER_PAREN.sub(")*", chunk)
    # 3) number before an identifier (1e5 stays one number)
    chunk = _MUL_NUMBER_IDENT.sub(r"\1*", chunk)
    # 4) identifier before '(' unless it is a function
    return _MUL_IDENT_PAREN.sub(
        lambda m: m.group(1) if m.group(1) in _FUNCTION_SET else m.group(1) + "*", chunk)


def insert_implicit_multiplication(expr):
    """2(3) → 2*(3), (2)3 → (2)*3, 2pi → 2*pi, x(y) → x*(y); sin(x) is left alone."""
    out = literals.map_outside_strings(expr, _multiply)
    if out != expr:
        logger.debug(f"insert_implicit_multiplication: {expr!r} -> {out!r}")
    return out

