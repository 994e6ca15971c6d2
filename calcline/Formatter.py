# Formatter.py
"""
Result post-processing and display markup.

- normalize_number: strip floating point noise from a raw result
- format_number_for_display: grouped integer / decimal / scientific markup
- result_to_latex: any evaluation result → display markup
- expression_to_latex_with_const_embeds: expression text → editor markup
  with constant references turned into \\embed{const}[key] badges
"""

import logging
import math
import re
from decimal import Decimal, localcontext, ROUND_HALF_UP

from . import error as E
from . import LatexTranslator
from . import MathEngine

logger = logging.getLogger(__name__)

EPSILON = 1e-12
PRECISION = 14
DISPLAY_DIGITS = 9
SCIENTIFIC_LARGE = 1e10
SCIENTIFIC_SMALL = 1e-4

_PLACEHOLDER = re.compile(r"\[([^\]]+)\]")


def _is_real(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _round_significant(value, digits):
    """Round to a number of significant digits (half-up, like toPrecision)."""
    with localcontext() as ctx:
        ctx.prec = digits
        ctx.rounding = ROUND_HALF_UP
        return float(+Decimal(repr(value)))


def normalize_number(n):
    """Snap near-zero and near-integer results, otherwise keep 14 significant digits."""
    if isinstance(n, complex):
        real = normalize_number(n.real)
        imag = normalize_number(n.imag)
        if imag == 0:
            return real
        return complex(real, imag)
    if not _is_real(n):
        return n
    if isinstance(n, int):
        return n
    if not math.isfinite(n):
        return n
    if abs(n) < EPSILON:
        return 0
    r = round(n)
    if abs(n - r) < EPSILON:
        return r
    # Reduce visible floating-point noise.
    return _round_significant(n, PRECISION)


def _group_integer(value):
    return f"{value:,}"


def format_number_for_display(n):
    """Markup for a real number: grouped integer, decimal or m \\times 10^{k}."""
    if isinstance(n, float) and math.isnan(n):
        return "\\text{NaN}"
    if isinstance(n, float) and math.isinf(n):
        return "\\infty" if n > 0 else "-\\infty"

    if n == 0:
        return "0"

    abs_n = abs(n)

    # Scientific notation for very large or very small magnitudes
    if abs_n >= SCIENTIFIC_LARGE or abs_n < SCIENTIFIC_SMALL:
        exponent = math.floor(math.log10(abs_n))
        mantissa = _round_significant(n / 10 ** exponent, DISPLAY_DIGITS)
        if abs(mantissa) >= 10:
            mantissa /= 10
            exponent += 1
        mantissa_str = f"{mantissa:.{DISPLAY_DIGITS}g}"
        return f"{mantissa_str} \\times 10^{{{exponent}}}"

    # Effectively an integer
    if isinstance(n, int) or abs(n - round(n)) < 1e-9:
        return _group_integer(round(n))

    parsed = _round_significant(n, DISPLAY_DIGITS)
    if parsed.is_integer():
        return _group_integer(int(parsed))

    sign = "-" if parsed < 0 else ""
    int_part, _, dec_part = repr(abs(parsed)).partition(".")
    return f"{sign}{_group_integer(int(int_part))}.{dec_part}"


def _complex_to_latex(value):
    real = value.real
    imag = value.imag
    imag_str = "" if abs(imag) == 1 else format_number_for_display(abs(imag))
    if real == 0:
        sign = "-" if imag < 0 else ""
        return f"{sign}{imag_str}i"
    sign = "-" if imag < 0 else "+"
    return f"{format_number_for_display(real)}{sign}{imag_str}i"


def result_to_latex(result):
    """Display markup for an evaluation result."""
    if _is_real(result):
        return format_number_for_display(result)
    if isinstance(result, complex):
        return _complex_to_latex(result)
    if isinstance(result, str):
        return f"\\text{{{result}}}"
    return str(result)


def expression_to_latex_with_const_embeds(value, constants):
    """Render expression text as editor markup, turning constant keys into embeds.

    [name] placeholders become plain identifiers. Keys are replaced longest
    first so multi-word keys are not partially consumed. If the text does
    not parse, the token-substituted text is returned with the embeds.
    """
    keys = sorted((k for k in constants if LatexTranslator.is_valid_embed_key(k)),
                  key=len, reverse=True)

    def _placeholder(match):
        name = "_".join(match.group(1).split())
        return name or "x"

    expr = _PLACEHOLDER.sub(_placeholder, str(value))

    token_to_key = {}
    for key in keys:
        token = f"CONST{len(token_to_key)}"
        pattern = re.compile(rf"(?<![A-Za-z0-9_]){re.escape(key)}(?![A-Za-z0-9_])")
        substituted = pattern.sub(token, expr)
        if substituted != expr:
            token_to_key[token] = key
            expr = substituted

    try:
        latex = MathEngine.ast(expr).to_latex()
    except E.MathError as e:
        logger.debug(f"Could not parse {expr!r} for markup: {e.describe()}")
        latex = expr
    for token, key in token_to_key.items():
        embed = LatexTranslator.const_embed_markup(key)
        latex = latex.replace(f"\\mathrm{{{token}}}", embed)
        latex = re.sub(rf"\b{token}\b", lambda _: embed, latex)
    return latex
