# LineEvaluator.py
"""
Line pipeline: markup → canonical expression → value → display markup.

Every line is evaluated in input order against one scope built per pass.
The previous successful result is bound to ans/Ans before each line. A
line that fails for any reason yields a blank result; the remaining
lines are still evaluated.
"""

import logging
from dataclasses import dataclass

from . import error as E
from . import Formatter
from . import ImplicitSyntax
from . import LatexTranslator
from . import MathEngine
from . import ScientificEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Line:
    markup: str = ""
    text: str = ""

    @property
    def canonical_expression(self):
        return to_math_expression(self.markup, self.text)


@dataclass(frozen=True)
class ConstantDefinition:
    key: str
    label: str
    value: float


@dataclass(frozen=True)
class LineResult:
    latex: str = ""
    value: object = None

    @property
    def is_blank(self):
        return self.latex == ""


BLANK = LineResult()


def constants_map(definitions):
    """key → value view of ConstantDefinitions (a mapping is passed through)."""
    if definitions is None:
        return {}
    if hasattr(definitions, "items"):
        return dict(definitions)
    return {definition.key: definition.value for definition in definitions}


def to_math_expression(markup, text=""):
    """Canonical expression for one line; markup wins, text is the fallback."""
    base = LatexTranslator.latex_to_expression(markup) if markup else LatexTranslator.normalize_expression(text or "")
    normalized = LatexTranslator.normalize_expression(base)
    with_calls = ImplicitSyntax.insert_implicit_function_calls(normalized)
    return ImplicitSyntax.insert_implicit_multiplication(with_calls)


def _evaluate_line(expression, scope):
    """Evaluate one canonical expression; returns a LineResult or BLANK."""
    try:
        result = MathEngine.evaluate(expression, scope)
    except E.MathError as e:
        logger.debug(f"Line {expression!r} failed: {e.describe()}")
        return BLANK
    except (ArithmeticError, ValueError, TypeError, RecursionError) as e:
        logger.debug(f"Line {expression!r} failed: {e!r}")
        return BLANK

    # A bare function name evaluates to the function itself; nothing to show.
    if callable(result):
        return BLANK
    result = Formatter.normalize_number(result)
    return LineResult(latex=Formatter.result_to_latex(result), value=result)


def evaluate_lines(lines, angle_unit=ScientificEngine.AngleUnit.RADIANS, constants=None):
    """Evaluate lines in order; returns one LineResult per line."""
    scope = ScientificEngine.build_scope(angle_unit, constants_map(constants))
    results = []
    last_answer = 0
    for line in lines:
        try:
            expression = line.canonical_expression if isinstance(line, Line) else to_math_expression("", str(line))
        except E.MathError as e:
            logger.debug(f"Could not translate line {line!r}: {e.describe()}")
            results.append(BLANK)
            continue
        if not expression:
            results.append(BLANK)
            continue

        ScientificEngine.set_last_answer(scope, last_answer)
        result = _evaluate_line(expression, scope)
        if not result.is_blank:
            last_answer = result.value
        results.append(result)
    return results


def evaluate_expression(expression, angle_unit=ScientificEngine.AngleUnit.RADIANS, constants=None):
    """Single plain-text line convenience wrapper."""
    return evaluate_lines([Line(text=expression)], angle_unit, constants)[0]
