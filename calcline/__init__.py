"""Calculator core: editor markup → canonical expression → evaluated, displayable results."""

from .LineEvaluator import (
    ConstantDefinition,
    Line,
    LineResult,
    evaluate_expression,
    evaluate_lines,
    to_math_expression,
)
from .ScientificEngine import AngleUnit, build_scope

__all__ = [
    "AngleUnit",
    "ConstantDefinition",
    "Line",
    "LineResult",
    "build_scope",
    "evaluate_expression",
    "evaluate_lines",
    "to_math_expression",
]
