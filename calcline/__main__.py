# __main__.py
"""Entry point for the calculator command line.

   Responsibilities:
   - Load configuration (angle unit, constants, clipboard preference)
   - Evaluate the lines given as arguments, or prompt for lines until EOF
   - Optionally copy the last result to the clipboard
"""
import argparse
import logging
import sys

import pyperclip

from . import config_manager
from . import error as E
from . import LineEvaluator
from .ScientificEngine import AngleUnit

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="calcline",
        description="Evaluate calculator lines written as editor markup or plain text.")
    parser.add_argument("lines", nargs="*", help="lines to evaluate, in order")
    parser.add_argument("--latex", action="store_true", help="treat lines as editor markup")
    unit = parser.add_mutually_exclusive_group()
    unit.add_argument("--degrees", dest="angle_unit", action="store_const", const=AngleUnit.DEGREES)
    unit.add_argument("--radians", dest="angle_unit", action="store_const", const=AngleUnit.RADIANS)
    parser.add_argument("--config", help="settings file (defaults to the packaged config.json)")
    parser.add_argument("--show-expression", action="store_true",
                        help="print the canonical expression next to each result")
    parser.add_argument("--copy", action="store_true", default=None,
                        help="copy the last result to the clipboard")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def to_line(raw, latex):
    return LineEvaluator.Line(markup=raw) if latex else LineEvaluator.Line(text=raw)


def render(line, result, show_expression):
    shown = f"= {result.latex}" if not result.is_blank else "="
    if show_expression:
        try:
            expression = line.canonical_expression
        except E.MathError as e:
            expression = e.describe()
        return f"{expression}  {shown}"
    return shown


def copy_to_clipboard(text):
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        logger.warning(f"Clipboard not available: {e}")


def run_interactive(angle_unit, constants, latex, show_expression):
    """Prompt for one line at a time; every new line re-evaluates the whole list."""
    lines = []
    results = []
    while True:
        try:
            raw = input("> ")
        except EOFError:
            break
        lines.append(to_line(raw, latex))
        results = LineEvaluator.evaluate_lines(lines, angle_unit, constants)
        print(render(lines[-1], results[-1], show_expression))
    return results


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    settings = config_manager.load_setting_value("all", args.config)
    logger.debug(f"Config loaded: {settings}")
    angle_unit = args.angle_unit or config_manager.load_angle_unit(args.config)
    constants = config_manager.load_constants(args.config)
    copy_result = args.copy if args.copy is not None else bool(settings.get("copy_result", False))

    if args.lines:
        lines = [to_line(raw, args.latex) for raw in args.lines]
        results = LineEvaluator.evaluate_lines(lines, angle_unit, constants)
        for line, result in zip(lines, results):
            print(render(line, result, args.show_expression))
    else:
        results = run_interactive(angle_unit, constants, args.latex, args.show_expression)

    answers = [result for result in results if not result.is_blank]
    if copy_result and answers:
        copy_to_clipboard(answers[-1].latex)
    return 0


if __name__ == "__main__":
    sys.exit(main())
