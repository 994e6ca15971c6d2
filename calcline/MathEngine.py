# MathEngine.py
"""
Expression evaluation engine for canonical calculator expressions.

Pipeline
--------
1) Tokenizer: converts an expression string into a flat list of tokens.
2) Parser (AST): builds an Abstract Syntax Tree (recursive-descent, precedence aware).
3) Evaluator: every node evaluates itself against a scope (name → number/function).
4) Renderer: every node renders itself back to markup (to_latex).

Grammar (lowest to highest precedence):
    sum     := term (('+' | '-') term)*
    term    := unary (('*' | '/') unary)*
    unary   := ('+' | '-') unary | power
    power   := postfix ('^' unary)?          (right associative)
    postfix := factor '!'*
    factor  := number | string | name | name '(' args ')' | '(' sum ')'
"""

import json
import logging
import math
from typing import NamedTuple

from . import error as E
from . import literals

logger = logging.getLogger(__name__)

Operations = ["+", "-", "*", "/", "^"]
Punctuation = ["(", ")", ",", "!"]

LATEX_SYMBOLS = {
    "pi": "\\pi",
    "tau": "\\tau",
    "phi": "\\phi",
    "theta": "\\theta",
    "Infinity": "\\infty",
}

LATEX_FUNCTIONS = {
    "sin": "\\sin", "cos": "\\cos", "tan": "\\tan",
    "sec": "\\sec", "csc": "\\csc", "cot": "\\cot",
    "asin": "\\arcsin", "acos": "\\arccos", "atan": "\\arctan",
    "sinh": "\\sinh", "cosh": "\\cosh", "tanh": "\\tanh",
    "ln": "\\ln", "log": "\\log", "exp": "\\exp",
}


class Token(NamedTuple):
    kind: str       # "number", "string", "name" or "op"
    value: object


# -----------------------------
# Utilities / small helpers
# -----------------------------

def factorial(value):
    """n! for non-negative integers, Γ(n + 1) otherwise."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int):
        if value < 0:
            raise E.CalculationError(f"factorial({value})", code="2006")
        # 171! no longer fits in a float
        if value > 170:
            return math.inf
        return float(math.factorial(value))
    return math.gamma(value + 1)


def _number_latex(value):
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


# -----------------------------
# AST node types
# -----------------------------

class Number:
    """AST node for a numeric literal."""
    def __init__(self, value):
        self.value = float(value)

    def evaluate(self, scope):
        return self.value

    def to_latex(self):
        return _number_latex(self.value)

    def __repr__(self):
        return f"Number({self.value!r})"


class String:
    """AST node for a double-quoted string literal (constant keys, integrand text)."""
    def __init__(self, value):
        self.value = value

    def evaluate(self, scope):
        return self.value

    def to_latex(self):
        return f"\\text{{{self.value}}}"

    def __repr__(self):
        return f"String({self.value!r})"


class Variable:
    """AST node for a name resolved through the scope."""
    def __init__(self, name):
        self.name = name

    def evaluate(self, scope):
        if self.name not in scope:
            raise E.UnknownIdentifierError(self.name, code="3031")
        return scope[self.name]

    def to_latex(self):
        if self.name in LATEX_SYMBOLS:
            return LATEX_SYMBOLS[self.name]
        if len(self.name) == 1:
            return self.name
        return f"\\mathrm{{{self.name}}}"

    def __repr__(self):
        return f"Variable('{self.name}')"


class Group:
    """Parenthesized sub-expression; kept in the tree so rendering keeps the parentheses."""
    def __init__(self, inner):
        self.inner = inner

    def evaluate(self, scope):
        return self.inner.evaluate(scope)

    def to_latex(self):
        return f"\\left({self.inner.to_latex()}\\right)"

    def __repr__(self):
        return f"Group({self.inner})"


class Negate:
    def __init__(self, operand):
        self.operand = operand

    def evaluate(self, scope):
        value = self.operand.evaluate(scope)
        try:
            return -value
        except TypeError:
            raise E.CalculationError(f"-{value!r}", code="3004")

    def to_latex(self):
        return f"-{self.operand.to_latex()}"

    def __repr__(self):
        return f"Negate({self.operand})"


class Factorial:
    def __init__(self, operand):
        self.operand = operand

    def evaluate(self, scope):
        value = self.operand.evaluate(scope)
        try:
            return factorial(value)
        except (ValueError, TypeError, OverflowError):
            raise E.CalculationError(f"{value!r}!", code="2006")

    def to_latex(self):
        return f"{self.operand.to_latex()}!"

    def __repr__(self):
        return f"Factorial({self.operand})"


class BinOp:
    """AST node for a binary operation: left <operator> right."""
    def __init__(self, left, operator, right):
        self.left = left
        self.operator = operator
        self.right = right

    def evaluate(self, scope):
        """Evaluate both subtrees and apply the binary operator."""
        left_value = self.left.evaluate(scope)
        right_value = self.right.evaluate(scope)

        try:
            if self.operator == '+':
                return left_value + right_value
            elif self.operator == '-':
                return left_value - right_value
            elif self.operator == '*':
                return left_value * right_value
            elif self.operator == '^':
                return left_value ** right_value
            elif self.operator == '/':
                if right_value == 0:
                    raise E.CalculationError("Division by zero", code="3003")
                return left_value / right_value
        except ZeroDivisionError:
            # 0 ^ negative
            raise E.CalculationError("Division by zero", code="3003")
        except OverflowError:
            raise E.CalculationError("Number too large (Arithmetic overflow).", code="3026")
        except TypeError:
            raise E.CalculationError(
                f"{left_value!r} {self.operator} {right_value!r}", code="3004")
        raise E.CalculationError(f"Unknown operator: {self.operator}", code="3004")

    def to_latex(self):
        left = self.left.to_latex()
        right = self.right.to_latex()
        if self.operator == '*':
            return f"{left}\\cdot {right}"
        if self.operator == '/':
            return f"\\frac{{{left}}}{{{right}}}"
        if self.operator == '^':
            return f"{{{left}}}^{{{right}}}"
        return f"{left}{self.operator}{right}"

    def __repr__(self):
        return f"BinOp({self.operator!r}, left={self.left}, right={self.right})"


class Call:
    """AST node for name(arg, ...); the callee is looked up in the scope."""
    def __init__(self, name, args):
        self.name = name
        self.args = args

    def evaluate(self, scope):
        if self.name not in scope:
            raise E.UnknownIdentifierError(self.name, code="3031")
        function = scope[self.name]
        if not callable(function):
            raise E.CalculationError(self.name, code="3033")
        values = [arg.evaluate(scope) for arg in self.args]
        try:
            return function(*values)
        except E.MathError:
            raise
        except OverflowError:
            raise E.CalculationError(f"{self.name}: arithmetic overflow", code="3026")
        except ZeroDivisionError:
            raise E.CalculationError(f"{self.name}: division by zero", code="3003")
        except (ValueError, TypeError) as e:
            raise E.CalculationError(f"{self.name}: {e}", code="2006")

    def to_latex(self):
        args = ",".join(arg.to_latex() for arg in self.args)
        if self.name == "__const" and len(self.args) == 1 and isinstance(self.args[0], String):
            return f"\\embed{{const}}[{self.args[0].value}]"
        if self.name == "sqrt" and len(self.args) == 1:
            return f"\\sqrt{{{args}}}"
        if self.name == "abs" and len(self.args) == 1:
            return f"\\left|{args}\\right|"
        if self.name in LATEX_FUNCTIONS:
            return f"{LATEX_FUNCTIONS[self.name]}\\left({args}\\right)"
        return f"\\mathrm{{{self.name}}}\\left({args}\\right)"

    def __repr__(self):
        return f"Call({self.name!r}, {self.args})"


# -----------------------------
# Tokenizer
# -----------------------------

def _read_number(problem, b):
    """Return (value, next_index) for the numeric literal starting at b."""
    start = b
    has_dot = False  # Only one dot allowed in a numeric literal
    while b < len(problem) and (problem[b].isdigit() or problem[b] == "."):
        if problem[b] == ".":
            if has_dot:
                raise E.SyntaxError("Double comma sign.", code="3008")
            has_dot = True
        b += 1

    # Exponent suffix: 1e5, 2.5e-3
    if b < len(problem) and problem[b] in "eE":
        e = b + 1
        if e < len(problem) and problem[e] in "+-":
            e += 1
        if e < len(problem) and problem[e].isdigit():
            while e < len(problem) and problem[e].isdigit():
                e += 1
            b = e

    text = problem[start:b]
    if text == ".":
        raise E.SyntaxError("Unexpected character: .", code="3012")
    return float(text), b


def translator(problem):
    """Convert an expression string into a token list (numbers, strings, names, operators)."""
    tokens = []
    b = 0

    while b < len(problem):
        current_char = problem[b]

        # --- Whitespace (ignored) ---
        if current_char.isspace():
            b += 1

        # --- Numbers: digits and decimal separator ---
        elif current_char.isdigit() or current_char == ".":
            value, b = _read_number(problem, b)
            tokens.append(Token("number", value))

        # --- String literals (JSON escapes) ---
        elif current_char == '"':
            end = literals.literal_end(problem, b)
            if end - b < 2 or problem[end - 1] != '"':
                raise E.SyntaxError(problem[b:], code="3013")
            try:
                tokens.append(Token("string", json.loads(problem[b:end])))
            except ValueError:
                raise E.SyntaxError(problem[b:end], code="3013")
            b = end

        # --- Names: variables, constants, functions ---
        elif current_char.isalpha() or current_char == "_":
            start = b
            while b < len(problem) and (problem[b].isalnum() or problem[b] == "_"):
                b += 1
            tokens.append(Token("name", problem[start:b]))

        # --- Operators and punctuation ---
        elif current_char in Operations or current_char in Punctuation:
            tokens.append(Token("op", current_char))
            b += 1

        else:
            raise E.SyntaxError(current_char, code="3012")

    return tokens


# -----------------------------
# Parser (recursive descent)
# -----------------------------

def _is_op(tokens, *ops):
    return bool(tokens) and tokens[0].kind == "op" and tokens[0].value in ops


def ast(expression):
    """Parse an expression string into an AST.
    Implements precedence via nested functions: factor → postfix → power → unary → term → sum.
    """
    tokens = translator(expression)
    if not tokens:
        raise E.SyntaxError("Missing Number.", code="3027")

    # ---- Parsing functions in precedence order ----

    def parse_factor(tokens):
        """Numbers, strings, names, calls and sub-expressions in '()'."""
        if not tokens:
            raise E.SyntaxError("Missing Number.", code="3027")
        token = tokens.pop(0)

        if token.kind == "number":
            return Number(token.value)
        if token.kind == "string":
            return String(token.value)
        if token.kind == "name":
            if _is_op(tokens, "("):
                tokens.pop(0)
                args = []
                if not _is_op(tokens, ")"):
                    args.append(parse_sum(tokens))
                    while _is_op(tokens, ","):
                        tokens.pop(0)
                        args.append(parse_sum(tokens))
                if not _is_op(tokens, ")"):
                    raise E.SyntaxError(f"Missing closing parenthesis after function '{token.value}'", code="3009")
                tokens.pop(0)
                return Call(token.value, args)
            return Variable(token.value)

        # Parenthesized sub-expression
        if token.value == "(":
            inner = parse_sum(tokens)
            if not _is_op(tokens, ")"):
                raise E.SyntaxError("Missing closing parenthesis ')'", code="3009")
            tokens.pop(0)
            return Group(inner)

        raise E.SyntaxError(f"{token.value}", code="3011")

    def parse_postfix(tokens):
        node = parse_factor(tokens)
        while _is_op(tokens, "!"):
            tokens.pop(0)
            node = Factorial(node)
        return node

    def parse_power(tokens):
        """Exponentiation '^' (right associative, binds tighter than unary minus on its left)."""
        base = parse_postfix(tokens)
        if _is_op(tokens, "^"):
            tokens.pop(0)
            exponent = parse_unary(tokens)
            return BinOp(base, "^", exponent)
        return base

    def parse_unary(tokens):
        """Handle leading '+'/'-'."""
        if _is_op(tokens, "+", "-"):
            operator = tokens.pop(0).value
            operand = parse_unary(tokens)
            if operator == "-":
                return Negate(operand)
            return operand
        return parse_power(tokens)

    def parse_term(tokens):
        """Multiplication and division."""
        current = parse_unary(tokens)
        while _is_op(tokens, "*", "/"):
            operator = tokens.pop(0).value
            current = BinOp(current, operator, parse_unary(tokens))
        return current

    def parse_sum(tokens):
        """Addition and subtraction."""
        current = parse_term(tokens)
        while _is_op(tokens, "+", "-"):
            operator = tokens.pop(0).value
            current = BinOp(current, operator, parse_term(tokens))
        return current

    tree = parse_sum(tokens)
    if tokens:
        raise E.SyntaxError(f"{tokens[0].value}", code="3011")

    logger.debug(f"AST for {expression!r}: {tree}")
    return tree


# -----------------------------
# Public entry point
# -----------------------------

def evaluate(expression, scope):
    """Parse and evaluate an expression string against a scope."""
    return ast(expression).evaluate(scope)
