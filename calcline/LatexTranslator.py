# LatexTranslator.py
"""
Markup → expression translation for the calculator.

Pipeline
--------
1) Delimiter unwrapping: \\left( ... \\right) → ( ... )
   (constant embeds are swapped for placeholders before anything else and
   come back as __const("key") at the very end)
2) Structural rewriters: \\frac and \\sqrt, using balanced-group parsing
3) Bracket constructs: |x| → abs(x), floor and ceil brackets
4) \\operatorname{name} unwrapping
5) Literal symbol substitution (\\times, \\pi, \\sin, ...)
6) Powers: base^{exp} → (base)^(exp), then brace and whitespace stripping

The plain-text normalizer (normalize_expression) is the fallback path for
lines without markup and is also applied to the translated markup.
"""

import json
import logging
import re
import string

from . import ImplicitSyntax
from . import literals

logger = logging.getLogger(__name__)

FRAC = "\\frac"
SQRT = "\\sqrt"
POWER = "^{"

IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# Closing delimiter → opening delimiter, for power bases.
_CLOSERS = {")": "(", "]": "[", "}": "{"}
_IDENT_CHARS = set(string.ascii_letters + string.digits + "._")
_COEFFICIENT = re.compile(r"\d+(?:\.\d*)?(?=[A-Za-z_])")
_SCI_NUMBER = re.compile(r"\d+(?:\.\d*)?e\d+")

_ABS = re.compile(r"\\left\|([^|]+)\\right\|")
_FLOOR = re.compile(r"\\left\\lfloor((?:(?!\\left\\lfloor|\\right\\rfloor).)+)\\right\\rfloor")
_CEIL = re.compile(r"\\left\\lceil((?:(?!\\left\\lceil|\\right\\rceil).)+)\\right\\rceil")
_OPERATORNAME = re.compile(r"\\operatorname\{([a-zA-Z][a-zA-Z0-9]*)\}")
_MATHRM = re.compile(r"\\mathrm\{([^{}]*)\}")
_CONST_EMBED = re.compile(r"\\embed\{const\}\[([^\]]+)\]")
_CONST_PLACEHOLDER = re.compile(r'"\x00(\d+)"')
_CONST_CALL = re.compile(r'__const\(("(?:[^"\\]|\\.)*")\)')

SYMBOL_SUBSTITUTIONS = {
    "times": "*",
    "cdotp": "*",
    "cdot": "*",
    "div": "/",
    "pi": "pi",
    "tau": "tau",
    "phi": "phi",
    "theta": "theta",
    "ln": "ln",
    "log": "log",
    "sin": "sin",
    "cos": "cos",
    "tan": "tan",
    "sec": "sec",
    "csc": "csc",
    "cot": "cot",
    "arcsin": "asin",
    "arccos": "acos",
    "arctan": "atan",
    "sinh": "sinh",
    "cosh": "cosh",
    "tanh": "tanh",
    "exp": "exp",
    "sum": "sum",
    "prod": "prod",
    "int": "int",
}

_SYMBOL = re.compile(
    r"\\(" + "|".join(sorted(SYMBOL_SUBSTITUTIONS, key=len, reverse=True)) + r")(?![A-Za-z])")
_SPACING = re.compile(r"\\[,:;! ]")

TEXT_SUBSTITUTIONS = {
    "×": "*",
    "·": "*",
    "÷": "/",
    "−": "-",
    "π": "pi",
    "√": "sqrt",
}

_OPERAND = r"(\([^()]*\)|[0-9A-Za-z._]+)"
_NCR = re.compile(_OPERAND + "nCr" + _OPERAND)
_NPR = re.compile(_OPERAND + "nPr" + _OPERAND)


# -----------------------------
# Balanced-group scanner
# -----------------------------

def parse_group(s, start, open_ch, close_ch):
    """Return (content, end) for the group opening at s[start].

    end is the index one past the matching close_ch. Only open_ch/close_ch
    are counted. Returns (None, start) if s[start] is not open_ch or the
    group never closes.
    """
    if start >= len(s) or s[start] != open_ch:
        return None, start
    depth = 0
    for b in range(start, len(s)):
        if s[b] == open_ch:
            depth += 1
        elif s[b] == close_ch:
            depth -= 1
            if depth == 0:
                return s[start + 1:b], b + 1
    return None, start


def parse_brace_group(s, start):
    return parse_group(s, start, "{", "}")


def parse_bracket_group(s, start):
    return parse_group(s, start, "[", "]")


def find_matching_open(s, close_idx, open_ch, close_ch):
    """Walk backwards from s[close_idx] to its matching open_ch; -1 if unmatched."""
    depth = 0
    b = close_idx
    while b >= 0:
        if s[b] == close_ch:
            depth += 1
        elif s[b] == open_ch:
            depth -= 1
            if depth == 0:
                return b
        b -= 1
    return -1


# -----------------------------
# Structural rewriters
# -----------------------------

def _parse_frac_arg(s, start):
    """One \\frac operand: a brace group, a command token (\\pi) or one digit/letter.

    \\frac12 means 1 over 2, so the shorthand form consumes a single character.
    """
    b = start
    while b < len(s) and s[b].isspace():
        b += 1
    if b >= len(s):
        return None, start
    ch = s[b]
    if ch == "{":
        return parse_brace_group(s, b)
    if ch == "\\":
        end = b + 1
        while end < len(s) and s[end] in string.ascii_letters:
            end += 1
        if end == b + 1:
            return None, start
        return s[b:end], end
    if ch in string.ascii_letters or ch in string.digits:
        return ch, b + 1
    return None, start


def replace_all_frac(s):
    """\\frac{a}{b} → ((a)/(b)), including nested and shorthand fractions."""
    out = s
    idx = out.find(FRAC)
    while idx != -1:
        numerator, pos = _parse_frac_arg(out, idx + len(FRAC))
        if numerator is None:
            idx = out.find(FRAC, idx + 1)
            continue
        denominator, end = _parse_frac_arg(out, pos)
        if denominator is None:
            idx = out.find(FRAC, idx + 1)
            continue
        replacement = f"(({numerator})/({denominator}))"
        out = out[:idx] + replacement + out[end:]
        # Operands may hold further \frac markers
        idx = out.find(FRAC, idx)
    return out


def replace_all_sqrt(s):
    """\\sqrt{x} → sqrt(x); \\sqrt[n]{x} → ((x)^(1/(n)))."""
    out = s
    idx = out.find(SQRT)
    while idx != -1:
        pos = idx + len(SQRT)
        index = None
        if pos < len(out) and out[pos] == "[":
            index, pos = parse_bracket_group(out, pos)
            if index is None:
                idx = out.find(SQRT, idx + 1)
                continue
        inner, end = parse_brace_group(out, pos)
        if inner is None:
            idx = out.find(SQRT, idx + 1)
            continue
        if index is not None:
            replacement = f"(({inner})^(1/({index})))"
        else:
            replacement = f"sqrt({inner})"
        out = out[:idx] + replacement + out[end:]
        idx = out.find(SQRT, idx)
    return out


def _call_name_start(s, open_idx):
    """Start of the function name written directly before s[open_idx], else open_idx."""
    start = open_idx
    while start > 0 and s[start - 1] in _IDENT_CHARS and s[start - 1] != ".":
        start -= 1
    name = s[start:open_idx].lstrip(string.digits)
    if name in ImplicitSyntax.FUNCTION_NAMES:
        return open_idx - len(name)
    return open_idx


def _power_base_start(s, caret):
    """Index where the base ending at s[caret - 1] starts, or -1."""
    last = s[caret - 1]
    if last in _CLOSERS:
        start = find_matching_open(s, caret - 1, _CLOSERS[last], last)
        if last == ")" and start > 0:
            # sin(x)^{2} raises the whole call
            start = _call_name_start(s, start)
        return start

    start = caret
    while start > 0 and s[start - 1] in _IDENT_CHARS:
        start -= 1
    if start == caret:
        return -1
    run = s[start:caret]
    # 2x^{2} raises x, not 2x
    coefficient = _COEFFICIENT.match(run)
    if coefficient and not _SCI_NUMBER.fullmatch(run):
        start += coefficient.end()
    return start


def replace_all_powers(s):
    """base^{exp} → (base)^(exp); the base may be a group or an identifier/number run."""
    out = s
    b = 0
    while b < len(out):
        caret = out.find(POWER, b)
        if caret == -1:
            break
        exponent, end = parse_brace_group(out, caret + 1)
        if exponent is None:
            b = caret + len(POWER)
            continue
        if caret == 0:
            b = end
            continue
        base_start = _power_base_start(out, caret)
        if base_start == -1:
            b = end
            continue
        base = out[base_start:caret]
        replacement = f"({base})^({exponent})"
        out = out[:base_start] + replacement + out[end:]
        # Re-scan the replacement; the exponent may hold another ^{
        b = base_start
    return out


# -----------------------------
# Token-level normalizers
# -----------------------------

def unwrap_delimiters(s):
    return (s.replace("\\left(", "(").replace("\\right)", ")")
             .replace("\\left[", "(").replace("\\right]", ")"))


def convert_bracket_constructs(s):
    """|x| → abs(x), floor/ceil brackets → floor(x)/ceil(x), innermost first."""
    s = literals.fixed_point(lambda text: _ABS.sub(r"abs(\1)", text), s)
    s = literals.fixed_point(lambda text: _FLOOR.sub(r"floor(\1)", text), s)
    s = literals.fixed_point(lambda text: _CEIL.sub(r"ceil(\1)", text), s)
    return s


def unwrap_operator_names(s):
    return _OPERATORNAME.sub(r"\1", s)


def is_valid_embed_key(key):
    """Embed payloads are serialized inside [...], so ']' and line breaks are not allowed."""
    k = str(key)
    if not k.strip():
        return False
    if "]" in k:
        return False
    if "\n" in k or "\r" in k:
        return False
    return True


def const_embed_markup(key):
    if not is_valid_embed_key(key):
        raise ValueError(f"Invalid constant embed key: {key!r}")
    return f"\\embed{{const}}[{key}]"


def convert_const_embeds(s):
    """\\embed{const}[key] → __const("key"), with the key as a JSON string literal.

    Embeds whose key fails is_valid_embed_key are left as they are and
    fail later at evaluation.
    """
    expr, keys = _protect_embeds(s)
    return _restore_embeds(expr, keys)


def extract_const_keys(expr):
    """Return the keys referenced by __const("...") calls, in order."""
    return [json.loads(literal) for literal in _CONST_CALL.findall(expr)]


def substitute_symbols(s):
    """Replace markup symbols and function commands with plain identifiers."""
    def _substitute(chunk):
        chunk = _SPACING.sub("", chunk)
        chunk = _MATHRM.sub(r"\1", chunk)
        return _SYMBOL.sub(lambda m: SYMBOL_SUBSTITUTIONS[m.group(1)], chunk)
    return literals.map_outside_strings(s, _substitute)


def strip_braces(s):
    return literals.map_outside_strings(s, lambda chunk: chunk.replace("{", "").replace("}", ""))


def rewrite_infix_combinatorics(s):
    """5nCr2 → combinations(5,2), 5nPr2 → permutations(5,2)."""
    s = _NCR.sub(r"combinations(\1,\2)", s)
    return _NPR.sub(r"permutations(\1,\2)", s)


def _protect_embeds(s):
    """Swap constant embeds for numbered __const placeholders; keys are restored last."""
    keys = []

    def _protect(match):
        key = match.group(1)
        if not is_valid_embed_key(key):
            return match.group(0)
        keys.append(key)
        return f'__const("\x00{len(keys) - 1}")'

    return _CONST_EMBED.sub(_protect, s), keys


def _restore_embeds(s, keys):
    return _CONST_PLACEHOLDER.sub(
        lambda m: json.dumps(keys[int(m.group(1))], ensure_ascii=False), s)


def latex_to_expression(latex):
    """Translate one line of editor markup into an expression string."""
    expr, keys = _protect_embeds(latex)
    expr = unwrap_delimiters(expr)
    expr = replace_all_frac(expr)
    expr = replace_all_sqrt(expr)
    expr = convert_bracket_constructs(expr)
    expr = unwrap_operator_names(expr)
    expr = substitute_symbols(expr)
    expr = replace_all_powers(expr)
    expr = strip_braces(expr)
    expr = literals.strip_whitespace_outside_strings(expr)
    expr = _restore_embeds(expr, keys)
    logger.debug(f"latex_to_expression: {latex!r} -> {expr!r}")
    return expr


def normalize_expression(text):
    """Plain-text cleanup: whitespace, unicode operators and nCr/nPr infix forms."""
    def _normalize(chunk):
        for symbol, replacement in TEXT_SUBSTITUTIONS.items():
            chunk = chunk.replace(symbol, replacement)
        return rewrite_infix_combinatorics(chunk)

    out = literals.strip_whitespace_outside_strings(text)
    return literals.map_outside_strings(out, _normalize)
