import random

import pytest

from calcline import LatexTranslator as LT


# --- Balanced-group scanner ---

def test_parse_brace_group_nested():
    assert LT.parse_brace_group("{a{b}c}d", 0) == ("a{b}c", 7)


def test_parse_brace_group_unclosed():
    assert LT.parse_brace_group("{ab", 0) == (None, 0)


def test_parse_brace_group_wrong_opener():
    assert LT.parse_brace_group("x{a}", 0) == (None, 0)


def test_parse_bracket_group():
    assert LT.parse_bracket_group("[3]{8}", 0) == ("3", 3)


def test_find_matching_open():
    assert LT.find_matching_open("(a(b))", 5, "(", ")") == 0
    assert LT.find_matching_open("a)", 1, "(", ")") == -1


# --- Fractions and roots ---

@pytest.mark.parametrize("latex, expected", [
    ("\\frac{1}{2}", "((1)/(2))"),
    ("\\frac12", "((1)/(2))"),
    ("\\frac{\\frac{1}{2}}{3}", "((((1)/(2)))/(3))"),
    ("\\frac{\\pi}{2}", "((\\pi)/(2))"),
    ("\\frac\\pi2", "((\\pi)/(2))"),
])
def test_replace_all_frac(latex, expected):
    assert LT.replace_all_frac(latex) == expected


def test_frac_without_operands_is_left_alone():
    assert LT.replace_all_frac("\\frac{1}") == "\\frac{1}"


@pytest.mark.parametrize("latex, expected", [
    ("\\sqrt{9}", "sqrt(9)"),
    ("\\sqrt[3]{8}", "((8)^(1/(3)))"),
    ("\\sqrt{\\sqrt{16}}", "sqrt(sqrt(16))"),
])
def test_replace_all_sqrt(latex, expected):
    assert LT.replace_all_sqrt(latex) == expected


# --- Powers ---

@pytest.mark.parametrize("latex, expected", [
    ("x^{2}", "(x)^(2)"),
    ("2^{10}", "(2)^(10)"),
    ("2x^{2}", "2(x)^(2)"),
    ("(a+b)^{2}", "((a+b))^(2)"),
    ("2^{3^{2}}", "(2)^((3)^(2))"),
    ("1e5^{2}", "(1e5)^(2)"),
    ("sin(x)^{2}", "(sin(x))^(2)"),
    ("2sin(x)^{2}", "2(sin(x))^(2)"),
    ("log2(8)^{2}", "(log2(8))^(2)"),
    ("x(y)^{2}", "x((y))^(2)"),
])
def test_replace_all_powers(latex, expected):
    assert LT.replace_all_powers(latex) == expected


def test_power_without_base_is_skipped():
    assert LT.replace_all_powers("^{2}") == "^{2}"


# --- Bracket constructs, names, symbols ---

def test_abs_bars():
    assert LT.convert_bracket_constructs("\\left|x\\right|") == "abs(x)"


def test_nested_floor_innermost_first():
    latex = "\\left\\lfloor\\left\\lfloor x\\right\\rfloor/2\\right\\rfloor"
    assert LT.convert_bracket_constructs(latex) == "floor(floor( x)/2)"


def test_ceil():
    assert LT.convert_bracket_constructs("\\left\\lceil 1.2\\right\\rceil") == "ceil( 1.2)"


def test_unwrap_operator_names():
    assert LT.unwrap_operator_names("\\operatorname{gcd}(4,6)") == "gcd(4,6)"


@pytest.mark.parametrize("latex, expected", [
    ("3\\times4", "3*4"),
    ("3\\cdot4", "3*4"),
    ("6\\div2", "6/2"),
    ("\\arcsin x", "asin x"),
    ("\\sinh x", "sinh x"),
    ("1\\,000", "1000"),
    ("\\mathrm{ans}", "ans"),
])
def test_substitute_symbols(latex, expected):
    assert LT.substitute_symbols(latex) == expected


# --- Constant embeds ---

@pytest.mark.parametrize("key, valid", [
    ("g", True),
    ("speed of sound", True),
    ("", False),
    ("   ", False),
    ("a]b", False),
    ("a\nb", False),
])
def test_is_valid_embed_key(key, valid):
    assert LT.is_valid_embed_key(key) is valid


def test_const_embed_markup_rejects_invalid_key():
    assert LT.const_embed_markup("g") == "\\embed{const}[g]"
    with pytest.raises(ValueError):
        LT.const_embed_markup("a]b")


def test_convert_const_embeds():
    assert LT.convert_const_embeds("2\\embed{const}[speed of sound]") == '2__const("speed of sound")'


def test_extract_const_keys_decodes_escapes():
    assert LT.extract_const_keys('__const("a")+__const("b \\"q\\"")') == ["a", 'b "q"']


@pytest.mark.parametrize("key", ["g", "speed of sound", "N_A", 'quote"d', "back\\slash", "{brace}", "x^{2}"])
def test_embed_key_survives_translation(key):
    expr = LT.latex_to_expression(LT.const_embed_markup(key))
    assert LT.extract_const_keys(expr) == [key]


@pytest.mark.parametrize("key", ["g", "speed of sound", "x^{2}"])
def test_powered_embed_keeps_its_key(key):
    expr = LT.latex_to_expression(LT.const_embed_markup(key) + "^{2}")
    assert expr.startswith("(__const(")
    assert LT.extract_const_keys(expr) == [key]


# --- Whole-line translation ---

@pytest.mark.parametrize("latex, expected", [
    ("\\left(1+2\\right)\\times3", "(1+2)*3"),
    ("\\frac{\\pi}{2}", "((pi)/(2))"),
    ("x^{2}+\\sqrt{4}", "(x)^(2)+sqrt(4)"),
    ("\\sin 30", "sin30"),
    ("\\embed{const}[g]\\cdot 2", '__const("g")*2'),
    ("\\left|-3\\right|", "abs(-3)"),
    ("\\operatorname{gcd}\\left(12,18\\right)", "gcd(12,18)"),
])
def test_latex_to_expression(latex, expected):
    assert LT.latex_to_expression(latex) == expected


@pytest.mark.parametrize("text, expected", [
    ("3 × 4 − 1", "3*4-1"),
    ("2π", "2pi"),
    ("5nCr2", "combinations(5,2)"),
    ("(2+3)nPr2", "permutations((2+3),2)"),
    ("10nCr(2+1)", "combinations(10,(2+1))"),
    ('__const("a b")', '__const("a b")'),
])
def test_normalize_expression(text, expected):
    assert LT.normalize_expression(text) == expected


# --- Structural rewriters on random nested markup ---

LEAVES = ["x", "2", "\\pi", "(1+y)", "3.5"]


def _random_markup(rng, depth=0):
    if depth >= 4 or rng.random() < 0.3:
        return rng.choice(LEAVES)
    a = _random_markup(rng, depth + 1)
    b = _random_markup(rng, depth + 1)
    kind = rng.choice(["frac", "sqrt", "root", "power", "sum"])
    if kind == "frac":
        return f"\\frac{{{a}}}{{{b}}}"
    if kind == "sqrt":
        return f"\\sqrt{{{a}}}"
    if kind == "root":
        return f"\\sqrt[{a}]{{{b}}}"
    if kind == "power":
        return f"({a})^{{{b}}}"
    return f"{a}+{b}"


@pytest.mark.parametrize("seed", range(40))
def test_structural_rewriters_consume_every_trigger(seed):
    markup = _random_markup(random.Random(seed))
    out = LT.replace_all_powers(LT.replace_all_sqrt(LT.replace_all_frac(markup)))
    assert LT.FRAC not in out
    assert LT.SQRT not in out
    assert LT.POWER not in out
    # each rewrite adds a bounded number of characters per trigger
    assert len(out) <= 2 * len(markup)
    assert out.count("(") == out.count(")")


@pytest.mark.parametrize("seed", range(40))
def test_structural_rewriters_settle_in_bounded_passes(seed):
    markup = _random_markup(random.Random(seed))
    triggers = markup.count(LT.FRAC) + markup.count(LT.SQRT) + markup.count(LT.POWER)
    out = markup
    for _ in range(triggers + 1):
        rewritten = LT.replace_all_powers(LT.replace_all_sqrt(LT.replace_all_frac(out)))
        if rewritten == out:
            break
        out = rewritten
    else:
        pytest.fail(f"rewriters did not settle on {markup!r}")
