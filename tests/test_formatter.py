import math

import pytest

from calcline import Formatter


# --- normalize_number ---

def test_normalize_strips_float_noise():
    assert Formatter.normalize_number(0.1 + 0.2) == 0.3


def test_normalize_snaps_to_zero_and_integers():
    assert Formatter.normalize_number(1e-13) == 0
    snapped = Formatter.normalize_number(2.9999999999999996)
    assert snapped == 3
    assert isinstance(snapped, int)


def test_normalize_complex_parts():
    assert Formatter.normalize_number(complex(1, 1e-15)) == 1
    assert Formatter.normalize_number(complex(1e-15, 2)) == 2j


def test_normalize_passes_non_finite_and_strings():
    assert Formatter.normalize_number(math.inf) == math.inf
    assert Formatter.normalize_number("x") == "x"


# --- format_number_for_display ---

@pytest.mark.parametrize("value, shown", [
    (0, "0"),
    (7, "7"),
    (1234567, "1,234,567"),
    (1234.5678, "1,234.5678"),
    (2 / 3, "0.666666667"),
    (-1234.5, "-1,234.5"),
    (-0.5, "-0.5"),
    (1e10, "1 \\times 10^{10}"),
    (12345678901, "1.23456789 \\times 10^{10}"),
    (0.00001234, "1.234 \\times 10^{-5}"),
    (9.9999999999e-5, "1 \\times 10^{-4}"),
    (-2.5e-7, "-2.5 \\times 10^{-7}"),
    (math.nan, "\\text{NaN}"),
    (math.inf, "\\infty"),
    (-math.inf, "-\\infty"),
])
def test_format_number_for_display(value, shown):
    assert Formatter.format_number_for_display(value) == shown


# --- result_to_latex ---

@pytest.mark.parametrize("value, shown", [
    (2j, "2i"),
    (-1j, "-i"),
    (1 - 1j, "1-i"),
    (3 + 2.5j, "3+2.5i"),
    ("abc", "\\text{abc}"),
    (42, "42"),
])
def test_result_to_latex(value, shown):
    assert Formatter.result_to_latex(value) == shown


# --- expression_to_latex_with_const_embeds ---

def test_placeholders_and_constant_keys():
    latex = Formatter.expression_to_latex_with_const_embeds("2*[x]+g", {"g": 9.8})
    assert latex == "2\\cdot x+\\embed{const}[g]"


def test_multi_word_key_wins_over_its_suffix():
    constants = {"speed of sound": 343, "sound": 1}
    latex = Formatter.expression_to_latex_with_const_embeds("speed of sound*2", constants)
    assert latex == "\\embed{const}[speed of sound]\\cdot 2"


def test_key_inside_identifier_is_not_replaced():
    latex = Formatter.expression_to_latex_with_const_embeds("gx", {"g": 9.8})
    assert latex == "\\mathrm{gx}"


def test_unparsable_text_still_gets_embeds():
    assert Formatter.expression_to_latex_with_const_embeds("g+", {"g": 1}) == "\\embed{const}[g]+"
