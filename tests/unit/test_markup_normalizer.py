from __future__ import annotations

import pytest

from study_assistant.domain.content.markup import normalize_markup

SAMPLES = [
    "Plain sentence.",
    "First paragraph.\n\nSecond paragraph.",
    "**V = I × R**\n- V: Voltage (Volts)\n- I: Current (Amperes)\n- R: Resistance (Ohms)",
    "**Thevenin's theorem** reduces a network to a source and a resistor.",
    "Key points:\n- Linear elements\n- Bilateral elements",
    "See https://ieeexplore.ieee.org/document/123.",
    "[IEEE Xplore](https://ieeexplore.ieee.org)",
    "<strong>P = V × I</strong>",
    '<div class="formula"><strong>E = mc^2</strong></div>\n<ul>\n<li><strong>E</strong>: Energy</li>\n</ul>',
    "**F = q(E + v × B)**\n\n- **F**: Lorentz force\n- **q**: charge",
    "Line one\r\nLine two\r\n\r\nNext",
    "<p>Already wrapped.</p>",
    "**Note:** ratios such as a/b appear later.",
    "Mixed **bold** and **x + y** inline.",
    "1. Step one\n2. Step two",
    "Visit http://example.com/path?x=1&y=2 now",
    "- item with **E = hf** inside\n- second item",
    "Temperature drops − 5 degrees overnight.",
    "**Ohm's Law**\n- V: Voltage",
    "<h3>Overview</h3>\n\nText body",
    "Use **a - b** carefully",
    "**https://example.com/a=b**",
    "**a + b**\n- just a note",
    "### Overview\nA heading the model left in markdown.",
    "**Reference:** https://ieeexplore.ieee.org/document/123**",
    "Ref https://example.com/x** and **bold**",
    "**https://example.com/a=b",
]


@pytest.mark.parametrize("text", SAMPLES)
def test_normalization_is_idempotent(text: str) -> None:
    once = normalize_markup(text)

    assert normalize_markup(once) == once


def test_empty_text_stays_empty() -> None:
    assert normalize_markup("") == ""


def test_plain_text_becomes_a_paragraph() -> None:
    assert normalize_markup("Ohm's law is linear.") == "<p>Ohm's law is linear.</p>"


def test_blank_lines_separate_paragraphs() -> None:
    assert normalize_markup("One\r\n\r\nTwo") == "<p>One</p>\n\n<p>Two</p>"


def test_bold_formula_gets_a_formula_block_and_variable_list() -> None:
    result = normalize_markup("**V = I × R**\n- V: Voltage (Volts)\n- I: Current (Amperes)")

    assert result == (
        '<div class="formula"><strong>V = I × R</strong></div>\n\n'
        '<ul class="var-list"><li><strong>V</strong>: Voltage (Volts)</li>'
        "<li><strong>I</strong>: Current (Amperes)</li></ul>"
    )


def test_bold_variable_labels_are_accepted() -> None:
    result = normalize_markup("**F = q(E + v × B)**\n\n- **F**: Lorentz force\n- **q**: charge")

    assert '<ul class="var-list"><li><strong>F</strong>: Lorentz force</li>' in result
    assert "<li><strong>q</strong>: charge</li></ul>" in result


def test_html_variable_list_after_formula_is_tagged() -> None:
    text = '<div class="formula"><strong>E = mc^2</strong></div>\n<ul>\n<li><strong>E</strong>: Energy</li>\n</ul>'

    assert '<ul class="var-list">' in normalize_markup(text)


def test_non_math_bold_stays_inline() -> None:
    assert normalize_markup("**Thevenin's theorem** applies.") == (
        "<p><strong>Thevenin's theorem</strong> applies.</p>"
    )


def test_html_strong_with_math_is_promoted_to_formula() -> None:
    assert normalize_markup("<strong>P = V × I</strong>") == (
        '<div class="formula"><strong>P = V × I</strong></div>'
    )


def test_dash_lines_become_a_bullet_list() -> None:
    assert normalize_markup("Key points:\n- Linear elements\n- Bilateral elements") == (
        "<p>Key points:</p>\n\n<ul><li>Linear elements</li><li>Bilateral elements</li></ul>"
    )


def test_dash_lines_without_labels_after_formula_stay_plain_bullets() -> None:
    result = normalize_markup("**a + b**\n- just a note")

    assert result == '<div class="formula"><strong>a + b</strong></div>\n\n<ul><li>just a note</li></ul>'


def test_bare_url_is_linked_without_trailing_punctuation() -> None:
    assert normalize_markup("See https://ieeexplore.ieee.org/document/123.") == (
        '<p>See <a href="https://ieeexplore.ieee.org/document/123">'
        "https://ieeexplore.ieee.org/document/123</a>.</p>"
    )


def test_unbalanced_bold_after_url_stays_outside_the_link() -> None:
    assert normalize_markup("**Reference:** https://ieeexplore.ieee.org/document/123**") == (
        '<p><strong>Reference:</strong> <a href="https://ieeexplore.ieee.org/document/123">'
        "https://ieeexplore.ieee.org/document/123</a>**</p>"
    )


def test_markdown_link_is_converted() -> None:
    assert normalize_markup("[IEEE Xplore](https://ieeexplore.ieee.org)") == (
        '<p><a href="https://ieeexplore.ieee.org">IEEE Xplore</a></p>'
    )


def test_bold_url_is_not_mistaken_for_a_formula() -> None:
    result = normalize_markup("**https://example.com/a=b**")

    assert 'class="formula"' not in result
    assert '<a href="https://example.com/a=b">' in result


def test_existing_block_markup_is_not_rewrapped() -> None:
    assert normalize_markup("<h3>Overview</h3>\n\nText body") == "<h3>Overview</h3>\n\n<p>Text body</p>"
