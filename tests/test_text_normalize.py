import pytest

from catalog_common.text import normalize_html


@pytest.mark.parametrize("value", ["", None])
def test_falsy_input_returns_empty_string(value):
    assert normalize_html(value) == ""


def test_block_tags_become_line_breaks():
    html = "<p>CPU: Octa-core</p><p>GPU: Adreno 610</p>"
    assert normalize_html(html) == "CPU: Octa-core\nGPU: Adreno 610"


def test_br_variants_are_case_insensitive():
    assert normalize_html("A<br>B<BR/>C<br />D") == "A\nB\nC\nD"


def test_list_items_and_wrappers_are_flattened():
    html = "<ul><li>One</li><li>Two</li></ul><div>Three</DIV>"
    assert normalize_html(html) == "One\nTwo\nThree"


def test_entities_and_nbsp_are_decoded():
    assert normalize_html("Tom &amp; Jerry&NBSP;Show") == "Tom & Jerry Show"
    assert normalize_html("&#39;quoted&#39; &#x41;") == "'quoted' A"


def test_mojibake_and_nbsp_code_points_are_cleaned():
    assert normalize_html("Size:\u00a0Large\u00c2") == "Size: Large"


def test_carriage_returns_and_outer_whitespace_removed():
    assert normalize_html("\r\n  <b>Bold</b>\r\n") == "Bold"


def test_inner_formatting_is_left_alone():
    assert normalize_html("a  b\tc") == "a  b\tc"


def test_non_string_values_are_stringified():
    assert normalize_html(123) == "123"


SAMPLES = [
    "<p>CPU: Octa-core</p><p>GPU: Adreno&nbsp;610</p>",
    "<ul><li><strong>Weight:</strong> 190 g</li><li>Colour: Black &amp; Blue</li></ul>",
    "plain text, no markup",
    "<div class=\"spec\">Screen: 6.5&quot;</div><br/>",
    "Â <span style='x'>Battery</span>: 5000mAh\r\n",
]


@pytest.mark.parametrize("sample", SAMPLES)
def test_normalization_is_idempotent(sample):
    once = normalize_html(sample)
    assert normalize_html(once) == once


@pytest.mark.parametrize("sample", SAMPLES)
def test_no_markup_or_entities_leak(sample):
    out = normalize_html(sample)
    assert "<" not in out
    assert ">" not in out
    assert "&nbsp;" not in out.lower()
    assert "&amp;" not in out
    assert "&quot;" not in out
