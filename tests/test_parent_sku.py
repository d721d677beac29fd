import pytest

from catalog_common.parent import DEFAULT_SUFFIXES, derive_parent, parse_suffixes


def test_only_listed_suffixes_are_stripped():
    assert derive_parent("2306EPN60GBL", ["BLACK", "BLUE", "GREEN", "RED"]) == ""
    assert derive_parent("2306EPN60GBL", ["BLACK", "BL"]) == "2306EPN60G"


def test_no_match_returns_empty_string():
    assert derive_parent("PLAINSKU", ["RED", "BLUE"]) == ""


def test_matching_is_case_insensitive_and_keeps_original_case():
    assert derive_parent("phone-Black", ["BLACK"]) == "phone-"


@pytest.mark.parametrize(
    "suffixes,expected",
    [
        (["D", "RED"], "ABCRE"),
        (["RED", "D"], "ABC"),
    ],
)
def test_first_match_wins(suffixes, expected):
    assert derive_parent("ABCRED", suffixes) == expected


def test_blank_tokens_are_skipped():
    assert derive_parent("XRED", ["", "  ", "red "]) == "X"


@pytest.mark.parametrize("identifier", ["", None])
def test_empty_identifier(identifier):
    assert derive_parent(identifier, DEFAULT_SUFFIXES) == ""


def test_default_suffixes():
    assert derive_parent("A52SILVER", DEFAULT_SUFFIXES) == "A52"
    assert derive_parent("A52GREY", DEFAULT_SUFFIXES) == "A52"


def test_parse_suffixes():
    assert parse_suffixes("BLACK, ,blue") == ["BLACK", "blue"]
    assert parse_suffixes([" red", ""]) == ["red"]
    assert parse_suffixes(None) == []
