import pytest

from zeroshell.textutil import atoi, htoi, splice, strcmp


@pytest.mark.parametrize(
    "text,index,expected",
    [("run a b", 0, "run"), ("run a b", 1, "a"), ("run a b", 2, "b")],
)
def test_splice_fields(text, index, expected):
    assert splice(text, index, " ") == expected


def test_splice_without_delimiter_returns_whole():
    assert splice("single", 0, " ") == "single"


def test_splice_past_end_is_empty():
    assert splice("a b", 5, " ") == ""


def test_splice_null_delimiter_keeps_everything():
    assert splice("12:rest", 0, "\0") == "12:rest"


def test_atoi_digits():
    assert atoi("1234") == 1234


def test_atoi_empty_string():
    assert atoi("") == -48


def test_htoi_mixed_case():
    assert htoi("fF") == 255
    assert htoi("10") == 16


def test_htoi_is_32_bit():
    assert htoi("1FFFFFFFF") == 0xFFFFFFFF


def test_strcmp_orders():
    assert strcmp("abc", "abc") == 0
    assert strcmp("abc", "abd") == -1
    assert strcmp("abd", "abc") == 1
    assert strcmp("ab", "abc") == -1