import pytest

from costtree.codes import (
    clean_sequence,
    code_sort_key,
    decode_chinese_numeral,
    format_sequence_code,
    is_top_level,
    normalize_code,
    parent_code,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1.10", "1.010"),
        ("2.100", "2.100"),
        ("10.20.30", "10.020.030"),
        ("007", "007"),
        (" 3.4 ", "3.004"),
        ("(1.2)", "1.002"),
        ("（3）", "3"),
        ("4、", "4"),
    ],
)
def test_normalize_code_formats_segments(raw, expected):
    assert normalize_code(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", "1..2", ".1", "1.", "1.a", "abc", None])
def test_normalize_code_rejects_malformed_labels(raw):
    assert normalize_code(raw) is None


def test_normalize_code_is_idempotent():
    for raw in ["1.10", "2.100", "10.20.30", "01.1"]:
        canonical = normalize_code(raw)
        assert normalize_code(canonical) == canonical


def test_chinese_numerals_use_the_decoder():
    calls = []

    def fake_decoder(text):
        calls.append(text)
        return "3"

    assert normalize_code("（三）", decoder=fake_decoder) == "3"
    assert calls == ["三"]


def test_decoder_failure_rejects_code():
    def broken(text):
        raise ValueError(text)

    assert normalize_code("二", decoder=broken) is None


def test_decode_chinese_numeral_returns_decimal_string():
    assert decode_chinese_numeral("二") == "2"
    assert decode_chinese_numeral("十二") == "12"
    assert normalize_code("十") == "10"


def test_clean_sequence_keeps_dots():
    assert clean_sequence("（1. 2）、") == "1.2"


def test_parent_code_and_top_level():
    assert parent_code("1") == "0"
    assert parent_code("1.002.003") == "1.002"
    assert is_top_level("12")
    assert not is_top_level("1.001")
    assert not is_top_level("0")


def test_sort_key_is_numeric_not_lexicographic():
    codes = ["10", "2", "1", "1.010", "1.002", "1.002.001"]
    assert sorted(codes, key=code_sort_key) == ["1", "1.002", "1.002.001", "1.010", "2", "10"]


def test_sort_key_ignores_first_segment_width():
    assert code_sort_key("01") == code_sort_key("1")
    assert format_sequence_code("01.1") == "01.001"
