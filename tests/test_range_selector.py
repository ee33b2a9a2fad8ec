import pytest

from catalog.errors import RangeSyntaxError
from catalog.range_selector import parse_entry_range, select_range


def test_mixed_expression():
    assert parse_entry_range("3,5,9-13", 13) == [3, 5, 9, 10, 11, 12, 13]


def test_prefix_form():
    assert parse_entry_range("-5", 13) == [1, 2, 3, 4, 5]


def test_suffix_beyond_end_is_empty():
    assert parse_entry_range("50-", 10) == []


def test_suffix_form():
    assert parse_entry_range("8-", 10) == [8, 9, 10]


def test_empty_expression_selects_all():
    assert parse_entry_range("", 4) == [1, 2, 3, 4]
    assert parse_entry_range("  ", 2) == [1, 2]
    assert parse_entry_range("", 0) == []


def test_positions_are_sorted_and_unique():
    assert parse_entry_range("5,1-3,2,5", 10) == [1, 2, 3, 5]


def test_whitespace_and_empty_tokens():
    assert parse_entry_range(" 1 , 3 - 4 ,, ", 10) == [1, 3, 4]


def test_out_of_range_positions_are_clamped():
    assert parse_entry_range("0,2,11", 10) == [2]
    assert parse_entry_range("8-20", 10) == [8, 9, 10]
    assert parse_entry_range("-20", 3) == [1, 2, 3]


@pytest.mark.parametrize("expr", ["a", "1,x", "-", "5-3", "1-2-3", "+1", "1.5"])
def test_invalid_expressions(expr):
    with pytest.raises(RangeSyntaxError):
        parse_entry_range(expr, 10)


def test_select_range():
    items = ["a", "b", "c", "d", "e"]
    assert select_range(items, "2,4-") == ["b", "d", "e"]
    assert select_range(items, "") == items
    assert select_range([], "1-3") == []
