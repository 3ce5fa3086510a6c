import pytest

from zeroshell.keyboard import (
    HOLD_THRESH_FAST,
    HOLD_THRESH_SLOW,
    PRESS_THRESH_FAST,
    HoldTiming,
    Key,
    LineEditor,
    hold_timing,
    printable_char,
    read_line,
)

A, B, C = 0x1E, 0x30, 0x2E
RELEASE = 0x9E


def test_printable_char_tables():
    assert printable_char(0x10) == "q"
    assert printable_char(0x10, shift=True) == "Q"
    assert printable_char(0x39) == " "
    assert printable_char(Key.ENTER) is None


def test_shift_table_lacks_three():
    assert printable_char(0x4) == "3"
    assert printable_char(0x4, shift=True) is None


def test_hold_timing():
    assert hold_timing(75) == HoldTiming(PRESS_THRESH_FAST, HOLD_THRESH_FAST)
    assert hold_timing(10).hold == HOLD_THRESH_SLOW


def test_read_line_basic():
    assert read_line([A, RELEASE, B, RELEASE, Key.ENTER]) == "ab"


def test_repeated_poll_does_not_repeat_char():
    assert read_line([A, A, A, RELEASE, Key.ENTER]) == "a"


def test_shift_uppercase():
    assert read_line([0x2A, A, 0xAA, B, Key.ENTER]) == "Ab"


def test_insert_and_backspace():
    codes = [A, C, Key.L_ARROW, B, Key.R_ARROW, Key.BACKSPACE, Key.ENTER]
    assert read_line(codes) == "ab"


def test_limit():
    assert read_line([A, RELEASE, B, RELEASE, C, Key.ENTER], limit=2) == "ab"


def test_editor_reports_done():
    editor = LineEditor()
    assert editor.feed(A) is False
    assert editor.feed(Key.ENTER) is True
    assert editor.text() == "a"


def test_missing_enter():
    with pytest.raises(EOFError):
        read_line([A, B])