"""Scancode translation and line editing."""

from dataclasses import dataclass
from enum import IntEnum


class Key(IntEnum):
    ESC = 0x1
    PGUP = 0x49
    PGDN = 0x51
    BACKSPACE = 0xE
    TAB = 0xF
    ENTER = 0x1C
    CAPS_LOCK = 0x3A
    SHIFT = 0x36
    CTRL = 0x1D
    ALT = 0x38
    SUPER = 0xB9
    R_ARROW = 0x4D
    L_ARROW = 0x4B
    U_ARROW = 0x48
    D_ARROW = 0x50


SHIFT_DOWN = 0x2A
SHIFT_UP = 0xAA

PRESS_THRESH_FAST = 1100000
HOLD_THRESH_FAST = 160000
PRESS_THRESH_SLOW = 1200000
HOLD_THRESH_SLOW = 350000

_STD = dict(zip(
    [0x29, 0x2, 0x3, 0x4, 0x5, 0x6, 0x7, 0x8, 0x9, 0xA, 0xB, 0xC, 0xD,
     0x10, 0x11, 0x12, 0x13, 0x14, 0x15, 0x16, 0x17, 0x18, 0x19, 0x1A, 0x1B,
     0x1E, 0x1F, 0x20, 0x21, 0x22, 0x23, 0x24, 0x25, 0x26, 0x27, 0x28, 0x2B,
     0x56, 0x2C, 0x2D, 0x2E, 0x2F, 0x30, 0x31, 0x32, 0x33, 0x34, 0x35, 0x39],
    "`1234567890-=qwertyuiop[]asdfghjkl;'#\\zxcvbnm,./ ",
))

_SHIFT = dict(zip(
    [0x29, 0x2, 0x3, 0x5, 0x6, 0x7, 0x8, 0x9, 0xA, 0xB, 0xC, 0xD,
     0x10, 0x11, 0x12, 0x13, 0x14, 0x15, 0x16, 0x17, 0x18, 0x19, 0x1A, 0x1B,
     0x1E, 0x1F, 0x20, 0x21, 0x22, 0x23, 0x24, 0x25, 0x26, 0x27, 0x28, 0x2B,
     0x56, 0x2C, 0x2D, 0x2E, 0x2F, 0x30, 0x31, 0x32, 0x33, 0x34, 0x35, 0x39],
    "\u00ac!\"$%^&*()_+QWERTYUIOP{}ASDFGHJKL:@~|ZXCVBNM<>? ",
))


def printable_char(keycode, shift=False):
    """Return the character for a scancode, or None if not printable."""
    return (_SHIFT if shift else _STD).get(keycode)


@dataclass(frozen=True)
class HoldTiming:
    """Poll counts before a held key repeats."""

    press: int
    hold: int


def hold_timing(tty_calibration):
    """Pick key-repeat thresholds from the terminal calibration."""
    if tty_calibration >= 75:
        return HoldTiming(PRESS_THRESH_FAST, HOLD_THRESH_FAST)
    return HoldTiming(PRESS_THRESH_SLOW, HOLD_THRESH_SLOW)


class LineEditor:
    """Builds a line of text from polled keyboard scancodes."""

    def __init__(self, limit=2000, timing=None):
        self.limit = limit
        self.timing = timing or hold_timing(0)
        self.cursor = 0
        self.shift = False
        self.done = False
        self._chars = []
        self._prev = Key.ENTER
        self._cached = 0
        self._hold = 0

    def feed(self, keycode):
        """Process one polled scancode; return True once Enter is pressed."""
        if self.done:
            return True
        if keycode == SHIFT_DOWN:
            self.shift = True
        elif keycode == SHIFT_UP:
            self.shift = False

        if keycode != self._prev:
            self._hold = 0
            self._prev = keycode
            char = printable_char(keycode, self.shift)
            if char and self.cursor < self.limit:
                self._chars.insert(self.cursor, char)
                self.cursor += 1
            elif keycode == Key.L_ARROW:
                if self.cursor > 0:
                    self.cursor -= 1
            elif keycode == Key.R_ARROW:
                if self.cursor < len(self._chars):
                    self.cursor += 1
            elif keycode == Key.BACKSPACE:
                if self.cursor > 0:
                    self.cursor -= 1
                    del self._chars[self.cursor]
            elif keycode == Key.ENTER:
                self.done = True
        else:
            if self._prev == self._cached and self._hold >= self.timing.hold:
                self._prev = 0
                return self.done
            if self._hold >= self.timing.press:
                self._cached = self._prev
                self._prev = 0
            else:
                self._hold += 1
        return self.done

    def text(self):
        """The line as typed so far."""
        return "".join(self._chars)


def read_line(keycodes, limit=2000):
    """Read a line from an iterable of scancodes, stopping at Enter."""
    editor = LineEditor(limit)
    for code in keycodes:
        if editor.feed(code):
            return editor.text()
    raise EOFError("input ended before Enter")