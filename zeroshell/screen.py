"""A text-mode terminal kept in memory."""

ROWS = 25
COLS = 80
ROW_BYTES = COLS * 2
SCREEN_BYTES = ROWS * COLS * 2
STD_COLOR = 0x1F


def _trunc_divmod(number, base):
    quotient = -(-number // base) if number < 0 else number // base
    return quotient, number - quotient * base


class Screen:
    """An 80x25 grid of character and attribute bytes with a cursor."""

    def __init__(self, term_color=STD_COLOR):
        self.video = bytearray(SCREEN_BYTES)
        self.cursor = 0
        self.term_color = term_color
        self.scrolling = True

    def clear(self):
        """Blank the screen in the current color and home the cursor."""
        for offset in range(0, SCREEN_BYTES, 2):
            self.video[offset] = 0
            self.video[offset + 1] = self.term_color & 0xFF
        self.cursor = 0

    def scroll(self):
        """Scroll up one line if the cursor left the screen; return 1 if so."""
        if self.cursor < SCREEN_BYTES:
            return 0
        self.video[:SCREEN_BYTES - ROW_BYTES] = self.video[ROW_BYTES:]
        for offset in range(SCREEN_BYTES - ROW_BYTES, SCREEN_BYTES, 2):
            self.video[offset] = 0
            self.video[offset + 1] = self.term_color & 0xFF
        self.cursor = SCREEN_BYTES - ROW_BYTES
        return 1

    def print_char(self, char):
        """Write one character at the cursor; return lines scrolled."""
        code = char if isinstance(char, int) else ord(char)
        if 0 <= self.cursor < SCREEN_BYTES - 1:
            self.video[self.cursor] = code & 0xFF
            self.video[self.cursor + 1] = self.term_color & 0xFF
        self.cursor += 2
        return self.scroll() if self.scrolling else 0

    def print(self, text):
        """Write a string, honouring newlines; return lines scrolled."""
        return sum(
            self.print_newline() if char == "\n" else self.print_char(char)
            for char in text
        )

    def print_dec(self, number):
        """Write an integer in decimal."""
        quotient, rest = _trunc_divmod(number, 10)
        if quotient:
            self.print_dec(quotient)
        self.print_char(48 + rest)

    def print_hex(self, number):
        """Write an integer in upper-case hexadecimal, without prefix."""
        quotient, rest = _trunc_divmod(number, 16)
        if quotient:
            self.print_hex(quotient)
        self.print_char(48 + rest if rest <= 9 else 55 + rest)

    def print_newline(self):
        """Move to the start of the next line; return lines scrolled."""
        self.cursor = (self.cursor // ROW_BYTES + 1) * ROW_BYTES
        return self.scroll() if self.scrolling else 0

    def char_under_cursor(self):
        """The character byte at the cursor."""
        return self.video[self.cursor] if self.cursor < SCREEN_BYTES else 0

    def cell(self, offset):
        """The (character, attribute) pair at a byte offset."""
        return self.video[offset], self.video[offset + 1]

    def lines(self):
        """Screen text, one string per row, trailing blanks removed."""
        rows = []
        for row in range(ROWS):
            data = self.video[row * ROW_BYTES:(row + 1) * ROW_BYTES:2]
            rows.append(
                "".join(chr(b) if b else " " for b in data).rstrip()
            )
        return rows