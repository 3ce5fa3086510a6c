"""Full-screen text viewer, text editor and hex editor."""

from zeroshell.fs import FileMissingError
from zeroshell.keyboard import Key, printable_char

LINE_WIDTH = 80
VISIBLE_LINES = 24
NEWLINE = 0x0A

HEX_ROW_BYTES = 24
HEX_ROWS = 20
HEX_WINDOW = HEX_ROW_BYTES * HEX_ROWS
HEX_LAST_BYTE = HEX_WINDOW - 1
HEX_LOWEST_ROW_START = 454
HEX_TITLE = "SYSTEMZERO STANDARD HEX EDITOR"
HEX_HELP = (
    "ESC: exit | PGUP/PGDN or J/K: scroll | c: change byte | d: delete byte\n"
    "i: insert byte | w: write changes to file\n"
)
KEY_J = 0x24
KEY_K = 0x25
V_LINE = 186
H_LINE = 205
H_JOIN = 202


def _at(buffer, index):
    return buffer[index] if 0 <= index < len(buffer) else 0


def _inverted(color):
    return ((color >> 4) | (color << 4)) & 0xFF


def seek_line(buffer, line_offset):
    """Index where display line ``line_offset`` starts.

    Lines end after a newline or after eighty characters.
    """
    index = 0
    for _ in range(line_offset):
        for _ in range(LINE_WIDTH):
            byte = _at(buffer, index)
            index += 1
            if byte == NEWLINE:
                break
    return index


def hex_row_label(offset):
    """Zero-padded hexadecimal row offset used by the hex editor."""
    zeros = 0
    limit = 0xFFFFFF // 16
    while offset < limit:
        zeros += 1
        limit //= 16
    return "0" * zeros + f"{offset:X}"


def _render_text(screen, buffer, line_offset, highlight=None, mark_newlines=False):
    base = screen.term_color
    inverted = _inverted(base)
    index = seek_line(buffer, line_offset)
    screen.clear()
    for _ in range(VISIBLE_LINES):
        for _ in range(LINE_WIDTH):
            byte = _at(buffer, index)
            screen.term_color = inverted if index == highlight else base
            if byte == NEWLINE:
                if mark_newlines:
                    screen.print_char(" ")
                screen.term_color = base
                screen.print_newline()
                index += 1
                break
            screen.print_char(byte)
            index += 1
    screen.term_color = base


def _save(fs, name, data, env):
    try:
        fs.delete(name, env)
    except FileMissingError:
        pass
    fs.create(name, env)
    return fs.write(name, bytes(data), env)


class TextView:
    """Read-only, scrollable view of a text buffer."""

    def __init__(self, data=b"", line_offset=0):
        self.buffer = bytes(data)
        self.line_offset = line_offset
        self.done = False

    def render(self, screen):
        """Draw the visible lines on the screen."""
        _render_text(screen, self.buffer, self.line_offset)

    def handle_key(self, keycode):
        """Apply one key press; return True if the view must be redrawn."""
        if keycode == Key.ESC:
            self.done = True
            return False
        if keycode in (Key.PGDN, Key.D_ARROW):
            self.line_offset += 1
            return True
        if keycode in (Key.PGUP, Key.U_ARROW) and self.line_offset > 0:
            self.line_offset -= 1
            return True
        return False


class TextEditor:
    """Editable text buffer with a cursor and a scroll offset."""

    def __init__(self, data=b""):
        self.buffer = bytearray(data)
        self.line_offset = 0
        self.selected_char = 0
        self.done = False
        self.save_requested = False

    @property
    def cursor(self):
        """Absolute buffer index of the cursor."""
        start = seek_line(self.buffer, self.line_offset)
        return min(max(start + self.selected_char, 0), len(self.buffer))

    def _set_cursor(self, position):
        self.selected_char = position - seek_line(self.buffer, self.line_offset)

    def render(self, screen):
        """Draw the buffer, highlighting the cursor; return its index."""
        position = self.cursor
        _render_text(screen, self.buffer, self.line_offset, position, True)
        return position

    def insert(self, char):
        """Insert a character before the cursor and advance past it."""
        code = char if isinstance(char, int) else ord(char)
        if not 0 <= code <= 0xFF:
            raise ValueError(f"character out of range: {char!r}")
        position = self.cursor
        self.buffer.insert(position, code)
        self._set_cursor(position + 1)
        return True

    def backspace(self):
        """Remove the character before the cursor; return True if one was."""
        position = self.cursor
        if position == 0:
            return False
        del self.buffer[position - 1]
        self._set_cursor(position - 1)
        return True

    def _line_up(self):
        position = self.cursor
        if position == 0:
            return False
        newlines = 0
        while newlines < 2:
            position -= 1
            if self.buffer[position] == NEWLINE:
                newlines += 1
            if position == 0:
                break
        if position != 0:
            position += 1
        self._set_cursor(position)
        return True

    def _line_down(self):
        position = self.cursor
        found = self.buffer.find(b"\n", position)
        target = len(self.buffer) if found < 0 else found + 1
        self._set_cursor(target)
        return target != position

    def handle_key(self, keycode, shift=False, ctrl=False):
        """Apply one key press; return True if the view must be redrawn.

        Ctrl+S marks the buffer for saving, Ctrl+R returns to the top and
        Escape ends editing.
        """
        if keycode == Key.ESC:
            self.done = True
            return False
        char = printable_char(keycode, shift)
        if char:
            if ctrl and char == "r":
                self.line_offset = 0
                self.selected_char = 0
                return True
            if ctrl and char == "s":
                self.save_requested = True
                return True
            return self.insert(char)
        if ctrl:
            if keycode == Key.U_ARROW and self.line_offset > 0:
                self.line_offset -= 1
                return True
            if keycode == Key.D_ARROW:
                self.line_offset += 1
                return True
            return False
        if keycode == Key.BACKSPACE:
            return self.backspace()
        if keycode == Key.L_ARROW:
            if self.cursor > 0:
                self._set_cursor(self.cursor - 1)
                return True
            return False
        if keycode == Key.R_ARROW:
            if self.cursor < len(self.buffer):
                self._set_cursor(self.cursor + 1)
                return True
            return False
        if keycode == Key.ENTER:
            return self.insert("\n")
        if keycode == Key.U_ARROW:
            return self._line_up()
        if keycode == Key.D_ARROW:
            return self._line_down()
        if keycode == Key.PGDN:
            self.line_offset += 1
            return True
        if keycode == Key.PGUP and self.line_offset > 0:
            self.line_offset -= 1
            return True
        return False

    def save(self, fs, name, env):
        """Replace the named file with the buffer; return bytes written."""
        self.save_requested = False
        return _save(fs, name, self.buffer, env)


class HexEditor:
    """Byte editor showing twenty rows of twenty-four bytes."""

    def __init__(self, data=b""):
        self.buffer = bytearray(data)
        self.selected_byte = 0
        self.read_offset = 0
        self.done = False

    @property
    def position(self):
        """Buffer index of the selected byte."""
        return self.read_offset + self.selected_byte

    def render(self, screen):
        """Draw the visible window, the selection and the key help."""
        base = screen.term_color
        inverted = _inverted(base)
        window = bytes(self.buffer[self.read_offset:self.read_offset + HEX_WINDOW])
        window = window.ljust(HEX_WINDOW, b"\0")
        screen.clear()
        screen.print(HEX_TITLE + "\n")
        for row in range(HEX_ROWS):
            screen.term_color = base
            screen.print(hex_row_label(self.read_offset + row * HEX_ROW_BYTES))
            screen.print_char(V_LINE)
            for column in range(HEX_ROW_BYTES):
                index = row * HEX_ROW_BYTES + column
                screen.term_color = inverted if index == self.selected_byte else base
                byte = window[index]
                if byte < 0x10:
                    screen.print_char("0")
                screen.print_hex(byte)
                screen.print_char(" ")
            screen.print_newline()
        screen.term_color = base
        screen.print(chr(H_LINE) * 6 + chr(H_JOIN) + chr(H_LINE) * 73)
        screen.print(HEX_HELP)

    def move(self, keycode):
        """Apply a navigation key; return True if the view changed."""
        if keycode == Key.ESC:
            self.done = True
            return False
        if keycode in (KEY_K, Key.PGUP):
            if self.read_offset >= HEX_ROW_BYTES:
                self.read_offset -= HEX_ROW_BYTES
                return True
            return False
        if keycode in (KEY_J, Key.PGDN):
            self.read_offset += HEX_ROW_BYTES
            return True
        if keycode == Key.R_ARROW:
            if self.selected_byte < HEX_LAST_BYTE:
                self.selected_byte += 1
                return True
            return False
        if keycode == Key.L_ARROW:
            if self.selected_byte > 0:
                self.selected_byte -= 1
                return True
            return False
        if keycode == Key.U_ARROW:
            if self.selected_byte >= HEX_ROW_BYTES:
                self.selected_byte -= HEX_ROW_BYTES
                return True
            return False
        if keycode == Key.D_ARROW:
            if self.selected_byte < HEX_LOWEST_ROW_START:
                self.selected_byte += HEX_ROW_BYTES
                return True
            return False
        return False

    @staticmethod
    def _parse(text):
        from zeroshell.textutil import htoi, splice

        value = htoi(splice(text, 0, " "))
        return value if value <= 0xFF else None

    def change_byte(self, text):
        """Overwrite the selected byte with a hex value; True on success."""
        value = self._parse(text)
        if value is None or self.position >= len(self.buffer):
            return False
        self.buffer[self.position] = value
        return True

    def insert_byte(self, text):
        """Insert a hex value at the selected position; True on success."""
        value = self._parse(text)
        if value is None or self.position > len(self.buffer):
            return False
        self.buffer.insert(self.position, value)
        return True

    def delete_byte(self):
        """Remove the selected byte; True if there was one."""
        if self.position >= len(self.buffer):
            return False
        del self.buffer[self.position]
        return True

    def save(self, fs, name, env):
        """Replace the named file with the buffer; return bytes written."""
        return _save(fs, name, self.buffer, env)