"""String helpers used by the shell and its programs."""


def splice(string, index, delim):
    """Return field ``index`` of ``string`` split on ``delim``.

    A field that ends the string keeps a trailing delimiter, as the
    shell's own field splitter does.
    """
    n = len(string)
    pos = 0
    for _ in range(index):
        found = string.find(delim, pos) if delim else -1
        pos = n if found < 0 else found + 1
    found = string.find(delim, pos) if delim else -1
    if found < 0:
        field, pos = string[pos:], n
    else:
        field, pos = string[pos:found + 1], found + 1
    if pos < n and field:
        field = field[:-1]
    return field


def atoi(text):
    """Convert decimal text to an integer without validating digits.

    Every character counts as a digit, and an empty string yields -48.
    """
    total = 0
    for char in text or "\0":
        total = total * 10 + (ord(char) - 0x30)
    return total


def htoi(text):
    """Convert hexadecimal text to a 32-bit unsigned integer."""
    value = 0
    for char in text:
        code = ord(char) & 0xFF
        if "0" <= char <= "9":
            code -= ord("0")
        elif "a" <= char <= "f":
            code = code - ord("a") + 10
        elif "A" <= char <= "F":
            code = code - ord("A") + 10
        value = ((value << 4) | (code & 0xF)) & 0xFFFFFFFF
    return value


def strcmp(first, second):
    """Compare two strings, returning -1, 0 or 1."""
    for a, b in zip(first, second):
        if a != b:
            return (a > b) - (a < b)
    return (len(first) > len(second)) - (len(first) < len(second))