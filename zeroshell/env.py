"""Environment shared between the kernel and programs."""

from dataclasses import dataclass

from zeroshell.screen import STD_COLOR


@dataclass
class Environment:
    """Mutable state handed to every program."""

    free_mem_ptr: int = 0
    system_drive: int = 0
    selected_drive: int = 0
    term_color: int = STD_COLOR
    tty_calibration: int = 0
    last_allocated_block: int = 0

    def inverted_color(self):
        """Terminal color with background and foreground swapped."""
        return ((self.term_color >> 4) | (self.term_color << 4)) & 0xFF

    def accent_color(self, foreground):
        """Current background combined with another foreground."""
        return (((self.term_color >> 4) * 16) + foreground) & 0xFF