"""A simulated hobby-OS shell with the ESFS filesystem on raw disk images."""

__version__ = "0.1.0"