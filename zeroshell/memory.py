"""A simple bump allocator over a flat address space."""

from dataclasses import dataclass

PAGE_MASK = 0xFFFFF000
PAGE_SIZE = 0x1000


@dataclass
class BumpAllocator:
    """Hands out addresses by advancing a free pointer."""

    free_addr: int = 0x10000

    def malloc(self, size, align=True):
        """Reserve ``size`` bytes and return their start address."""
        if align and self.free_addr & PAGE_MASK:
            self.free_addr = (self.free_addr & PAGE_MASK) + PAGE_SIZE
        start = self.free_addr
        self.free_addr += size
        return start

    def release(self, size):
        """Move the free pointer back by ``size`` bytes."""
        if size > self.free_addr:
            raise ValueError("release exceeds allocated memory")
        self.free_addr -= size