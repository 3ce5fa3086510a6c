"""Sector access to disk image files and a set of four drives."""

from pathlib import Path

SECTOR_SIZE = 512
DRIVE_COUNT = 4


class DiskError(Exception):
    """A disk access failed."""


class DiskImage:
    """A raw disk image addressed in 512-byte sectors."""

    def __init__(self, path):
        self.path = Path(path)
        if not self.path.is_file():
            raise DiskError(f"no such disk image: {self.path}")

    def size(self):
        """Size of the image in bytes."""
        return self.path.stat().st_size

    def _check(self, lba, count):
        if lba < 0 or count < 0 or (lba + count) * SECTOR_SIZE > self.size():
            raise DiskError(f"sectors {lba}..{lba + count} out of range")

    def read_sectors(self, lba, count=1):
        """Read ``count`` sectors starting at ``lba``."""
        self._check(lba, count)
        with self.path.open("rb") as disk:
            disk.seek(lba * SECTOR_SIZE)
            return disk.read(count * SECTOR_SIZE)

    def write_sectors(self, lba, data):
        """Write data from ``lba``, zero-padding the last sector."""
        data = bytes(data)
        count = max(1, -(-len(data) // SECTOR_SIZE))
        self._check(lba, count)
        with self.path.open("r+b") as disk:
            disk.seek(lba * SECTOR_SIZE)
            disk.write(data.ljust(count * SECTOR_SIZE, b"\0"))


class DriveSet:
    """Up to four drives, one of which is selected."""

    def __init__(self, drives=()):
        drives = list(drives)
        if len(drives) > DRIVE_COUNT:
            raise ValueError("at most four drives")
        self._drives = drives + [None] * (DRIVE_COUNT - len(drives))
        self.selected = 0

    def select(self, number):
        """Select a drive by number; numbers outside 0-3 are ignored."""
        if 0 <= number < DRIVE_COUNT:
            self.selected = number

    def current(self):
        """The selected drive."""
        drive = self._drives[self.selected]
        if drive is None:
            raise DiskError(f"drive {self.selected} is absent")
        return drive

    def identify(self, number):
        """Whether a drive exists and its first sector can be read."""
        if not 0 <= number < DRIVE_COUNT or self._drives[number] is None:
            return False
        try:
            self._drives[number].read_sectors(0, 1)
        except DiskError:
            return False
        return True