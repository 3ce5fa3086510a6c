"""Write a host file into an ESFS disk image."""

import sys
from pathlib import Path

from zeroshell.disk import DiskError, DiskImage
from zeroshell.env import Environment
from zeroshell.fs import FileSystem, FsError

USAGE = "usage: rawwrite <disk.bin> <filename_in_ESFS> <filename_on_local_machine>"


def write_file(disk_path, name, data):
    """Store ``data`` under ``name`` in the image, formatting it if needed.

    An existing file is appended to.  Returns the number of bytes stored.
    """
    fs = FileSystem(DiskImage(disk_path))
    env = Environment()
    formatted = fs.is_formatted()
    fs.init(env)
    if not formatted:
        fs.format()
    if fs.get_file_info(name) is None:
        fs.create(name, env)
    return fs.write(name, data, env)


def main(argv=None):
    """Command entry point; returns the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) < 3:
        print("Incorrect syntax detected!")
        print(USAGE)
        return 1
    disk_path, name, local_path = args[:3]
    try:
        data = Path(local_path).read_bytes()
        written = write_file(disk_path, name, data)
    except (OSError, DiskError, FsError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(f"Wrote {written} bytes to {name}")
    return 0