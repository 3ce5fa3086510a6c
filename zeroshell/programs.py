"""Shell programs run by the kernel.

Every program is called as ``program(kernel, args)`` where ``args`` is the
whole command line, and returns its exit status.
"""

import argparse
import sys

from zeroshell.disk import DRIVE_COUNT, SECTOR_SIZE, DiskError, DiskImage, DriveSet
from zeroshell.fs import (
    ELF_MAGIC,
    INODES_PER_BLOCK,
    MAGIC,
    SUPERBLOCK_BLOCK,
    FileMissingError,
    FileSystem,
    FsError,
    Superblock,
)
from zeroshell.graphics import draw_line
from zeroshell.kernel import Kernel
from zeroshell.textutil import atoi, splice


def _arg(args, index):
    return splice(args, index, " ")


def _out(kernel, text):
    kernel.screen.term_color = kernel.env.term_color
    kernel.screen.print(text)


def _working_fs(kernel):
    kernel.drives.select(kernel.env.selected_drive)
    return kernel.fs


def chain(kernel, args):
    """Run a ``$``-separated list of commands with jumps and messages.

    ``"text"`` prints text, ``~status:n~`` jumps to command ``n`` when the
    last status matches, ``@n@`` jumps to command ``n`` unconditionally.
    """
    kernel.screen.term_color = kernel.env.term_color
    _, _, raw = args.partition(" ")
    status = 0
    i = 1
    while splice(args, i, "$"):
        cmd = splice(raw, i, "$").split("$", 1)[0]
        keyword = splice(cmd, 0, " ")
        if cmd.startswith('"'):
            _out(kernel, cmd[1:].split('"', 1)[0] + "\n")
        elif cmd.startswith("~"):
            target = cmd[1:].split("~", 1)[0]
            if status == atoi(splice(target, 0, ":")):
                i = atoi(splice(target, 1, ":")) - 1
        elif cmd.startswith("@"):
            i = atoi(cmd[1:].split("@", 1)[0]) - 1
        else:
            status = kernel.execute(keyword, cmd)
        i += 1
    return 0


def cls(kernel, args):
    """Clear the screen."""
    kernel.screen.term_color = kernel.env.term_color
    kernel.screen.clear()
    return 0


def color(kernel, args):
    """Set the terminal color from background and foreground numbers."""
    kernel.screen.term_color = kernel.env.term_color
    background = atoi(_arg(args, 1)) & 0xFF
    foreground = atoi(_arg(args, 2)) & 0xFF
    if background > 15 or foreground > 15:
        _out(kernel, "Invalid color values given!\n")
        _out(kernel, "Format: color <0 - 15 (background)> <0 - 15 (foreground)>\n")
        return 1
    kernel.env.term_color = background * 16 + foreground
    kernel.screen.term_color = kernel.env.term_color
    return 0


def copy(kernel, args):
    """Copy ``drive:name`` to ``drive:name``, possibly across drives."""
    kernel.screen.term_color = kernel.env.term_color
    source, target = _arg(args, 1), _arg(args, 2)
    src_drive, src_name = atoi(splice(source, 0, ":")), splice(source, 1, ":")
    dst_drive, dst_name = atoi(splice(target, 0, ":")), splice(target, 1, ":")
    try:
        kernel.drives.select(src_drive)
        src_fs = kernel.fs
        info = src_fs.get_file_info(src_name)
        if info is None:
            _out(kernel, "File doesn't exist!\n")
            return 1
        contents = src_fs.read(src_name, info.size // SECTOR_SIZE + 1, 0)
        length = info.size - len(src_name) - 1

        kernel.drives.select(dst_drive)
        dst_fs = kernel.fs
        if dst_fs.get_file_info(dst_name) is None:
            dst_fs.create(dst_name, kernel.env)
        _out(kernel, "Copying data (will take a while for large files)... \n")
        dst_fs.write(dst_name, contents[:max(length, 0)], kernel.env)
    except (DiskError, FsError) as exc:
        _out(kernel, f"{exc}\n")
        return 1
    return 0


def delete(kernel, args):
    """Delete a file on the selected drive."""
    kernel.screen.term_color = kernel.env.term_color
    try:
        _working_fs(kernel).delete(_arg(args, 1), kernel.env)
    except FileMissingError:
        _out(kernel, "File doesn't exist!\n")
        return 1
    except (DiskError, FsError) as exc:
        _out(kernel, f"{exc}\n")
        return 1
    _out(kernel, "File successfully deleted!\n")
    return 0


def drawline(kernel, args):
    """Draw a line; the starting x coordinate doubles as the color."""
    values = [atoi(_arg(args, n)) for n in range(1, 5)]
    draw_line(kernel.screen, *values, values[0])
    return 0


def drive(kernel, args):
    """Make another drive the working drive."""
    kernel.screen.term_color = kernel.env.term_color
    number = atoi(_arg(args, 1)) & 0xFF
    kernel.drives.select(number)
    if kernel.drives.identify(number):
        kernel.env.selected_drive = number
        return 0
    _out(kernel, "Drive doesn't exist\n")
    return 1


def drives(kernel, args):
    """List the four drive slots and whether each is present."""
    kernel.screen.term_color = kernel.env.term_color
    for number in range(DRIVE_COUNT):
        kernel.drives.select(number)
        status = "Exists" if kernel.drives.identify(number) else "Absent"
        _out(kernel, f"[{number}] IDE{number} - Status: {status}\n")
    return 0


def format_drive(kernel, args):
    """Format the selected drive with a fresh ESFS filesystem."""
    env = kernel.env
    _out(kernel, f"Formatting drive IDE{env.selected_drive}\n")
    try:
        kernel.drives.select(env.selected_drive)
        disk = kernel.drives.current()
        size = disk.size()
        _out(kernel, f"Determining size of drive... [{size} bytes]\n")
        disk_size = size - SUPERBLOCK_BLOCK * SECTOR_SIZE
        if disk_size <= 0:
            raise FsError("disk too small for a filesystem")
        blocks = disk_size // SECTOR_SIZE
        inode_blocks = blocks // 10
        fs = FileSystem(disk)
        fs.superblock = Superblock(
            magic=MAGIC,
            blocks=blocks,
            inode_blocks=inode_blocks,
            inodes=inode_blocks * INODES_PER_BLOCK,
            disk_size=disk_size,
            last_allocated_block=0,
        )
        _out(kernel, "Formatting disk with ESFS...\n")
        fs.format()
    except (DiskError, FsError) as exc:
        _out(kernel, f"{exc}\n")
        return 1
    env.last_allocated_block = 0
    sb = fs.superblock
    _out(kernel, f"{sb.inodes} inodes written to {sb.inode_blocks} blocks!\n")
    free = (sb.blocks - sb.inode_blocks) * SECTOR_SIZE
    _out(kernel, f"{free} bytes available for file creation!\n")
    return 0


def list_files(kernel, args):
    """List the files on the selected drive, marking executables."""
    kernel.screen.term_color = kernel.env.term_color
    try:
        entries = _working_fs(kernel).list_files()
    except (DiskError, FsError) as exc:
        _out(kernel, f"{exc}\n")
        return 1
    for name, size, executable in entries:
        mark = "[x]" if executable else "[-]"
        _out(kernel, f"{mark}  [{size} bytes]  {name}\n")
    return 0


def _show_sector(kernel, chunk, as_hex):
    if as_hex:
        for byte in chunk.ljust(SECTOR_SIZE, b"\0")[:SECTOR_SIZE]:
            kernel.screen.print_hex(byte)
            kernel.screen.print_char(" ")
    else:
        _out(kernel, chunk.split(b"\0", 1)[0].decode("latin-1"))


def read(kernel, args):
    """Print a file, or one sector of it, as text or hex (``-x``)."""
    kernel.screen.term_color = kernel.env.term_color
    as_hex = _arg(args, 1) == "-x"
    first = 2 if as_hex else 1
    name = _arg(args, first)
    sector = atoi(_arg(args, first + 1))
    try:
        fs = _working_fs(kernel)
        if sector >= 0:
            _show_sector(kernel, fs.read(name, 1, sector), as_hex)
            if not as_hex:
                _out(kernel, "\n")
            return 0
        info = fs.get_file_info(name)
        if info is None:
            raise FileMissingError(name)
        for sec in range(info.size // SECTOR_SIZE + 1):
            _show_sector(kernel, fs.read(name, 1, sec), as_hex)
    except FileMissingError:
        _out(kernel, "File doesn't exist!\n")
        return 1
    except (DiskError, FsError) as exc:
        _out(kernel, f"{exc}\n")
        return 1
    return 0


def touch(kernel, args):
    """Create an empty file on the selected drive."""
    kernel.screen.term_color = kernel.env.term_color
    name = _arg(args, 1)
    try:
        fs = _working_fs(kernel)
        if fs.get_file_info(name) is not None:
            _out(kernel, "File already exists!\n")
            return 1
        fs.create(name, kernel.env)
    except (DiskError, FsError) as exc:
        _out(kernel, f"{exc}\n")
        return 1
    _out(kernel, f"File {name} successfully created!\n")
    return 0


PROGRAMS = {
    "chain": chain,
    "cls": cls,
    "color": color,
    "copy": copy,
    "del": delete,
    "drawline": drawline,
    "drive": drive,
    "drives": drives,
    "format": format_drive,
    "list": list_files,
    "read": read,
    "touch": touch,
}


def install(kernel):
    """Register every program and place its executable on the system drive.

    Returns the sorted program names.
    """
    for name, program in PROGRAMS.items():
        kernel.register(name, program)
    kernel.drives.select(kernel.env.system_drive)
    fs = kernel.fs
    if fs.is_formatted():
        for name in PROGRAMS:
            if fs.get_file_info(name) is None:
                fs.create(name, kernel.env)
                fs.write(name, ELF_MAGIC, kernel.env)
    return sorted(PROGRAMS)


def _dump(screen):
    lines = screen.lines()
    while lines and not lines[-1]:
        lines.pop()
    for line in lines:
        print(line)


def main(argv=None):
    """Boot the shell on disk images and run commands read from stdin."""
    parser = argparse.ArgumentParser(
        prog="zeroshell", description="Run the shell on one to four disk images."
    )
    parser.add_argument("disks", nargs="+", metavar="DISK")
    options = parser.parse_args(argv)
    if len(options.disks) > DRIVE_COUNT:
        parser.error("at most four disk images")
    try:
        kernel = Kernel(DriveSet(DiskImage(path) for path in options.disks))
        kernel.boot()
        install(kernel)
        _dump(kernel.screen)
        for line in sys.stdin:
            line = line.rstrip("\r\n")
            if not line.strip():
                continue
            kernel.screen.clear()
            kernel.prompt()
            kernel.screen.print(line + "\n")
            kernel.run_line(line)
            _dump(kernel.screen)
    except (DiskError, FsError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0