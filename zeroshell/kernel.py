"""Boot sequence, program execution and the command shell."""

from zeroshell.disk import DRIVE_COUNT, SECTOR_SIZE, DiskError
from zeroshell.env import Environment
from zeroshell.fs import ELF_MAGIC, FileMissingError, FileSystem
from zeroshell.memory import BumpAllocator
from zeroshell.screen import Screen
from zeroshell.textutil import splice

BOOT_SIGNATURE = b"\x55\xaa"
PROGRAM_MEMORY = 50000
YELLOW = 0x0E
RED = 0x04

_LOGO = (
    " _____         _             _____             ",
    "|   __|_ _ ___| |_ ___ _____|__   |___ ___ ___ ",
    "|__   | | |_ -|  _| -_|     |   __| -_|  _| . |",
    "|_____|_  |___|_| |___|_|_|_|_____|___|_| |___|",
    "      |___|                                    ",
)


def find_boot_drive(drives):
    """Number of the first drive whose sector 0 ends in the boot signature."""
    for number in range(DRIVE_COUNT):
        if not drives.identify(number):
            continue
        drives.select(number)
        if drives.current().read_sectors(0, 1)[510:512] == BOOT_SIGNATURE:
            return number
    raise DiskError("kernel not found on any existing drive")


def find_kernel_block(disk):
    """First sector of the disk that starts with an ELF header."""
    for block in range(disk.size() // SECTOR_SIZE):
        if disk.read_sectors(block, 1)[:4] == ELF_MAGIC:
            return block
    raise DiskError("no kernel image on disk")


class Kernel:
    """Owns the drives, screen, memory and environment, and runs programs."""

    def __init__(self, drives, screen=None, env=None, memory=None):
        self.drives = drives
        self.env = env or Environment()
        self.screen = screen or Screen(self.env.term_color)
        self.memory = memory or BumpAllocator()
        self._programs = {}

    @property
    def fs(self):
        """The filesystem on the selected drive, superblock loaded."""
        fs = FileSystem(self.drives.current())
        fs.load_superblock()
        return fs

    def _say(self, text, color=None):
        self.screen.term_color = self.env.term_color if color is None else color
        self.screen.print(text)
        self.screen.term_color = self.env.term_color

    def boot(self):
        """Find the system drive, prepare its filesystem and greet the user."""
        self.screen.term_color = self.env.term_color
        self.screen.clear()
        try:
            drive = find_boot_drive(self.drives)
        except DiskError:
            self._say(
                "[LOADER] ERROR! Kernel not found on any existing drive!\n",
                self.env.accent_color(RED),
            )
            raise
        self._say(f"[LOADER] Loading kernel from drive {drive}\n")
        self.env.selected_drive = drive
        self.env.system_drive = drive
        if self.env.free_mem_ptr:
            self.memory.free_addr = self.env.free_mem_ptr
        else:
            self.env.free_mem_ptr = self.memory.free_addr
        self._say("Kernel successfully initialized!\n")

        self.drives.select(drive)
        fs = FileSystem(self.drives.current())
        self._say("Scanning disk for ESFS filesystem...\n")
        formatted = fs.is_formatted()
        fs.init(self.env)
        if formatted:
            self._say("ESFS superblock found!\n")
        else:
            self._say("Disk not formatted with ESFS!\n")
            fs.format()
            sb = fs.superblock
            self._say(f"{sb.inodes} inodes written to {sb.inode_blocks} blocks!\n")
            free = (sb.blocks - sb.inode_blocks) * SECTOR_SIZE
            self._say(f"{free} bytes available for file creation!\n")

        self._say("\n")
        for line in _LOGO:
            self._say(line + "\n", self.env.accent_color(YELLOW))
        self._say("\nYou are now working from the built-in kernel shell.\n")
        self._say(
            "Type \"list\" to list all files on disk, "
            "files marked with 'x' are executable.\n\n"
        )

    def register(self, name, program):
        """Bind a callable ``program(kernel, args)`` to an executable name."""
        self._programs[name] = program

    def execute(self, command, args):
        """Run the named executable from the system drive; return its status."""
        self.drives.select(self.env.system_drive)
        try:
            head = self.fs.read(command, 1, 0)
        except FileMissingError:
            self._say("File doesn't exist!\n")
            return 2
        if head[:4] != ELF_MAGIC:
            self._say("File is not executable!\n")
            return 2
        program = self._programs.get(command)
        if program is None:
            self._say("Program has no registered entry point!\n")
            return 2

        start = self.memory.free_addr
        self.memory.malloc(PROGRAM_MEMORY)
        self.env.free_mem_ptr = self.memory.free_addr
        try:
            return program(self, args)
        finally:
            self.memory.free_addr = start
            self.env.free_mem_ptr = start

    def prompt(self):
        """Select the working drive and print the shell prompt."""
        self.drives.select(self.env.selected_drive)
        text = f"IDE{self.env.selected_drive}> "
        self._say(text, self.env.accent_color(YELLOW))
        return text

    def run_line(self, line):
        """Execute one shell line and report its exit status."""
        status = self.execute(splice(line, 0, " "), line)
        self._say(f"{status} -> exit status\n")
        return status