"""The ESFS block filesystem kept on a sector-addressed disk.

Layout: the superblock sits in block 200, followed by the inode blocks
(eight 64-byte inodes per block).  Each inode holds up to fourteen
pointer blocks; each pointer block lists up to 128 data blocks.  The
first data block of a file starts with its NUL-terminated name, and the
file's contents follow that terminator.
"""

import struct
from dataclasses import dataclass, field

from zeroshell.disk import SECTOR_SIZE

MAGIC = 0xF0F03410
SUPERBLOCK_BLOCK = 200
INODE_SIZE = 64
INODES_PER_BLOCK = SECTOR_SIZE // INODE_SIZE
POINTERS = 14
ENTRIES = SECTOR_SIZE // 4
EMPTY_RUN_LIMIT = 100
ELF_MAGIC = b"\x7fELF"

_SUPERBLOCK = struct.Struct("<6I")
_INODE = struct.Struct("<16I")
_TABLE = struct.Struct(f"<{ENTRIES}I")


class FsError(Exception):
    """A filesystem operation failed."""


class FileMissingError(FsError):
    """The named file does not exist."""


@dataclass
class Superblock:
    """Filesystem geometry and allocation state."""

    magic: int = MAGIC
    blocks: int = 0
    inode_blocks: int = 0
    inodes: int = 0
    disk_size: int = 0
    last_allocated_block: int = 0


@dataclass
class Inode:
    """A file record: validity, size and pointer-block numbers."""

    valid: bool = False
    size: int = 0
    pointers: list = field(default_factory=lambda: [0] * POINTERS)


def _pack_superblock(sb):
    return _SUPERBLOCK.pack(
        sb.magic, sb.blocks, sb.inode_blocks, sb.inodes,
        sb.disk_size, sb.last_allocated_block,
    )


def _unpack_superblock(raw):
    return Superblock(*_SUPERBLOCK.unpack_from(raw))


def _pack_inode(inode):
    return _INODE.pack(int(inode.valid), inode.size, *inode.pointers)


def _unpack_inode(raw):
    words = _INODE.unpack_from(raw)
    return Inode(words[0] == 1, words[1], list(words[2:]))


def _encode_name(name):
    try:
        raw = name.encode("latin-1")
    except UnicodeEncodeError as exc:
        raise FsError(f"invalid file name: {name!r}") from exc
    if not raw or b"\0" in raw or len(raw) >= SECTOR_SIZE:
        raise FsError(f"invalid file name: {name!r}")
    return raw


class FileSystem:
    """ESFS operations on a disk offering read_sectors and write_sectors."""

    def __init__(self, disk):
        self.disk = disk
        self.superblock = Superblock()

    # -- low level helpers -------------------------------------------------

    def _read(self, lba):
        return self.disk.read_sectors(lba, 1)

    def _write(self, lba, data):
        self.disk.write_sectors(lba, data)

    def _table(self, lba):
        return list(_TABLE.unpack(self._read(lba)))

    def _write_table(self, lba, table):
        self._write(lba, _TABLE.pack(*table))

    @property
    def _data_start(self):
        return SUPERBLOCK_BLOCK + self.superblock.inode_blocks + 1

    def _scan(self):
        """Yield (lba, slot, inode) for valid inodes until a long empty run."""
        empty = 0
        for offset in range(1, self.superblock.inode_blocks + 1):
            lba = SUPERBLOCK_BLOCK + offset
            raw = self._read(lba)
            for slot in range(INODES_PER_BLOCK):
                inode = _unpack_inode(raw[slot * INODE_SIZE:(slot + 1) * INODE_SIZE])
                if inode.valid:
                    empty = 0
                    yield lba, slot, inode
                else:
                    empty += 1
                    if empty >= EMPTY_RUN_LIMIT:
                        return

    def _name_of(self, inode):
        if not inode.pointers[0]:
            return None
        first = self._table(inode.pointers[0])[0]
        if not first:
            return None
        return self._read(first).split(b"\0", 1)[0].decode("latin-1")

    def _write_inode(self, lba, slot, inode):
        block = bytearray(self._read(lba))
        block[slot * INODE_SIZE:(slot + 1) * INODE_SIZE] = _pack_inode(inode)
        self._write(lba, block)

    def _used_blocks(self):
        used = set()
        for _, _, inode in self._scan():
            for pointer in filter(None, inode.pointers):
                used.add(pointer)
                used.update(filter(None, self._table(pointer)))
        return used

    # -- superblock --------------------------------------------------------

    def init(self, env):
        """Set up the superblock from disk, or from the disk size if absent."""
        stored = _unpack_superblock(self._read(SUPERBLOCK_BLOCK))
        formatted = stored.magic == MAGIC and stored.disk_size != 0
        if formatted:
            disk_size = stored.disk_size
            env.last_allocated_block = stored.last_allocated_block
        else:
            disk_size = self.disk.size() - SUPERBLOCK_BLOCK * SECTOR_SIZE
            if disk_size <= 0:
                raise FsError("disk too small for a filesystem")
        blocks = disk_size // SECTOR_SIZE
        inode_blocks = blocks // 10
        self.superblock = Superblock(
            MAGIC, blocks, inode_blocks, inode_blocks * INODES_PER_BLOCK,
            disk_size, env.last_allocated_block,
        )
        if formatted and not env.last_allocated_block:
            self.allocate_data_block(env)
        self.save_superblock(env)

    def load_superblock(self):
        """Read the superblock from disk into memory."""
        self.superblock = _unpack_superblock(self._read(SUPERBLOCK_BLOCK))
        return self.superblock

    def save_superblock(self, env):
        """Write the superblock, recording the environment's allocation point."""
        self.superblock.last_allocated_block = env.last_allocated_block
        self._write(SUPERBLOCK_BLOCK, _pack_superblock(self.superblock))

    def format(self):
        """Write the superblock and clear every inode block."""
        self._write(SUPERBLOCK_BLOCK, _pack_superblock(self.superblock))
        if self.superblock.inode_blocks:
            self._write(
                SUPERBLOCK_BLOCK + 1,
                bytes(SECTOR_SIZE * self.superblock.inode_blocks),
            )

    def is_formatted(self):
        """Whether the disk carries the ESFS magic number."""
        return _unpack_superblock(self._read(SUPERBLOCK_BLOCK)).magic == MAGIC

    # -- inodes ------------------------------------------------------------

    def get_file_info(self, name):
        """The inode of the named file, or None if there is none."""
        for _, _, inode in self._scan():
            if self._name_of(inode) == name:
                return inode
        return None

    def set_file_info(self, name, info):
        """Overwrite the inode of every file with this name; return how many."""
        matches = [(lba, slot) for lba, slot, inode in self._scan()
                   if self._name_of(inode) == name]
        for lba, slot in matches:
            self._write_inode(lba, slot, info)
        return len(matches)

    def allocate_data_block(self, env):
        """Find an empty, unreferenced data block and record it in ``env``."""
        start = max(env.last_allocated_block, self._data_start)
        last = min(self.superblock.blocks, self.disk.size() // SECTOR_SIZE - 1)
        used = self._used_blocks()
        for block in range(start, last + 1):
            if block in used:
                continue
            if not any(self._read(block)):
                env.last_allocated_block = block
                return block
        raise FsError("no free data blocks")

    # -- files -------------------------------------------------------------

    def create(self, name, env):
        """Create an empty file holding only its name."""
        raw_name = _encode_name(name)
        if self.get_file_info(name) is not None:
            raise FsError(f"file already exists: {name}")
        if not env.last_allocated_block:
            env.last_allocated_block = self._data_start

        for offset in range(1, self.superblock.inode_blocks + 1):
            lba = SUPERBLOCK_BLOCK + offset
            raw = self._read(lba)
            for slot in range(INODES_PER_BLOCK):
                if _unpack_inode(raw[slot * INODE_SIZE:(slot + 1) * INODE_SIZE]).valid:
                    continue
                if raw[slot * INODE_SIZE:slot * INODE_SIZE + 4] != bytes(4):
                    continue
                inode = Inode(True, len(raw_name) + 1)
                inode.pointers[0] = self.allocate_data_block(env)
                self._write_inode(lba, slot, inode)
                data_block = self.allocate_data_block(env)
                table = [0] * ENTRIES
                table[0] = data_block
                self._write_table(inode.pointers[0], table)
                self._write(data_block, raw_name + b"\0")
                self.save_superblock(env)
                return
        raise FsError("no free inodes available for file creation")

    def list_files(self):
        """Return (name, size, executable) for every file."""
        entries = []
        for _, _, inode in self._scan():
            name = self._name_of(inode)
            if name is None:
                continue
            executable = self.read(name, 1, 0)[:4] == ELF_MAGIC
            entries.append((name, inode.size, executable))
        return entries

    def _grow_pointers(self, name, info, ptr_i, env):
        if ptr_i + 1 < POINTERS and not info.pointers[ptr_i + 1]:
            info.pointers[ptr_i + 1] = self.allocate_data_block(env)
            self.set_file_info(name, info)

    def write(self, name, data, env):
        """Append data to an existing file; return the number of bytes stored."""
        info = self.get_file_info(name)
        if info is None:
            raise FileMissingError(name)
        if not env.last_allocated_block:
            env.last_allocated_block = self._data_start

        data = bytes(data)
        pos = 0
        for ptr_i in range(POINTERS):
            if pos >= len(data):
                break
            pointer = info.pointers[ptr_i]
            if not pointer:
                continue
            table = self._table(pointer)
            i = 0
            while i < ENTRIES and pos < len(data):
                if not table[i]:
                    table[i] = self.allocate_data_block(env)
                    self._write_table(pointer, table)
                    continue
                content = bytearray(self._read(table[i]))
                if content[-1]:
                    if i + 1 < ENTRIES and not table[i + 1]:
                        table[i + 1] = self.allocate_data_block(env)
                        self._write_table(pointer, table)
                    elif i == ENTRIES - 1:
                        self._grow_pointers(name, info, ptr_i, env)
                    i += 1
                    continue

                skip_name = ptr_i == 0 and i == 0
                written = 0
                for k, byte in enumerate(content):
                    if byte:
                        continue
                    if skip_name:
                        skip_name = False
                        continue
                    if pos >= len(data):
                        break
                    content[k] = data[pos]
                    pos += 1
                    written += 1

                info.size += written
                self.set_file_info(name, info)
                self._write(table[i], content)
                if content[-1] and i == ENTRIES - 1 and pos < len(data):
                    self._grow_pointers(name, info, ptr_i, env)
                i += 1

        self.set_file_info(name, info)
        self.save_superblock(env)
        return pos

    def read(self, name, sectors, offset=0):
        """Read ``sectors`` sectors of contents starting at sector ``offset``.

        Contents start after the name's terminator; the result may end
        early if the file has fewer blocks.
        """
        info = self.get_file_info(name)
        if info is None or not info.pointers[0]:
            raise FileMissingError(name)
        end = (offset + sectors) * SECTOR_SIZE + 1
        raw = bytearray()
        for pointer in filter(None, info.pointers):
            for block in filter(None, self._table(pointer)):
                raw += self._read(block)
                if len(raw) >= end:
                    break
            if len(raw) >= end:
                break

        if offset:
            start = offset * SECTOR_SIZE + 1
        else:
            terminator = raw.find(b"\0")
            if terminator < 0:
                return b""
            start = terminator + 1
        return bytes(raw[start:end])

    def delete(self, name, env):
        """Remove a file and clear its data blocks."""
        info = self.get_file_info(name)
        if info is None:
            raise FileMissingError(name)
        self.set_file_info(name, Inode())

        freed = []
        for pointer in filter(None, info.pointers):
            for block in filter(None, self._table(pointer)):
                freed.append(block)
                self._write(block, bytes(SECTOR_SIZE))
        env.last_allocated_block = min(freed, default=0)
        self.save_superblock(env)