import struct

import pytest

from zeroshell.disk import DiskImage, SECTOR_SIZE
from zeroshell.env import Environment
from zeroshell.fs import (
    MAGIC,
    SUPERBLOCK_BLOCK,
    FileMissingError,
    FileSystem,
    FsError,
    Inode,
)


def _make_image(tmp_path, sectors=1000):
    path = tmp_path / "disk.bin"
    path.write_bytes(bytes(sectors * SECTOR_SIZE))
    return DiskImage(path)


@pytest.fixture
def disk(tmp_path):
    return _make_image(tmp_path)


@pytest.fixture
def env():
    return Environment()


@pytest.fixture
def fs(disk, env):
    filesystem = FileSystem(disk)
    filesystem.init(env)
    filesystem.format()
    return filesystem


def _pattern(length):
    return bytes((i % 255) + 1 for i in range(length))


def test_fresh_disk_is_not_formatted(disk):
    assert FileSystem(disk).is_formatted() is False


def test_init_writes_magic(disk, env):
    filesystem = FileSystem(disk)
    filesystem.init(env)
    assert filesystem.is_formatted() is True
    raw = disk.read_sectors(SUPERBLOCK_BLOCK, 1)
    assert struct.unpack_from("<I", raw)[0] == 0xF0F03410


def test_superblock_geometry_invariants(fs):
    sb = fs.superblock
    assert sb.magic == MAGIC
    assert sb.inodes == sb.inode_blocks * 8
    assert sb.inode_blocks == sb.blocks // 10
    assert sb.blocks * SECTOR_SIZE == sb.disk_size


def test_superblock_round_trip(fs, disk):
    other = FileSystem(disk)
    assert other.load_superblock() == fs.superblock


def test_create_and_get_file_info(fs, env):
    fs.create("notes", env)
    info = fs.get_file_info("notes")
    assert info.valid is True
    assert info.size == len("notes") + 1
    assert info.pointers[0] > SUPERBLOCK_BLOCK + fs.superblock.inode_blocks
    assert info.pointers[1:] == [0] * 13


def test_missing_file_info_is_none(fs):
    assert fs.get_file_info("ghost") is None


def test_create_duplicate_raises(fs, env):
    fs.create("a", env)
    with pytest.raises(FsError):
        fs.create("a", env)


def test_create_empty_name_raises(fs, env):
    with pytest.raises(FsError):
        fs.create("", env)


def test_write_then_read(fs, env):
    fs.create("greeting", env)
    assert fs.write("greeting", b"hello", env) == 5
    content = fs.read("greeting", 1, 0)
    assert content.startswith(b"hello")
    assert content[5:] == bytes(len(content) - 5)
    assert fs.get_file_info("greeting").size == len("greeting") + 1 + 5


def test_write_appends(fs, env):
    fs.create("log", env)
    fs.write("log", b"hello", env)
    fs.write("log", b" world", env)
    assert fs.read("log", 1, 0).rstrip(b"\0") == b"hello world"


def test_large_write_spans_blocks(fs, env):
    data = _pattern(1500)
    fs.create("big", env)
    assert fs.write("big", data, env) == len(data)
    assert fs.read("big", 4, 0)[:len(data)] == data
    assert fs.get_file_info("big").size == len("big") + 1 + len(data)


def test_sector_reads_are_contiguous(fs, env):
    fs.create("big", env)
    fs.write("big", _pattern(1500), env)
    two = fs.read("big", 2, 0)
    assert two == fs.read("big", 1, 0) + fs.read("big", 1, 1)


def test_missing_file_operations_raise(fs, env):
    with pytest.raises(FileMissingError):
        fs.read("nope", 1, 0)
    with pytest.raises(FileMissingError):
        fs.write("nope", b"x", env)
    with pytest.raises(FileMissingError):
        fs.delete("nope", env)


def test_missing_file_caught_as_fs_error(fs):
    with pytest.raises(FsError) as excinfo:
        fs.read("nope", 1, 0)
    assert isinstance(excinfo.value, FileMissingError)


def test_delete_clears_data(fs, env, disk):
    fs.create("tmp", env)
    fs.write("tmp", b"contents", env)
    info = fs.get_file_info("tmp")
    table = struct.unpack("<128I", disk.read_sectors(info.pointers[0], 1))
    data_block = table[0]

    fs.delete("tmp", env)

    assert fs.get_file_info("tmp") is None
    assert disk.read_sectors(data_block, 1) == bytes(SECTOR_SIZE)
    assert env.last_allocated_block == data_block
    assert fs.superblock.last_allocated_block == data_block


def test_delete_then_recreate(fs, env):
    fs.create("tmp", env)
    fs.write("tmp", b"old", env)
    fs.delete("tmp", env)
    fs.create("tmp", env)
    assert fs.get_file_info("tmp").size == len("tmp") + 1
    assert fs.read("tmp", 1, 0).rstrip(b"\0") == b""


def test_list_files(fs, env):
    fs.create("text", env)
    fs.write("text", b"plain", env)
    fs.create("prog", env)
    fs.write("prog", b"\x7fELF" + b"\x01" * 10, env)
    entries = {name: (size, exe) for name, size, exe in fs.list_files()}
    assert entries == {
        "text": (len("text") + 1 + 5, False),
        "prog": (len("prog") + 1 + 14, True),
    }


def test_list_files_empty_after_format(fs):
    assert fs.list_files() == []


def test_set_file_info_updates_size(fs, env):
    fs.create("f", env)
    info = fs.get_file_info("f")
    info.size = 99
    assert fs.set_file_info("f", info) == 1
    assert fs.get_file_info("f").size == 99


def test_set_file_info_unknown_name(fs):
    assert fs.set_file_info("ghost", Inode()) == 0


def test_allocate_data_block(fs, env):
    block = fs.allocate_data_block(env)
    assert env.last_allocated_block == block
    assert block > SUPERBLOCK_BLOCK + fs.superblock.inode_blocks
    assert fs.allocate_data_block(env) == block


def test_allocation_skips_used_blocks(fs, env):
    fs.create("a", env)
    info = fs.get_file_info("a")
    block = fs.allocate_data_block(env)
    assert block != info.pointers[0]
    assert fs.read("a", 1, 0) == bytes(len(fs.read("a", 1, 0)))


def test_files_persist_across_instances(fs, env, disk):
    fs.create("keep", env)
    fs.write("keep", b"data", env)
    other_env = Environment()
    other = FileSystem(disk)
    other.init(other_env)
    assert other_env.last_allocated_block == env.last_allocated_block
    assert other.read("keep", 1, 0).rstrip(b"\0") == b"data"