import io
import sys

import pytest

from zeroshell.disk import SECTOR_SIZE, DiskImage, DriveSet
from zeroshell.fs import FileSystem
from zeroshell.kernel import Kernel
from zeroshell.programs import (
    chain,
    cls,
    color,
    copy,
    delete,
    drawline,
    drive,
    drives,
    format_drive,
    install,
    list_files,
    main,
    read,
    touch,
)

SECTORS = 1000


def _image(path, boot=True):
    data = bytearray(SECTORS * SECTOR_SIZE)
    if boot:
        data[510:512] = b"\x55\xaa"
    path.write_bytes(bytes(data))
    return path


def _boot(images):
    kernel = Kernel(DriveSet(DiskImage(p) for p in images))
    kernel.boot()
    install(kernel)
    kernel.screen.clear()
    return kernel


@pytest.fixture
def kernel(tmp_path):
    return _boot([_image(tmp_path / "d0.bin")])


@pytest.fixture
def two_drive_kernel(tmp_path):
    return _boot([_image(tmp_path / "d0.bin"), _image(tmp_path / "d1.bin", boot=False)])


def _text(kernel):
    return "\n".join(kernel.screen.lines())


def test_touch_creates_file_once(kernel):
    assert touch(kernel, "touch notes") == 0
    assert "File notes successfully created!" in _text(kernel)
    assert kernel.fs.get_file_info("notes").size == len("notes") + 1
    assert touch(kernel, "touch notes") == 1
    assert "File already exists!" in _text(kernel)


def test_delete_removes_file(kernel):
    touch(kernel, "touch notes")
    assert delete(kernel, "del notes") == 0
    assert "File successfully deleted!" in _text(kernel)
    assert kernel.fs.get_file_info("notes") is None


def test_delete_missing_file(kernel):
    assert delete(kernel, "del ghost") == 1
    assert "File doesn't exist!" in _text(kernel)


def test_color_sets_background_and_foreground(kernel):
    assert color(kernel, "color 1 14") == 0
    assert kernel.env.term_color >> 4 == 1
    assert kernel.env.term_color & 0xF == 14
    assert kernel.screen.term_color == kernel.env.term_color


def test_color_rejects_out_of_range(kernel):
    before = kernel.env.term_color
    assert color(kernel, "color 16 0") == 1
    assert kernel.env.term_color == before
    assert "Invalid color values given!" in _text(kernel)


def test_color_rejects_missing_arguments(kernel):
    assert color(kernel, "color") == 1


def test_cls_blanks_screen(kernel):
    kernel.screen.print("some text\nmore")
    assert cls(kernel, "cls") == 0
    assert all(line == "" for line in kernel.screen.lines())
    assert kernel.screen.cursor == 0


def test_drawline_uses_start_x_as_color(kernel):
    assert drawline(kernel, "drawline 2 1 6 1") == 0
    row = 160
    assert kernel.screen.cell(4 * 2 + row)[1] >> 4 == 2
    assert kernel.screen.cell(4 * 5 + row)[1] >> 4 == 2
    assert kernel.screen.cell(4 * 6 + row)[1] == kernel.env.term_color
    assert kernel.screen.cell(4 * 1 + row)[1] == kernel.env.term_color


def test_drive_missing(kernel):
    assert drive(kernel, "drive 1") == 1
    assert "Drive doesn't exist" in _text(kernel)
    assert kernel.env.selected_drive == 0


def test_drive_switches(two_drive_kernel):
    assert drive(two_drive_kernel, "drive 1") == 0
    assert two_drive_kernel.env.selected_drive == 1


def test_drives_lists_status(kernel):
    assert drives(kernel, "drives") == 0
    text = _text(kernel)
    assert "[0] IDE0 - Status: Exists" in text
    assert "[3] IDE3 - Status: Absent" in text


def test_list_marks_executables(kernel):
    touch(kernel, "touch notes")
    kernel.screen.clear()
    assert list_files(kernel, "list") == 0
    lines = kernel.screen.lines()
    notes = [line for line in lines if line.endswith("notes")]
    tools = [line for line in lines if line.endswith("touch")]
    assert notes and notes[0].startswith("[-]")
    assert tools and tools[0].startswith("[x]")


def test_read_text(kernel):
    touch(kernel, "touch notes")
    kernel.fs.write("notes", b"Hello shell", kernel.env)
    kernel.screen.clear()
    assert read(kernel, "read notes") == 0
    assert kernel.screen.lines()[0] == "Hello shell"


def test_read_hex_sector(kernel):
    touch(kernel, "touch notes")
    kernel.fs.write("notes", b"Hello", kernel.env)
    kernel.screen.clear()
    assert read(kernel, "read -x notes 0") == 0
    assert kernel.screen.lines()[0].startswith("48 65 6C 6C 6F 0 ")


def test_read_missing(kernel):
    assert read(kernel, "read ghost") == 1
    assert "File doesn't exist!" in _text(kernel)


def test_format_erases_files(kernel):
    touch(kernel, "touch notes")
    assert format_drive(kernel, "format") == 0
    assert "inodes written to" in _text(kernel)
    assert kernel.fs.is_formatted()
    assert kernel.fs.get_file_info("notes") is None


def test_copy_across_drives(two_drive_kernel):
    k = two_drive_kernel
    k.env.selected_drive = 1
    assert format_drive(k, "format") == 0
    k.env.selected_drive = 0
    k.drives.select(0)
    fs0 = k.fs
    fs0.create("src", k.env)
    fs0.write("src", b"payload data", k.env)

    assert copy(k, "copy 0:src 1:dst") == 0
    k.drives.select(1)
    fs1 = k.fs
    assert fs1.read("dst", 1, 0).startswith(b"payload data")
    assert fs1.get_file_info("dst").size == fs0.get_file_info("src").size


def test_copy_missing_source(kernel):
    assert copy(kernel, "copy 0:ghost 0:dst") == 1
    assert kernel.fs.get_file_info("dst") is None


def test_chain_prints_and_runs(kernel):
    assert chain(kernel, 'chain $"hello there"$touch memo') == 0
    assert "hello there" in _text(kernel)
    assert kernel.fs.get_file_info("memo").size == len("memo") + 1


def test_chain_conditional_jump(kernel):
    chain(kernel, "chain $touch a$~0:4~$touch b$touch c")
    fs = kernel.fs
    assert fs.get_file_info("a").valid
    assert fs.get_file_info("b") is None
    assert fs.get_file_info("c").valid


def test_chain_unconditional_jump(kernel):
    chain(kernel, "chain $@3@$touch b$touch c")
    fs = kernel.fs
    assert fs.get_file_info("b") is None
    assert fs.get_file_info("c").valid


def test_install_places_executables(kernel):
    names = install(kernel)
    assert "touch" in names and "del" in names
    listing = {name: executable for name, _, executable in kernel.fs.list_files()}
    assert all(listing[name] for name in names)


def test_main_runs_commands(tmp_path, monkeypatch, capsys):
    path = _image(tmp_path / "disk.bin")
    monkeypatch.setattr(sys, "stdin", io.StringIO("touch memo\n"))
    assert main([str(path)]) == 0
    out = capsys.readouterr().out
    assert "IDE0> touch memo" in out
    assert "File memo successfully created!" in out
    fs = FileSystem(DiskImage(path))
    fs.load_superblock()
    assert fs.get_file_info("memo").valid


def test_main_requires_disk():
    with pytest.raises(SystemExit):
        main([])