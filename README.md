# zeroshell

`zeroshell` models a small hobby operating system in plain Python. It has
these parts:

* a text-mode 80x25 screen held in memory
* a scan-code keyboard line editor
* a bump memory allocator
* drives backed by raw disk image files
* the **ESFS** block filesystem that lives on those drives
* a kernel shell that runs built-in programs
* text viewer, text editor and hex editor classes

## Installing

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## The ESFS layout

ESFS works in 512-byte blocks.

* Block 200 holds the superblock. It is made of little-endian 32-bit
  words: magic `0xf0f03410`, block count, inode block count, inode count,
  disk size and the last allocated block.
* The blocks right after it hold the inodes, eight 64-byte inodes per
  block. An inode has a `valid` word, a `size` word and 14 pointers to
  pointer blocks.
* A pointer block lists up to 128 data-block numbers. The first data
  block of a file starts with the file's name and a zero byte. The
  file's contents follow that zero byte.

`zeroshell.fs.FileSystem` works on any object that offers
`read_sectors`, `write_sectors` and `size`, such as
`zeroshell.disk.DiskImage`. It provides these methods:

* `init`, `format` and `is_formatted`
* `create`, `write`, `read` and `delete`
* `list_files`, `get_file_info` and `set_file_info`

`write` appends to a file. `read(name, sectors, offset)` reads whole
sectors of contents. A missing file raises
`zeroshell.fs.FileMissingError`. Other failures raise
`zeroshell.fs.FsError`.

## Making a disk image

`DiskImage` only opens files that already exist. An image must be larger
than 200 sectors. To boot the shell from an image, bytes 510–511 of
sector 0 must hold the boot signature `55 AA`:

```python
with open("disk.bin", "wb") as image:
    image.write(bytes(510) + b"\x55\xaa")
    image.truncate(4 * 1024 * 1024)
```

## Writing a file into a disk image

The `esfs-raw-write` command copies a local file into an image. If the
image has no ESFS superblock yet, the command formats it first. If the
named file does not exist in the image, the command creates it.
Otherwise the data is appended to the existing file.

```
esfs-raw-write disk.bin hello.txt ./hello.txt
```

The same thing from Python:

```python
from zeroshell.rawwrite import write_file

written = write_file("disk.bin", "hello.txt", b"Hello from ESFS\n")
```

## The shell

The `zeroshell` command takes one to four disk images as drives 0–3.
It goes through these steps:

1. It boots from the first drive that carries the boot signature, and
   formats that drive with ESFS if it is not formatted yet.
2. It installs the built-in programs.
3. It reads commands from standard input, one per line.
4. After each command it prints the screen contents.

```
echo "list" | zeroshell disk.bin
```

Each line is a program name followed by its arguments. The shell reports
the exit status that the program returned. The built-in programs are:

| Command | What it does |
| --- | --- |
| `list` | lists files, marking executables with `[x]` |
| `touch NAME` | creates an empty file |
| `del NAME` | deletes a file |
| `read [-x] NAME [SECTOR]` | prints a file, or one sector of it, as text or hex |
| `copy D:NAME D:NAME` | copies a file, possibly to another drive |
| `color BG FG` | sets the terminal color (0–15 each) |
| `cls` | clears the screen |
| `drive N` | selects the working drive |
| `drives` | shows which of the four drive slots are present |
| `format` | formats the working drive |
| `drawline X1 Y1 X2 Y2` | draws a block-graphics line |
| `chain $cmd$cmd...` | runs several commands |

In a `chain` command, the forms below have special meaning:

* `"text"` prints the text.
* `~status:n~` jumps to command `n` when the last status matches.
* `@n@` jumps to command `n`.

From Python, use `zeroshell.kernel.Kernel`:

* `boot`, `register`, `execute`, `prompt` and `run_line`
* `zeroshell.programs.install(kernel)` registers the built-in programs.
  It also places a stub file for each one on the system drive.

## Other pieces

* `zeroshell.textutil`: `splice`, `atoi`, `htoi` and `strcmp`, the
  helpers that pick command arguments apart.
* `zeroshell.keyboard`: `printable_char`, `hold_timing`, `LineEditor`
  and `read_line`, which turn scan codes into a line of text.
* `zeroshell.screen.Screen`: the in-memory terminal.
* `zeroshell.graphics`: `draw_pixel`, `straight_line` and `draw_line`.
* `zeroshell.memory.BumpAllocator`: the bump allocator.
* `zeroshell.editors`: `TextView`, `TextEditor` and `HexEditor`. These
  hold a buffer, apply key codes, render to a `Screen` and save to a
  `FileSystem`.

## What it does not do

* The shell does not read a live keyboard. Commands come from standard
  input as whole lines.
* The editors are not reachable as shell commands. There is no `edit`,
  `view` or `hexedit` program; use the editor classes from Python.
* No machine code is loaded or run. Program files on disk are only
  markers that start with the ELF magic. Running one calls the Python
  function registered under its name.
* The shell output is a text dump of the screen. There is no colored
  display.