[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zeroshell"
version = "0.1.0"
description = "A simulated hobby-OS shell with the ESFS filesystem on raw disk images, plus an image writer"
requires-python = ">=3.10"
dependencies = []
keywords = ["filesystem", "esfs", "disk-image", "shell", "vga", "bump-allocator"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Filesystems",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
esfs-raw-write = "zeroshell.rawwrite:main"
zeroshell = "zeroshell.programs:main"

[tool.hatch.build.targets.wheel]
packages = ["zeroshell"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"
