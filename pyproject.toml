[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zipcraft"
version = "2.6.1"
description = "Building blocks for ZIP archives: CP437 names, CRC32 checking, extra fields, compression methods and WinZip AES encryption."
requires-python = ">=3.10"
keywords = ["zip", "archive", "compression", "aes", "crc32", "cp437"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Archiving :: Compression",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "cryptography",
    "zstandard",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["zipcraft"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
