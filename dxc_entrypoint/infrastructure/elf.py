"""Minimal ELF header inspection for spotting executables."""

import struct
from pathlib import Path
from typing import BinaryIO

ELF_MAGIC = b"\x7fELF"

_ELFCLASS64 = 2
_ELFDATA2LSB = 1
_ET_EXEC = 2
_ET_DYN = 3
_PT_INTERP = 3


def _has_interpreter(fh: BinaryIO, header: bytes, endian: str) -> bool:
    """True when a program header requests a dynamic loader (PIE binaries)."""
    if header[4] == _ELFCLASS64:
        (phoff,) = struct.unpack_from(endian + "Q", header, 32)
        phentsize, phnum = struct.unpack_from(endian + "HH", header, 54)
    else:
        (phoff,) = struct.unpack_from(endian + "I", header, 28)
        phentsize, phnum = struct.unpack_from(endian + "HH", header, 42)

    for index in range(phnum):
        fh.seek(phoff + index * phentsize)
        raw = fh.read(4)
        if len(raw) < 4:
            return False
        (p_type,) = struct.unpack(endian + "I", raw)
        if p_type == _PT_INTERP:
            return True
    return False


def is_elf_executable(path: Path) -> bool:
    """
    Reports whether ``path`` is an ELF executable.

    Matches what ``file`` describes as an executable: ET_EXEC images and
    position-independent executables (ET_DYN with an interpreter). Shared
    libraries are ET_DYN without one and are rejected.
    """
    try:
        with open(path, "rb") as fh:
            header = fh.read(64)
            if len(header) < 52 or header[:4] != ELF_MAGIC:
                return False
            endian = "<" if header[5] == _ELFDATA2LSB else ">"
            (e_type,) = struct.unpack_from(endian + "H", header, 16)
            if e_type == _ET_EXEC:
                return True
            if e_type != _ET_DYN:
                return False
            return _has_interpreter(fh, header, endian)
    except (OSError, struct.error):
        return False
