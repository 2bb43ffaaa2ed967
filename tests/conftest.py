"""Shared fixtures: archives built on the fly and an in-memory release host."""

import io
import struct
import tarfile
from pathlib import Path
from typing import Dict, Tuple, Union

import httpx
import pytest

from dxc_entrypoint.application.domain import InstallLayout
from dxc_entrypoint.infrastructure.catalog_models import load_catalog
from dxc_entrypoint.settings import load_settings

Member = Union[bytes, Tuple[bytes, int]]


def elf_header(e_type: int = 2, interpreter: bool = False) -> bytes:
    """A little-endian ELF64 image, optionally with a PT_INTERP header."""
    phnum = 1 if interpreter else 0
    header = b"\x7fELF" + bytes([2, 1, 1]) + bytes(9)
    header += struct.pack(
        "<HHIQQQIHHHHHH",
        e_type, 62, 1, 0x400000,
        64 if interpreter else 0, 0, 0,
        64, 56, phnum, 64, 0, 0,
    )
    if interpreter:
        header += struct.pack("<IIQQQQQQ", 3, 4, 0, 0, 0, 0, 0, 1)
    return header + b"\x00" * 32


def build_tarball(path: Path, members: Dict[str, Member]) -> Path:
    """Writes a tar.gz whose members are ``name -> bytes`` or ``(bytes, mode)``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(path, "w:gz") as archive:
        for name, member in members.items():
            data, mode = member if isinstance(member, tuple) else (member, 0o644)
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = mode
            archive.addfile(info, io.BytesIO(data))
    return path


def release_members() -> Dict[str, Member]:
    """The layout of a regular Linux release archive."""
    return {
        "bin/dxc": (elf_header(), 0o755),
        "lib/libdxcompiler.so": b"compiler",
        "lib/libdxil.so": b"dxil",
        "include/dxc/dxcapi.h": b"// dxcapi",
        "include/dxc/WinAdapter.h": b"// adapter",
    }


class ReleaseHost:
    """An httpx transport serving archives by URL and counting requests."""

    def __init__(self):
        self.assets: Dict[str, bytes] = {}
        self.requests = []

    def serve(self, url: str, body: bytes):
        self.assets[url] = body

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(str(request.url))
        body = self.assets.get(str(request.url))
        if body is None:
            return httpx.Response(404, text="<html>Not Found</html>")
        return httpx.Response(200, content=body)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def settings():
    return load_settings()


@pytest.fixture
def catalog(settings):
    return load_catalog(settings.catalog, settings.release)


@pytest.fixture
def layout(tmp_path):
    return InstallLayout(base_dir=tmp_path / "dxc", executable_name="dxc")


@pytest.fixture
def release_host():
    return ReleaseHost()


@pytest.fixture
def release_archive(tmp_path):
    return build_tarball(tmp_path / "src" / "release.tar.gz", release_members())
