"""Tests for publishing an installed version into the active directories."""

import os
from pathlib import Path

import pytest

from dxc_entrypoint.application.domain import InstallLayout, InstalledVersion
from dxc_entrypoint.application.exceptions import FilesystemError
from dxc_entrypoint.infrastructure.linker import SymlinkLinker


def fake_install(layout, version, libs=(), headers=()):
    install_dir = layout.install_dir(version)
    for sub in ("bin", "lib", "include"):
        (install_dir / sub).mkdir(parents=True)
    binary = install_dir / "bin" / "dxc"
    binary.write_text("#!/bin/sh\n")
    binary.chmod(0o755)
    for name in libs:
        (install_dir / "lib" / name).write_text(name)
    for name in headers:
        (install_dir / "include" / name).write_text(name)
    return InstalledVersion(
        version=version,
        install_dir=install_dir,
        binary_path=binary,
        library_paths=frozenset(install_dir / "lib" / n for n in libs),
        header_paths=frozenset(install_dir / "include" / n for n in headers),
    )


def snapshot(layout):
    state = {}
    for directory in (layout.bin_dir, layout.lib_dir, layout.include_dir):
        for entry in sorted(directory.iterdir()):
            state[str(entry.relative_to(layout.base_dir))] = os.readlink(entry)
    return state


@pytest.fixture
def linker(layout):
    return SymlinkLinker(layout)


def test_publish_links_binary_libraries_and_headers(layout, linker):
    installed = fake_install(
        layout, "1.8.2502", libs=["libdxil.so"], headers=["dxcapi.h"]
    )

    linker.publish(installed)

    assert snapshot(layout) == {
        "bin/dxc": str(installed.binary_path),
        "lib/libdxil.so": str(installed.install_dir / "lib" / "libdxil.so"),
        "include/dxcapi.h": str(installed.install_dir / "include" / "dxcapi.h"),
    }
    assert os.access(layout.active_binary, os.X_OK)


def test_publish_without_libraries_creates_no_library_links(layout, linker):
    installed = fake_install(layout, "1.8.2502")

    linker.publish(installed)

    assert list(layout.lib_dir.iterdir()) == []
    assert list(layout.include_dir.iterdir()) == []
    assert layout.active_binary.is_symlink()


def test_publish_is_idempotent(layout, linker):
    installed = fake_install(
        layout, "1.8.2502", libs=["libdxcompiler.so"], headers=["d3d12shader.h"]
    )

    linker.publish(installed)
    first = snapshot(layout)
    linker.publish(installed)

    assert snapshot(layout) == first


def test_switching_versions_replaces_links(layout, linker):
    old = fake_install(
        layout, "1.7.2308", libs=["libdxcompiler.so", "libold.so"]
    )
    new = fake_install(layout, "1.8.2502", libs=["libdxcompiler.so"])

    linker.publish(old)
    linker.publish(new)

    assert snapshot(layout) == {
        "bin/dxc": str(new.binary_path),
        "lib/libdxcompiler.so": str(new.install_dir / "lib" / "libdxcompiler.so"),
    }


def test_regular_files_in_shared_directories_are_left_alone(layout, linker):
    installed = fake_install(layout, "1.8.2502")
    layout.lib_dir.mkdir(parents=True)
    (layout.lib_dir / "libsystem.so").write_text("mounted by the user")

    linker.publish(installed)

    assert (layout.lib_dir / "libsystem.so").read_text() == "mounted by the user"


def test_relative_base_dir_produces_working_links(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    layout = InstallLayout(base_dir=Path("dxc"), executable_name="dxc")
    installed = fake_install(layout, "1.8.2502", libs=["libdxil.so"])

    SymlinkLinker(layout).publish(installed)

    assert os.path.isabs(os.readlink(layout.active_binary))
    assert os.access(layout.active_binary, os.X_OK)
    assert (layout.lib_dir / "libdxil.so").read_text() == "libdxil.so"


def test_unwritable_shared_directory_raises_filesystem_error(layout, linker):
    installed = fake_install(layout, "1.8.2502", libs=["libdxil.so"])
    layout.lib_dir.write_text("not a directory")

    with pytest.raises(FilesystemError) as excinfo:
        linker.publish(installed)

    assert excinfo.value.path == layout.base_dir
