"""
Tarball implementation of the Installer port.
"""

import fnmatch
import logging
import os
import shutil
import stat
import tarfile
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from ..application.domain import InstalledVersion, Installer
from ..application.exceptions import (
    CorruptArchiveError,
    FilesystemError,
    InstallIncompleteError,
)

from .elf import is_elf_executable

_EXECUTABLE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def _regular_files(root: Path) -> List[Path]:
    """All regular files below ``root``, symlinks excluded, in stable order."""
    return sorted(
        p for p in root.rglob("*") if p.is_file() and not p.is_symlink()
    )


def _matches(path: Path, patterns: Iterable[str]) -> bool:
    return any(fnmatch.fnmatchcase(path.name, pattern) for pattern in patterns)


def _is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


class TarballInstaller(Installer):
    """
    An adapter that unpacks a release tarball into a per-version directory
    with ``bin``, ``lib`` and ``include`` subdirectories.
    """

    def __init__(
        self,
        executable_name: str,
        library_patterns: Sequence[str],
        header_patterns: Sequence[str],
        fallback_library_patterns: Sequence[str] = ("*.so*",),
    ):
        """Initializes the installer."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.executable_name = executable_name
        self.library_patterns = tuple(library_patterns)
        self.header_patterns = tuple(header_patterns)
        self.fallback_library_patterns = tuple(fallback_library_patterns)

    def _binary_path(self, install_dir: Path) -> Path:
        return install_dir / "bin" / self.executable_name

    def _describe(self, install_dir: Path) -> InstalledVersion:
        def listing(directory: Path):
            if not directory.is_dir():
                return frozenset()
            return frozenset(p for p in directory.iterdir() if p.is_file())

        return InstalledVersion(
            version=install_dir.name,
            install_dir=install_dir,
            binary_path=self._binary_path(install_dir),
            library_paths=listing(install_dir / "lib"),
            header_paths=listing(install_dir / "include"),
        )

    def find_installed(self, install_dir: Path) -> Optional[InstalledVersion]:
        """Returns the install in ``install_dir`` if its binary is usable."""
        if _is_executable(self._binary_path(install_dir)):
            return self._describe(install_dir)
        return None

    def _extract(self, archive_path: Path, destination: Path):
        try:
            with tarfile.open(archive_path, "r:gz") as archive:
                archive.extractall(destination, filter="data")
        except (tarfile.TarError, OSError, EOFError) as e:
            raise CorruptArchiveError(
                archive_path, f"extraction failed: {e}"
            ) from e

        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug("Extracted archive contents:")
            for path in _regular_files(destination):
                self.logger.debug(f"  {path.relative_to(destination)}")

    def _copy_all(self, files: Iterable[Path], target_dir: Path):
        for path in files:
            shutil.copy2(path, target_dir / path.name)

    def _place_binary(self, source: Path, install_dir: Path):
        binary = self._binary_path(install_dir)
        shutil.copy2(source, binary)
        binary.chmod(binary.stat().st_mode | _EXECUTABLE_BITS)

    def _install_expected_layout(
        self, files: List[Path], install_dir: Path
    ) -> bool:
        """Primary strategy: files named the way a release normally is."""
        candidates = [p for p in files if p.name == self.executable_name]
        if not candidates:
            return False

        self._place_binary(candidates[0], install_dir)
        self._copy_all(
            (p for p in files if _matches(p, self.library_patterns)),
            install_dir / "lib",
        )
        self._copy_all(
            (p for p in files if _matches(p, self.header_patterns)),
            install_dir / "include",
        )
        return True

    def _install_by_heuristics(self, files: List[Path], install_dir: Path):
        """Fallback strategy: adopt the first ELF executable in the tree."""
        self.logger.info(
            f"Searching for {self.executable_name} executable in "
            f"subdirectories..."
        )
        for candidate in (p for p in files if _is_executable(p)):
            if is_elf_executable(candidate):
                self.logger.info(
                    f"Found potential {self.executable_name} executable: "
                    f"{candidate.name}"
                )
                self._place_binary(candidate, install_dir)
                break

        self._copy_all(
            (p for p in files if _matches(p, self.fallback_library_patterns)),
            install_dir / "lib",
        )
        self._copy_all(
            (p for p in files if _matches(p, self.header_patterns)),
            install_dir / "include",
        )

    def install(self, cache_path: Path, install_dir: Path) -> InstalledVersion:
        """
        Extract ``cache_path`` and lay out ``install_dir``.

        This public method fulfills the Installer port contract. Extraction
        happens in a scratch directory that is removed whatever the outcome,
        so a half-extracted tree is never mistaken for an install.

        Args:
            cache_path: A validated tar.gz archive.
            install_dir: The per-version install directory.

        Returns:
            An InstalledVersion describing the new install.

        Raises:
            CorruptArchiveError: If the archive cannot be extracted.
            InstallIncompleteError: If no executable could be installed.
            FilesystemError: If the install directory cannot be written.
        """

        self.logger.info(f"Installing {install_dir.name} to {install_dir}")

        try:
            for sub in ("bin", "lib", "include"):
                (install_dir / sub).mkdir(parents=True, exist_ok=True)

            with tempfile.TemporaryDirectory(prefix="dxc-extract-") as scratch:
                scratch_dir = Path(scratch)
                self._extract(cache_path, scratch_dir)
                files = _regular_files(scratch_dir)
                if not self._install_expected_layout(files, install_dir):
                    self._install_by_heuristics(files, install_dir)
        except OSError as e:
            raise FilesystemError(install_dir, str(e)) from e

        installed = self.find_installed(install_dir)
        if installed is None:
            raise InstallIncompleteError(install_dir, self.executable_name)

        self.logger.info(
            f"Installed {installed.version}: {len(installed.library_paths)} "
            f"libraries, {len(installed.header_paths)} headers"
        )
        return installed
