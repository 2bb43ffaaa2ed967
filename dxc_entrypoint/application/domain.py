"""
This module defines the core domain models for the application.

These classes represent the pure, technology-agnostic entities and data
structures that the application's business logic operates on, together with
the ports the infrastructure layer implements.
"""

import dataclasses
from pathlib import Path

from abc import ABC, abstractmethod
from typing import FrozenSet, Optional, Tuple, Union


# --- Domain Models ---

@dataclasses.dataclass(frozen=True)
class VersionEntry:
    """A catalog row: a release version and the date code of its archive."""

    version: str
    date_code: str


@dataclasses.dataclass(frozen=True)
class ReleaseAsset:
    """The downloadable archive that belongs to one catalog version."""

    version: str
    tag: str
    archive_name: str
    url: str


@dataclasses.dataclass(frozen=True)
class CacheEntry:
    """A downloaded archive on disk, keyed by its remote filename."""

    archive_name: str
    cache_path: Path


@dataclasses.dataclass(frozen=True)
class InstalledVersion:
    """
    A domain model representing one version's install directory,
    defined by its executable, libraries and headers.
    """

    version: str
    install_dir: Path
    binary_path: Path
    library_paths: FrozenSet[Path] = frozenset()
    header_paths: FrozenSet[Path] = frozenset()


@dataclasses.dataclass(frozen=True)
class InstallLayout:
    """
    Filesystem layout shared by every component.

    Everything lives under ``base_dir``: per-version installs in
    ``<base>/<version>``, archives in ``<base>/cache`` and the links of the
    active version in ``<base>/{bin,lib,include}``.
    """

    base_dir: Path
    executable_name: str = "dxc"

    def __post_init__(self):
        # Symlink targets are stored verbatim, so they must be absolute.
        object.__setattr__(self, "base_dir", Path(self.base_dir).absolute())

    @property
    def cache_dir(self) -> Path:
        return self.base_dir / "cache"

    @property
    def bin_dir(self) -> Path:
        return self.base_dir / "bin"

    @property
    def lib_dir(self) -> Path:
        return self.base_dir / "lib"

    @property
    def include_dir(self) -> Path:
        return self.base_dir / "include"

    @property
    def active_binary(self) -> Path:
        return self.bin_dir / self.executable_name

    def install_dir(self, version: str) -> Path:
        return self.base_dir / version

    def cache_entry(self, asset: ReleaseAsset) -> CacheEntry:
        return CacheEntry(
            archive_name=asset.archive_name,
            cache_path=self.cache_dir / asset.archive_name,
        )


@dataclasses.dataclass(frozen=True)
class Invocation:
    """The parsed command line: selected version and pass-through args."""

    version: str
    args: Tuple[str, ...]


# --- Terminal Actions ---

@dataclasses.dataclass(frozen=True)
class ShowUsage:
    """Print the usage summary and exit successfully."""

    version: str
    versions: Tuple[str, ...]


@dataclasses.dataclass(frozen=True)
class ExecuteTool:
    """Replace the current process with the installed tool."""

    path: Path
    args: Tuple[str, ...]


TerminalAction = Union[ShowUsage, ExecuteTool]


# --- Ports (Interfaces) ---

class ArchiveValidator(ABC):
    """A port for checking the integrity of an archive on disk."""

    @abstractmethod
    def validate(self, path: Path):
        """
        Verifies the archive is well formed.
        Removes the file and raises CorruptArchiveError otherwise.
        """
        pass


class ArchiveFetcher(ABC):
    """A port for any archive downloader."""

    @abstractmethod
    def fetch(self, url: str, cache_path: Path) -> Path:
        """Ensures the archive at ``url`` is present at ``cache_path``."""
        pass


class Installer(ABC):
    """A port for turning an archive into an install directory."""

    @abstractmethod
    def find_installed(self, install_dir: Path) -> Optional[InstalledVersion]:
        """Returns the existing install in ``install_dir``, if complete."""
        pass

    @abstractmethod
    def install(self, cache_path: Path, install_dir: Path) -> InstalledVersion:
        """Extracts an archive and lays out bin, lib and include."""
        pass


class Linker(ABC):
    """A port for publishing a version as the active one."""

    @abstractmethod
    def publish(self, installed: InstalledVersion):
        """Points the shared directories at ``installed``."""
        pass
