"""Symlink implementation of the Linker port."""

import logging
import os
from pathlib import Path
from typing import Iterable

from ..application.domain import InstallLayout, InstalledVersion, Linker
from ..application.exceptions import FilesystemError


def _force_symlink(target: Path, link: Path):
    """``ln -sf``: replace whatever sits at ``link`` with a new symlink."""
    if link.is_symlink() or link.is_file():
        link.unlink()
    link.symlink_to(target)


class SymlinkLinker(Linker):
    """
    Publishes one installed version into the shared bin, lib and include
    directories of the layout.
    """

    def __init__(self, layout: InstallLayout):
        """Initializes the linker."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.layout = layout

    def _belongs_to_other_version(self, link: Path, install_dir: Path) -> bool:
        target = Path(os.readlink(link))
        if not target.is_absolute():
            target = link.parent / target
        base = self.layout.base_dir
        return (
            target.parent.parent.parent == base
            and target.parent.parent != install_dir
        )

    def _prune_stale(self, directory: Path, install_dir: Path):
        """Drop links left behind by a previously active version."""
        for entry in directory.iterdir():
            if entry.is_symlink() and self._belongs_to_other_version(
                entry, install_dir
            ):
                self.logger.debug(f"Removing stale link {entry}")
                entry.unlink()

    def _link_each(self, sources: Iterable[Path], directory: Path) -> int:
        count = 0
        for source in sorted(sources):
            _force_symlink(source, directory / source.name)
            count += 1
        return count

    def _publish_links(self, installed: InstalledVersion):
        layout = self.layout
        for directory in (layout.bin_dir, layout.lib_dir, layout.include_dir):
            directory.mkdir(parents=True, exist_ok=True)

        _force_symlink(installed.binary_path, layout.active_binary)

        for directory, sources in (
            (layout.lib_dir, installed.library_paths),
            (layout.include_dir, installed.header_paths),
        ):
            self._prune_stale(directory, installed.install_dir)
            if sources:
                linked = self._link_each(sources, directory)
                self.logger.debug(f"Linked {linked} files into {directory}")

    def publish(self, installed: InstalledVersion):
        """
        Make ``installed`` the active version.

        Safe to re-run: every link is force-overwritten, so the end state
        only depends on the version being published. A version without
        libraries or headers gets no links of that kind.

        Args:
            installed: The version to activate.

        Raises:
            FilesystemError: If the shared directories cannot be written.
        """

        try:
            self._publish_links(installed)
        except OSError as e:
            raise FilesystemError(self.layout.base_dir, str(e)) from e

        self.logger.info(f"Activated version {installed.version}")
