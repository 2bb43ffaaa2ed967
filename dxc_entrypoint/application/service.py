"""
The core application service and pipeline, containing pure business logic.

This module defines the main orchestrator (EntrypointService), which turns a
command line into a terminal action, and the pipeline (InstallPipeline) that
makes one catalog version installed and active.
"""

import logging
import os
import re
from typing import Sequence

from .catalog import VersionCatalog
from .domain import *
from .exceptions import MissingExecutableError

logger = logging.getLogger(__name__)

VERSION_FLAG = re.compile(r"^--v=(.+)$")
VERSION_FLAG_PREFIX = "--v="


class InstallPipeline:
    """Encapsulates fetch, validate, install and publish for one version."""

    def __init__(
        self,
        fetcher: ArchiveFetcher,
        validator: ArchiveValidator,
        installer: Installer,
        linker: Linker,
        layout: InstallLayout,
    ):
        """Initializes the pipeline with necessary dependencies (ports)."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.fetcher = fetcher
        self.validator = validator
        self.installer = installer
        self.linker = linker
        self.layout = layout

    def _install(
        self, asset: ReleaseAsset, install_dir: Path
    ) -> InstalledVersion:
        cache = self.layout.cache_entry(asset)

        # Step 1: Fetch (URL -> cached archive)
        archive_path = self.fetcher.fetch(asset.url, cache.cache_path)

        # Step 2: Validate the cache copy, which may predate this run
        self.validator.validate(archive_path)

        # Step 3: Install (archive -> InstalledVersion)
        return self.installer.install(archive_path, install_dir)

    def run(self, asset: ReleaseAsset) -> InstalledVersion:
        """Executes the sequential steps for making one version active.

        Args:
            asset: The release asset of the version to activate.

        Returns:
            The installed version, now published as the active one.
        """

        install_dir = self.layout.install_dir(asset.version)
        installed = self.installer.find_installed(install_dir)

        if installed is not None:
            self.logger.info(
                f"DXC version {asset.version} is already installed"
            )
        else:
            installed = self._install(asset, install_dir)

        # Step 4: Publish (InstalledVersion -> active links)
        self.linker.publish(installed)

        active = self.layout.active_binary
        if not (active.is_file() and os.access(active, os.X_OK)):
            raise MissingExecutableError(active)

        return installed


def parse_arguments(argv: Sequence[str], default_version: str) -> Invocation:
    """
    Split the version selector out of the command line.

    Every ``--v=<version>`` token is consumed, the last one winning. All
    other tokens pass through in their original order.
    """
    version = default_version
    args = []
    for arg in argv:
        match = VERSION_FLAG.match(arg)
        if match:
            version = match.group(1)
        else:
            args.append(arg)
    return Invocation(version=version, args=tuple(args))


class EntrypointService:
    """Orchestrates version resolution, installation and the hand-off."""

    def __init__(
        self,
        catalog: VersionCatalog,
        pipeline: InstallPipeline,
        layout: InstallLayout,
        default_version: str,
    ):
        """Initializes the service."""
        self.catalog = catalog
        self.pipeline = pipeline
        self.layout = layout
        self.default_version = str(default_version)

    def dispatch(self, argv: Sequence[str]) -> TerminalAction:
        """
        Install the requested version and decide what the process does next.

        The version is installed even when only usage is shown, so that
        running with just ``--v=<version>`` pre-installs it.

        Args:
            argv: The command line, without the program name.

        Returns:
            ShowUsage when no tool arguments were given, else ExecuteTool.

        Raises:
            EntrypointError: If any step of resolution or installation fails.
        """

        invocation = parse_arguments(argv, self.default_version)
        asset = self.catalog.asset(invocation.version)

        logger.info(f"Using DXC version {asset.version}")
        self.pipeline.run(asset)

        args = invocation.args
        if not args or args[0].startswith(VERSION_FLAG_PREFIX):
            return ShowUsage(
                version=invocation.version, versions=self.catalog.versions()
            )

        return ExecuteTool(path=self.layout.active_binary, args=args)
