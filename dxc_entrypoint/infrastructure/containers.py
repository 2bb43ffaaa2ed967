"""
Dependency Injection container for the dxc_entrypoint component.

This container uses the `dependency-injector` library to wire together all
the components of the application, such as services and infrastructure
adapters, based on the application's configuration.
"""

from pathlib import Path

from dependency_injector import containers, providers
import httpx

from ..application.domain import *
from ..application.service import EntrypointService, InstallPipeline
from ..settings import load_settings

from .catalog_models import load_catalog
from .downloader import HttpArchiveFetcher
from .installer import TarballInstaller
from .linker import SymlinkLinker
from .validator import GzipArchiveValidator


class Container(containers.DeclarativeContainer):
    """DI container for wiring the application components."""

    config = providers.Singleton(load_settings)

    http_client = providers.Singleton(
        httpx.Client,
        follow_redirects=True,
        timeout=config.provided.http.timeout,
    )

    layout = providers.Singleton(
        InstallLayout,
        base_dir=providers.Callable(Path, config.provided.base_dir),
        executable_name=config.provided.tool.executable,
    )

    catalog = providers.Singleton(
        load_catalog,
        entries=config.provided.catalog,
        release=config.provided.release,
    )

    validator: providers.Factory[ArchiveValidator] = providers.Factory(
        GzipArchiveValidator,
        chunk_size=config.provided.integrity.chunk_size,
    )

    fetcher: providers.Factory[ArchiveFetcher] = providers.Factory(
        HttpArchiveFetcher,
        client=http_client,
        validator=validator,
        chunk_size=config.provided.download.chunk_size,
        progress=config.provided.download.progress,
    )

    installer: providers.Factory[Installer] = providers.Factory(
        TarballInstaller,
        executable_name=config.provided.tool.executable,
        library_patterns=config.provided.tool.library_patterns,
        header_patterns=config.provided.tool.header_patterns,
        fallback_library_patterns=(
            config.provided.tool.fallback_library_patterns
        ),
    )

    linker: providers.Factory[Linker] = providers.Factory(
        SymlinkLinker,
        layout=layout,
    )

    pipeline = providers.Factory(
        InstallPipeline,
        fetcher=fetcher,
        validator=validator,
        installer=installer,
        linker=linker,
        layout=layout,
    )

    entrypoint_service = providers.Factory(
        EntrypointService,
        catalog=catalog,
        pipeline=pipeline,
        layout=layout,
        default_version=config.provided.version,
    )
