"""
Core business exceptions for the entrypoint application.

This module defines a hierarchy of custom exceptions to allow for granular
error handling and clear separation of failure domains. Every failure is
terminal for the invocation; nothing here is retried.
"""

from pathlib import Path
from typing import Iterable


class EntrypointError(Exception):
    """Base exception for all component-specific errors."""
    pass


# --- Configuration Errors ---

class ConfigurationError(EntrypointError):
    """Raised for errors related to application configuration."""
    pass


# --- Infrastructure Errors ---

class InfrastructureError(EntrypointError):
    """Base class for errors related to external systems (network, etc.)."""
    pass


class DownloadError(InfrastructureError):
    """Raised when an archive cannot be downloaded from the release host."""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        message = f"Failed to download {url}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class FilesystemError(InfrastructureError):
    """Raised when the cache or install directories cannot be written."""

    def __init__(self, path: Path, reason: str = ""):
        self.path = path
        message = f"Filesystem operation on {path} failed"
        if reason:
            message += f": {reason}"
        super().__init__(message)


# --- Domain/Business Logic Errors ---

class DomainError(EntrypointError):
    """Base class for errors related to business logic failures."""
    pass


class UnknownVersionError(DomainError):
    """Raised when a version identifier has no catalog entry."""

    def __init__(self, version: str, available: Iterable[str]):
        self.version = version
        self.available = tuple(available)
        listing = "\n".join(f"  {v}" for v in self.available)
        super().__init__(
            f"Unknown DXC version {version}\nAvailable versions:\n{listing}"
        )


class CorruptArchiveError(DomainError):
    """Raised when a staged or cached archive fails validation."""

    def __init__(self, path: Path, reason: str = ""):
        self.path = path
        message = f"{path} is not a valid tar.gz archive"
        if reason:
            message += f" ({reason})"
        super().__init__(
            f"{message}. Re-run to download it again."
        )


class InstallIncompleteError(DomainError):
    """Raised when extraction finished without producing the executable."""

    def __init__(self, install_dir: Path, executable: str):
        self.install_dir = install_dir
        super().__init__(
            f"{executable} executable not found in {install_dir} after "
            f"installation. Archive structure may be different than expected."
        )


class MissingExecutableError(DomainError):
    """Raised when the active executable is unusable after publishing."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(
            f"Active executable {path} is missing or not executable after "
            f"installation"
        )
