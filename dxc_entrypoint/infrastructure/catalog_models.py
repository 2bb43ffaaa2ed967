"""
Pydantic models for validating the catalog and release sections of the
settings file.

These models serve as a strict contract for the configured data, ensuring
that a malformed row is caught at the infrastructure layer before the
application core builds download URLs from it.
"""

from collections import Counter
from typing import Any, Iterable, List, Mapping

from pydantic import BaseModel, Field, ValidationError

from ..application.catalog import FixedArchive, ReleaseNaming, VersionCatalog
from ..application.domain import VersionEntry
from ..application.exceptions import ConfigurationError


class CatalogEntryModel(BaseModel):
    """A single ``[[catalog]]`` row."""

    version: str = Field(min_length=1, pattern=r"^[0-9][0-9A-Za-z.-]*$")
    date_code: str = Field(pattern=r"^\d{4}_\d{2}_\d{2}$")


class FixedArchiveModel(BaseModel):
    """A ``[[release.fixed_archives]]`` naming rule."""

    marker: str = Field(min_length=1)
    archive: str = Field(min_length=1)


class ReleaseModel(BaseModel):
    """The ``[release]`` table."""

    host: str = Field(min_length=1)
    tag_template: str = "v{version}"
    archive_template: str = "linux_dxc_{date_code}.x86_64.tar.gz"
    fixed_archives: List[FixedArchiveModel] = []


def _as_plain(value: Any) -> Any:
    """Unwraps Dynaconf boxes into plain dicts and lists."""
    if isinstance(value, Mapping):
        return {str(k).lower(): _as_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_as_plain(item) for item in value]
    return value


def _check_unique(catalog: VersionCatalog, rows: List[CatalogEntryModel]):
    duplicate_versions = [
        v for v, n in Counter(row.version for row in rows).items() if n > 1
    ]
    if duplicate_versions:
        raise ConfigurationError(
            f"Duplicate catalog versions: {', '.join(duplicate_versions)}"
        )

    # The cache is keyed by archive filename, so two versions sharing one
    # would silently share a cache entry.
    names = Counter(catalog.asset(v).archive_name for v in catalog.versions())
    shared = [name for name, n in names.items() if n > 1]
    if shared:
        raise ConfigurationError(
            f"Catalog versions share archive filenames: {', '.join(shared)}"
        )


def load_catalog(entries: Iterable[Any], release: Mapping) -> VersionCatalog:
    """
    Validates raw settings data and builds the domain catalog.

    Args:
        entries: The ``catalog`` array of tables from the settings file.
        release: The ``release`` table from the settings file.

    Returns:
        An immutable VersionCatalog.

    Raises:
        ConfigurationError: If any row or naming rule is malformed, or the
                            catalog contains duplicates.
    """
    try:
        rows = [
            CatalogEntryModel.model_validate(_as_plain(row))
            for row in entries or []
        ]
        release_model = ReleaseModel.model_validate(_as_plain(release))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid catalog configuration: {e}") from e

    if not rows:
        raise ConfigurationError("The version catalog is empty")

    naming = ReleaseNaming(
        host=release_model.host,
        tag_template=release_model.tag_template,
        archive_template=release_model.archive_template,
        fixed_archives=tuple(
            FixedArchive(marker=rule.marker, archive=rule.archive)
            for rule in release_model.fixed_archives
        ),
    )
    catalog = VersionCatalog(
        (VersionEntry(row.version, row.date_code) for row in rows), naming
    )
    _check_unique(catalog, rows)
    return catalog
