"""
The version catalog: exact-match lookup of release metadata.

The catalog is pure data. Adding a release means adding a row to the
settings file, not changing code.
"""

import dataclasses
from types import MappingProxyType
from typing import Iterable, Mapping, Tuple

from .domain import ReleaseAsset, VersionEntry
from .exceptions import UnknownVersionError


@dataclasses.dataclass(frozen=True)
class FixedArchive:
    """An archive name used verbatim for versions ending with ``marker``."""

    marker: str
    archive: str


@dataclasses.dataclass(frozen=True)
class ReleaseNaming:
    """How a catalog entry maps onto a release tag and archive filename."""

    host: str
    tag_template: str = "v{version}"
    archive_template: str = "linux_dxc_{date_code}.x86_64.tar.gz"
    fixed_archives: Tuple[FixedArchive, ...] = ()

    def tag(self, entry: VersionEntry) -> str:
        return self.tag_template.format(version=entry.version)

    def archive_name(self, entry: VersionEntry) -> str:
        # First matching marker wins, so more specific markers come first.
        for rule in self.fixed_archives:
            if entry.version.endswith(rule.marker):
                return rule.archive
        return self.archive_template.format(
            version=entry.version, date_code=entry.date_code
        )

    def url(self, tag: str, archive_name: str) -> str:
        return f"{self.host.rstrip('/')}/{tag}/{archive_name}"


class VersionCatalog:
    """An immutable mapping from version identifier to release metadata."""

    def __init__(self, entries: Iterable[VersionEntry], naming: ReleaseNaming):
        self._entries: Mapping[str, VersionEntry] = MappingProxyType(
            {entry.version: entry for entry in entries}
        )
        self.naming = naming

    def __contains__(self, version: str) -> bool:
        return version in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def versions(self) -> Tuple[str, ...]:
        """Known versions, in catalog order."""
        return tuple(self._entries)

    def entry(self, version: str) -> VersionEntry:
        try:
            return self._entries[version]
        except KeyError:
            raise UnknownVersionError(version, self.versions()) from None

    def resolve(self, version: str) -> str:
        """
        Looks up the release date code of ``version``.

        Raises:
            UnknownVersionError: If the version is not in the catalog.
        """
        return self.entry(version).date_code

    def asset(self, version: str) -> ReleaseAsset:
        """Builds the download coordinates for ``version``."""
        entry = self.entry(version)
        tag = self.naming.tag(entry)
        archive_name = self.naming.archive_name(entry)
        return ReleaseAsset(
            version=entry.version,
            tag=tag,
            archive_name=archive_name,
            url=self.naming.url(tag, archive_name),
        )
