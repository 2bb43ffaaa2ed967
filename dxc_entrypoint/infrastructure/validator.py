"""Gzip implementation of the ArchiveValidator port."""

import gzip
import logging
import zlib
from pathlib import Path

from ..application.domain import ArchiveValidator
from ..application.exceptions import CorruptArchiveError


class GzipArchiveValidator(ArchiveValidator):
    """
    An adapter that checks a file decompresses cleanly as gzip.

    The whole stream is decompressed and discarded, the equivalent of
    ``gzip -t``. A header peek would accept truncated downloads.
    """

    def __init__(self, chunk_size: int = 1 << 20):
        """Initializes the validator."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.chunk_size = chunk_size

    def _decompress_fully(self, path: Path):
        with gzip.open(path, "rb") as stream:
            while stream.read(self.chunk_size):
                pass

    def validate(self, path: Path):
        """
        Guarantee the file at ``path`` is a well-formed gzip archive.

        Args:
            path: The archive to check.

        Raises:
            CorruptArchiveError: If the file is missing, is not gzip, or is
                                 truncated. The file is removed first.
        """

        if not path.is_file():
            raise CorruptArchiveError(path, "file does not exist")

        try:
            self._decompress_fully(path)
        except (OSError, EOFError, zlib.error) as e:
            self.logger.error(f"{path.name} failed gzip integrity check: {e}")
            path.unlink(missing_ok=True)
            raise CorruptArchiveError(path, str(e)) from e

        self.logger.debug(f"{path.name} passed gzip integrity check.")
