"""HTTP implementation of the ArchiveFetcher port."""

import contextlib
import logging
from pathlib import Path
from typing import Generator, Iterator

import httpx
from tqdm import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm

from ..application.domain import ArchiveFetcher, ArchiveValidator
from ..application.exceptions import DownloadError, FilesystemError


class HttpArchiveFetcher(ArchiveFetcher):
    """A fetcher that downloads release archives via HTTP atomically."""

    def __init__(
        self,
        client: httpx.Client,
        validator: ArchiveValidator,
        chunk_size: int = 65536,
        progress: bool = True,
    ):
        """Initializes the fetcher adapter."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.client = client
        self.validator = validator
        self.chunk_size = chunk_size
        self.progress = progress

    @contextlib.contextmanager
    def _atomic_target(self, destination: Path) -> Generator[Path, None, None]:
        """Provides a temporary '.tmp' path and ensures cleanup."""
        tmp_path = destination.with_suffix(destination.suffix + ".tmp")
        destination.parent.mkdir(parents=True, exist_ok=True)
        try:
            yield tmp_path
        finally:
            tmp_path.unlink(missing_ok=True)

    def _stream_chunks(
        self, response: httpx.Response, target_file: Path
    ) -> Iterator[int]:
        """Produce byte counts while writing a response body to a file."""
        with open(target_file, "wb") as f:
            for chunk in response.iter_bytes(self.chunk_size):
                f.write(chunk)
                yield len(chunk)

    def _consume_stream_with_progress(
        self, stream: Iterator[int], total_size: int, desc: str
    ):
        """Consume the byte stream to update a TQDM progress bar."""
        with logging_redirect_tqdm(), tqdm(
            total=total_size or None,
            unit="B",
            unit_scale=True,
            desc=desc,
            disable=not self.progress,
        ) as progress_bar:
            for progress in stream:
                progress_bar.update(progress)

    def _stream_from_network(self, url: str, target_file: Path):
        """Manage the network request and the streaming process."""
        with self.client.stream("GET", url) as response:
            response.raise_for_status()
            total_size = int(response.headers.get("Content-Length", 0))
            stream = self._stream_chunks(response, target_file)
            self._consume_stream_with_progress(
                stream, total_size, target_file.name
            )

    def _execute_atomic_download(self, url: str, destination: Path):
        """Download, validate, then promote the file into the cache."""
        self.logger.info(f"Downloading {url}")
        try:
            with self._atomic_target(destination) as tmp_path:
                try:
                    self._stream_from_network(url, tmp_path)
                except httpx.HTTPStatusError as e:
                    raise DownloadError(
                        url, f"HTTP status {e.response.status_code}"
                    ) from e
                except httpx.HTTPError as e:
                    raise DownloadError(
                        url, str(e) or type(e).__name__
                    ) from e

                # An HTML error page served with 200 is caught here.
                self.validator.validate(tmp_path)
                tmp_path.rename(destination)
        except OSError as e:
            raise FilesystemError(destination, str(e)) from e
        self.logger.info(f"Finished downloading {destination.name}")

    def fetch(self, url: str, cache_path: Path) -> Path:
        """
        Guarantee that the archive is in the cache, downloading only if needed.

        This is the public method that fulfills the ArchiveFetcher port
        contract. An existing cache file is trusted as-is here; the caller
        validates it before extraction.

        Args:
            url: The release asset URL.
            cache_path: The canonical cache location for the archive.

        Returns:
            The path of the cached archive.

        Raises:
            DownloadError: If the request fails or returns an error status.
            FilesystemError: If the cache directory cannot be written.
            CorruptArchiveError: If the downloaded body is not a gzip archive.
        """

        if cache_path.exists():
            self.logger.info(
                f"Archive {cache_path.name} already cached. Skipping download."
            )
        else:
            self._execute_atomic_download(url, cache_path)

        return cache_path
