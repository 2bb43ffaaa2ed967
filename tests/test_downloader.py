"""Tests for the atomic, cache-aware archive fetcher."""

import httpx
import pytest

from dxc_entrypoint.application.exceptions import (
    CorruptArchiveError,
    DownloadError,
    FilesystemError,
)
from dxc_entrypoint.infrastructure.downloader import HttpArchiveFetcher
from dxc_entrypoint.infrastructure.validator import GzipArchiveValidator

URL = "https://releases.test/v1.7.2308/linux_dxc_2023_08_14.x86_64.tar.gz"


@pytest.fixture
def cache_path(tmp_path):
    return tmp_path / "cache" / "linux_dxc_2023_08_14.x86_64.tar.gz"


def make_fetcher(client):
    return HttpArchiveFetcher(
        client=client,
        validator=GzipArchiveValidator(),
        chunk_size=1024,
        progress=False,
    )


def leftovers(cache_path):
    return sorted(p.name for p in cache_path.parent.iterdir())


def test_downloads_into_cache(release_host, release_archive, cache_path):
    release_host.serve(URL, release_archive.read_bytes())
    fetcher = make_fetcher(release_host.client())

    result = fetcher.fetch(URL, cache_path)

    assert result == cache_path
    assert cache_path.read_bytes() == release_archive.read_bytes()
    assert leftovers(cache_path) == [cache_path.name]
    assert release_host.requests == [URL]


def test_cached_archive_skips_network(release_host, release_archive, cache_path):
    cache_path.parent.mkdir(parents=True)
    cache_path.write_bytes(release_archive.read_bytes())
    fetcher = make_fetcher(release_host.client())

    assert fetcher.fetch(URL, cache_path) == cache_path
    assert release_host.requests == []


def test_error_status_raises_and_leaves_nothing(release_host, cache_path):
    fetcher = make_fetcher(release_host.client())

    with pytest.raises(DownloadError) as excinfo:
        fetcher.fetch(URL, cache_path)

    assert excinfo.value.url == URL
    assert "404" in str(excinfo.value)
    assert leftovers(cache_path) == []


def test_connection_error_raises_download_error(cache_path):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    fetcher = make_fetcher(httpx.Client(transport=httpx.MockTransport(refuse)))

    with pytest.raises(DownloadError, match="connection refused"):
        fetcher.fetch(URL, cache_path)

    assert leftovers(cache_path) == []


def test_html_served_with_200_is_never_cached(release_host, cache_path):
    release_host.serve(URL, b"<html><body>Rate limited</body></html>")
    fetcher = make_fetcher(release_host.client())

    with pytest.raises(CorruptArchiveError):
        fetcher.fetch(URL, cache_path)

    assert leftovers(cache_path) == []


def test_follows_redirects_when_client_does(release_archive, cache_path):
    cdn_url = "https://cdn.test/asset"

    def handler(request):
        if str(request.url) == URL:
            return httpx.Response(302, headers={"Location": cdn_url})
        return httpx.Response(200, content=release_archive.read_bytes())

    client = httpx.Client(
        transport=httpx.MockTransport(handler), follow_redirects=True
    )

    make_fetcher(client).fetch(URL, cache_path)

    assert cache_path.read_bytes() == release_archive.read_bytes()


def test_unwritable_cache_directory_raises_filesystem_error(
    release_host, release_archive, tmp_path
):
    release_host.serve(URL, release_archive.read_bytes())
    (tmp_path / "cache").write_text("not a directory")
    cache_path = tmp_path / "cache" / "linux_dxc_2023_08_14.x86_64.tar.gz"
    fetcher = make_fetcher(release_host.client())

    with pytest.raises(FilesystemError) as excinfo:
        fetcher.fetch(URL, cache_path)

    assert excinfo.value.path == cache_path
    assert release_host.requests == []
