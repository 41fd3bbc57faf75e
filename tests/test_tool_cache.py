"""Tests for the versioned tool cache."""

import io
import tarfile

import pytest
import requests

from setup_haskell.core import tool_cache as tool_cache_module
from setup_haskell.core.tool_cache import ToolCache, ToolDownloadError, ToolExtractError


class FakeResponse:
    """Streams ``chunks``; an exception in ``chunks`` is raised when reached."""

    def __init__(self, chunks=(), status_error=None):
        self.chunks = chunks
        self.status_error = status_error

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self):
        if self.status_error:
            raise self.status_error

    def iter_content(self, chunk_size=1):
        for chunk in self.chunks:
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk


@pytest.fixture
def fake_get(monkeypatch):
    requests_made = []

    def install(response):
        def get(url, **kwargs):
            requests_made.append((url, kwargs))
            return response

        monkeypatch.setattr(tool_cache_module.requests, "get", get)
        return requests_made

    return install


def test_entry_needs_completion_marker(tmp_path):
    cache = ToolCache(tmp_path / "cache", tmp_path / "tmp")
    cache.entry_path("stack", "2.15.7").mkdir(parents=True)

    assert cache.find("stack", "2.15.7") is None


def test_cache_file(tmp_path):
    cache = ToolCache(tmp_path / "cache", tmp_path / "tmp", "arm64")
    source = tmp_path / "download"
    source.write_text("binary")

    entry = cache.cache_file(source, "ghcup", "ghcup", "0.1.50.2")

    assert entry == tmp_path / "cache" / "ghcup" / "0.1.50.2" / "arm64"
    assert (entry / "ghcup").read_text() == "binary"
    assert (entry.parent / "arm64.complete").is_file()
    assert cache.find("ghcup", "0.1.50.2") == entry


def test_cache_dir_replaces_previous_entry(tmp_path):
    cache = ToolCache(tmp_path / "cache", tmp_path / "tmp")
    old = tmp_path / "old"
    old.mkdir()
    (old / "stale").write_text("")
    new = tmp_path / "new"
    (new / "doc").mkdir(parents=True)
    (new / "stack").write_text("")

    cache.cache_dir(old, "stack", "2.15.7")
    entry = cache.cache_dir(new, "stack", "2.15.7")

    assert sorted(p.name for p in entry.iterdir()) == ["doc", "stack"]


def test_extract_tar(tmp_path):
    archive = tmp_path / "archive.tar.gz"
    with tarfile.open(archive, "w:gz") as tar:
        info = tarfile.TarInfo("stack-2.15.7-osx-x86_64/stack")
        info.size = 5
        tar.addfile(info, io.BytesIO(b"stack"))
    cache = ToolCache(tmp_path / "cache", tmp_path / "tmp")

    extracted = cache.extract_tar(archive)

    assert (extracted / "stack-2.15.7-osx-x86_64" / "stack").read_bytes() == b"stack"
    assert extracted.parent == tmp_path / "tmp"


def test_extract_rejects_non_archive(tmp_path):
    body = tmp_path / "download"
    body.write_text("<html>rate limited</html>")
    cache = ToolCache(tmp_path / "cache", tmp_path / "tmp")

    with pytest.raises(ToolExtractError):
        cache.extract_tar(body)


@pytest.mark.asyncio
async def test_download_streams_to_temp_file(tmp_path, fake_get):
    requests_made = fake_get(FakeResponse([b"ghc", b"up"]))
    cache = ToolCache(tmp_path / "cache", tmp_path / "tmp")

    path = await cache.download_tool("https://downloads.haskell.org/ghcup/ghcup")

    assert path.read_bytes() == b"ghcup"
    assert path.parent == tmp_path / "tmp"
    url, kwargs = requests_made[0]
    assert url == "https://downloads.haskell.org/ghcup/ghcup"
    assert kwargs["stream"] is True
    assert kwargs["timeout"] == tool_cache_module.DOWNLOAD_TIMEOUT


@pytest.mark.asyncio
async def test_http_error_becomes_download_error(tmp_path, fake_get):
    fake_get(FakeResponse(status_error=requests.HTTPError("404 Client Error: Not Found")))
    cache = ToolCache(tmp_path / "cache", tmp_path / "tmp")

    with pytest.raises(ToolDownloadError, match="404"):
        await cache.download_tool("https://github.com/commercialhaskell/stack/releases/download/v0/stack.tar.gz")


@pytest.mark.asyncio
async def test_timeout_while_streaming_becomes_download_error(tmp_path, fake_get):
    fake_get(FakeResponse([b"partial", requests.exceptions.ConnectionError("Read timed out.")]))
    cache = ToolCache(tmp_path / "cache", tmp_path / "tmp")

    with pytest.raises(ToolDownloadError):
        await cache.download_tool("https://downloads.haskell.org/ghcup/ghcup")
