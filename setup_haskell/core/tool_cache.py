"""
Versioned tool cache and download helpers.
"""

import asyncio
import logging
import shutil
import tarfile
import uuid
from pathlib import Path
from typing import Optional

import requests

DOWNLOAD_TIMEOUT = 60
CHUNK_SIZE = 8192


class ToolCacheError(Exception):
    """A tool could not be fetched, unpacked or stored in the cache."""


class ToolDownloadError(ToolCacheError):
    """A tool archive or binary could not be downloaded."""


class ToolExtractError(ToolCacheError):
    """A downloaded archive could not be extracted."""


class ToolCache:
    """Manages the runner tool cache.

    Entries live at ``{root}/{tool}/{version}/{arch}`` and only count as
    present once the sibling ``{arch}.complete`` marker has been written.
    """

    def __init__(self, root: Path, temp_dir: Path, arch: str = "x64"):
        """
        Initialize the tool cache.

        Args:
            root: Tool cache root directory
            temp_dir: Directory for downloads and extraction
            arch: Architecture the cached entries are keyed by
        """
        self.logger = logging.getLogger(__name__)
        self.root = Path(root)
        self.temp_dir = Path(temp_dir)
        self.arch = arch

    def entry_path(self, tool: str, version: str) -> Path:
        return self.root / tool / version / self.arch

    def find(self, tool: str, version: str) -> Optional[Path]:
        """Return the cached directory of ``tool`` ``version`` if it is complete."""
        path = self.entry_path(tool, version)
        marker = path.parent / f"{self.arch}.complete"
        if path.is_dir() and marker.is_file():
            self.logger.debug(f"Found {tool} {version} in tool cache at {path}")
            return path
        return None

    def cache_dir(self, source_dir: Path, tool: str, version: str) -> Path:
        """
        Copy a directory into the cache.

        Args:
            source_dir: Directory to copy
            tool: Tool name
            version: Tool version

        Returns:
            Path of the cache entry
        """
        dest = self._create_entry(tool, version)
        for item in Path(source_dir).iterdir():
            if item.is_dir():
                shutil.copytree(item, dest / item.name, symlinks=True)
            else:
                shutil.copy2(item, dest / item.name)
        self._complete_entry(tool, version)
        self.logger.info(f"Cached {tool} {version} at {dest}")
        return dest

    def cache_file(self, source_file: Path, target_file: str, tool: str, version: str) -> Path:
        """Copy a single file into the cache under the name ``target_file``."""
        dest = self._create_entry(tool, version)
        shutil.copy2(source_file, dest / target_file)
        self._complete_entry(tool, version)
        self.logger.info(f"Cached {tool} {version} at {dest}")
        return dest

    async def download_tool(self, url: str) -> Path:
        """
        Download ``url`` into a fresh file under the temp directory.

        Raises:
            ToolDownloadError: If the download fails
        """
        dest = self.temp_dir / str(uuid.uuid4())
        dest.parent.mkdir(parents=True, exist_ok=True)
        self.logger.info(f"Downloading {url}")
        await asyncio.to_thread(self._download, url, dest)
        return dest

    def extract_tar(self, archive: Path) -> Path:
        """
        Extract a (compressed) tarball into a fresh directory and return it.

        Raises:
            ToolExtractError: If the file is not a readable tar archive
        """
        dest = self.temp_dir / str(uuid.uuid4())
        dest.mkdir(parents=True, exist_ok=True)
        try:
            with tarfile.open(archive, "r:*") as tar:
                tar.extractall(dest, filter="data")
        except (tarfile.TarError, OSError) as e:
            raise ToolExtractError(f"Failed to extract {archive}: {e}") from e
        return dest

    def _download(self, url: str, dest: Path) -> None:
        try:
            with requests.get(
                url, stream=True, timeout=DOWNLOAD_TIMEOUT, headers={"User-Agent": "setup-haskell"}
            ) as response:
                response.raise_for_status()
                with open(dest, "wb") as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        f.write(chunk)
        except requests.exceptions.RequestException as e:
            raise ToolDownloadError(f"Failed to download {url}: {e}") from e

    def _create_entry(self, tool: str, version: str) -> Path:
        dest = self.entry_path(tool, version)
        marker = dest.parent / f"{self.arch}.complete"
        if marker.exists():
            marker.unlink()
        if dest.exists():
            shutil.rmtree(dest)
        dest.mkdir(parents=True)
        return dest

    def _complete_entry(self, tool: str, version: str) -> None:
        path = self.entry_path(tool, version)
        (path.parent / f"{self.arch}.complete").write_text("")
