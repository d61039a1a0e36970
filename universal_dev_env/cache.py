"""Versioned download cache for upstream template files.

Files are downloaded from the upstream repository over HTTPS with
``httpx.AsyncClient`` and kept under ``~/.universal-dev-env/cache``.  Each
entry is stored as ``<md5 key>_<filename>`` where the key hashes the entry
type, URL and tool version, so a version bump invalidates every entry.
Entries also expire 30 days after they were written.

Typical usage::

    cache = TemplateCache(Settings.from_env())
    text = await cache.download_with_cache(url, "Dockerfile.universal")
"""

from __future__ import annotations

import hashlib
import json
import shutil
import time
from datetime import datetime, timezone
from pathlib import Path

import httpx
from pydantic import BaseModel, Field

from universal_dev_env.config import Settings
from universal_dev_env.utils import console, print_warning

RESOURCE_DIR = Path(__file__).resolve().parent / "resources"

INDEX_FILE = "index.json"


class DownloadError(Exception):
    """Raised when a file cannot be downloaded and no cached or bundled copy exists."""


class CacheEntry(BaseModel):
    """One record of the cache index."""

    url: str
    filename: str
    version: str
    file: str = Field(..., description="Name of the cached file inside the cache directory")
    cached_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class CacheInfo(BaseModel):
    """Summary returned by :meth:`TemplateCache.info`."""

    directory: Path
    exists: bool
    entries: int = 0
    total_bytes: int = 0


def bundled_resource(filename: str) -> str | None:
    """Return the packaged copy of *filename*, or ``None`` if none is bundled."""
    path = RESOURCE_DIR / filename
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8")


def cache_key(url: str, entry_type: str = "file", version: str | None = None) -> str:
    """MD5 key of ``"<type>:<url>[:<version>]"``."""
    raw = f"{entry_type}:{url}:{version}" if version else f"{entry_type}:{url}"
    return hashlib.md5(raw.encode("utf-8")).hexdigest()


class TemplateCache:
    """Download cache with mtime-based expiry and version-keyed entries."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings.from_env()

    # ------------------------------------------------------------------
    # Paths and validity
    # ------------------------------------------------------------------

    @property
    def cache_dir(self) -> Path:
        return self.settings.cache_dir

    @property
    def index_path(self) -> Path:
        return self.cache_dir / INDEX_FILE

    def cache_file(self, url: str, filename: str, version: str | None = None) -> Path:
        """Path of the cache entry for *url* at *version* (defaults to the tool version)."""
        key = cache_key(url, "file", version or self.settings.version)
        return self.cache_dir / f"{key}_{filename}"

    def is_valid(self, path: Path) -> bool:
        """``True`` if *path* exists and is younger than the expiry window."""
        if not path.is_file():
            return False
        age = time.time() - path.stat().st_mtime
        return age < self.settings.cache_expiry_seconds

    # ------------------------------------------------------------------
    # Index
    # ------------------------------------------------------------------

    def _load_index(self) -> dict[str, CacheEntry]:
        if not self.index_path.is_file():
            return {}
        try:
            raw = json.loads(self.index_path.read_text(encoding="utf-8"))
            return {name: CacheEntry.model_validate(entry) for name, entry in raw.items()}
        except (ValueError, TypeError, AttributeError):
            print_warning("Cache index is corrupt; rebuilding it")
            return {}

    def _save_index(self, index: dict[str, CacheEntry]) -> None:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        data = {name: entry.model_dump() for name, entry in index.items()}
        self.index_path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def _cleanup_old_versions(
        self,
        index: dict[str, CacheEntry],
        url: str,
        filename: str,
        current: Path,
    ) -> None:
        """Drop entries for the same url/filename cached under another version."""
        for name, entry in list(index.items()):
            if entry.url == url and entry.filename == filename and name != current.name:
                (self.cache_dir / name).unlink(missing_ok=True)
                del index[name]
                console.print(f"[dim]Cleaned up old cache: {name}[/dim]")

    def store(self, url: str, filename: str, content: str, version: str | None = None) -> Path:
        """Write *content* as the current cache entry for *url*/*filename*."""
        version = version or self.settings.version
        path = self.cache_file(url, filename, version)
        index = self._load_index()
        self._cleanup_old_versions(index, url, filename, path)

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        index[path.name] = CacheEntry(url=url, filename=filename, version=version, file=path.name)
        self._save_index(index)
        return path

    # ------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.settings.http_timeout, connect=10.0),
            follow_redirects=True,
        )

    async def fetch(self, url: str) -> str:
        """GET *url* and return the body text.  Raises ``httpx.HTTPError``."""
        async with self._client() as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.text

    async def download_with_cache(
        self,
        url: str,
        filename: str,
        use_cache: bool = True,
        version: str | None = None,
        fallback: str | None = None,
    ) -> str:
        """Return the content of *url*, preferring a valid cache entry.

        Args:
            url: File URL.
            filename: Name used for the cache file.
            use_cache: Read from and write to the cache.
            version: Version tag of the entry; defaults to the tool version.
            fallback: Content to use when the download fails and no cached
                copy exists (usually a bundled resource).

        Returns:
            The file content.

        Raises:
            DownloadError: The download failed and neither a cached copy nor
                a fallback is available.
        """
        version = version or self.settings.version
        path = self.cache_file(url, filename, version)

        if use_cache and self.is_valid(path):
            console.print(f"[green]Using cached {filename} (v{version})[/green]")
            return path.read_text(encoding="utf-8")

        console.print(f"[yellow]Downloading {filename}...[/yellow]")
        try:
            content = await self.fetch(url)
        except httpx.HTTPError as exc:
            if path.is_file():
                print_warning(f"Download failed, using cached version (v{version})")
                return path.read_text(encoding="utf-8")
            if fallback is not None:
                print_warning(f"Download of {filename} failed, using bundled copy")
                return fallback
            raise DownloadError(f"Could not download {filename} from {url}: {exc}") from exc

        if use_cache:
            self.store(url, filename, content, version)
            console.print(f"[green]Cached {filename} (v{version}) for future use[/green]")
        return content

    async def get_template(self, filename: str, use_cache: bool = True) -> str:
        """Download an upstream template file, falling back to the bundled copy."""
        return await self.download_with_cache(
            self.settings.template_url(filename),
            filename,
            use_cache=use_cache,
            fallback=bundled_resource(filename),
        )

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def clear(self) -> bool:
        """Delete the cache directory.  Returns ``False`` if there was none."""
        if not self.cache_dir.exists():
            return False
        shutil.rmtree(self.cache_dir)
        return True

    def info(self) -> CacheInfo:
        """Directory, number of cached files and their total size."""
        if not self.cache_dir.is_dir():
            return CacheInfo(directory=self.cache_dir, exists=False)
        files = [p for p in self.cache_dir.iterdir() if p.is_file() and p.name != INDEX_FILE]
        return CacheInfo(
            directory=self.cache_dir,
            exists=True,
            entries=len(files),
            total_bytes=sum(p.stat().st_size for p in files),
        )
