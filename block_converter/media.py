"""block_converter.media — Media resolvers used by the image rule.

A resolver turns a sanitized image URL into a stable URL the converted
content can reference.  Resolvers follow the :class:`MediaResolver`
``Protocol`` so any object with a matching ``resolve`` method works::

    class CdnResolver:
        def resolve(self, src: str, alt: str) -> str:
            return src.replace("http://legacy.example.com", "https://cdn.example.com")

Resolvers signal failure by raising :class:`~block_converter.exceptions.MediaError`.
Resolving the same ``src`` twice must return the same URL.
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
import threading
from pathlib import Path, PurePosixPath
from typing import Any, Protocol, runtime_checkable
from urllib.parse import urlparse

from block_converter.exceptions import FetchError, MediaError
from block_converter.transport import fetch_bytes

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.json"

# Meta key under which the source URL of a stored asset is recorded.
ORIGINAL_URL_KEY = "original_url"

_UNSAFE_FILENAME_RE = re.compile(r"[^\w\-]+")

_CONTENT_TYPE_EXTENSIONS: dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/svg+xml": ".svg",
    "image/avif": ".avif",
    "image/bmp": ".bmp",
}


@runtime_checkable
class MediaResolver(Protocol):
    """Resolves a sanitized media URL to the URL the output should use."""

    def resolve(self, src: str, alt: str) -> str:
        """Return the resolved URL for *src*; raise MediaError on failure."""
        ...


class PassthroughMediaResolver:
    """Leaves every source URL untouched."""

    def resolve(self, src: str, alt: str) -> str:
        return src


class LocalMediaStore:
    """Download media into a local directory and serve it from *base_url*.

    Each source URL is downloaded at most once.  An ``index.json`` file in
    *directory* maps source URLs to stored records, so later runs reuse
    earlier downloads.

    Args:
        directory:   Where assets and the index are written.
        base_url:    Public URL prefix under which *directory* is served.
        timeout:     Per-download network timeout in seconds.
        user_agent:  Override the default User-Agent string.
    """

    def __init__(
        self,
        directory: str | Path,
        base_url: str = "",
        *,
        timeout: float = 30,
        user_agent: str | None = None,
    ) -> None:
        self.directory = Path(directory)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self._lock = threading.Lock()
        self._index: dict[str, dict[str, Any]] | None = None

    # ------------------------------------------------------------------
    # Index persistence
    # ------------------------------------------------------------------

    @property
    def index_path(self) -> Path:
        return self.directory / INDEX_FILENAME

    def _load_index(self) -> dict[str, dict[str, Any]]:
        if self._index is None:
            try:
                raw = self.index_path.read_text(encoding="utf-8")
            except FileNotFoundError:
                self._index = {}
            except OSError as exc:
                raise MediaError(f"Cannot read media index {self.index_path}: {exc}") from exc
            else:
                try:
                    data = json.loads(raw) if raw.strip() else {}
                except json.JSONDecodeError as exc:
                    raise MediaError(f"Corrupt media index {self.index_path}: {exc}") from exc
                self._index = data if isinstance(data, dict) else {}
        return self._index

    def _save_index(self) -> None:
        tmp = self.index_path.with_suffix(".tmp")
        tmp.write_text(json.dumps(self._index, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(self.index_path)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def lookup(self, src: str) -> dict[str, Any] | None:
        """Return the stored record for *src*, or None if never stored."""
        with self._lock:
            return self._load_index().get(src)

    def url_for(self, filename: str) -> str:
        return f"{self.base_url}/{filename}" if self.base_url else filename

    def resolve(self, src: str, alt: str) -> str:
        """Return the stored URL for *src*, downloading it on first use."""
        if not src:
            raise MediaError("Cannot resolve an empty media URL")

        with self._lock:
            index = self._load_index()
            record = index.get(src)
            if record:
                return record["url"]

            try:
                raw, headers = fetch_bytes(src, timeout=self.timeout, user_agent=self.user_agent,
                                           accept="image/*,*/*;q=0.8")
            except FetchError as exc:
                raise MediaError(f"Download failed for {src}: {exc}") from exc
            if not raw:
                raise MediaError(f"Empty response body for {src}")

            filename = self._filename_for(src, raw, headers)
            try:
                self.directory.mkdir(parents=True, exist_ok=True)
                (self.directory / filename).write_bytes(raw)
                index[src] = {
                    ORIGINAL_URL_KEY: src,
                    "filename": filename,
                    "alt": alt,
                    "url": self.url_for(filename),
                }
                self._save_index()
            except OSError as exc:
                index.pop(src, None)
                raise MediaError(f"Cannot store media for {src}: {exc}") from exc

            logger.info("Stored media %s as %s", src, filename)
            return index[src]["url"]

    __call__ = resolve

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _filename_for(src: str, raw: bytes, headers: object) -> str:
        digest = hashlib.sha256(raw).hexdigest()[:16]
        suffix = PurePosixPath(urlparse(src).path).suffix.lower()
        if not suffix:
            content_type = ""
            try:
                content_type = headers.get_content_type()
            except AttributeError:
                content_type = ""
            suffix = _CONTENT_TYPE_EXTENSIONS.get(content_type, "")
        stem = PurePosixPath(urlparse(src).path).stem
        stem = _UNSAFE_FILENAME_RE.sub("-", stem).strip("-") or "media"
        return f"{stem}-{digest}{suffix}"
