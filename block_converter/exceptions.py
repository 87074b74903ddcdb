"""Exception hierarchy for block_converter."""

from __future__ import annotations


class BlockConverterError(Exception):
    """Base class for every error raised by block_converter."""


class ConfigError(BlockConverterError, ValueError):
    """Raised when a settings file cannot be read or fails validation."""


class MediaError(BlockConverterError):
    """Raised by a media resolver when an asset cannot be stored or located."""


class OEmbedError(BlockConverterError):
    """Raised when oEmbed metadata cannot be obtained for a URL."""


class FetchError(BlockConverterError, RuntimeError):
    """Raised when a URL cannot be fetched.

    Attributes:
        url    -- the URL that failed
        status -- HTTP status code (0 if no response was received)
    """

    def __init__(self, message: str, url: str = "", status: int = 0) -> None:
        super().__init__(message)
        self.url = url
        self.status = status
