"""
Detection and removal of the gzip wrapper around downloaded messages.
"""

import gzip
import logging
import zlib

from .constants import GZIP_MAGIC
from .errors import DecompressionError

logger = logging.getLogger(__name__)


def is_gzip(buffer) -> bool:
    """Return True when the buffer starts with the gzip magic bytes."""
    return bytes(buffer[:2]) == GZIP_MAGIC


def decompress(buffer):
    """
    Undo the optional gzip wrapper.

    Parameters
    ----------
    buffer : bytes-like
        Raw buffer as fetched or uploaded.

    Returns
    -------
    bytes-like
        The decompressed payload, or ``buffer`` itself (same object) when
        no gzip prefix is present.

    Raises
    ------
    DecompressionError
        If the prefix is present but the stream cannot be inflated.
    """
    if not is_gzip(buffer):
        return buffer

    try:
        payload = gzip.decompress(bytes(buffer))
    except (OSError, EOFError, zlib.error) as exc:
        raise DecompressionError(f"Corrupt gzip stream: {exc}") from exc

    logger.debug(f"Decompressed {len(buffer):,} -> {len(payload):,} bytes")
    return payload
