"""
Exceptions raised while obtaining raw radar buffers.
"""
from typing import Optional


class RadarFetchError(Exception):
    """All download attempts failed."""

    def __init__(self, message: str, status: Optional[int] = None, attempts: int = 0):
        super().__init__(message)
        self.status = status
        self.attempts = attempts


class UploadError(ValueError):
    """A local file was rejected (missing, wrong extension, too large)."""
