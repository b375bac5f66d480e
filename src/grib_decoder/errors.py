"""
Exceptions raised while decoding GRIB2 reflectivity messages.

All of them derive from GribDecodeError, which is what ``decode`` catches
before switching to the synthetic fallback field.
"""


class GribDecodeError(Exception):
    """Base class for malformed or unsupported input."""


class DecompressionError(GribDecodeError):
    """The gzip wrapper is present but the stream is corrupt or truncated."""


class InvalidFormatError(GribDecodeError):
    """The buffer does not start with the GRIB magic marker."""


class UnsupportedTemplateError(GribDecodeError):
    """The grid definition uses a template other than 3.0 (lat/lon)."""

    def __init__(self, template: int):
        super().__init__(f"Unsupported grid definition template: {template}")
        self.template = template


class NoGridDataError(GribDecodeError):
    """Required sections are missing, truncated, or describe an empty grid."""
