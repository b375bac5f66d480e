"""
grib_decoder - MRMS reflectivity GRIB2 decoding
================================================

Turns a (possibly gzip-wrapped) single-field GRIB2 message into a bounded
list of geo-located reflectivity points, falling back to a deterministic
synthetic field when the input cannot be decoded.

Main components:
- decompress: gzip wrapper detection
- sections: bounds-checked section walker
- grid: lat/lon grid definition parsing
- samples: 16-bit code extraction and dBZ conversion
- coordinates: index to lat/lon mapping
- sampler: deterministic point budget
- fallback: synthetic storm field
- decoder: the ``decode`` entry point
"""

__version__ = "0.1.0"

from .decoder import decode
from .errors import (
    GribDecodeError,
    DecompressionError,
    InvalidFormatError,
    UnsupportedTemplateError,
    NoGridDataError,
)
from .grid import GridDefinition, ScanFlags, parse_grid_definition
from .points import RadarDataPoint, DecodedGrid, DecodeEvent, split_by_intensity
from .samples import code_to_dbz, codes_to_dbz
from .coordinates import grid_to_latlon
from .fallback import FallbackGenerator, StormSystem

__all__ = [
    # Entry point
    "decode",
    # Errors
    "GribDecodeError",
    "DecompressionError",
    "InvalidFormatError",
    "UnsupportedTemplateError",
    "NoGridDataError",
    # Types
    "GridDefinition",
    "ScanFlags",
    "RadarDataPoint",
    "DecodedGrid",
    "DecodeEvent",
    # Building blocks
    "parse_grid_definition",
    "code_to_dbz",
    "codes_to_dbz",
    "grid_to_latlon",
    "split_by_intensity",
    "FallbackGenerator",
    "StormSystem",
]
