"""
Sample code extraction (section 7) and conversion to reflectivity.

Codes are 16-bit big-endian unsigned integers following a 5-byte header.
The conversion to dBZ is a three-branch signed/offset packing, not a single
linear scale: codes above 32000 wrap to negative values, codes between 3200
and 32000 carry a -32 dBZ offset, and small codes are plain hundredths.
"""

import numpy as np

from .constants import (
    CODE_SCALE,
    CODE_WRAP,
    DATA_HEADER_LENGTH,
    MISSING_CODES,
    NEGATIVE_CODE_THRESHOLD,
    OFFSET_CODE_THRESHOLD,
    OFFSET_DBZ,
    SAMPLE_DTYPE,
)
from .errors import NoGridDataError
from .sections import Section


def read_sample_codes(section: Section, n_points: int) -> np.ndarray:
    """
    View the packed sample codes of a data section.

    Parameters
    ----------
    section : Section
        Section 7 as returned by the section walker
    n_points : int
        Number of grid cells declared by the grid definition

    Returns
    -------
    np.ndarray
        Read-only ``>u2`` array of ``min(available_words, n_points)`` codes
        in row-major order. The array is a view over the message buffer.
    """
    payload = section.payload
    if len(payload) < DATA_HEADER_LENGTH:
        raise NoGridDataError(f"Data section too short: {len(payload)} bytes")

    available = (len(payload) - DATA_HEADER_LENGTH) // 2
    count = min(available, n_points)
    if count <= 0:
        return np.empty(0, dtype=SAMPLE_DTYPE)
    return np.frombuffer(payload, dtype=SAMPLE_DTYPE, count=count, offset=DATA_HEADER_LENGTH)


def is_missing(raw: int) -> bool:
    """Return True for the reserved no-data codes."""
    return raw in MISSING_CODES


def valid_code_mask(codes: np.ndarray) -> np.ndarray:
    """Boolean mask, False where the code is one of the no-data codes."""
    return ~np.isin(codes, MISSING_CODES)


def code_to_dbz(raw: int) -> float:
    """
    Convert one sample code to dBZ.

    >>> code_to_dbz(100), code_to_dbz(3300), code_to_dbz(65000)
    (1.0, 1.0, -5.35)
    """
    if raw > NEGATIVE_CODE_THRESHOLD:
        return (raw - CODE_WRAP) / CODE_SCALE
    elif raw > OFFSET_CODE_THRESHOLD:
        return (raw / CODE_SCALE) - OFFSET_DBZ
    return raw / CODE_SCALE


def codes_to_dbz(codes: np.ndarray) -> np.ndarray:
    """Vectorized ``code_to_dbz``; returns float64."""
    raw = np.asarray(codes).astype(np.float64)
    return np.where(
        raw > NEGATIVE_CODE_THRESHOLD,
        (raw - CODE_WRAP) / CODE_SCALE,
        np.where(
            raw > OFFSET_CODE_THRESHOLD,
            (raw / CODE_SCALE) - OFFSET_DBZ,
            raw / CODE_SCALE,
        ),
    )
