"""
Walking a GRIB2 message as a sequence of numbered sections.

Every section after the 16-byte indicator starts with a 4-byte big-endian
length (which counts the header itself) followed by the section number.
All reads here are bounds-checked; anything that would run past the end of
the buffer is reported as NoGridDataError.
"""

import logging
import struct
from dataclasses import dataclass
from typing import Iterator, Tuple

from .constants import (
    DATA_SECTION,
    END_MARKER,
    GRID_DEFINITION_SECTION,
    GRIB_MAGIC,
    INDICATOR_LENGTH,
    SECTION_HEADER_LENGTH,
)
from .errors import InvalidFormatError, NoGridDataError

logger = logging.getLogger(__name__)

_UINT_FORMATS = {1: ">B", 2: ">H", 4: ">I"}


@dataclass(frozen=True)
class Section:
    """
    One section of a GRIB2 message.

    Attributes
    ----------
    number : int
        Section number (3 = grid definition, 7 = data, ...)
    offset : int
        Byte offset of the section start within the message
    length : int
        Section length in bytes, header included
    payload : memoryview
        View over the whole section (header included), so the byte offsets
        documented by the format tables can be used directly.
    """

    number: int
    offset: int
    length: int
    payload: memoryview

    def __len__(self) -> int:
        return self.length


def _check_span(buffer, offset: int, size: int) -> None:
    if offset < 0 or offset + size > len(buffer):
        raise NoGridDataError(
            f"Read of {size} bytes at offset {offset} exceeds buffer of {len(buffer)} bytes"
        )


def read_uint(buffer, offset: int, size: int) -> int:
    """Read a big-endian unsigned integer of 1, 2 or 4 bytes."""
    if size not in _UINT_FORMATS:
        raise ValueError(f"Unsupported integer size: {size}")
    _check_span(buffer, offset, size)
    return struct.unpack_from(_UINT_FORMATS[size], buffer, offset)[0]


def read_int32(buffer, offset: int) -> int:
    """Read a big-endian signed 32-bit integer."""
    _check_span(buffer, offset, 4)
    return struct.unpack_from(">i", buffer, offset)[0]


def check_magic(buffer) -> None:
    """
    Verify the indicator section magic.

    Raises
    ------
    InvalidFormatError
        If the first 4 bytes are not ``b"GRIB"``.
    """
    head = bytes(buffer[:4])
    if head != GRIB_MAGIC:
        raise InvalidFormatError(f"Bad magic {head!r}, expected {GRIB_MAGIC!r}")


def iter_sections(buffer, start: int = INDICATOR_LENGTH) -> Iterator[Section]:
    """
    Yield the sections of a message, starting past the indicator section.

    Iteration ends at the ``7777`` end marker or when fewer bytes than a
    section header remain.

    Raises
    ------
    NoGridDataError
        On a section length that is too small to advance or that runs past
        the end of the buffer.
    """
    view = memoryview(buffer)
    total = len(view)
    offset = start

    while offset + SECTION_HEADER_LENGTH <= total:
        if bytes(view[offset:offset + 4]) == END_MARKER:
            return

        length = read_uint(view, offset, 4)
        number = read_uint(view, offset + 4, 1)

        if length < SECTION_HEADER_LENGTH:
            raise NoGridDataError(f"Section {number} at offset {offset} has invalid length {length}")
        if offset + length > total:
            raise NoGridDataError(
                f"Section {number} at offset {offset} (length {length}) is truncated "
                f"({total - offset} bytes left)"
            )

        yield Section(number=number, offset=offset, length=length,
                      payload=view[offset:offset + length])
        offset += length


def find_grid_sections(buffer) -> Tuple[Section, Section]:
    """
    Locate the grid-definition section and the data section after it.

    A data section seen before the grid definition is ignored.

    Returns
    -------
    tuple of Section
        (grid_definition_section, data_section)

    Raises
    ------
    NoGridDataError
        If either section is absent or the walk hits a malformed length.
    """
    grid_section = None
    for section in iter_sections(buffer):
        logger.debug(f"Section {section.number} at offset {section.offset} ({section.length:,} bytes)")
        if grid_section is None:
            if section.number == GRID_DEFINITION_SECTION:
                grid_section = section
        elif section.number == DATA_SECTION:
            return grid_section, section

    if grid_section is None:
        raise NoGridDataError("No grid definition section found")
    raise NoGridDataError("No data section found after the grid definition")
