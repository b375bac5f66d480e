"""
Grid definition (section 3) parsing for the latitude/longitude template.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

from .constants import (
    COORDINATE_SCALE,
    GRID_TEMPLATE_MIN_LENGTH,
    GRID_TEMPLATE_OFFSETS,
    LATLON_TEMPLATE,
    MISSING_INCREMENT,
    SCAN_COLUMN_POSITIVE,
    SCAN_CONSECUTIVE_J,
    SCAN_ROW_NEGATIVE,
)
from .errors import NoGridDataError, UnsupportedTemplateError
from .sections import Section, read_int32, read_uint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanFlags:
    """
    Scanning mode flags (code table 3.4).

    Attributes
    ----------
    row_direction_negative : bool
        Bit 0x80. Points along a row are scanned east-to-west.
    column_scans_positive : bool
        Bit 0x40. Rows follow each other south-to-north.
    consecutive_points_axis : bool
        Bit 0x20. Adjacent points are consecutive along a column instead of
        along a row.
    raw : int
        The flag byte as stored in the message.
    """

    row_direction_negative: bool = False
    column_scans_positive: bool = False
    consecutive_points_axis: bool = False
    raw: int = 0

    @classmethod
    def from_byte(cls, value: int) -> "ScanFlags":
        return cls(
            row_direction_negative=bool(value & SCAN_ROW_NEGATIVE),
            column_scans_positive=bool(value & SCAN_COLUMN_POSITIVE),
            consecutive_points_axis=bool(value & SCAN_CONSECUTIVE_J),
            raw=value,
        )

    @property
    def north_to_south(self) -> bool:
        return not self.column_scans_positive

    @property
    def west_to_east(self) -> bool:
        return not self.row_direction_negative


@dataclass(frozen=True)
class GridDefinition:
    """
    Shape, corners, increments and scanning mode of a lat/lon grid.

    Attributes
    ----------
    points_per_row : int
        Ni, number of points along a parallel (columns)
    points_per_column : int
        Nj, number of points along a meridian (rows)
    lat1, lon1 : float
        First grid point in degrees (longitude in the 0-360 convention)
    lat2, lon2 : float
        Last grid point in degrees
    row_increment : float
        Latitude step between consecutive rows, degrees
    col_increment : float
        Longitude step between consecutive columns, degrees
    scan_flags : ScanFlags
        Traversal directions
    template : int
        Grid definition template number
    """

    points_per_row: int
    points_per_column: int
    lat1: float
    lon1: float
    lat2: float
    lon2: float
    row_increment: float
    col_increment: float
    scan_flags: ScanFlags = ScanFlags()
    template: int = LATLON_TEMPLATE

    def __post_init__(self):
        if self.points_per_row <= 0 or self.points_per_column <= 0:
            raise NoGridDataError(
                f"Empty grid: {self.points_per_column} rows x {self.points_per_row} columns"
            )

    @property
    def shape(self) -> Tuple[int, int]:
        """Return (rows, columns)."""
        return self.points_per_column, self.points_per_row

    def n_points(self) -> int:
        """Return the number of grid cells."""
        return self.points_per_row * self.points_per_column

    def __repr__(self) -> str:
        return (
            f"GridDefinition(shape={self.shape}, "
            f"first=({self.lat1:.4f}, {self.lon1:.4f}), "
            f"last=({self.lat2:.4f}, {self.lon2:.4f}), "
            f"increments=({self.row_increment:.4f}, {self.col_increment:.4f}), "
            f"scan=0x{self.scan_flags.raw:02x})"
        )


def _derive_increment(first: float, last: float, n: int) -> float:
    if n <= 1:
        return 0.0
    return abs(last - first) / (n - 1)


def parse_grid_definition(section: Section) -> GridDefinition:
    """
    Decode a grid definition section using template 3.0.

    Parameters
    ----------
    section : Section
        Section 3 as returned by the section walker.

    Returns
    -------
    GridDefinition

    Raises
    ------
    UnsupportedTemplateError
        If the section declares any template other than 3.0.
    NoGridDataError
        If the section is too short or describes an empty grid.

    Notes
    -----
    Increments stored as the all-ones "missing" pattern are derived from the
    corner coordinates instead.
    """
    buf = section.payload
    off = GRID_TEMPLATE_OFFSETS

    template = read_uint(buf, off["template"], 2)
    if template != LATLON_TEMPLATE:
        raise UnsupportedTemplateError(template)

    if len(buf) < GRID_TEMPLATE_MIN_LENGTH:
        raise NoGridDataError(
            f"Grid definition section too short for template 3.0: {len(buf)} bytes"
        )

    ni = read_uint(buf, off["ni"], 4)
    nj = read_uint(buf, off["nj"], 4)
    lat1 = read_int32(buf, off["la1"]) / COORDINATE_SCALE
    lon1 = read_int32(buf, off["lo1"]) / COORDINATE_SCALE
    lat2 = read_int32(buf, off["la2"]) / COORDINATE_SCALE
    lon2 = read_int32(buf, off["lo2"]) / COORDINATE_SCALE
    di_raw = read_uint(buf, off["di"], 4)
    dj_raw = read_uint(buf, off["dj"], 4)
    scan = read_uint(buf, off["scan_mode"], 1)

    if di_raw == MISSING_INCREMENT:
        col_increment = _derive_increment(lon1, lon2, ni)
    else:
        col_increment = di_raw / COORDINATE_SCALE
    if dj_raw == MISSING_INCREMENT:
        row_increment = _derive_increment(lat1, lat2, nj)
    else:
        row_increment = dj_raw / COORDINATE_SCALE

    grid = GridDefinition(
        points_per_row=ni,
        points_per_column=nj,
        lat1=lat1,
        lon1=lon1,
        lat2=lat2,
        lon2=lon2,
        row_increment=row_increment,
        col_increment=col_increment,
        scan_flags=ScanFlags.from_byte(scan),
        template=template,
    )
    logger.debug(f"Parsed {grid!r}")
    return grid
