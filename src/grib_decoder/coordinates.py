"""
Mapping grid indices to geographic coordinates.
"""

from typing import Tuple

import numpy as np

from .constants import LAT_LIMITS, LNG_LIMITS
from .grid import GridDefinition


def normalize_longitude(lng):
    """Map the 0-360 longitude convention to -180/+180 (scalar or array)."""
    if isinstance(lng, np.ndarray):
        return np.where(lng > 180.0, lng - 360.0, lng)
    return lng - 360.0 if lng > 180.0 else lng


def grid_to_latlon(row: int, col: int, grid: GridDefinition) -> Tuple[float, float]:
    """
    Convert a (row, column) index into (latitude, longitude).

    Parameters
    ----------
    row : int
        Row index (along the meridian, 0 = first row in the message)
    col : int
        Column index (along the parallel)
    grid : GridDefinition
        Grid geometry and scanning mode

    Returns
    -------
    tuple of float
        (lat, lng) in degrees, longitude normalized to -180/+180

    Examples
    --------
    For an MRMS-like grid starting at (55, 230) with 0.01 degree steps,
    scanning north-to-south and west-to-east, row 100 / column 200 maps
    to (54.0, -128.0).
    """
    flags = grid.scan_flags
    d_lat = row * abs(grid.row_increment)
    d_lng = col * abs(grid.col_increment)

    lat = grid.lat1 - d_lat if flags.north_to_south else grid.lat1 + d_lat
    lng = grid.lon1 + d_lng if flags.west_to_east else grid.lon1 - d_lng
    return lat, normalize_longitude(lng)


def grid_to_latlon_arrays(
    rows: np.ndarray,
    cols: np.ndarray,
    grid: GridDefinition
) -> Tuple[np.ndarray, np.ndarray]:
    """Vectorized ``grid_to_latlon`` for index arrays of equal shape."""
    flags = grid.scan_flags
    d_lat = np.asarray(rows, dtype=np.float64) * abs(grid.row_increment)
    d_lng = np.asarray(cols, dtype=np.float64) * abs(grid.col_increment)

    lats = grid.lat1 - d_lat if flags.north_to_south else grid.lat1 + d_lat
    lngs = grid.lon1 + d_lng if flags.west_to_east else grid.lon1 - d_lng
    return lats, normalize_longitude(lngs)


def in_bounds(lat: float, lng: float) -> bool:
    """Return True when the coordinate is a valid point location."""
    return LAT_LIMITS[0] <= lat <= LAT_LIMITS[1] and LNG_LIMITS[0] <= lng <= LNG_LIMITS[1]


def in_bounds_mask(lats: np.ndarray, lngs: np.ndarray) -> np.ndarray:
    """Boolean mask of coordinates inside the valid lat/lng ranges."""
    return (
        (lats >= LAT_LIMITS[0]) & (lats <= LAT_LIMITS[1])
        & (lngs >= LNG_LIMITS[0]) & (lngs <= LNG_LIMITS[1])
    )
