"""
Binning decoded points into a regular latitude/longitude raster.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

import numpy as np
from affine import Affine
from rasterio.transform import from_bounds

from grib_decoder import DecodedGrid, RadarDataPoint

from .constants import DEFAULT_RESOLUTION_DEG, RASTER_REDUCERS

logger = logging.getLogger(__name__)

Bounds = Tuple[float, float, float, float]


@dataclass
class RasterGrid:
    """
    A north-up lat/lon raster of reflectivity values.

    Attributes
    ----------
    data : np.ndarray
        Values, shape (ny, nx), float32, NaN where no point fell
    bounds : tuple of float
        (south, west, north, east) of the outer cell edges, degrees
    resolution : float
        Cell size in degrees
    """

    data: np.ndarray
    bounds: Bounds
    resolution: float

    @property
    def shape(self) -> Tuple[int, int]:
        return self.data.shape

    @property
    def transform(self) -> Affine:
        """Affine transform mapping (col, row) to (lng, lat)."""
        south, west, north, east = self.bounds
        ny, nx = self.data.shape
        return from_bounds(west, south, east, north, nx, ny)

    def n_filled(self) -> int:
        """Return number of cells holding a value."""
        return int(np.count_nonzero(~np.isnan(self.data)))

    def __repr__(self) -> str:
        return (
            f"RasterGrid(shape={self.shape}, bounds={self.bounds}, "
            f"resolution={self.resolution}, filled={self.n_filled():,})"
        )


def _point_arrays(points) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    if isinstance(points, DecodedGrid):
        return points.to_arrays()
    pts = list(points)
    if not pts:
        empty = np.empty(0, dtype=np.float64)
        return empty, empty.copy(), empty.copy()
    arr = np.array([(p.lat, p.lng, p.value) for p in pts], dtype=np.float64)
    return arr[:, 0], arr[:, 1], arr[:, 2]


def rasterize_points(
    points: Union[DecodedGrid, Iterable[RadarDataPoint]],
    resolution: float = DEFAULT_RESOLUTION_DEG,
    bounds: Optional[Bounds] = None,
    reducer: str = "max"
) -> RasterGrid:
    """
    Bin points into raster cells.

    Parameters
    ----------
    points : DecodedGrid or iterable of RadarDataPoint
        Points to rasterize
    resolution : float, optional
        Cell size in degrees (default: 0.05)
    bounds : tuple of float, optional
        (south, west, north, east). Default: extent of the points padded by
        half a cell. Points outside explicit bounds are ignored.
    reducer : str, optional
        'max' (default) or 'mean' of the points falling in one cell

    Returns
    -------
    RasterGrid

    Raises
    ------
    ValueError
        On a non-positive resolution, an unknown reducer, empty input
        without bounds, or degenerate bounds.
    """
    if resolution <= 0:
        raise ValueError(f"resolution must be positive, got {resolution}")
    if reducer not in RASTER_REDUCERS:
        raise ValueError(f"Unknown reducer '{reducer}'. Valid options: {', '.join(RASTER_REDUCERS)}")

    lats, lngs, values = _point_arrays(points)

    if bounds is None:
        if lats.size == 0:
            raise ValueError("Cannot derive raster bounds from an empty point set")
        half = resolution / 2
        bounds = (lats.min() - half, lngs.min() - half, lats.max() + half, lngs.max() + half)

    south, west, north, east = (float(b) for b in bounds)
    if north <= south or east <= west:
        raise ValueError(f"Degenerate bounds: {bounds}")

    nx = max(1, math.ceil((east - west) / resolution))
    ny = max(1, math.ceil((north - south) / resolution))
    # Snap the far edges to whole cells
    east = west + nx * resolution
    south = north - ny * resolution

    inside = (lats >= south) & (lats <= north) & (lngs >= west) & (lngs <= east)
    lats, lngs, values = lats[inside], lngs[inside], values[inside]

    rows = np.clip(((north - lats) / resolution).astype(np.int64), 0, ny - 1)
    cols = np.clip(((lngs - west) / resolution).astype(np.int64), 0, nx - 1)

    if reducer == "max":
        data = np.full((ny, nx), -np.inf, dtype=np.float64)
        np.maximum.at(data, (rows, cols), values)
        data[np.isneginf(data)] = np.nan
    else:
        sums = np.zeros((ny, nx), dtype=np.float64)
        counts = np.zeros((ny, nx), dtype=np.int64)
        np.add.at(sums, (rows, cols), values)
        np.add.at(counts, (rows, cols), 1)
        with np.errstate(invalid='ignore', divide='ignore'):
            data = np.where(counts > 0, sums / counts, np.nan)

    raster = RasterGrid(data=data.astype(np.float32), bounds=(south, west, north, east),
                        resolution=resolution)
    logger.info(f"Rasterized {values.size:,} points into {ny}x{nx} cells")
    return raster
