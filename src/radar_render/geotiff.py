"""
GeoTIFF generation for rasterized reflectivity.

Rasters are colored to RGBA with a matplotlib colormap and written with
rasterio, either as a plain tiled GeoTIFF or as a Cloud-Optimized GeoTIFF
(COG) with pyramid overviews. Rasters are built in WGS84; any other target
projection is produced by warping the RGBA bands.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import matplotlib
import numpy as np
import pyproj
import rasterio
from affine import Affine
from matplotlib.colors import Normalize
from rasterio.enums import ColorInterp, Resampling
from rasterio.warp import calculate_default_transform, reproject

from .constants import DEFAULT_OVERVIEW_FACTORS, DEFAULT_PROJECTION
from .raster import RasterGrid

logger = logging.getLogger(__name__)

WGS84 = "EPSG:4326"


def _string_to_resampling(method: str) -> Resampling:
    """
    Convert resampling method string to rasterio Resampling enum.

    Raises
    ------
    ValueError
        If method is not valid
    """
    method_map = {
        'nearest': Resampling.nearest,
        'bilinear': Resampling.bilinear,
        'cubic': Resampling.cubic,
        'average': Resampling.average,
        'mode': Resampling.mode,
        'max': Resampling.max,
        'min': Resampling.min,
        'rms': Resampling.rms,
    }

    if method not in method_map:
        valid = ', '.join(method_map.keys())
        raise ValueError(f"Invalid resampling method '{method}'. Valid options: {valid}")

    return method_map[method]


def apply_colormap_to_array(
    data: np.ndarray,
    cmap: Union[str, matplotlib.colors.Colormap],
    vmin: Optional[float] = None,
    vmax: Optional[float] = None
) -> np.ndarray:
    """
    Apply a colormap to a 2D data array, converting to RGBA.

    Parameters
    ----------
    data : np.ndarray
        2D array of data values, shape (ny, nx). NaN marks no-data.
    cmap : str or matplotlib.colors.Colormap
        Colormap name or object
    vmin, vmax : float, optional
        Normalization range (default: range of the valid data)

    Returns
    -------
    np.ndarray
        RGBA image, shape (ny, nx, 4), uint8; alpha is 0 for no-data cells
        and 255 elsewhere.
    """
    if isinstance(cmap, str):
        cmap = matplotlib.colormaps[cmap]

    nodata = np.isnan(data)
    valid = data[~nodata]
    if vmin is None:
        vmin = float(valid.min()) if valid.size else 0.0
    if vmax is None:
        vmax = float(valid.max()) if valid.size else 1.0

    norm = Normalize(vmin=vmin, vmax=vmax, clip=True)
    rgba = (cmap(norm(np.where(nodata, vmin, data))) * 255).astype(np.uint8)
    rgba[..., 3] = np.where(nodata, 0, 255)
    return rgba


def _target_grid(
    raster: RasterGrid,
    projection: str
) -> Tuple[pyproj.CRS, Affine, int, int]:
    """CRS, transform and size of the output image."""
    target = pyproj.CRS.from_user_input(projection)
    ny, nx = raster.shape
    if target.to_epsg() == 4326:
        return target, raster.transform, nx, ny

    south, west, north, east = raster.bounds
    transform, width, height = calculate_default_transform(
        WGS84, target.to_wkt(), nx, ny, left=west, bottom=south, right=east, top=north
    )
    return target, transform, width, height


def _render_bands(
    raster: RasterGrid,
    cmap,
    vmin: Optional[float],
    vmax: Optional[float],
    projection: str
) -> Tuple[np.ndarray, pyproj.CRS, Affine]:
    """RGBA bands (4, height, width) in the target projection."""
    rgba = np.moveaxis(apply_colormap_to_array(raster.data, cmap, vmin, vmax), -1, 0)
    crs, transform, width, height = _target_grid(raster, projection)
    if crs.to_epsg() == 4326:
        return np.ascontiguousarray(rgba), crs, transform

    warped = np.zeros((4, height, width), dtype=np.uint8)
    reproject(
        source=rgba,
        destination=warped,
        src_transform=raster.transform,
        src_crs=WGS84,
        dst_transform=transform,
        dst_crs=crs.to_wkt(),
        resampling=Resampling.nearest,
    )
    return warped, crs, transform


def _write_rgba(dst, bands: np.ndarray) -> None:
    dst.write(bands)
    dst.colorinterp = (
        ColorInterp.red,
        ColorInterp.green,
        ColorInterp.blue,
        ColorInterp.alpha
    )


def create_geotiff(
    raster: RasterGrid,
    output_path: Union[str, Path],
    cmap: Union[str, matplotlib.colors.Colormap] = 'viridis',
    vmin: Optional[float] = None,
    vmax: Optional[float] = None,
    projection: str = DEFAULT_PROJECTION
) -> Path:
    """
    Write a colored raster as a tiled RGBA GeoTIFF.

    Parameters
    ----------
    raster : RasterGrid
        Rasterized reflectivity
    output_path : str or Path
        Output file path
    cmap : str or Colormap, optional
        Colormap to apply (default: 'viridis')
    vmin, vmax : float, optional
        Colormap normalization range
    projection : str, optional
        Target CRS (default: 'EPSG:3857' - Web Mercator)

    Returns
    -------
    Path
        Path to the created file
    """
    output_path = Path(output_path)
    bands, crs, transform = _render_bands(raster, cmap, vmin, vmax, projection)

    with rasterio.open(
        output_path,
        'w',
        driver='GTiff',
        height=bands.shape[1],
        width=bands.shape[2],
        count=4,
        dtype=np.uint8,
        crs=crs.to_wkt(),
        transform=transform,
        compress='DEFLATE',
        tiled=True
    ) as dst:
        _write_rgba(dst, bands)

    logger.info(f"Wrote GeoTIFF {output_path} ({bands.shape[2]}x{bands.shape[1]})")
    return output_path


def _usable_overview_factors(factors: list, width: int, height: int) -> list:
    """Keep the overview factors that leave at least one pixel per axis."""
    usable = [f for f in factors if min(width, height) // f >= 1]
    if usable != factors:
        logger.debug(f"Overview factors {factors} reduced to {usable} for {width}x{height} image")
    return usable


def create_cog(
    raster: RasterGrid,
    output_path: Union[str, Path],
    cmap: Union[str, matplotlib.colors.Colormap] = 'viridis',
    vmin: Optional[float] = None,
    vmax: Optional[float] = None,
    projection: str = DEFAULT_PROJECTION,
    overview_factors: Optional[list] = None,
    resampling_method: str = 'nearest'
) -> Path:
    """
    Write a colored raster as a Cloud-Optimized GeoTIFF with overviews.

    Parameters
    ----------
    raster : RasterGrid
        Rasterized reflectivity
    output_path : str or Path
        Output file path
    cmap : str or Colormap, optional
        Colormap to apply (default: 'viridis')
    vmin, vmax : float, optional
        Colormap normalization range
    projection : str, optional
        Target CRS (default: 'EPSG:3857' - Web Mercator)
    overview_factors : list of int, optional
        Downsampling factors (default [2, 4, 8, 16]). [] disables overviews;
        factors that would shrink an axis below one pixel are skipped.
    resampling_method : str, optional
        Overview resampling (default: 'nearest')

    Returns
    -------
    Path
        Path to the created COG

    Raises
    ------
    TypeError
        If overview_factors is not a list
    ValueError
        If resampling_method is unknown
    """
    output_path = Path(output_path)

    if overview_factors is None:
        overview_factors = list(DEFAULT_OVERVIEW_FACTORS)
    if not isinstance(overview_factors, list):
        raise TypeError(
            f"overview_factors must be a list, got {type(overview_factors).__name__}"
        )
    resampling_enum = _string_to_resampling(resampling_method)

    bands, crs, transform = _render_bands(raster, cmap, vmin, vmax, projection)
    overview_factors = _usable_overview_factors(overview_factors, bands.shape[2], bands.shape[1])

    with rasterio.open(
        output_path,
        'w',
        driver='COG',
        height=bands.shape[1],
        width=bands.shape[2],
        count=4,
        dtype=np.uint8,
        crs=crs.to_wkt(),
        transform=transform,
        compress='DEFLATE',
        predictor=2,
        BIGTIFF='IF_NEEDED'
    ) as dst:
        _write_rgba(dst, bands)
        if overview_factors:
            dst.build_overviews(overview_factors, resampling_enum)
            dst.update_tags(ns='rio_overview', resampling=resampling_method)

    logger.info(f"Wrote COG {output_path} ({bands.shape[2]}x{bands.shape[1]}, overviews={overview_factors})")
    return output_path


def save_raster_as_geotiff(
    raster: RasterGrid,
    output_path: Union[str, Path],
    cmap: Union[str, matplotlib.colors.Colormap] = 'viridis',
    vmin: Optional[float] = None,
    vmax: Optional[float] = None,
    projection: str = DEFAULT_PROJECTION,
    as_cog: bool = True,
    overview_factors: Optional[list] = None,
    resampling_method: str = 'nearest'
) -> Path:
    """Write ``raster`` as a COG (default) or a plain GeoTIFF."""
    if as_cog:
        return create_cog(
            raster, output_path, cmap=cmap, vmin=vmin, vmax=vmax, projection=projection,
            overview_factors=overview_factors, resampling_method=resampling_method
        )
    return create_geotiff(raster, output_path, cmap=cmap, vmin=vmin, vmax=vmax,
                          projection=projection)
