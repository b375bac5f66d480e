"""
radar_render - rendering of decoded reflectivity points

- raster: bin points into a lat/lon raster
- colormaps: reflectivity colormaps
- geotiff: RGBA GeoTIFF / COG writers
- processor: buffer -> COG pipeline
"""

from .raster import RasterGrid, rasterize_points
from .colormaps import get_cmap_grc_th, get_cmap_nws_reflectivity, colormap_for
from .geotiff import (
    apply_colormap_to_array,
    create_geotiff,
    create_cog,
    save_raster_as_geotiff,
)
from .processor import process_grib_to_cog

__version__ = "0.1.0"

__all__ = [
    "RasterGrid",
    "rasterize_points",
    "get_cmap_grc_th",
    "get_cmap_nws_reflectivity",
    "colormap_for",
    "apply_colormap_to_array",
    "create_geotiff",
    "create_cog",
    "save_raster_as_geotiff",
    "process_grib_to_cog",
]
