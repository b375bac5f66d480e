"""
Rendering parameters for decoded reflectivity points.
"""

FIELD_NAME = "DBZ"
FIELD_UNITS = "dBZ"

# Default rendering parameters
REFLECTIVITY_RENDER = {"vmin": -20.0, "vmax": 70.0, "cmap": "grc_th"}

# Value range each colormap was designed for
COLORMAP_RANGES = {
    "grc_th": (-20.0, 70.0),
    "nws_reflectivity": (5.0, 80.0),
    "viridis": (-20.0, 70.0),
    "jet": (-20.0, 70.0),
}

# Available colormap options
REFLECTIVITY_COLORMAP_OPTIONS = list(COLORMAP_RANGES)

# Raster defaults
DEFAULT_RESOLUTION_DEG = 0.05
DEFAULT_PROJECTION = "EPSG:3857"
DEFAULT_OVERVIEW_FACTORS = [2, 4, 8, 16]
RASTER_REDUCERS = ("max", "mean")
