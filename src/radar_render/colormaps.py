"""
Reflectivity colormaps for rendering decoded points.
"""
from typing import Optional, Tuple

import matplotlib
from matplotlib.colors import Colormap, LinearSegmentedColormap, ListedColormap

from .constants import COLORMAP_RANGES, REFLECTIVITY_RENDER

# NWS reflectivity palette, one color per 5 dBZ from 5 to 80
NWS_REFLECTIVITY_COLORS = [
    "#04e9e7", "#019ff4", "#0300f4", "#02fd02", "#01c501",
    "#008e00", "#fdf802", "#e5bc00", "#fd9500", "#fd0000",
    "#d40000", "#bc0000", "#f800fd", "#9854c6", "#fdfdfd",
]


def get_cmap_grc_th():
    """Get custom colormap for reflectivity (TH) visualization."""
    grc_th = {
        'red': [
            (0.0, 1, 1),
            (0.33, 0.95, 0.95),
            (0.4, 0.24, 0.24),
            (0.45, 0.22, 0.22),
            (0.55, 0.04, 0.04),
            (0.63, 0.95, 0.95),
            (0.85, 1, 1),
            (1, 1, 1),
        ],
        'green': [
            (0.0, 1, 1),
            (0.33, 0.97, 0.97),
            (0.4, 0.46, 0.46),
            (0.4, 0.98, 0.98),
            (0.55, 0.62, 0.62),
            (0.63, 1, 1),
            (0.85, 0, 0),
            (1, 0, 0),
        ],
        'blue': [
            (0.0, 1, 1),
            (0.33, 0.95, 0.95),
            (0.4, 0.78, 0.78),
            (0.4, 0.52, 0.52),
            (0.55, 0.27, 0.27),
            (0.63, 0, 0),
            (0.85, 0, 0),
            (1, 1, 1),
        ],
    }
    return LinearSegmentedColormap('grc_th', grc_th)


def get_cmap_nws_reflectivity():
    """Get the stepped NWS reflectivity colormap (5 dBZ bins, 5 to 80 dBZ)."""
    return ListedColormap(NWS_REFLECTIVITY_COLORS, name='nws_reflectivity')


def colormap_for(cmap_key: Optional[str] = None) -> Tuple[Colormap, float, float, str]:
    """
    Get colormap and value range for reflectivity rendering.

    Parameters
    ----------
    cmap_key : str, optional
        'grc_th', 'nws_reflectivity' or any matplotlib colormap name
        (default: REFLECTIVITY_RENDER['cmap'])

    Returns
    -------
    Tuple[Colormap, float, float, str]
        (colormap_object, vmin, vmax, colormap_key)
    """
    key = cmap_key or REFLECTIVITY_RENDER["cmap"]
    vmin, vmax = COLORMAP_RANGES.get(
        key, (REFLECTIVITY_RENDER["vmin"], REFLECTIVITY_RENDER["vmax"])
    )

    if key == "grc_th":
        cmap = get_cmap_grc_th()
    elif key == "nws_reflectivity":
        cmap = get_cmap_nws_reflectivity()
    else:
        try:
            cmap = matplotlib.colormaps[key]
        except KeyError as exc:
            raise ValueError(f"Unknown colormap: {key}") from exc
    return cmap, vmin, vmax, key
