"""
radar_feed - raw buffer sources for the GRIB2 decoder

- fetch: latest MRMS file over HTTP with retry/backoff and a TTL cache
- upload: validated reads of local files
"""

from .fetch import (
    RadarDownload,
    fetch_latest_radar,
    head_latest_radar,
    latest_url,
    backoff_delay,
    DOWNLOAD_CACHE,
)
from .upload import read_upload
from .errors import RadarFetchError, UploadError

__version__ = "0.1.0"

__all__ = [
    "RadarDownload",
    "fetch_latest_radar",
    "head_latest_radar",
    "latest_url",
    "backoff_delay",
    "DOWNLOAD_CACHE",
    "read_upload",
    "RadarFetchError",
    "UploadError",
]
