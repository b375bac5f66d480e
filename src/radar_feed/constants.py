"""
Constants for retrieving MRMS reflectivity messages.
"""

# Regional MRMS directories publishing the product, and its rolling "latest" file
MRMS_REGIONS = {
    "CONUS": "https://mrms.ncep.noaa.gov/2D/ReflectivityAtLowestAltitude/",
    "HAWAII": "https://mrms.ncep.noaa.gov/2D/HAWAII/ReflectivityAtLowestAltitude/",
}
DEFAULT_REGION = "CONUS"
MRMS_BASE_URL = MRMS_REGIONS[DEFAULT_REGION]
LATEST_FILE_NAME = "MRMS_ReflectivityAtLowestAltitude.latest.grib2.gz"

# Retry policy
MAX_RETRIES = 3
REQUEST_TIMEOUT_S = 30.0
BACKOFF_BASE_S = 1.0
BACKOFF_CAP_S = 5.0

REQUEST_HEADERS = {
    "User-Agent": "radar-viz-app/1.0.0",
    "Accept": "application/gzip, application/octet-stream, */*",
    "Accept-Encoding": "identity",  # the payload is already gzip
    "Cache-Control": "no-cache",
}

# Download cache (bytes, seconds)
DOWNLOAD_CACHE_BYTES = 64 * 1024 * 1024
DOWNLOAD_CACHE_TTL_S = 120

# Local uploads
ALLOWED_EXTENSIONS = (".grib2", ".grb2", ".grib2.gz", ".grb2.gz", ".gz")
MAX_UPLOAD_MB = 100
