"""
Constants for GRIB2 reflectivity decoding.

Byte-level layout of the messages we accept, the sample code packing used by
MRMS reflectivity products, and the defaults used when assembling output.
"""

# Optional compression wrapper
GZIP_MAGIC = b"\x1f\x8b"

# Section 0 (indicator)
GRIB_MAGIC = b"GRIB"
INDICATOR_LENGTH = 16
END_MARKER = b"7777"

# Generic section header: 4-byte length + 1-byte section number
SECTION_HEADER_LENGTH = 5
GRID_DEFINITION_SECTION = 3
DATA_SECTION = 7

# Section 3, template 3.0 (latitude/longitude grid), 0-based offsets
LATLON_TEMPLATE = 0
GRID_TEMPLATE_OFFSETS = {
    "template": 12,
    "ni": 30,
    "nj": 34,
    "la1": 46,
    "lo1": 50,
    "la2": 55,
    "lo2": 59,
    "di": 63,
    "dj": 67,
    "scan_mode": 71,
}
GRID_TEMPLATE_MIN_LENGTH = 72
COORDINATE_SCALE = 1e6
MISSING_INCREMENT = 0xFFFFFFFF

# Scanning mode flag bits (code table 3.4)
SCAN_ROW_NEGATIVE = 0x80
SCAN_COLUMN_POSITIVE = 0x40
SCAN_CONSECUTIVE_J = 0x20

# Section 7: header, then packed big-endian 16-bit codes
DATA_HEADER_LENGTH = 5
SAMPLE_DTYPE = ">u2"

# Reserved sample codes meaning "no data"
MISSING_CODES = (0, 32767, 65535)

# Thresholds of the signed/offset packing scheme
NEGATIVE_CODE_THRESHOLD = 32000
OFFSET_CODE_THRESHOLD = 3200
CODE_WRAP = 65535
CODE_SCALE = 100.0
OFFSET_DBZ = 32.0

# Output assembly
DEFAULT_POINT_BUDGET = 20000
DEFAULT_VALUE_RANGE = (-30.0, 80.0)   # dBZ, inclusive
SIGNIFICANT_DBZ = 20.0

LAT_LIMITS = (-90.0, 90.0)
LNG_LIMITS = (-180.0, 180.0)

# Synthetic fallback field
FALLBACK_SEED = 20240601
SPIRAL_RADIUS_STEP = 0.15
SPIRAL_MIN_POINTS = 8
SPIRAL_POINTS_PER_DEGREE = 12
SPIRAL_TWIST = 0.5
SPIRAL_LAT_SQUASH = 0.8
SPIRAL_NOISE_DBZ = 10.0
SPIRAL_BAND_DBZ = 5.0
SPIRAL_BAND_FREQ = 3.0
SPIRAL_MIN_DBZ = 5.0
SPIRAL_JITTER_DEG = 0.1
SCATTER_POINTS_PER_STORM = 50
SCATTER_DISTANCE_DEG = 2.0
SCATTER_DBZ = (5.0, 20.0)
BACKGROUND_CANDIDATES = 200
BACKGROUND_LAT = (25.0, 50.0)        # continental US
BACKGROUND_LNG = (-125.0, -65.0)
BACKGROUND_MAX_DBZ = 20.0
BACKGROUND_MIN_DBZ = 8.0

STORM_SYSTEMS = (
    {"name": "Kansas", "lat": 39.0, "lng": -95.0, "intensity": 45.0, "size": 3.0},
    {"name": "Alabama", "lat": 32.0, "lng": -85.0, "intensity": 35.0, "size": 2.5},
    {"name": "Chicago", "lat": 41.5, "lng": -87.5, "intensity": 25.0, "size": 2.0},
    {"name": "Houston", "lat": 29.5, "lng": -95.0, "intensity": 40.0, "size": 2.8},
    {"name": "Phoenix", "lat": 33.5, "lng": -112.0, "intensity": 20.0, "size": 1.5},
    {"name": "Seattle", "lat": 47.0, "lng": -122.0, "intensity": 30.0, "size": 2.2},
)
