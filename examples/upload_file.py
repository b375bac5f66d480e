"""
Example: Decode a local GRIB2 file and inspect the decode diagnostics.

Usage: python upload_file.py path/to/MRMS_ReflectivityAtLowestAltitude.grib2.gz
"""
import sys

from grib_decoder import decode
from radar_feed import UploadError, read_upload


def main(path):
    try:
        buffer = read_upload(path)
    except UploadError as exc:
        print(f"Rejected: {exc}")
        return 1

    result = decode(buffer, on_event=lambda e: print(f"  [{e.stage}] {e.message}"))

    print(f"\n{result!r}")
    if result.grid is not None:
        print(f"Grid: {result.grid!r}")
    for record in result.to_records()[:5]:
        print(f"  {record}")
    return 0


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(2)
    sys.exit(main(sys.argv[1]))
