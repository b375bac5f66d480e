"""
Basic example: Fetch the latest MRMS reflectivity and render it to COG.

This example demonstrates the simplest use case - downloading the current
CONUS reflectivity message, decoding it and writing a Cloud-Optimized
GeoTIFF. If the download or the decode fails, a synthetic field is
rendered instead so there is always something to look at.
"""
import logging
from pathlib import Path

from grib_decoder import decode, split_by_intensity
from radar_feed import DOWNLOAD_CACHE, RadarFetchError, fetch_latest_radar
from radar_render import process_grib_to_cog


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    # Output directory for COG files
    output_dir = "output"

    try:
        download = fetch_latest_radar(cache=DOWNLOAD_CACHE)
        buffer = download.content
        print(f"Downloaded {len(download):,} bytes (Last-Modified: {download.last_modified})")
    except RadarFetchError as exc:
        print(f"Download failed ({exc}); decoding an empty buffer instead")
        buffer = b""

    # Quick look at the points themselves
    result = decode(buffer, point_budget=5000)
    significant, background = split_by_intensity(result.points)
    print(f"{result!r}: {len(significant):,} significant, {len(background):,} background points")

    # Render with the NWS palette
    summary = process_grib_to_cog(buffer, output_dir=output_dir, cmap="nws_reflectivity")

    print(f"COG file created: {summary['image_url']}")
    print(f"Synthetic fallback: {summary['is_synthetic_fallback']} ({summary['failure']})")
    print(f"Bounds (S, W, N, E): {summary['bounds']}")

    if summary['image_url'] and Path(summary['image_url']).exists():
        size_kb = Path(summary['image_url']).stat().st_size / 1024
        print(f"\nSuccess! File size: {size_kb:.2f} KB")
    else:
        print("\nNo image written (no precipitation in the decoded grid)")


if __name__ == "__main__":
    main()
