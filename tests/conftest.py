"""
Pytest configuration and fixtures.
"""
import gzip
import struct

import numpy as np
import pytest

MISSING_INCREMENT = 0xFFFFFFFF


def _section(number: int, body: bytes) -> bytes:
    return struct.pack(">IB", len(body) + 5, number) + body


def _grid_section(ni, nj, lat1, lon1, lat2, lon2, di, dj, scan_mode, template):
    sec = bytearray(72)
    struct.pack_into(">IB", sec, 0, 72, 3)
    struct.pack_into(">I", sec, 6, ni * nj)
    struct.pack_into(">H", sec, 12, template)
    sec[14] = 6  # shape of the earth
    struct.pack_into(">II", sec, 30, ni, nj)
    struct.pack_into(">ii", sec, 46, round(lat1 * 1e6), round(lon1 * 1e6))
    sec[54] = 0x30
    struct.pack_into(">ii", sec, 55, round(lat2 * 1e6), round(lon2 * 1e6))
    struct.pack_into(">I", sec, 63, MISSING_INCREMENT if di is None else round(di * 1e6))
    struct.pack_into(">I", sec, 67, MISSING_INCREMENT if dj is None else round(dj * 1e6))
    sec[71] = scan_mode
    return bytes(sec)


def build_grib_message(
    codes=None,
    ni=4,
    nj=3,
    lat1=55.0,
    lon1=230.0,
    lat2=None,
    lon2=None,
    di=0.01,
    dj=0.01,
    scan_mode=0x00,
    template=0,
    with_grid=True,
    with_data=True,
    data_before_grid=False,
    truncate=0,
    gzip_wrap=False,
):
    """
    Build a single-field GRIB2 message.

    ``codes`` defaults to 1000 + cell index (10.0 dBZ and up). ``truncate``
    drops that many bytes from the end of the message.
    """
    if codes is None:
        codes = 1000 + np.arange(ni * nj)
    codes = np.asarray(codes).astype(">u2")

    step_lat = dj if dj is not None else 0.01
    step_lon = di if di is not None else 0.01
    if lat2 is None:
        lat2 = lat1 + (nj - 1) * step_lat if scan_mode & 0x40 else lat1 - (nj - 1) * step_lat
    if lon2 is None:
        lon2 = lon1 - (ni - 1) * step_lon if scan_mode & 0x80 else lon1 + (ni - 1) * step_lon

    data = _section(7, codes.tobytes())
    sections = [_section(1, bytes(16))]
    if data_before_grid:
        sections.append(data)
    if with_grid:
        sections.append(_grid_section(ni, nj, lat1, lon1, lat2, lon2, di, dj, scan_mode, template))
    sections.append(_section(4, bytes(29)))
    sections.append(_section(5, bytes(16)))
    sections.append(_section(6, b"\xff"))
    if with_data and not data_before_grid:
        sections.append(data)

    body = b"".join(sections) + b"7777"
    total = 16 + len(body)
    message = b"GRIB" + b"\x00\x00" + bytes([209, 2]) + struct.pack(">Q", total) + body

    if truncate:
        message = message[:-truncate]
    if gzip_wrap:
        message = gzip.compress(message)
    return message


@pytest.fixture
def make_grib():
    """Factory building synthetic GRIB2 messages."""
    return build_grib_message


@pytest.fixture
def mrms_message(make_grib):
    """Small MRMS-like grid: 5 rows x 6 columns from (55, 230), N->S, W->E."""
    codes = np.array([
        [0, 1000, 2000, 3000, 32767, 65535],
        [4200, 4500, 5000, 5500, 6000, 6500],
        [100, 200, 300, 400, 500, 600],
        [33000, 65000, 64000, 1500, 2500, 3500],
        [7000, 7200, 7400, 7600, 7800, 8000],
    ])
    return make_grib(codes=codes.ravel(), ni=6, nj=5)


@pytest.fixture(autouse=True)
def clear_caches():
    """Clear caches before and after each test."""
    from radar_feed.fetch import DOWNLOAD_CACHE
    DOWNLOAD_CACHE.clear()
    yield
    DOWNLOAD_CACHE.clear()
