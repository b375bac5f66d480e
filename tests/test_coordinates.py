"""
Unit tests for grib_decoder.coordinates module.
"""
import numpy as np
import pytest

from grib_decoder.coordinates import (
    grid_to_latlon,
    grid_to_latlon_arrays,
    in_bounds,
    in_bounds_mask,
    normalize_longitude,
)
from grib_decoder.grid import GridDefinition, ScanFlags


def make_grid(scan_mode=0x00, lat1=55.0, lon1=230.0, step=0.01, ni=7000, nj=3500):
    return GridDefinition(
        points_per_row=ni,
        points_per_column=nj,
        lat1=lat1,
        lon1=lon1,
        lat2=lat1 - (nj - 1) * step,
        lon2=lon1 + (ni - 1) * step,
        row_increment=step,
        col_increment=step,
        scan_flags=ScanFlags.from_byte(scan_mode),
    )


class TestNormalizeLongitude:
    """Tests for the 0-360 to -180/+180 conversion."""

    @pytest.mark.parametrize("lng,expected", [
        (230.0, -130.0),
        (180.0, 180.0),
        (180.5, -179.5),
        (359.0, -1.0),
        (10.0, 10.0),
        (-95.0, -95.0),
    ])
    def test_scalar(self, lng, expected):
        """Test scalar conversion."""
        assert normalize_longitude(lng) == pytest.approx(expected)

    def test_array(self):
        """Test array conversion."""
        result = normalize_longitude(np.array([230.0, 10.0, 300.0]))
        np.testing.assert_allclose(result, [-130.0, 10.0, -60.0])


class TestGridToLatLon:
    """Tests for index to coordinate mapping."""

    def test_mrms_example(self):
        """Test row 100 / column 200 of an MRMS-like grid."""
        lat, lng = grid_to_latlon(100, 200, make_grid())
        assert lat == pytest.approx(54.0)
        assert lng == pytest.approx(-128.0)

    def test_first_point(self):
        """Test that (0, 0) is the first grid point."""
        lat, lng = grid_to_latlon(0, 0, make_grid())
        assert lat == pytest.approx(55.0)
        assert lng == pytest.approx(-130.0)

    @pytest.mark.parametrize("scan_mode,expected", [
        (0x00, (54.0, -128.0)),   # N->S, W->E
        (0x40, (56.0, -128.0)),   # S->N, W->E
        (0x80, (54.0, -132.0)),   # N->S, E->W
        (0xC0, (56.0, -132.0)),   # S->N, E->W
    ])
    def test_scan_directions(self, scan_mode, expected):
        """Test the four direction combinations."""
        lat, lng = grid_to_latlon(100, 200, make_grid(scan_mode=scan_mode))
        assert lat == pytest.approx(expected[0])
        assert lng == pytest.approx(expected[1])

    def test_negative_increments_use_magnitude(self):
        """Test that signed increments do not flip the scan direction."""
        grid = GridDefinition(points_per_row=10, points_per_column=10, lat1=40.0, lon1=260.0,
                              lat2=39.1, lon2=260.9, row_increment=-0.1, col_increment=-0.1)
        lat, lng = grid_to_latlon(2, 3, grid)
        assert lat == pytest.approx(39.8)
        assert lng == pytest.approx(-99.7)

    def test_arrays_match_scalar(self):
        """Test the vectorized mapping against the scalar one."""
        grid = make_grid(scan_mode=0x80)
        rows = np.array([0, 10, 100, 3499])
        cols = np.array([0, 5, 200, 6999])
        lats, lngs = grid_to_latlon_arrays(rows, cols, grid)
        for i in range(rows.size):
            lat, lng = grid_to_latlon(int(rows[i]), int(cols[i]), grid)
            assert lats[i] == pytest.approx(lat)
            assert lngs[i] == pytest.approx(lng)


class TestBounds:
    """Tests for the coordinate validity checks."""

    @pytest.mark.parametrize("lat,lng,expected", [
        (0.0, 0.0, True),
        (90.0, 180.0, True),
        (-90.0, -180.0, True),
        (90.01, 0.0, False),
        (0.0, -180.5, False),
        (45.0, 230.0, False),
    ])
    def test_in_bounds(self, lat, lng, expected):
        """Test scalar bounds."""
        assert in_bounds(lat, lng) is expected

    def test_mask(self):
        """Test the vectorized mask."""
        lats = np.array([0.0, 91.0, 45.0])
        lngs = np.array([0.0, 0.0, 181.0])
        np.testing.assert_array_equal(in_bounds_mask(lats, lngs), [True, False, False])
