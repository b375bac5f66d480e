"""
Unit tests for grib_decoder.fallback module.
"""
import numpy as np
import pytest

from grib_decoder.constants import SCATTER_POINTS_PER_STORM
from grib_decoder.coordinates import in_bounds
from grib_decoder.fallback import DEFAULT_STORMS, FallbackGenerator, StormSystem


@pytest.fixture
def kansas():
    return StormSystem(name="Kansas", lat=39.0, lng=-95.0, intensity=45.0, size=3.0)


class TestStormSystem:
    """Tests for storm definitions."""

    def test_default_storms(self):
        """Test the six built-in storm centres."""
        assert len(DEFAULT_STORMS) == 6
        assert {s.name for s in DEFAULT_STORMS} >= {"Kansas", "Seattle"}

    def test_radii(self, kansas):
        """Test that radii run from 0 to the storm size inclusive."""
        radii = kansas.radii()
        assert radii.size == 21
        assert radii[0] == 0.0
        assert radii[-1] == pytest.approx(3.0)


class TestFallbackGenerator:
    """Tests for the synthetic field."""

    def test_non_empty(self):
        """Test that the default field always has points."""
        assert len(FallbackGenerator().generate()) > 0

    def test_same_seed_same_points(self):
        """Test determinism for a fixed seed."""
        assert FallbackGenerator(seed=42).generate() == FallbackGenerator(seed=42).generate()

    def test_different_seeds_differ(self):
        """Test that the seed changes the field."""
        assert FallbackGenerator(seed=1).generate() != FallbackGenerator(seed=2).generate()

    def test_accepts_generator(self):
        """Test that a ready numpy Generator can be supplied."""
        a = FallbackGenerator(seed=np.random.default_rng(5)).generate()
        b = FallbackGenerator(seed=5).generate()
        assert a == b

    def test_points_valid(self):
        """Test coordinate bounds and intensity floor of every point."""
        points = FallbackGenerator(seed=3).generate()
        assert all(in_bounds(p.lat, p.lng) for p in points)
        assert all(p.value >= 5.0 for p in points)

    def test_scatter_count(self, kansas):
        """Test that each storm gets a fixed ring of scattered points."""
        points = FallbackGenerator(seed=0).scatter(kansas)
        assert len(points) == SCATTER_POINTS_PER_STORM
        for p in points:
            distance = np.hypot(p.lat - kansas.lat, p.lng - kansas.lng)
            assert kansas.size <= distance + 1e-9
            assert distance <= kansas.size + 2.0 + 1e-9
            assert 5.0 <= p.value < 20.0

    def test_spiral_near_centre(self, kansas):
        """Test that spiral points stay within the storm radius plus jitter."""
        points = FallbackGenerator(seed=0).spiral(kansas)
        assert points
        for p in points:
            assert abs(p.lat - kansas.lat) <= kansas.size + 0.1
            assert abs(p.lng - kansas.lng) <= kansas.size + 0.1
            assert p.value > 5.0

    def test_background(self):
        """Test background candidates over the continental US."""
        points = FallbackGenerator(seed=0).background()
        assert len(points) <= 200
        for p in points:
            assert 25.0 <= p.lat <= 50.0
            assert -125.0 <= p.lng <= -65.0
            assert 8.0 < p.value < 20.0

    def test_custom_storms(self, kansas):
        """Test rendering a single storm."""
        points = FallbackGenerator(seed=0, storms=[kansas]).generate()
        assert len(points) >= SCATTER_POINTS_PER_STORM

    def test_no_storms_only_background(self):
        """Test that an empty storm list leaves only the background."""
        points = FallbackGenerator(seed=0, storms=[]).generate()
        assert all(25.0 <= p.lat <= 50.0 for p in points)
