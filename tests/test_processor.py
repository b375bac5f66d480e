"""
Unit tests for radar_render.processor, the buffer to COG pipeline.
"""
import pytest
import rasterio

from radar_feed.errors import UploadError
from radar_render.processor import process_grib_to_cog


class TestProcessGribToCog:
    """End-to-end rendering."""

    def test_decoded_message(self, mrms_message, tmp_path):
        """Test rendering a valid message."""
        summary = process_grib_to_cog(mrms_message, output_dir=tmp_path, resolution=0.01,
                                      projection='EPSG:4326', overview_factors=[])

        assert summary["field"] == "DBZ"
        assert not summary["is_synthetic_fallback"]
        assert summary["failure"] is None
        assert summary["n_points"] == 26
        assert summary["source"].startswith("<buffer")
        south, west, north, east = summary["bounds"]
        assert north == pytest.approx(55.0)
        assert west == pytest.approx(-130.0)

        with rasterio.open(summary["image_url"]) as src:
            assert src.count == 4
            assert src.crs.to_epsg() == 4326

    def test_output_name(self, mrms_message, tmp_path):
        """Test that the file name encodes the rendering parameters."""
        summary = process_grib_to_cog(mrms_message, output_dir=tmp_path, cmap='viridis',
                                      resolution=0.01, projection='EPSG:4326',
                                      overview_factors=[])
        name = summary["image_url"].rsplit("/", 1)[-1]
        assert name.startswith("radar_DBZ_viridis_0.01_epsg4326_")
        assert name.endswith(".tif")

    def test_decode_options_in_name(self, mrms_message, tmp_path):
        """Test that different value windows render to different files."""
        kwargs = dict(output_dir=tmp_path, resolution=0.01, projection='EPSG:4326',
                      overview_factors=[])
        everything = process_grib_to_cog(mrms_message, value_range=None, **kwargs)
        strong = process_grib_to_cog(mrms_message, value_range=(40.0, 80.0), **kwargs)

        assert everything["image_url"] != strong["image_url"]
        assert everything["n_points"] == 27
        assert strong["n_points"] == 5
        assert "_norange_n20000_" in everything["image_url"]
        assert "_40_80_n20000_" in strong["image_url"]
        assert len(list(tmp_path.glob("*.tif"))) == 2

    def test_budget_and_seed_in_name(self, tmp_path):
        """Test that budget and seed of a synthetic field select distinct files."""
        kwargs = dict(output_dir=tmp_path, resolution=0.5, projection='EPSG:4326',
                      overview_factors=[])
        a = process_grib_to_cog(b"junk", seed=1, **kwargs)
        b = process_grib_to_cog(b"junk", seed=2, **kwargs)
        c = process_grib_to_cog(b"junk", seed=1, point_budget=100, **kwargs)
        assert len({a["image_url"], b["image_url"], c["image_url"]}) == 3
        assert "_s1_" in a["image_url"]
        assert c["n_points"] <= 100

    def test_unseeded_fallback_rewritten(self, tmp_path):
        """Test that an unseeded synthetic field is rendered again on every call."""
        kwargs = dict(output_dir=tmp_path, resolution=0.5, projection='EPSG:4326',
                      overview_factors=[], seed=None)
        first = process_grib_to_cog(b"junk", **kwargs)
        second = process_grib_to_cog(b"junk", **kwargs)
        assert "_srandom_" in first["image_url"]
        assert first["image_url"] == second["image_url"]
        assert second["is_synthetic_fallback"]

    def test_default_arguments_small_grid(self, mrms_message, tmp_path):
        """Test rendering a tiny grid with every rendering default."""
        summary = process_grib_to_cog(mrms_message, output_dir=tmp_path, value_range=None)
        with rasterio.open(summary["image_url"]) as src:
            assert src.crs.to_epsg() == 3857
            smallest = min(src.width, src.height)
            assert all(smallest // f >= 1 for f in src.overviews(1))

    def test_existing_output_reused(self, mrms_message, tmp_path):
        """Test that a second call does not rewrite the file."""
        kwargs = dict(output_dir=tmp_path, resolution=0.01, projection='EPSG:4326',
                      overview_factors=[])
        first = process_grib_to_cog(mrms_message, **kwargs)
        mtime = (tmp_path / first["image_url"].rsplit("/", 1)[-1]).stat().st_mtime_ns
        second = process_grib_to_cog(mrms_message, **kwargs)
        assert second == first
        assert (tmp_path / second["image_url"].rsplit("/", 1)[-1]).stat().st_mtime_ns == mtime

    def test_fallback_rendered(self, tmp_path):
        """Test that an undecodable buffer still produces an image."""
        summary = process_grib_to_cog(b"definitely not grib", output_dir=tmp_path,
                                      resolution=0.5, overview_factors=[2])
        assert summary["is_synthetic_fallback"]
        assert summary["failure"] == "InvalidFormatError"
        assert summary["n_points"] > 0
        with rasterio.open(summary["image_url"]) as src:
            assert src.crs.to_epsg() == 3857

    def test_empty_grid_no_image(self, make_grib, tmp_path):
        """Test that a grid without precipitation writes nothing."""
        summary = process_grib_to_cog(make_grib(codes=[0] * 12), output_dir=tmp_path)
        assert summary["image_url"] is None
        assert summary["n_points"] == 0
        assert list(tmp_path.iterdir()) == []

    def test_file_source(self, make_grib, tmp_path):
        """Test reading the message from a local file."""
        path = tmp_path / "scan.grib2.gz"
        path.write_bytes(make_grib(gzip_wrap=True))
        summary = process_grib_to_cog(path, output_dir=tmp_path / "out", resolution=0.01,
                                      projection='EPSG:4326', as_cog=False)
        assert summary["source"] == str(path)
        assert not summary["is_synthetic_fallback"]
        assert summary["image_url"].endswith(".gtiff.tif")

    def test_bad_file_source(self, tmp_path):
        """Test that a rejected file raises UploadError."""
        with pytest.raises(UploadError):
            process_grib_to_cog(tmp_path / "missing.grib2", output_dir=tmp_path)
