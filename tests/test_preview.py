"""Unit tests for quantization, image export and gamma correction."""

import logging

import numpy as np
import pytest

from whitted.preview.display import apply_gamma
from whitted.preview.export import encode_ppm_p3, quantize, save_image, save_png, save_ppm


class TestQuantize:
    """Tests for quantize."""

    def test_endpoints_and_midpoint(self):
        """Test that 0, 0.5 and 1 map to 0, 128 and 255."""
        levels = quantize(np.array([0.0, 0.5, 1.0]))
        assert levels.dtype == np.uint8
        assert levels.tolist() == [0, 128, 255]

    def test_out_of_range_clamped(self):
        """Test that values outside the range saturate."""
        assert quantize(np.array([-0.5, 2.0])).tolist() == [0, 255]

    def test_custom_range(self):
        """Test quantizing a [-1, 1] range."""
        assert quantize(np.array([-1.0, 0.0, 1.0]), -1.0, 1.0).tolist() == [0, 128, 255]

    def test_empty_range(self):
        """Test that a zero-width range raises ValueError."""
        with pytest.raises(ValueError):
            quantize(np.array([0.5]), 1.0, 1.0)

    def test_shape_preserved(self):
        """Test that the output keeps the input shape."""
        assert quantize(np.zeros((4, 3, 3))).shape == (4, 3, 3)


class TestPPM:
    """Tests for the ASCII PPM writer."""

    def test_encode_content(self, tmp_path):
        """Test the exact P3 file layout."""
        path = tmp_path / "out.ppm"
        colors = np.array([[255, 0, 0], [0, 255, 0], [0, 0, 255], [10, 20, 30]], dtype=np.uint8)
        encode_ppm_p3(2, 2, colors, path)

        assert path.read_text() == "P3\n2 2\n255\n255 0 0\n0 255 0\n0 0 255\n10 20 30\n"

    def test_extra_pixels_ignored(self, tmp_path):
        """Test that only width * height pixels are written."""
        path = tmp_path / "out.ppm"
        encode_ppm_p3(1, 1, np.zeros((3, 3), dtype=np.uint8), path)

        assert path.read_text().splitlines() == ["P3", "1 1", "255", "0 0 0"]

    def test_undersized_buffer(self, tmp_path):
        """Test that too few pixels raise ValueError."""
        with pytest.raises(ValueError):
            encode_ppm_p3(2, 2, np.zeros((3, 3), dtype=np.uint8), tmp_path / "out.ppm")

    def test_unwritable_path(self, tmp_path, caplog):
        """Test that an unopenable file is logged and re-raised."""
        path = tmp_path / "missing" / "out.ppm"
        with caplog.at_level(logging.ERROR):
            with pytest.raises(OSError):
                encode_ppm_p3(1, 1, np.zeros((1, 3), dtype=np.uint8), path)
        assert "Can't open the file" in caplog.text

    def test_save_ppm_quantizes(self, tmp_path):
        """Test that save_ppm maps float colors to 8-bit levels."""
        path = tmp_path / "out.ppm"
        save_ppm(np.array([[0.0, 0.5, 1.0]]), 1, 1, path)

        assert path.read_text().splitlines()[3] == "0 128 255"


class TestPNG:
    """Tests for the Pillow-based writer."""

    def test_save_png(self, tmp_path):
        """Test writing and reading back a PNG."""
        from PIL import Image

        buffer = np.zeros((6, 3), dtype=np.float32)
        buffer[0] = (1.0, 0.0, 0.0)
        path = tmp_path / "out.png"
        save_png(buffer, 3, 2, path)

        with Image.open(path) as img:
            assert img.size == (3, 2)
            pixels = np.asarray(img)
        assert pixels[0, 0].tolist() == [255, 0, 0]
        assert pixels[1, 2].tolist() == [0, 0, 0]

    def test_size_mismatch(self, tmp_path):
        """Test that a buffer of the wrong size raises ValueError."""
        with pytest.raises(ValueError):
            save_png(np.zeros((5, 3)), 3, 2, tmp_path / "out.png")

    def test_save_image_dispatch(self, tmp_path):
        """Test that the suffix selects the output format."""
        buffer = np.full((4, 3), 0.25, dtype=np.float32)
        save_image(buffer, 2, 2, tmp_path / "a.ppm")
        save_image(buffer, 2, 2, tmp_path / "a.png")

        assert (tmp_path / "a.ppm").read_text().startswith("P3\n")
        assert (tmp_path / "a.png").read_bytes()[:4] == b"\x89PNG"


class TestApplyGamma:
    """Tests for apply_gamma."""

    def test_identity(self):
        """Test that gamma 1 returns the input unchanged."""
        image = np.full((2, 2, 3), 0.25, dtype=np.float32)
        assert apply_gamma(image, 1.0) is image

    def test_srgb_gamma(self):
        """Test gamma encoding of a mid-grey value."""
        image = np.full((1, 1, 3), 0.25, dtype=np.float32)
        result = apply_gamma(image, 2.0)
        assert np.allclose(result, 0.5)
        assert result.dtype == np.float32

    def test_clamps_before_power(self):
        """Test that out-of-range values are clamped instead of producing NaN."""
        image = np.array([[[-0.5, 0.0, 2.0]]], dtype=np.float32)
        result = apply_gamma(image, 2.2)
        assert not np.isnan(result).any()
        assert result.tolist() == [[[0.0, 0.0, 1.0]]]

    def test_invalid_gamma(self):
        """Test that non-positive gamma raises ValueError."""
        with pytest.raises(ValueError):
            apply_gamma(np.zeros((1, 1, 3)), 0.0)
