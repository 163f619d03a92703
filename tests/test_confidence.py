"""
Unit tests for disparity confidence computation
"""

import pytest
import numpy as np
from pathlib import Path
import sys

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from stereo_confidence.core.fusion import DisparityConfidence, compute_confidence
from stereo_confidence.core.config import ConfidenceConfig, INVALID_DISPARITY


def horizontal_ramp(width, height):
    """Grayscale ramp 0 -> 255 across the columns"""
    row = (np.arange(width) * 255 // (width - 1)).astype(np.uint8)
    return np.tile(row, (height, 1))


class TestConfidenceFusion:
    """Test the fused confidence map"""

    def test_invalid_disparity_zero_confidence(self):
        """All-invalid disparity gives an all-zero map"""
        disparity = np.full((8, 8), INVALID_DISPARITY, dtype=np.int16)
        gray = np.random.RandomState(0).randint(0, 256, (8, 8)).astype(np.uint8)

        confidence = compute_confidence(disparity, gray)

        assert confidence.dtype == np.uint8
        assert confidence.shape == (8, 8)
        assert np.all(confidence == 0)

    def test_uniform_texture_low_confidence(self):
        """Uniform image has no texture anywhere"""
        disparity = np.full((8, 8), 100, dtype=np.int16)
        gray = np.full((8, 8), 128, dtype=np.uint8)

        confidence = compute_confidence(disparity, gray)

        assert np.all(confidence <= 10)

    def test_strong_texture_higher_confidence(self):
        """Textured image scores higher at an interior pixel"""
        disparity = np.full((16, 16), 100, dtype=np.int16)
        gray_uniform = np.full((16, 16), 128, dtype=np.uint8)
        gray_textured = horizontal_ramp(16, 16)

        conf_uniform = compute_confidence(disparity, gray_uniform)
        conf_textured = compute_confidence(disparity, gray_textured)

        assert conf_textured[8, 8] > conf_uniform[8, 8]

    def test_noisy_disparity_lower_confidence(self):
        """High local variance scores lower at an interior pixel"""
        gray = horizontal_ramp(16, 16)
        disp_smooth = np.full((16, 16), 100, dtype=np.int16)
        disp_noisy = np.where(np.arange(256) % 2 == 0, 50, 150).astype(np.int16).reshape(16, 16)

        conf_smooth = compute_confidence(disp_smooth, gray)
        conf_noisy = compute_confidence(disp_noisy, gray)

        assert conf_noisy[8, 8] < conf_smooth[8, 8]

    def test_mixed_valid_invalid(self):
        """Invalid half is zero, valid half has some confidence"""
        gray = horizontal_ramp(16, 16)
        disparity = np.where(np.arange(256) < 128, 100, INVALID_DISPARITY)
        disparity = disparity.astype(np.int16).reshape(16, 16)

        confidence = compute_confidence(disparity, gray).ravel()

        assert np.all(confidence[128:] == 0)
        assert np.any(confidence[:128] > 0)

    def test_single_pixel(self):
        """1x1 image is all border, so texture is zero"""
        disparity = np.array([[100]], dtype=np.int16)
        gray = np.array([[128]], dtype=np.uint8)

        confidence = compute_confidence(disparity, gray)

        assert confidence.shape == (1, 1)
        assert confidence[0, 0] <= 10

    @pytest.mark.parametrize("shape", [(1, 5), (5, 1), (2, 2), (2, 7)])
    def test_degenerate_shapes(self, shape):
        """Thin images do not crash and have no texture"""
        disparity = np.full(shape, 100, dtype=np.int16)
        gray = np.random.RandomState(1).randint(0, 256, shape).astype(np.uint8)

        confidence = compute_confidence(disparity, gray)

        assert confidence.shape == shape
        assert np.all(confidence == 0)

    def test_exact_value_smooth_ramp(self):
        """Ramp of step 17 gives |gx| = 136 and zero variance"""
        gray = horizontal_ramp(16, 16)
        disparity = np.full((16, 16), 100, dtype=np.int16)

        confidence = compute_confidence(disparity, gray)

        # 136 / 200 * 255 = 173.4, truncated
        assert confidence[8, 8] == 173
        # Border pixels carry no texture
        assert np.all(confidence[0, :] == 0)
        assert np.all(confidence[:, -1] == 0)

    def test_truncation_not_rounding(self):
        """Scores are truncated toward zero"""
        gray = horizontal_ramp(16, 16)
        disparity = np.full((16, 16), 100, dtype=np.int16)

        # texture 136 / 199 * 255 = 174.27...; variance score 1.0
        config = ConfidenceConfig(texture_cap=199.0)
        assert compute_confidence(disparity, gray, config)[8, 8] == 174

        # texture 136 / 180 * 255 = 192.67...
        config = ConfidenceConfig(texture_cap=180.0)
        assert compute_confidence(disparity, gray, config)[8, 8] == 192

    def test_texture_cap_saturates(self):
        """Gradients above the cap score 255 when the disparity is smooth"""
        gray = np.zeros((8, 8), dtype=np.uint8)
        gray[:, 4:] = 255
        disparity = np.full((8, 8), 100, dtype=np.int16)

        confidence = compute_confidence(disparity, gray)

        # Columns 3 and 4 straddle the step: |gx| = 1020
        assert np.all(confidence[1:-1, 3:5] == 255)

    def test_variance_half_life(self):
        """Variance equal to the half-life halves the score"""
        gray = np.zeros((3, 3), dtype=np.uint8)
        gray[:, 2] = 255
        # Texture at (1, 1) = 4 * 255 = 1020 -> texture score 1.0
        disparity = np.array([[80, 120, 80],
                              [120, 80, 120],
                              [80, 120, 80]], dtype=np.int16)
        # Mean 97.78, variance 395.06 -> score 400 / 795.06 * 255 = 128.29
        config = ConfidenceConfig(variance_half_life=400.0)

        estimator = DisparityConfidence(config)
        confidence = estimator.compute(disparity, gray)

        assert confidence[1, 1] == estimator.compute_pixel(disparity, gray, 1, 1)
        assert confidence[1, 1] == 128

    def test_texture_monotonicity(self):
        """Stronger gradient never lowers confidence"""
        disparity = np.full((8, 8), 100, dtype=np.int16)
        previous = None
        # 7 * 36 = 252 keeps the ramp unclipped; |gx| = 8 * step
        for step in (0, 2, 5, 10, 20, 30, 36):
            gray = (np.arange(8) * step).astype(np.uint8)
            gray = np.tile(gray, (8, 1))
            value = compute_confidence(disparity, gray)[4, 4]
            if previous is not None:
                assert value >= previous
            previous = value

    def test_variance_monotonicity(self):
        """Larger disparity spread never raises confidence"""
        gray = horizontal_ramp(16, 16)
        previous = None
        for spread in (0, 4, 16, 32, 64, 128):
            disparity = np.where(np.arange(256) % 2 == 0, 200 - spread, 200 + spread)
            disparity = disparity.astype(np.int16).reshape(16, 16)
            value = compute_confidence(disparity, gray)[8, 8]
            if previous is not None:
                assert value <= previous
            previous = value

    def test_invalid_neighbors_skipped(self):
        """Invalid samples do not count toward local variance"""
        gray = horizontal_ramp(16, 16)
        clean = np.full((16, 16), 100, dtype=np.int16)
        holes = clean.copy()
        holes[7, 7] = INVALID_DISPARITY
        holes[9, 9] = -200

        conf_clean = compute_confidence(clean, gray)
        conf_holes = compute_confidence(holes, gray)

        assert conf_holes[8, 8] == conf_clean[8, 8]
        assert conf_holes[7, 7] == 0
        assert conf_holes[9, 9] == 0

    def test_deterministic(self):
        """Repeated calls give byte-identical output"""
        rng = np.random.RandomState(42)
        disparity = rng.randint(-32, 800, (24, 32)).astype(np.int16)
        gray = rng.randint(0, 256, (24, 32)).astype(np.uint8)

        first = compute_confidence(disparity, gray)
        second = compute_confidence(disparity, gray)

        assert np.array_equal(first, second)

    def test_inputs_not_modified(self):
        """Inputs are read-only for the call"""
        rng = np.random.RandomState(3)
        disparity = rng.randint(-32, 800, (10, 12)).astype(np.int16)
        gray = rng.randint(0, 256, (10, 12)).astype(np.uint8)
        disparity_before = disparity.copy()
        gray_before = gray.copy()

        compute_confidence(disparity, gray)

        assert np.array_equal(disparity, disparity_before)
        assert np.array_equal(gray, gray_before)


class TestDisparityConfidence:
    """Test the estimator class"""

    def test_vectorized_matches_scalar(self):
        """Every pixel of the map equals the scalar reference path"""
        rng = np.random.RandomState(7)
        disparity = rng.randint(-40, 600, (12, 15)).astype(np.int16)
        gray = rng.randint(0, 256, (12, 15)).astype(np.uint8)
        estimator = DisparityConfidence()

        confidence = estimator.compute(disparity, gray)

        for y in range(12):
            for x in range(15):
                assert confidence[y, x] == estimator.compute_pixel(disparity, gray, x, y)

    @pytest.mark.parametrize("num_workers", [2, 3, 7, 64])
    def test_parallel_bands_match_single_pass(self, num_workers):
        """Row-band parallelism is byte-identical to a single pass"""
        rng = np.random.RandomState(11)
        disparity = rng.randint(-40, 600, (29, 17)).astype(np.int16)
        gray = rng.randint(0, 256, (29, 17)).astype(np.uint8)

        single = DisparityConfidence(ConfidenceConfig(num_workers=1)).compute(disparity, gray)
        parallel = DisparityConfidence(ConfidenceConfig(num_workers=num_workers)).compute(disparity, gray)

        assert np.array_equal(single, parallel)

    def test_out_buffer(self):
        """Results are written into a caller-provided buffer"""
        disparity = np.full((8, 8), 100, dtype=np.int16)
        gray = horizontal_ramp(8, 8)
        out = np.full((8, 8), 7, dtype=np.uint8)

        result = DisparityConfidence().compute(disparity, gray, out=out)

        assert result is out
        assert np.array_equal(out, compute_confidence(disparity, gray))

    def test_bad_out_buffer(self):
        """Wrong out shape is rejected"""
        disparity = np.full((8, 8), 100, dtype=np.int16)
        gray = np.zeros((8, 8), dtype=np.uint8)

        with pytest.raises(ValueError):
            DisparityConfidence().compute(disparity, gray, out=np.zeros((8, 9), dtype=np.uint8))

    def test_shape_mismatch(self):
        """Disparity and grayscale must share a shape"""
        with pytest.raises(ValueError):
            compute_confidence(np.zeros((8, 8), dtype=np.int16), np.zeros((8, 7), dtype=np.uint8))

    def test_custom_invalid_sentinel(self):
        """Configured sentinel replaces -16"""
        gray = horizontal_ramp(16, 16)
        disparity = np.full((16, 16), 100, dtype=np.int16)
        disparity[8, 8] = 0

        default = compute_confidence(disparity, gray)
        strict = compute_confidence(disparity, gray, ConfidenceConfig(invalid_disparity=0))

        assert default[8, 8] > 0
        assert strict[8, 8] == 0

    def test_log_level_applied(self):
        """Configured log level reaches the module logger"""
        import logging

        estimator = DisparityConfidence(ConfidenceConfig(log_level="DEBUG"))
        assert estimator.logger.level == logging.DEBUG

        estimator = DisparityConfidence(ConfidenceConfig(log_level="WARNING"))
        assert estimator.logger.level == logging.WARNING

    def test_colorize_passthrough(self):
        """colorize() blacks out zero confidence"""
        estimator = DisparityConfidence()
        rgb = estimator.colorize(np.zeros((4, 4), dtype=np.uint8))

        assert rgb.shape == (4, 4, 3)
        assert np.all(rgb == 0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
