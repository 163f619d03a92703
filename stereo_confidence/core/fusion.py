"""
Per-pixel disparity confidence

Combines three signals into a 0-255 confidence score:
1. Disparity validity: invalid disparity (<= sentinel) gets 0 unconditionally
2. Texture strength: Sobel magnitude of the left image, capped at texture_cap
3. Local disparity variance: reciprocal decay with half-life variance_half_life

    confidence = min(texture / texture_cap, 1) * half / (half + variance) * 255

The product means either weak texture or noisy disparity alone is enough to
suppress confidence. Scores are truncated, not rounded, to a byte.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Tuple

import numpy as np

from .config import ConfidenceConfig
from .texture import sobel_magnitude, texture_map
from .noise import local_variance, variance_map
from .colormap import colorize_confidence
from ..utils.disparity_utils import validate_inputs

logger = logging.getLogger(__name__)


def _fuse(
    texture: np.ndarray,
    variance: np.ndarray,
    valid: np.ndarray,
    config: ConfidenceConfig,
) -> np.ndarray:
    """Combine texture and variance maps into uint8 confidence"""
    texture_score = np.minimum(texture / config.texture_cap, 1.0)
    variance_score = config.variance_half_life / (config.variance_half_life + variance)

    confidence = np.clip(texture_score * variance_score * 255.0, 0.0, 255.0)
    confidence = confidence.astype(np.uint8)
    confidence[~valid] = 0
    return confidence


def _compute_band(
    disparity: np.ndarray,
    gray: np.ndarray,
    rows: Tuple[int, int],
    config: ConfidenceConfig,
) -> np.ndarray:
    """Confidence for rows [start, stop) using a one-row halo on each side"""
    start, stop = rows
    height = disparity.shape[0]
    top = max(start - 1, 0)
    bottom = min(stop + 1, height)

    texture = texture_map(gray[top:bottom])
    variance = variance_map(disparity[top:bottom], config.invalid_disparity)
    valid = disparity[top:bottom] > config.invalid_disparity

    band = _fuse(texture, variance, valid, config)
    return band[start - top:stop - top]


def _row_bands(height: int, num_bands: int):
    """Split [0, height) into at most num_bands contiguous row ranges"""
    num_bands = max(1, min(num_bands, height))
    edges = np.linspace(0, height, num_bands + 1).astype(int)
    return [(int(a), int(b)) for a, b in zip(edges[:-1], edges[1:]) if b > a]


class DisparityConfidence:
    """
    Confidence map estimator for Q4.4 disparity maps

    Stateless apart from its configuration; one instance can be shared
    between threads.
    """

    def __init__(self, config: Optional[ConfidenceConfig] = None):
        """
        Args:
            config: ConfidenceConfig or None (uses defaults)
        """
        self.config = config if config is not None else ConfidenceConfig()
        self.logger = logging.getLogger(__name__)

        # Module-wide: the most recently configured estimator sets the level
        self.logger.setLevel(getattr(logging, self.config.log_level))

    def compute(
        self,
        disparity: np.ndarray,
        gray: np.ndarray,
        out: Optional[np.ndarray] = None,
    ) -> np.ndarray:
        """
        Compute a per-pixel confidence map

        Args:
            disparity: Q4.4 disparity map, shape (H, W), int16
            gray: Rectified left grayscale image, shape (H, W), uint8
            out: Optional pre-allocated (H, W) uint8 buffer

        Returns:
            Confidence map, shape (H, W), uint8. 0 = no confidence, 255 = high.
        """
        disparity, gray = validate_inputs(disparity, gray, out)
        height, width = disparity.shape

        if out is None:
            out = np.zeros((height, width), dtype=np.uint8)
        if disparity.size == 0:
            return out

        bands = _row_bands(height, self.config.num_workers)
        self.logger.debug(f"Computing confidence for {width}x{height} in {len(bands)} band(s)")

        if len(bands) == 1:
            out[:] = _compute_band(disparity, gray, (0, height), self.config)
        else:
            with ThreadPoolExecutor(max_workers=len(bands)) as executor:
                futures = {
                    executor.submit(_compute_band, disparity, gray, rows, self.config): rows
                    for rows in bands
                }
                for future, (start, stop) in futures.items():
                    out[start:stop] = future.result()

        if self.logger.isEnabledFor(logging.DEBUG):
            valid = disparity > self.config.invalid_disparity
            mean_conf = float(out[valid].mean()) if valid.any() else 0.0
            self.logger.debug(
                f"Valid pixels: {valid.mean() * 100:.1f}%, mean confidence: {mean_conf:.1f}"
            )

        return out

    def compute_pixel(self, disparity: np.ndarray, gray: np.ndarray, x: int, y: int) -> int:
        """
        Confidence of a single pixel through the scalar reference path

        Returns:
            Confidence byte in [0, 255]
        """
        if disparity[y, x] <= self.config.invalid_disparity:
            return 0

        texture = sobel_magnitude(gray, x, y)
        texture_score = min(texture / self.config.texture_cap, 1.0)

        variance = local_variance(disparity, x, y, self.config.invalid_disparity)
        variance_score = self.config.variance_half_life / (self.config.variance_half_life + variance)

        confidence = texture_score * variance_score * 255.0
        return int(min(max(confidence, 0.0), 255.0))

    def colorize(self, confidence: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
        """Map a confidence map to RGB (0 = black)"""
        return colorize_confidence(confidence, out=out)


def compute_confidence(
    disparity: np.ndarray,
    gray: np.ndarray,
    config: Optional[ConfidenceConfig] = None,
    out: Optional[np.ndarray] = None,
) -> np.ndarray:
    """Compute a confidence map (see DisparityConfidence.compute)"""
    return DisparityConfidence(config).compute(disparity, gray, out=out)
