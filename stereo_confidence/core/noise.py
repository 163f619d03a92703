"""
Local disparity noise estimation

High variance of the valid disparities in a 3x3 window indicates noisy or
unreliable matches. Windows are clamped to the image, invalid samples are
skipped, and fewer than two valid samples count as zero variance.
"""

import numpy as np

from .config import INVALID_DISPARITY


def local_variance(
    disparity: np.ndarray,
    x: int,
    y: int,
    invalid_disparity: int = INVALID_DISPARITY,
) -> float:
    """
    Population variance of valid disparities around one pixel

    Args:
        disparity: Q4.4 disparity map, shape (H, W), int16
        x, y: Window center
        invalid_disparity: Values at or below this are skipped

    Returns:
        Variance in Q4.4 squared units, >= 0
    """
    height, width = disparity.shape[:2]
    y0, y1 = max(y - 1, 0), min(y + 1, height - 1)
    x0, x1 = max(x - 1, 0), min(x + 1, width - 1)

    window = disparity[y0:y1 + 1, x0:x1 + 1].astype(np.float64).ravel()
    samples = window[window > invalid_disparity]

    n = samples.size
    if n < 2:
        return 0.0

    mean = samples.sum() / n
    variance = (np.square(samples).sum() / n) - mean * mean
    return max(float(variance), 0.0)


def _window_sum(values: np.ndarray) -> np.ndarray:
    """Sum over the clamped 3x3 window of every pixel (zero outside the image)"""
    height, width = values.shape
    padded = np.pad(values, 1, mode="constant", constant_values=0)

    total = np.zeros((height, width), dtype=values.dtype)
    for dy in range(3):
        for dx in range(3):
            total += padded[dy:dy + height, dx:dx + width]
    return total


def variance_map(
    disparity: np.ndarray,
    invalid_disparity: int = INVALID_DISPARITY,
) -> np.ndarray:
    """
    Local variance for every pixel

    Zero padding outside the image contributes neither samples nor counts,
    which is equivalent to clamping the window. Sums of int16 values are
    exact in float64, so this agrees with local_variance() pixel for pixel.

    Args:
        disparity: Q4.4 disparity map, shape (H, W), int16
        invalid_disparity: Values at or below this are skipped

    Returns:
        Variance map, shape (H, W), float64, >= 0
    """
    valid = disparity > invalid_disparity
    values = np.where(valid, disparity.astype(np.float64), 0.0)

    n = _window_sum(valid.astype(np.float64))
    s = _window_sum(values)
    s2 = _window_sum(values * values)

    variance = np.zeros(disparity.shape, dtype=np.float64)
    enough = n >= 2
    mean = s[enough] / n[enough]
    variance[enough] = (s2[enough] / n[enough]) - mean * mean

    # Cancellation can leave tiny negatives
    np.maximum(variance, 0.0, out=variance)
    return variance
