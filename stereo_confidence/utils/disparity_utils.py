"""
Disparity map helpers: Q4.4 conversion, validity and confidence masks
"""

import numpy as np
from typing import Any, Dict, Optional, Tuple

from ..core.config import DISPARITY_SCALE, INVALID_DISPARITY


def validate_inputs(
    disparity: np.ndarray,
    gray: np.ndarray,
    out: Optional[np.ndarray] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Check array contracts for confidence computation

    Returns:
        (disparity as int16, gray as uint8)

    Raises:
        ValueError: On wrong dimensionality, mismatched shapes or bad out buffer
    """
    disparity = np.asarray(disparity)
    gray = np.asarray(gray)

    if disparity.ndim != 2:
        raise ValueError(f"Disparity map must be 2-D, got shape {disparity.shape}")
    if gray.ndim != 2:
        raise ValueError(f"Grayscale image must be 2-D, got shape {gray.shape}")
    if disparity.shape != gray.shape:
        raise ValueError(
            f"Disparity {disparity.shape} and grayscale {gray.shape} shapes differ"
        )

    if out is not None and (out.shape != disparity.shape or out.dtype != np.uint8):
        raise ValueError(
            f"out must be uint8 with shape {disparity.shape}, got {out.dtype} {out.shape}"
        )

    if disparity.dtype != np.int16:
        disparity = disparity.astype(np.int16)
    if gray.dtype != np.uint8:
        gray = gray.astype(np.uint8)

    return disparity, gray


def valid_mask(disparity: np.ndarray, invalid_disparity: int = INVALID_DISPARITY) -> np.ndarray:
    """Boolean mask of matched pixels"""
    return np.asarray(disparity) > invalid_disparity


def disparity_to_pixels(
    disparity: np.ndarray,
    invalid_disparity: int = INVALID_DISPARITY,
) -> np.ndarray:
    """Convert Q4.4 disparity to float32 pixels, NaN where invalid"""
    disparity = np.asarray(disparity)
    pixels = disparity.astype(np.float32) / DISPARITY_SCALE
    pixels[~valid_mask(disparity, invalid_disparity)] = np.nan
    return pixels


def confidence_mask(confidence: np.ndarray, min_confidence: int = 0) -> np.ndarray:
    """Pixels with nonzero confidence at or above min_confidence"""
    confidence = np.asarray(confidence)
    return (confidence > 0) & (confidence >= min_confidence)


def mask_disparity(
    disparity: np.ndarray,
    confidence: np.ndarray,
    min_confidence: int,
    invalid_disparity: int = INVALID_DISPARITY,
) -> np.ndarray:
    """
    Invalidate unreliable disparities

    Returns:
        Copy of the disparity with every pixel below min_confidence (or with
        zero confidence) set to the invalid sentinel
    """
    disparity = np.asarray(disparity)
    if disparity.shape != np.shape(confidence):
        raise ValueError(
            f"Disparity {disparity.shape} and confidence {np.shape(confidence)} shapes differ"
        )

    masked = disparity.copy()
    masked[~confidence_mask(confidence, min_confidence)] = invalid_disparity
    return masked


def confidence_statistics(confidence: np.ndarray) -> Dict[str, Any]:
    """Summary of a confidence map for logging and reports"""
    confidence = np.asarray(confidence)
    total = confidence.size

    stats = {
        'num_pixels': int(total),
        'confident_fraction': 0.0,
        'mean': 0.0,
        'median': 0.0,
        'histogram': [0, 0, 0, 0],
    }
    if total == 0:
        return stats

    nonzero = confidence[confidence > 0]
    stats['confident_fraction'] = float(nonzero.size) / total
    if nonzero.size:
        stats['mean'] = float(np.mean(nonzero))
        stats['median'] = float(np.median(nonzero))

    # Quartile bins over the full 0-255 range
    counts, _ = np.histogram(confidence, bins=4, range=(0, 256))
    stats['histogram'] = [int(c) for c in counts]

    return stats
