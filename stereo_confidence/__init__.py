"""
Stereo Confidence Package
Per-pixel confidence maps for stereo disparity and their visualization
"""

__version__ = "0.1.0"

from .core import (
    ConfidenceConfig,
    DisparityConfidence,
    compute_confidence,
    colorize_confidence,
    INVALID_DISPARITY,
)
from .utils.disparity_utils import (
    disparity_to_pixels,
    valid_mask,
    confidence_mask,
    mask_disparity,
    confidence_statistics,
)

__all__ = [
    # Main entry points
    "compute_confidence",
    "colorize_confidence",
    "DisparityConfidence",
    "ConfidenceConfig",
    "INVALID_DISPARITY",

    # Helpers
    "disparity_to_pixels",
    "valid_mask",
    "confidence_mask",
    "mask_disparity",
    "confidence_statistics",
]
