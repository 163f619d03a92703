"""
Core confidence components
"""

from .config import ConfidenceConfig, INVALID_DISPARITY, DISPARITY_SCALE
from .texture import sobel_magnitude, texture_map
from .noise import local_variance, variance_map
from .colormap import jet_color, build_jet_lut, colorize_confidence, JET_LUT
from .fusion import DisparityConfidence, compute_confidence

__all__ = [
    # Configuration
    "ConfidenceConfig",
    "INVALID_DISPARITY",
    "DISPARITY_SCALE",

    # Texture
    "sobel_magnitude",
    "texture_map",

    # Noise
    "local_variance",
    "variance_map",

    # Visualization
    "jet_color",
    "build_jet_lut",
    "colorize_confidence",
    "JET_LUT",

    # Fusion
    "DisparityConfidence",
    "compute_confidence",
]
