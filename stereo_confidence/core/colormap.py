"""
Confidence visualization with a simplified JET colormap

0 = deep blue, 128 ~ green, 255 = deep red. Confidence 0 is always drawn
black so pixels without data stand out from low-confidence ones.
"""

from typing import Optional, Tuple

import numpy as np


def jet_color(value: int) -> Tuple[int, int, int]:
    """
    Simplified JET colour for a 0-255 input value

    Returns:
        (r, g, b) bytes, each channel truncated from fraction * 255
    """
    t = value / 255.0

    if t < 0.125:
        r, g, b = 0.0, 0.0, 0.5 + t / 0.125 * 0.5
    elif t < 0.375:
        r, g, b = 0.0, (t - 0.125) / 0.25, 1.0
    elif t < 0.625:
        r, g, b = (t - 0.375) / 0.25, 1.0, 1.0 - (t - 0.375) / 0.25
    elif t < 0.875:
        r, g, b = 1.0, 1.0 - (t - 0.625) / 0.25, 0.0
    else:
        r, g, b = 1.0 - (t - 0.875) / 0.125 * 0.5, 0.0, 0.0

    return int(r * 255.0), int(g * 255.0), int(b * 255.0)


def build_jet_lut() -> np.ndarray:
    """Lookup table of jet_color() for every byte, with 0 forced to black"""
    lut = np.array([jet_color(v) for v in range(256)], dtype=np.uint8)
    lut[0] = (0, 0, 0)
    return lut


JET_LUT = build_jet_lut()
JET_LUT.setflags(write=False)


def colorize_confidence(confidence: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Map a confidence map to RGB

    Args:
        confidence: Confidence map, shape (H, W), uint8
        out: Optional pre-allocated (H, W, 3) uint8 buffer

    Returns:
        RGB image, shape (H, W, 3), uint8
    """
    confidence = np.asarray(confidence)
    if confidence.dtype != np.uint8:
        confidence = confidence.astype(np.uint8)

    expected_shape = confidence.shape + (3,)
    if out is None:
        return JET_LUT[confidence]

    if out.shape != expected_shape or out.dtype != np.uint8:
        raise ValueError(
            f"out must be uint8 with shape {expected_shape}, got {out.dtype} {out.shape}"
        )
    np.take(JET_LUT, confidence, axis=0, out=out)
    return out
