"""
I/O utilities for confidence pipeline inputs and outputs
"""

import cv2
import numpy as np
from typing import Dict, Any
from pathlib import Path
import json


def load_disparity(path: str) -> np.ndarray:
    """
    Load a Q4.4 disparity map

    Accepts .npy arrays and 16-bit single-channel images (PNG/TIFF). Unsigned
    16-bit images are reinterpreted as int16, which is how signed disparity
    survives a PNG round trip.
    """
    path = Path(path)
    if not path.exists():
        raise ValueError(f"Disparity file does not exist: {path}")

    if path.suffix.lower() == ".npy":
        disparity = np.load(path)
    else:
        disparity = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if disparity is None:
            raise ValueError(f"Could not load disparity {path}")
        if disparity.dtype == np.uint16:
            disparity = disparity.view(np.int16)

    if disparity.ndim != 2:
        raise ValueError(f"Disparity {path} must be single-channel, got shape {disparity.shape}")

    return disparity.astype(np.int16, copy=False)


def load_grayscale(path: str) -> np.ndarray:
    """Load an image as 8-bit grayscale"""
    path = Path(path)
    if not path.exists():
        raise ValueError(f"Image file does not exist: {path}")

    if path.suffix.lower() == ".npy":
        return np.load(path).astype(np.uint8)

    image = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE)
    if image is None:
        raise ValueError(f"Could not load image {path}")
    return image


def save_confidence(confidence: np.ndarray, output_path: str):
    """Save a confidence map as an 8-bit PNG"""
    if not cv2.imwrite(str(output_path), confidence):
        raise ValueError(f"Could not write confidence map {output_path}")


def save_colorized(rgb: np.ndarray, output_path: str):
    """Save an RGB visualization (converted to OpenCV's BGR order)"""
    if not cv2.imwrite(str(output_path), cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)):
        raise ValueError(f"Could not write visualization {output_path}")


def save_statistics(filepath: Path, statistics: Dict[str, Any]):
    """Save per-frame confidence statistics in JSON format"""
    with open(filepath, 'w') as f:
        json.dump(statistics, f, indent=2)
