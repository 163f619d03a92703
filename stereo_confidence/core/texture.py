"""
Texture strength from Sobel gradients

Low-texture regions produce unreliable stereo matches, so gradient magnitude
of the rectified left image is used as the texture signal. |gx| + |gy| stands
in for sqrt(gx^2 + gy^2); it is monotone in the same direction and needs no
square root. Range for 8-bit input is [0, 1020].
"""

import cv2
import numpy as np


def sobel_magnitude(gray: np.ndarray, x: int, y: int) -> int:
    """
    Sobel gradient magnitude for a single pixel

    Args:
        gray: Grayscale image, shape (H, W), uint8
        x, y: Pixel coordinate

    Returns:
        |gx| + |gy|, or 0 on the one-pixel image border
    """
    height, width = gray.shape[:2]
    if x == 0 or y == 0 or x >= width - 1 or y >= height - 1:
        return 0

    p = gray[y - 1:y + 2, x - 1:x + 2].astype(np.int32)

    gx = -p[0, 0] + p[0, 2] - 2 * p[1, 0] + 2 * p[1, 2] - p[2, 0] + p[2, 2]
    gy = -p[0, 0] - 2 * p[0, 1] - p[0, 2] + p[2, 0] + 2 * p[2, 1] + p[2, 2]

    return int(abs(gx) + abs(gy))


def texture_map(gray: np.ndarray) -> np.ndarray:
    """
    Sobel gradient magnitude for every pixel

    Args:
        gray: Grayscale image, shape (H, W), uint8

    Returns:
        Magnitude map, shape (H, W), int32. Border pixels are 0.
    """
    height, width = gray.shape[:2]
    magnitude = np.zeros((height, width), dtype=np.int32)

    # Everything is border below 3x3
    if height < 3 or width < 3:
        return magnitude

    gray = np.ascontiguousarray(gray, dtype=np.uint8)
    gx = cv2.Sobel(gray, cv2.CV_16S, 1, 0, ksize=3)
    gy = cv2.Sobel(gray, cv2.CV_16S, 0, 1, ksize=3)

    interior = np.abs(gx[1:-1, 1:-1].astype(np.int32)) + np.abs(gy[1:-1, 1:-1].astype(np.int32))
    magnitude[1:-1, 1:-1] = interior

    return magnitude
