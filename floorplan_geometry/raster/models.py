"""
Raster buffer data structure.

A RasterBuffer wraps an H x W x 4 RGBA uint8 array. All per-pixel
readers in this package go through it so the luminance and saturation
formulas stay identical everywhere.
"""

from dataclasses import dataclass
from typing import Tuple

import cv2
import numpy as np


# Integer luminance weights (sum to 1000) keep threshold comparisons exact.
LUMA_R = 299
LUMA_G = 587
LUMA_B = 114


@dataclass(eq=False)
class RasterBuffer:
    """
    Row-major RGBA image.

    Attributes:
        pixels: uint8 array of shape (height, width, 4)
    """
    pixels: np.ndarray

    def __post_init__(self):
        """Validate buffer shape and dtype."""
        pixels = self.pixels
        if not isinstance(pixels, np.ndarray):
            raise ValueError(f"pixels must be a numpy array, got {type(pixels).__name__}")
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"pixels must have shape (H, W, 4), got {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise ValueError(f"pixels must be uint8, got {pixels.dtype}")
        if pixels.shape[0] < 1 or pixels.shape[1] < 1:
            raise ValueError(f"buffer must be at least 1x1, got {pixels.shape[1]}x{pixels.shape[0]}")

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def shape(self) -> Tuple[int, int]:
        """(height, width), the shape every mask for this buffer must have."""
        return self.height, self.width

    @classmethod
    def from_rgba(cls, array: np.ndarray) -> "RasterBuffer":
        """Wrap an existing (H, W, 4) uint8 RGBA array."""
        return cls(np.ascontiguousarray(array))

    @classmethod
    def from_bytes(cls, width: int, height: int, data: bytes) -> "RasterBuffer":
        """
        Build a buffer from raw row-major RGBA bytes.

        Raises:
            ValueError: If the byte length is not width * height * 4
        """
        expected = width * height * 4
        if width < 1 or height < 1:
            raise ValueError(f"width and height must be >= 1, got {width}x{height}")
        if len(data) != expected:
            raise ValueError(
                f"RGBA data must be {expected} bytes for {width}x{height}, got {len(data)}"
            )
        array = np.frombuffer(bytes(data), dtype=np.uint8).reshape(height, width, 4)
        return cls(array.copy())

    @classmethod
    def from_bgr(cls, image: np.ndarray) -> "RasterBuffer":
        """
        Convert an OpenCV image (grayscale, BGR or BGRA) to RGBA.
        """
        if image.ndim == 2:
            rgba = cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
        elif image.shape[2] == 3:
            rgba = cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
        elif image.shape[2] == 4:
            rgba = cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
        else:
            raise ValueError(f"Unsupported channel count: {image.shape[2]}")
        return cls(rgba.astype(np.uint8, copy=False))

    @classmethod
    def load(cls, path: str) -> "RasterBuffer":
        """
        Load an image file from disk.

        Raises:
            ValueError: If the file cannot be read as an image
        """
        image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if image is None:
            raise ValueError(f"Could not load image: {path}")
        if image.dtype != np.uint8:
            image = cv2.convertScaleAbs(image, alpha=255.0 / max(1, int(image.max())))
        return cls.from_bgr(image)

    def to_bgr(self) -> np.ndarray:
        """Return a BGR copy for drawing and cv2.imwrite."""
        return cv2.cvtColor(self.pixels, cv2.COLOR_RGBA2BGR)

    def copy(self) -> "RasterBuffer":
        return RasterBuffer(self.pixels.copy())

    def luminance(self) -> np.ndarray:
        """
        Per-pixel luminance, 0.299 R + 0.587 G + 0.114 B, as float64 (H, W).
        """
        return self.weighted_luminance() / 1000.0

    def weighted_luminance(self) -> np.ndarray:
        """Luminance scaled by 1000 as exact int32 values."""
        rgb = self.pixels[:, :, :3].astype(np.int32)
        return LUMA_R * rgb[:, :, 0] + LUMA_G * rgb[:, :, 1] + LUMA_B * rgb[:, :, 2]

    def channel_max(self) -> np.ndarray:
        return self.pixels[:, :, :3].max(axis=2)

    def saturation(self) -> np.ndarray:
        """(max - min) / max over RGB, 0 for black pixels."""
        rgb = self.pixels[:, :, :3]
        cmax = rgb.max(axis=2).astype(np.float64)
        cmin = rgb.min(axis=2).astype(np.float64)
        sat = np.zeros_like(cmax)
        nonzero = cmax > 0
        sat[nonzero] = (cmax[nonzero] - cmin[nonzero]) / cmax[nonzero]
        return sat

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def rgb_at(self, x: int, y: int) -> Tuple[int, int, int]:
        px = self.pixels[y, x]
        return int(px[0]), int(px[1]), int(px[2])


def validate_mask(mask: np.ndarray, shape: Tuple[int, int], name: str = "mask") -> None:
    """
    Raise ValueError unless mask is a 2D array with the given (H, W) shape.
    """
    if mask.ndim != 2:
        raise ValueError(f"{name} must be 2D, got shape {mask.shape}")
    if tuple(mask.shape) != tuple(shape):
        raise ValueError(f"{name} shape {mask.shape} does not match image shape {tuple(shape)}")
