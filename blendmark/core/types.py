"""
Blend Data Model
================
Immutable value types consumed by the blend engine.

Technical Notes:
- Pixels live in numpy uint8 arrays shaped (height, width, channels)
- Buffers are frozen and their arrays are marked read-only
- Placement and transparency are small tagged variants; a single value
  holds the active policy, so conflicting modes cannot be expressed
"""

from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np
from PIL import Image


Color = Tuple[int, int, int]


@dataclass(frozen=True, eq=False)
class ImageBuffer:
    """
    A decoded raster image.

    The pixel array is copied on construction and made read-only, so a
    buffer can be shared between threads without locking.
    """
    pixels: np.ndarray

    def __post_init__(self):
        pixels = np.array(self.pixels, dtype=np.uint8, copy=True)
        if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
            raise ValueError(
                f"Pixel array must be shaped (height, width, 3|4), got {pixels.shape}"
            )
        if pixels.shape[0] < 1 or pixels.shape[1] < 1:
            raise ValueError("Image must be at least 1x1")
        pixels.flags.writeable = False
        object.__setattr__(self, "pixels", pixels)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height), matching PIL's convention."""
        return self.width, self.height

    @property
    def channels(self) -> int:
        return self.pixels.shape[2]

    @property
    def has_alpha(self) -> bool:
        return self.channels == 4

    @property
    def bit_depth(self) -> int:
        """Total bits per pixel (24 or 32)."""
        return 8 * self.channels

    def pixel(self, x: int, y: int) -> Tuple[int, ...]:
        """Return the channel values at column x, row y."""
        return tuple(int(c) for c in self.pixels[y, x])

    @classmethod
    def from_image(cls, image: Image.Image) -> "ImageBuffer":
        """Build a buffer from an RGB or RGBA PIL image."""
        if image.mode not in ("RGB", "RGBA"):
            raise ValueError(f"Expected RGB or RGBA image, got {image.mode}")
        return cls(np.asarray(image))

    def to_image(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self.pixels))


# ===== Placement =====

@dataclass(frozen=True)
class SinglePlacement:
    """Watermark top-left corner at (offset_x, offset_y) in base coordinates."""
    offset_x: int = 0
    offset_y: int = 0

    def __post_init__(self):
        if self.offset_x < 0 or self.offset_y < 0:
            raise ValueError("Watermark offset cannot be negative")


@dataclass(frozen=True)
class GridPlacement:
    """Watermark tiled from (0, 0) with no gap across the whole base image."""


PlacementPolicy = Union[SinglePlacement, GridPlacement]


# ===== Transparency =====

@dataclass(frozen=True)
class NoTransparency:
    """Every covered watermark pixel is blended."""


@dataclass(frozen=True)
class WatermarkAlpha:
    """Watermark pixels whose alpha is exactly 0 leave the base untouched."""


@dataclass(frozen=True)
class ColorKey:
    """Watermark pixels whose RGB equals `color` leave the base untouched."""
    color: Color = (0, 0, 0)

    def __post_init__(self):
        color = tuple(self.color)
        if len(color) != 3:
            raise ValueError("Key color needs exactly 3 components")
        for component in color:
            if isinstance(component, bool) or not isinstance(component, (int, np.integer)):
                raise ValueError("Key color components must be integers")
            if not 0 <= component <= 255:
                raise ValueError("Key color components must be between 0 and 255")
        object.__setattr__(self, "color", tuple(int(c) for c in color))


TransparencyPolicy = Union[NoTransparency, WatermarkAlpha, ColorKey]


# ===== Blend percentage =====

@dataclass(frozen=True)
class BlendPercent:
    """Watermark weight in percent: 0 keeps the base, 100 shows only the watermark."""
    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, (int, np.integer)):
            raise ValueError("Blend percentage must be an integer")
        if not 0 <= self.value <= 100:
            raise ValueError("Blend percentage must be between 0 and 100")
        object.__setattr__(self, "value", int(self.value))

    def __int__(self) -> int:
        return self.value
