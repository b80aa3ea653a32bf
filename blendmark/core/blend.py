"""
Blend Engine
============
Composites a watermark image onto a base image with integer per-pixel
blending.

Technical Notes:
- Placement is either a single offset or a seamless grid tiled from (0, 0)
- Grid tiling maps each destination coordinate with a modulo, so partial
  tiles at the right/bottom edges wrap correctly
- Channel math is integer: (p * W + (100 - p) * B) // 100, truncating
- Transparent watermark pixels (alpha 0 or matching key color) leave the
  base pixel untouched whatever the percentage
- Output is always opaque 3-channel RGB with the base image's size
"""

from typing import Optional, Sequence, Tuple

import numpy as np

from .types import (
    BlendPercent, ColorKey, GridPlacement, ImageBuffer, PlacementPolicy,
    SinglePlacement, TransparencyPolicy, WatermarkAlpha,
)


def watermark_source(
        placement: PlacementPolicy,
        watermark_size: Tuple[int, int],
        x: int,
        y: int
) -> Optional[Tuple[int, int]]:
    """
    Map a base-image coordinate to the watermark pixel that covers it.

    Args:
        placement: Active placement policy.
        watermark_size: (width, height) of the watermark.
        x: Column in the base image.
        y: Row in the base image.

    Returns:
        (sx, sy) in watermark coordinates, or None if the watermark
        does not cover (x, y).
    """
    wm_w, wm_h = watermark_size

    if isinstance(placement, GridPlacement):
        return x % wm_w, y % wm_h

    sx = x - placement.offset_x
    sy = y - placement.offset_y
    if 0 <= sx < wm_w and 0 <= sy < wm_h:
        return sx, sy
    return None


def is_transparent(watermark_pixel: Sequence[int], transparency: TransparencyPolicy) -> bool:
    """Whether a single watermark pixel is exempt from blending."""
    if isinstance(transparency, WatermarkAlpha):
        return len(watermark_pixel) == 4 and watermark_pixel[3] == 0
    if isinstance(transparency, ColorKey):
        return tuple(watermark_pixel[:3]) == transparency.color
    return False


def blend_pixel(
        base_pixel: Sequence[int],
        watermark_pixel: Sequence[int],
        transparency: TransparencyPolicy,
        percent: BlendPercent
) -> Tuple[int, int, int]:
    """
    Blend one covered pixel.

    Scalar reference for the vectorised path in blend_rows().
    """
    if is_transparent(watermark_pixel, transparency):
        return tuple(int(c) for c in base_pixel[:3])

    p = int(percent)
    return tuple(
        (p * int(w) + (100 - p) * int(b)) // 100
        for w, b in zip(watermark_pixel[:3], base_pixel[:3])
    )


def _opaque_mask(patch: np.ndarray, transparency: TransparencyPolicy) -> np.ndarray:
    """Boolean (h, w) mask of watermark pixels that take part in blending."""
    if isinstance(transparency, WatermarkAlpha) and patch.shape[2] == 4:
        return patch[:, :, 3] != 0
    if isinstance(transparency, ColorKey):
        key = np.array(transparency.color, dtype=np.uint8)
        return ~np.all(patch[:, :, :3] == key, axis=-1)
    return np.ones(patch.shape[:2], dtype=bool)


def blend_rows(
        base: ImageBuffer,
        watermark: ImageBuffer,
        placement: PlacementPolicy,
        transparency: TransparencyPolicy,
        percent: BlendPercent,
        top: int = 0,
        bottom: Optional[int] = None
) -> np.ndarray:
    """
    Compute rows [top, bottom) of the blended output.

    Each output row depends only on the inputs, so disjoint bands can be
    computed independently and stacked.

    Returns:
        uint8 array shaped (bottom - top, base.width, 3).
    """
    if bottom is None:
        bottom = base.height
    top = max(0, top)
    bottom = min(base.height, bottom)

    out = base.pixels[top:bottom, :, :3].astype(np.int32)
    p = int(percent)

    if p == 0 or bottom <= top:
        return out.astype(np.uint8)

    if isinstance(placement, SinglePlacement):
        ox, oy = placement.offset_x, placement.offset_y
        y0 = max(top, oy)
        y1 = min(bottom, oy + watermark.height)
        x0 = min(base.width, ox)
        x1 = min(base.width, ox + watermark.width)
        if y0 >= y1 or x0 >= x1:
            return out.astype(np.uint8)

        patch = watermark.pixels[y0 - oy:y1 - oy, x0 - ox:x1 - ox]
        region = out[y0 - top:y1 - top, x0:x1]
    else:
        rows = np.arange(top, bottom) % watermark.height
        cols = np.arange(base.width) % watermark.width
        patch = watermark.pixels[np.ix_(rows, cols)]
        region = out

    mask = _opaque_mask(patch, transparency)
    blended = (p * patch[:, :, :3].astype(np.int32) + (100 - p) * region) // 100
    region[mask] = blended[mask]

    return out.astype(np.uint8)


def blend(
        base: ImageBuffer,
        watermark: ImageBuffer,
        placement: PlacementPolicy,
        transparency: TransparencyPolicy,
        percent: BlendPercent
) -> ImageBuffer:
    """
    Apply a watermark to a base image.

    Args:
        base: Image to watermark.
        watermark: Watermark image. For SinglePlacement it must fit inside
                   the base at the given offset.
        placement: SinglePlacement or GridPlacement.
        transparency: NoTransparency, WatermarkAlpha or ColorKey.
        percent: Watermark weight, 0-100.

    Returns:
        New 3-channel ImageBuffer the size of the base image.
    """
    return ImageBuffer(
        blend_rows(base, watermark, placement, transparency, percent, 0, base.height)
    )
