"""
Core Module - Pure Algorithm Logic
==================================
This module contains no UI dependencies.
The blend engine, its value types and the image I/O collaborators live here.
"""

from .blend import blend, blend_pixel, blend_rows, watermark_source
from .errors import (
    DecodeError, EncodeError, InputError, InputErrorKind, UnsupportedColorModel,
    WatermarkError,
)
from .image_io import SUPPORTED_OUTPUT_EXTS, decode_image, encode_image
from .types import (
    BlendPercent, ColorKey, GridPlacement, ImageBuffer, NoTransparency,
    SinglePlacement, WatermarkAlpha,
)

__all__ = [
    # Engine
    "blend",
    "blend_rows",
    "blend_pixel",
    "watermark_source",

    # Types
    "ImageBuffer",
    "SinglePlacement",
    "GridPlacement",
    "NoTransparency",
    "WatermarkAlpha",
    "ColorKey",
    "BlendPercent",

    # I/O
    "decode_image",
    "encode_image",
    "SUPPORTED_OUTPUT_EXTS",

    # Errors
    "WatermarkError",
    "DecodeError",
    "UnsupportedColorModel",
    "EncodeError",
    "InputError",
    "InputErrorKind",
]
