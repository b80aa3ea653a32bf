"""
blendmark Package
=================
Blend a watermark image onto a base image, once or as a tiled grid.

Modules:
    - core: Blend engine, value types, image I/O and validation
    - workers: Pipeline runner with band-parallel blending
    - cli: Interactive session and command-line flags

Usage:
    from blendmark.core import blend, decode_image, encode_image
    from blendmark.workers import BlendWorker, BlendConfig
"""

__version__ = "1.0.0"
__app_name__ = "blendmark"

# Core exports
from .core import (
    BlendPercent,
    ColorKey,
    GridPlacement,
    ImageBuffer,
    NoTransparency,
    SinglePlacement,
    WatermarkAlpha,
    WatermarkError,
    blend,
    decode_image,
    encode_image,
)
# Worker exports
from .workers import BlendWorker, BlendConfig, BlendResult

__all__ = [
    # Version info
    "__version__",
    "__app_name__",

    # Core
    "blend",
    "decode_image",
    "encode_image",
    "ImageBuffer",
    "SinglePlacement",
    "GridPlacement",
    "NoTransparency",
    "WatermarkAlpha",
    "ColorKey",
    "BlendPercent",
    "WatermarkError",

    # Workers
    "BlendWorker",
    "BlendConfig",
    "BlendResult",
]
