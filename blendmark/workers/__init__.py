"""
Workers Module - Pipeline Execution
===================================
Runs a complete watermark job: decode, validate, blend, encode.

Blending can be split into horizontal bands computed on a thread pool.

Components:
- BlendWorker: Full pipeline with progress reporting and cancellation
- blend_parallel: Band-parallel front end to the blend engine
"""

from .blend_worker import BlendWorker, BlendConfig, BlendResult, band_bounds, blend_parallel

__all__ = [
    "BlendWorker",
    "BlendConfig",
    "BlendResult",
    "band_bounds",
    "blend_parallel",
]
