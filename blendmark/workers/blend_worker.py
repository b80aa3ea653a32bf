"""
Blend Worker - Full Watermark Pipeline
======================================
Runs one watermark job from files on disk to the output file.

Workflow:
1. Check both input files exist and decode them
2. Check the watermark fits and resolve placement/transparency
3. Blend, optionally split into horizontal bands across worker threads
4. Encode the finished buffer to the output path
5. Report progress through an optional callback and return a BlendResult

The output file is only written once the whole buffer is ready.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import numpy as np

from blendmark.core.blend import blend_rows
from blendmark.core.errors import WatermarkError
from blendmark.core.image_io import decode_image, encode_image
from blendmark.core.types import (
    BlendPercent, ImageBuffer, PlacementPolicy, TransparencyPolicy,
)
from blendmark.core.validation import (
    PLACEMENT_GRID, build_placement, check_dimensions, check_output_name,
    require_file, resolve_transparency,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


class _Cancelled(Exception):
    """Raised internally when cancel() was requested."""


@dataclass
class BlendConfig:
    """Complete configuration for one watermark job."""
    image_path: Path
    watermark_path: Path
    output_path: Path
    percent: int = 50
    placement: str = PLACEMENT_GRID  # "single" or "grid"
    position: Optional[Tuple[int, int]] = None  # required for "single"
    transparency_color: Optional[Tuple[int, int, int]] = None
    use_alpha: bool = False
    workers: int = 1
    jpeg_quality: int = 95


@dataclass
class BlendResult:
    """Outcome of a BlendWorker run."""
    source_path: Path
    output_path: Optional[Path] = None
    success: bool = False
    error_kind: Optional[str] = None
    error_message: str = ""


def band_bounds(height: int, bands: int) -> List[Tuple[int, int]]:
    """Split [0, height) into at most `bands` contiguous, non-empty row ranges."""
    bands = max(1, min(bands, height))
    step = -(-height // bands)
    return [(top, min(height, top + step)) for top in range(0, height, step)]


def blend_parallel(
        base: ImageBuffer,
        watermark: ImageBuffer,
        placement: PlacementPolicy,
        transparency: TransparencyPolicy,
        percent: BlendPercent,
        workers: int = 1,
        on_band: Optional[Callable[[int, int], None]] = None
) -> ImageBuffer:
    """
    Blend using `workers` threads, one horizontal band each.

    The result is identical to core.blend.blend(); bands only read the
    shared read-only inputs and write their own rows.
    """
    bounds = band_bounds(base.height, workers)
    total = len(bounds)

    if total == 1:
        rows = blend_rows(base, watermark, placement, transparency, percent, 0, base.height)
        if on_band is not None:
            on_band(1, total)
        return ImageBuffer(rows)

    with ThreadPoolExecutor(max_workers=total) as pool:
        futures = [
            pool.submit(blend_rows, base, watermark, placement, transparency, percent, top, bottom)
            for top, bottom in bounds
        ]
        parts = []
        for idx, future in enumerate(futures):
            parts.append(future.result())
            if on_band is not None:
                on_band(idx + 1, total)

    return ImageBuffer(np.vstack(parts))


class BlendWorker:
    """
    Runs the decode -> blend -> encode pipeline for a BlendConfig.

    Progress callback:
        progress(step, current, total) with step one of
        "decode", "blend", "encode".
    """

    def __init__(self, config: BlendConfig, progress: Optional[ProgressCallback] = None):
        """
        Initialize the blend worker.

        Args:
            config: BlendConfig with all job settings.
            progress: Optional progress callback.
        """
        self.config = config
        self._progress = progress
        self._is_cancelled = False

    def cancel(self):
        """Request cancellation; honoured between pipeline steps."""
        self._is_cancelled = True

    def _emit(self, step: str, current: int, total: int):
        logger.debug("%s %d/%d", step, current, total)
        if self._progress is not None:
            self._progress(step, current, total)

    def _check_cancelled(self):
        if self._is_cancelled:
            raise _Cancelled()

    def _load(self) -> Tuple[ImageBuffer, ImageBuffer]:
        image_path = require_file(str(self.config.image_path))
        base = decode_image(image_path, role="image")
        self._emit("decode", 1, 2)

        watermark_path = require_file(str(self.config.watermark_path))
        watermark = decode_image(watermark_path, role="watermark")
        self._emit("decode", 2, 2)
        return base, watermark

    def run(
            self,
            base: Optional[ImageBuffer] = None,
            watermark: Optional[ImageBuffer] = None
    ) -> BlendResult:
        """
        Main worker execution.

        Args:
            base: Already decoded base image; decoded from config if None.
            watermark: Already decoded watermark; decoded from config if None.

        Returns:
            BlendResult. Errors are reported in the result, never raised.
        """
        cfg = self.config
        result = BlendResult(source_path=Path(cfg.image_path))

        try:
            output_path = check_output_name(str(cfg.output_path))

            if base is None or watermark is None:
                base, watermark = self._load()
            self._check_cancelled()

            check_dimensions(base, watermark)
            if cfg.transparency_color is not None and watermark.has_alpha:
                logger.warning("Watermark has an alpha channel; ignoring transparency color")
            transparency = resolve_transparency(
                watermark, color=cfg.transparency_color, use_alpha=cfg.use_alpha
            )
            placement = build_placement(cfg.placement, base, watermark, cfg.position)
            percent = BlendPercent(cfg.percent)

            logger.debug(
                "Blending %s onto %s: %s, %s, %d%%",
                cfg.watermark_path, cfg.image_path, placement, transparency, int(percent)
            )
            blended = blend_parallel(
                base, watermark, placement, transparency, percent,
                workers=cfg.workers,
                on_band=lambda current, total: self._emit("blend", current, total)
            )
            self._check_cancelled()

            result.output_path = encode_image(blended, output_path, jpeg_quality=cfg.jpeg_quality)
            self._emit("encode", 1, 1)
            result.success = True

        except _Cancelled:
            result.error_kind = "cancelled"
            result.error_message = "Cancelled"

        except WatermarkError as e:
            result.error_kind = e.kind
            result.error_message = str(e)
            logger.debug("Job failed: %s", e)

        except ValueError as e:
            result.error_kind = "invalid_config"
            result.error_message = str(e)
            logger.debug("Job failed: %s", e)

        return result
