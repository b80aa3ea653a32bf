"""
Command Line Front End
======================
Gathers the inputs for one watermark job, either interactively (one
question at a time) or from command-line flags, and hands them to a
BlendWorker.

Interactive order:
    image -> watermark -> transparency color / alpha -> percentage
    -> position method (and position) -> output filename

Every answer goes through core.validation; the first invalid answer
ends the session with its message and exit status 1.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .config import AppConfig, configure_logging
from .core.errors import InputError, InputErrorKind, WatermarkError
from .core.image_io import decode_image
from .core.types import ImageBuffer
from .core.validation import (
    PLACEMENT_GRID, PLACEMENT_SINGLE, check_dimensions, check_output_name, parse_int,
    parse_percent, parse_placement_method, parse_position, parse_transparency_color,
    position_bounds, require_file,
)
from .workers import BlendConfig, BlendResult, BlendWorker

logger = logging.getLogger(__name__)

InputFn = Callable[[], str]
OutputFn = Callable[[str], None]


def _is_yes(answer: str) -> bool:
    return answer.strip().lower() == "yes"


class PromptSession:
    """
    Interactive question/answer session.

    Decodes the images as soon as their names are known so later
    questions (alpha channel, position range) can depend on them.
    """

    def __init__(self, input_fn: InputFn = input, output_fn: OutputFn = print):
        self._input = input_fn
        self._output = output_fn

    def ask(self, prompt: str) -> str:
        self._output(prompt)
        return self._input()

    def _ask_image(self, prompt: str, role: str) -> Tuple[Path, ImageBuffer]:
        path = require_file(self.ask(prompt))
        return path, decode_image(path, role=role)

    def gather(
            self,
            workers: int = 1,
            jpeg_quality: int = 95
    ) -> Tuple[BlendConfig, ImageBuffer, ImageBuffer]:
        """
        Run the full session.

        Returns:
            (config, base, watermark) ready for BlendWorker.run().

        Raises:
            WatermarkError: On the first invalid answer.
        """
        image_path, base = self._ask_image("Input the image filename:", "image")
        watermark_path, watermark = self._ask_image(
            "Input the watermark image filename:", "watermark"
        )
        check_dimensions(base, watermark)

        color = None
        if not watermark.has_alpha:
            if _is_yes(self.ask("Do you want to set a transparency color?")):
                color = parse_transparency_color(
                    self.ask("Input a transparency color ([Red] [Green] [Blue]):")
                )

        use_alpha = False
        if color is None and watermark.has_alpha:
            use_alpha = _is_yes(self.ask("Do you want to use the watermark's Alpha channel?"))

        percent = parse_percent(
            self.ask("Input the watermark transparency percentage (Integer 0-100):")
        )

        method = parse_placement_method(self.ask("Choose the position method (single, grid):"))
        position = None
        if method == PLACEMENT_SINGLE:
            max_x, max_y = position_bounds(base, watermark)
            placement = parse_position(
                self.ask(f"Input the watermark position ([x 0-{max_x}] [y 0-{max_y}]):"),
                base, watermark
            )
            position = (placement.offset_x, placement.offset_y)

        output = check_output_name(
            self.ask("Input the output image filename (jpg or png extension):")
        )

        config = BlendConfig(
            image_path=image_path,
            watermark_path=watermark_path,
            output_path=output,
            percent=int(percent),
            placement=method,
            position=position,
            transparency_color=color,
            use_alpha=use_alpha,
            workers=workers,
            jpeg_quality=jpeg_quality,
        )
        return config, base, watermark


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blendmark",
        description="Blend a watermark image onto a base image. "
                    "Run without flags for an interactive session.",
    )
    parser.add_argument("--image", help="base image file")
    parser.add_argument("--watermark", help="watermark image file")
    parser.add_argument("--output", help="output file (.jpg or .png)")
    parser.add_argument("--percent", help="watermark weight, integer 0-100")

    placement = parser.add_mutually_exclusive_group()
    placement.add_argument("--grid", action="store_true", help="tile the watermark (default)")
    placement.add_argument(
        "--position", nargs=2, metavar=("X", "Y"),
        help="place a single watermark with its top-left corner at X Y",
    )

    parser.add_argument(
        "--color", nargs=3, metavar=("R", "G", "B"),
        help="treat this watermark color as transparent (watermarks without alpha)",
    )
    parser.add_argument(
        "--use-alpha", action="store_true",
        help="skip watermark pixels whose alpha is 0 (watermarks with alpha)",
    )
    parser.add_argument("--workers", type=int, help="number of blending threads")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    return parser


def config_from_args(args: argparse.Namespace, app_config: AppConfig) -> BlendConfig:
    """
    Validate flag values and build a BlendConfig.

    Raises:
        WatermarkError: If a flag value is invalid.
    """
    percent = parse_percent(args.percent)
    output = check_output_name(args.output)

    color = None
    if args.color is not None:
        color = parse_transparency_color(" ".join(args.color))

    position = None
    method = PLACEMENT_GRID
    if args.position is not None:
        method = PLACEMENT_SINGLE
        position = _parse_position_flag(args.position)

    return BlendConfig(
        image_path=require_file(args.image),
        watermark_path=require_file(args.watermark),
        output_path=output,
        percent=int(percent),
        placement=method,
        position=position,
        transparency_color=color,
        use_alpha=args.use_alpha,
        workers=args.workers or app_config.workers,
        jpeg_quality=app_config.jpeg_quality,
    )


def _parse_position_flag(values: List[str]) -> Tuple[int, int]:
    try:
        return parse_int(values[0]), parse_int(values[1])
    except ValueError:
        raise InputError(InputErrorKind.POSITION_INVALID, "The position input is invalid.")


class WatermarkController:
    """
    Connects the input front end to the BlendWorker.

    Responsibilities:
    - Collect validated input (interactive or flags)
    - Create and run the worker
    - Report the outcome on the output stream
    """

    def __init__(self, app_config: AppConfig, input_fn: InputFn = input,
                 output_fn: OutputFn = print):
        self.app_config = app_config
        self._input = input_fn
        self._output = output_fn
        self.last_result: Optional[BlendResult] = None

    def _on_progress(self, step: str, current: int, total: int):
        logger.info("%s: %d/%d", step, current, total)

    def run_interactive(self, workers: Optional[int] = None) -> int:
        session = PromptSession(self._input, self._output)
        try:
            config, base, watermark = session.gather(
                workers=workers or self.app_config.workers,
                jpeg_quality=self.app_config.jpeg_quality,
            )
        except WatermarkError as e:
            self._output(str(e))
            return 1
        return self._run_worker(config, base, watermark)

    def run_flags(self, args: argparse.Namespace) -> int:
        try:
            config = config_from_args(args, self.app_config)
        except WatermarkError as e:
            self._output(str(e))
            return 1
        return self._run_worker(config)

    def _run_worker(
            self,
            config: BlendConfig,
            base: Optional[ImageBuffer] = None,
            watermark: Optional[ImageBuffer] = None
    ) -> int:
        worker = BlendWorker(config, progress=self._on_progress)
        result = worker.run(base, watermark)
        self.last_result = result

        if not result.success:
            self._output(result.error_message)
            return 1

        self._output(f"The watermarked image {result.output_path} has been created.")
        return 0


def main(
        argv: Optional[List[str]] = None,
        input_fn: InputFn = input,
        output_fn: OutputFn = print
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    app_config = AppConfig.load()
    configure_logging(args.log_level or app_config.log_level)

    if args.workers is not None and args.workers < 1:
        parser.error("--workers must be at least 1")

    controller = WatermarkController(app_config, input_fn=input_fn, output_fn=output_fn)

    flags = (args.image, args.watermark, args.output, args.percent)
    if all(value is None for value in flags):
        return controller.run_interactive(workers=args.workers)

    missing = [name for name, value in zip(("--image", "--watermark", "--output", "--percent"), flags)
               if value is None]
    if missing:
        parser.error(f"missing required flags: {', '.join(missing)}")

    return controller.run_flags(args)
