"""
Input Validation
================
Turns raw user input into the typed values the blend engine expects.

Every function either returns the validated value or raises InputError
with a specific InputErrorKind. Nothing here exits the process; callers
decide how to report the failure.
"""

import re
from pathlib import Path
from typing import Optional, Tuple

from .errors import InputError, InputErrorKind
from .image_io import SUPPORTED_OUTPUT_EXTS, output_extension
from .types import (
    BlendPercent, Color, ColorKey, GridPlacement, ImageBuffer, NoTransparency,
    PlacementPolicy, SinglePlacement, TransparencyPolicy, WatermarkAlpha,
)

PLACEMENT_SINGLE = "single"
PLACEMENT_GRID = "grid"

# Optional sign and ASCII digits only; no underscores, no other Unicode digits
_INTEGER = re.compile(r"[+-]?[0-9]+")


def parse_int(text: str) -> int:
    """
    Parse a plain base-10 integer.

    Raises:
        ValueError: For anything but an optional sign followed by ASCII digits.
    """
    if not _INTEGER.fullmatch(text):
        raise ValueError(f"Not an integer: {text!r}")
    return int(text, 10)


def _parse_ints(text: str) -> list:
    """Split on single spaces and parse each field with parse_int()."""
    return [parse_int(part) for part in text.strip().split(" ")]


def require_file(name: str) -> Path:
    path = Path(name)
    if not path.exists():
        raise InputError(InputErrorKind.FILE_NOT_FOUND, f"The file {name} doesn't exist.")
    return path


def check_dimensions(base: ImageBuffer, watermark: ImageBuffer) -> None:
    """The watermark must fit inside the base image on both axes."""
    if base.width < watermark.width or base.height < watermark.height:
        raise InputError(InputErrorKind.DIMENSIONS, "The watermark's dimensions are larger.")


def parse_transparency_color(text: str) -> Color:
    """Parse "R G B" with each component in 0-255."""
    try:
        values = _parse_ints(text)
    except ValueError:
        values = []

    if len(values) != 3 or any(not 0 <= v <= 255 for v in values):
        raise InputError(
            InputErrorKind.TRANSPARENCY_COLOR, "The transparency color input is invalid."
        )
    return values[0], values[1], values[2]


def parse_percent(text: str) -> BlendPercent:
    try:
        value = parse_int(text.strip())
    except ValueError:
        raise InputError(
            InputErrorKind.PERCENT_NOT_INTEGER,
            "The transparency percentage isn't an integer number."
        )

    if not 0 <= value <= 100:
        raise InputError(
            InputErrorKind.PERCENT_OUT_OF_RANGE, "The transparency percentage is out of range."
        )
    return BlendPercent(value)


def parse_placement_method(text: str) -> str:
    """Return "single" or "grid" (input is case-insensitive)."""
    method = text.strip().lower()
    if method not in (PLACEMENT_SINGLE, PLACEMENT_GRID):
        raise InputError(InputErrorKind.PLACEMENT_METHOD, "The position method input is invalid.")
    return method


def position_bounds(base: ImageBuffer, watermark: ImageBuffer) -> Tuple[int, int]:
    """Largest legal (x, y) offset for a single placement."""
    return base.width - watermark.width, base.height - watermark.height


def check_position(
        x: int,
        y: int,
        base: ImageBuffer,
        watermark: ImageBuffer
) -> SinglePlacement:
    max_x, max_y = position_bounds(base, watermark)
    if not 0 <= x <= max_x or not 0 <= y <= max_y:
        raise InputError(
            InputErrorKind.POSITION_OUT_OF_RANGE, "The position input is out of range."
        )
    return SinglePlacement(offset_x=x, offset_y=y)


def parse_position(text: str, base: ImageBuffer, watermark: ImageBuffer) -> SinglePlacement:
    """Parse "X Y" and check it keeps the watermark inside the base image."""
    try:
        values = _parse_ints(text)
    except ValueError:
        values = []

    if len(values) != 2:
        raise InputError(InputErrorKind.POSITION_INVALID, "The position input is invalid.")

    return check_position(values[0], values[1], base, watermark)


def build_placement(
        method: str,
        base: ImageBuffer,
        watermark: ImageBuffer,
        position: Optional[Tuple[int, int]] = None
) -> PlacementPolicy:
    """Combine a placement method and optional position into a policy."""
    if method == PLACEMENT_GRID:
        return GridPlacement()
    if position is None:
        raise InputError(InputErrorKind.POSITION_INVALID, "The position input is invalid.")
    return check_position(position[0], position[1], base, watermark)


def check_output_name(name: str) -> Path:
    if output_extension(name) not in SUPPORTED_OUTPUT_EXTS:
        raise InputError(
            InputErrorKind.OUTPUT_EXTENSION, "The output file extension isn't \"jpg\" or \"png\"."
        )
    return Path(name)


def resolve_transparency(
        watermark: ImageBuffer,
        color: Optional[Color] = None,
        use_alpha: bool = False
) -> TransparencyPolicy:
    """
    Pick the transparency policy for a watermark.

    A key color only applies to watermarks without alpha, and the alpha
    channel only when one exists and no key color was chosen.
    """
    if color is not None and not watermark.has_alpha:
        return ColorKey(color)
    if use_alpha and watermark.has_alpha:
        return WatermarkAlpha()
    return NoTransparency()
