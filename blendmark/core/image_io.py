"""
Image I/O
=========
Decode files into ImageBuffers and encode blended buffers back to disk
using Pillow.

Technical Notes:
- Only 24-bit RGB and 32-bit RGBA images are accepted
- Pixels are taken as stored; EXIF orientation is not applied
- Output format comes from the file extension: "png" or "jpg"
"""

import logging
from pathlib import Path
from typing import Union

from PIL import Image, UnidentifiedImageError

from .errors import DecodeError, EncodeError, UnsupportedColorModel
from .types import ImageBuffer

logger = logging.getLogger(__name__)

SUPPORTED_OUTPUT_EXTS = {"jpg", "png"}

# Pillow save format for each accepted extension
_OUTPUT_FORMATS = {"jpg": "JPEG", "png": "PNG"}

_COLOR_BANDS = {"R", "G", "B"}

# Indexed images carry RGB palette entries but 8 or fewer bits per pixel
_PALETTE_MODES = ("P", "PA")


def _raw_modes(image: Image.Image) -> list:
    """Decoder raw modes of a not-yet-loaded image, e.g. "RGB;16B" for 48-bit PNG."""
    modes = []
    for tile in image.tile:
        args = tile[3]
        if isinstance(args, tuple):
            args = args[0] if args else None
        if isinstance(args, str):
            modes.append(args)
    return modes


def _check_color_model(image: Image.Image, role: str) -> None:
    """
    Reject anything other than 8-bit-per-channel RGB/RGBA.

    Raises:
        UnsupportedColorModel: With the same wording the interactive
                               tool has always printed.
    """
    if image.mode in ("RGB", "RGBA"):
        if any(";16" in rawmode for rawmode in _raw_modes(image)):
            raise UnsupportedColorModel(f"The {role} isn't 24 or 32-bit.")
        return

    if image.mode not in _PALETTE_MODES and not _COLOR_BANDS.issubset(image.getbands()):
        raise UnsupportedColorModel(f"The number of {role} color components isn't 3.")

    raise UnsupportedColorModel(f"The {role} isn't 24 or 32-bit.")


def decode_image(path: Union[str, Path], role: str = "image") -> ImageBuffer:
    """
    Read an image file into an ImageBuffer.

    Args:
        path: File to read.
        role: "image" or "watermark", used in error messages.

    Returns:
        ImageBuffer with 3 or 4 channels.

    Raises:
        DecodeError: If Pillow cannot read the file.
        UnsupportedColorModel: If the image is not RGB or RGBA.
    """
    path = Path(path)

    try:
        with Image.open(path) as image:
            _check_color_model(image, role)
            image.load()
            buffer = ImageBuffer.from_image(image)
    except UnsupportedColorModel:
        raise
    except FileNotFoundError as e:
        raise DecodeError(f"The file {path} doesn't exist.") from e
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise DecodeError(f"The {role} file {path} isn't a readable image: {e}") from e

    logger.debug(
        "Decoded %s %s: %dx%d, %d-bit",
        role, path, buffer.width, buffer.height, buffer.bit_depth
    )
    return buffer


def output_extension(path: Union[str, Path]) -> str:
    """Extension without the dot, exactly as written."""
    return Path(path).suffix[1:]


def encode_image(
        buffer: ImageBuffer,
        path: Union[str, Path],
        jpeg_quality: int = 95
) -> Path:
    """
    Write an ImageBuffer to disk.

    Args:
        buffer: Pixels to write.
        path: Destination; the extension picks the format.
        jpeg_quality: Quality used when writing JPEG.

    Returns:
        The written path.

    Raises:
        EncodeError: On an unsupported extension or a failed write.
    """
    path = Path(path)
    extension = output_extension(path)
    if extension not in SUPPORTED_OUTPUT_EXTS:
        raise EncodeError(f"Unsupported output format: {path.suffix or path.name}")

    image = buffer.to_image()
    if image.mode != "RGB":
        image = image.convert("RGB")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if extension == "jpg":
            image.save(path, format=_OUTPUT_FORMATS[extension], quality=jpeg_quality)
        else:
            image.save(path, format=_OUTPUT_FORMATS[extension])
    except (OSError, ValueError) as e:
        raise EncodeError(f"Failed to write {path}: {e}") from e
    finally:
        image.close()

    logger.info("Wrote %s (%dx%d)", path, buffer.width, buffer.height)
    return path
