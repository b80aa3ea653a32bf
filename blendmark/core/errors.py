"""
Error Types
===========
Exception hierarchy shared by the decoder, the encoder and the
validation pipeline.

The blend engine itself raises nothing for valid inputs; everything
listed here comes from the collaborators around it.
"""

from enum import Enum


class InputErrorKind(str, Enum):
    """Specific reasons a piece of gathered input was rejected."""
    FILE_NOT_FOUND = "file_not_found"
    DIMENSIONS = "dimensions"
    TRANSPARENCY_COLOR = "transparency_color"
    PERCENT_NOT_INTEGER = "percent_not_integer"
    PERCENT_OUT_OF_RANGE = "percent_out_of_range"
    PLACEMENT_METHOD = "placement_method"
    POSITION_INVALID = "position_invalid"
    POSITION_OUT_OF_RANGE = "position_out_of_range"
    OUTPUT_EXTENSION = "output_extension"


class WatermarkError(Exception):
    """Base class for every error raised by blendmark."""
    kind = "error"

    @property
    def message(self) -> str:
        return str(self)


class DecodeError(WatermarkError):
    """The file could not be read as a supported raster image."""
    kind = "decode"


class UnsupportedColorModel(DecodeError):
    """The image decoded fine but is not 24-bit RGB or 32-bit RGBA."""
    kind = "unsupported_color_model"


class EncodeError(WatermarkError):
    """The output image could not be written."""
    kind = "encode"


class InputError(WatermarkError):
    """
    A user-supplied value failed validation.

    Attributes:
        error_kind: InputErrorKind describing which check failed.
    """

    def __init__(self, error_kind: InputErrorKind, message: str):
        super().__init__(message)
        self.error_kind = error_kind

    @property
    def kind(self) -> str:
        return self.error_kind.value
