"""
Test script for the interactive session and command-line flags.

Run with: python -m pytest tests/test_cli.py -v
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import numpy as np
import pytest
from PIL import Image

from blendmark import config as config_module
from blendmark.cli import main
from blendmark.config import AppConfig
from blendmark.core.image_io import decode_image


def write_solid(path: Path, width: int, height: int, color) -> Path:
    arr = np.zeros((height, width, len(color)), dtype=np.uint8)
    arr[:, :] = color
    img = Image.fromarray(arr)
    img.save(path)
    img.close()
    return path


class Console:
    """Scripted stand-in for input()/print()."""

    def __init__(self, answers):
        self._answers = iter(answers)
        self.lines = []

    def input(self) -> str:
        return next(self._answers)

    def print(self, text: str):
        self.lines.append(text)


def run_session(answers):
    console = Console(answers)
    code = main([], input_fn=console.input, output_fn=console.print)
    return code, console.lines


def test_interactive_single_with_color_key(tmp_path):
    base = write_solid(tmp_path / "base.png", 6, 6, (10, 20, 30))
    wm_arr = np.full((2, 2, 3), 200, dtype=np.uint8)
    wm_arr[0, 0] = (0, 0, 0)
    img = Image.fromarray(wm_arr)
    img.save(tmp_path / "wm.png")
    img.close()
    output = tmp_path / "out.png"

    code, lines = run_session([
        str(base), str(tmp_path / "wm.png"), "yes", "0 0 0", "100", "single", "1 1", str(output),
    ])

    assert code == 0
    assert lines == [
        "Input the image filename:",
        "Input the watermark image filename:",
        "Do you want to set a transparency color?",
        "Input a transparency color ([Red] [Green] [Blue]):",
        "Input the watermark transparency percentage (Integer 0-100):",
        "Choose the position method (single, grid):",
        "Input the watermark position ([x 0-4] [y 0-4]):",
        "Input the output image filename (jpg or png extension):",
        f"The watermarked image {output} has been created.",
    ]
    out = decode_image(output)
    assert out.pixel(1, 1) == (10, 20, 30)
    assert out.pixel(2, 1) == (200, 200, 200)
    assert out.pixel(0, 0) == (10, 20, 30)


def test_interactive_alpha_watermark_grid(tmp_path):
    base = write_solid(tmp_path / "base.png", 5, 5, (100, 100, 100))
    wm = write_solid(tmp_path / "wm.png", 2, 2, (200, 0, 0, 0))
    output = tmp_path / "out.png"

    code, lines = run_session([str(base), str(wm), "YES", "50", "Grid", str(output)])

    assert code == 0
    assert "Do you want to set a transparency color?" not in lines
    assert "Do you want to use the watermark's Alpha channel?" in lines
    out = decode_image(output)
    assert out.pixel(4, 4) == (100, 100, 100)


def test_interactive_declined_alpha_blends(tmp_path):
    base = write_solid(tmp_path / "base.png", 3, 3, (100, 100, 100))
    wm = write_solid(tmp_path / "wm.png", 1, 1, (200, 0, 0, 0))
    output = tmp_path / "out.png"

    code, _ = run_session([str(base), str(wm), "no", "50", "grid", str(output)])

    assert code == 0
    assert decode_image(output).pixel(2, 2) == (150, 50, 50)


def test_interactive_missing_file():
    code, lines = run_session(["no_such_image.png"])

    assert code == 1
    assert lines[-1] == "The file no_such_image.png doesn't exist."


def test_interactive_watermark_too_large(tmp_path):
    base = write_solid(tmp_path / "base.png", 4, 4, (1, 1, 1))
    wm = write_solid(tmp_path / "wm.png", 5, 5, (2, 2, 2))

    code, lines = run_session([str(base), str(wm)])

    assert code == 1
    assert lines[-1] == "The watermark's dimensions are larger."


@pytest.mark.parametrize("answers, message", [
    (["no", "abc"], "The transparency percentage isn't an integer number."),
    (["no", "101"], "The transparency percentage is out of range."),
    (["no", "50", "spiral"], "The position method input is invalid."),
    (["no", "50", "single", "9 9"], "The position input is out of range."),
    (["no", "50", "single", "one two"], "The position input is invalid."),
    (["yes", "1 2"], "The transparency color input is invalid."),
    (["no", "50", "grid", "out.bmp"], "The output file extension isn't \"jpg\" or \"png\"."),
])
def test_interactive_invalid_answers(tmp_path, answers, message):
    base = write_solid(tmp_path / "base.png", 4, 4, (1, 1, 1))
    wm = write_solid(tmp_path / "wm.png", 2, 2, (2, 2, 2))

    code, lines = run_session([str(base), str(wm)] + answers)

    assert code == 1
    assert lines[-1] == message


def test_flags_grid(tmp_path):
    base = write_solid(tmp_path / "base.png", 8, 8, (0, 0, 0))
    wm = write_solid(tmp_path / "wm.png", 3, 3, (100, 200, 250))
    output = tmp_path / "out.jpg"
    console = Console([])

    code = main([
        "--image", str(base), "--watermark", str(wm), "--output", str(output),
        "--percent", "40", "--grid", "--workers", "2",
    ], input_fn=console.input, output_fn=console.print)

    assert code == 0
    assert output.exists()
    assert console.lines == [f"The watermarked image {output} has been created."]


def test_flags_single_position(tmp_path):
    base = write_solid(tmp_path / "base.png", 8, 8, (0, 0, 0))
    wm = write_solid(tmp_path / "wm.png", 3, 3, (100, 200, 250))
    output = tmp_path / "out.png"
    console = Console([])

    code = main([
        "--image", str(base), "--watermark", str(wm), "--output", str(output),
        "--percent", "100", "--position", "5", "5",
    ], input_fn=console.input, output_fn=console.print)

    assert code == 0
    out = decode_image(output)
    assert out.pixel(7, 7) == (100, 200, 250)
    assert out.pixel(4, 4) == (0, 0, 0)


def test_flags_position_out_of_range(tmp_path):
    base = write_solid(tmp_path / "base.png", 8, 8, (0, 0, 0))
    wm = write_solid(tmp_path / "wm.png", 3, 3, (100, 200, 250))
    console = Console([])

    code = main([
        "--image", str(base), "--watermark", str(wm), "--output", str(tmp_path / "o.png"),
        "--percent", "100", "--position", "6", "0",
    ], input_fn=console.input, output_fn=console.print)

    assert code == 1
    assert console.lines == ["The position input is out of range."]


def test_flags_position_not_plain_integer(tmp_path):
    base = write_solid(tmp_path / "base.png", 8, 8, (0, 0, 0))
    wm = write_solid(tmp_path / "wm.png", 3, 3, (100, 200, 250))
    console = Console([])

    code = main([
        "--image", str(base), "--watermark", str(wm), "--output", str(tmp_path / "o.png"),
        "--percent", "100", "--position", "1_0", "0",
    ], input_fn=console.input, output_fn=console.print)

    assert code == 1
    assert console.lines == ["The position input is invalid."]
    assert not (tmp_path / "o.png").exists()


def test_flags_invalid_percent(tmp_path):
    base = write_solid(tmp_path / "base.png", 8, 8, (0, 0, 0))
    console = Console([])

    code = main([
        "--image", str(base), "--watermark", str(base), "--output", str(tmp_path / "o.png"),
        "--percent", "101",
    ], input_fn=console.input, output_fn=console.print)

    assert code == 1
    assert console.lines == ["The transparency percentage is out of range."]


def test_flags_incomplete_exits():
    with pytest.raises(SystemExit) as excinfo:
        main(["--image", "a.png"])
    assert excinfo.value.code == 2


def test_app_config_from_environment(monkeypatch):
    monkeypatch.setenv("BLENDMARK_LOG_LEVEL", "debug")
    monkeypatch.setenv("BLENDMARK_JPEG_QUALITY", "250")
    monkeypatch.setenv("BLENDMARK_WORKERS", "not-a-number")

    cfg = AppConfig.load()

    assert cfg.log_level == "DEBUG"
    assert cfg.jpeg_quality == 100
    assert cfg.workers == 1


@pytest.mark.parametrize("name", [
    "BLENDMARK_LOG_LEVEL", "BLENDMARK_JPEG_QUALITY", "BLENDMARK_WORKERS",
])
def test_config_module_documents_environment(name):
    doc = config_module.__doc__

    assert doc.strip().startswith("Application Configuration")
    assert name in doc


def main_tests():
    """Run all tests."""
    return pytest.main([__file__, "-v"])


if __name__ == "__main__":
    sys.exit(main_tests())
