"""
blendmark - Main Entry Point
============================
Blend a watermark image onto a base image.

Usage:
    python main.py                      (interactive session)
    python main.py --image in.png --watermark wm.png --percent 40 \
        --grid --output out.png

Architecture:
    - Model: blendmark/core/ (pure algorithms, image I/O, validation)
    - Workers: blendmark/workers/ (pipeline runner, band-parallel blending)
    - Front end: blendmark/cli.py (prompts, flags, WatermarkController)
"""

import sys

from blendmark.cli import main


if __name__ == "__main__":
    sys.exit(main())
