"""Configuration files for sky_imager."""

from pathlib import Path

CONFIG_PATH = Path(__file__).parent
