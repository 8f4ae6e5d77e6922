#!/usr/bin/env python3
"""
Configuration settings for the depth grid monitor
"""

import os
from dataclasses import dataclass
from enum import Enum

# Paths
LOG_DIR = os.path.expanduser("~/.kingrid/logs")

# Sensor frame format (11-bit depth)
FRAME_WIDTH = 640
FRAME_HEIGHT = 480
RAW_RANGE = 2048
OUT_OF_RANGE = 2047         # Sentinel raw value for "no reading"

# Raw value to meters calibration: 0.1236 * tan(raw / 2842.5 + 1.1863)
LUT_SCALE = 0.1236
LUT_DIVISOR = 2842.5
LUT_OFFSET = 1.1863

# Grid settings
DEFAULT_DIVISIONS = 6
HISTOGRAM_SIZE = 32         # Buckets per grid cell
HISTOGRAM_RANGE = 1024      # Raw units covered by the histogram (only half the raw domain)
MIN_BOX_WIDTH = 10          # Characters inside a grid box, less border and padding
HISTOGRAM_SCALE = 40        # Visual scale for histogram bars

# ASCII mode clipping range (meters)
DEFAULT_NEAR_CLIP = 0.5
DEFAULT_FAR_CLIP = 5.0
ASCII_RAMP = "@#%*+-"       # Closest to farthest
ASCII_OUT_OF_RANGE = "."

# Out of range indicator threshold (percent of the frame)
OUT_OF_RANGE_THRESHOLD = 35

# Sensor settings
DEFAULT_TILT = -5           # Degrees

# Logging settings
LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_NAME = "kingrid"

# Terminal control
CLEAR_SCREEN = "\033[H\033[2J"


class ConfigError(ValueError):
    """Raised when a grid configuration cannot be used"""


class DisplayMode(Enum):
    """How each frame's grid is drawn"""

    STATS = "stats"
    HISTOGRAM = "histogram"
    ASCII = "ascii"


@dataclass(frozen=True)
class GridConfig:
    """Per-run display configuration, read-only once built"""

    divisions: int = DEFAULT_DIVISIONS
    box_width: int = MIN_BOX_WIDTH
    histogram_rows: int = 1
    near_clip: float = DEFAULT_NEAR_CLIP
    far_clip: float = DEFAULT_FAR_CLIP
    display_mode: DisplayMode = DisplayMode.STATS
    frame_width: int = FRAME_WIDTH
    frame_height: int = FRAME_HEIGHT

    def __post_init__(self):
        if self.divisions < 1:
            raise ConfigError(f"Grid divisions must be at least 1, got {self.divisions}")
        if self.box_width < 1:
            raise ConfigError(f"Box width must be positive, got {self.box_width}")
        if self.histogram_rows < 1:
            raise ConfigError(f"Histogram rows must be positive, got {self.histogram_rows}")
        if self.frame_width < 1 or self.frame_height < 1:
            raise ConfigError(f"Invalid frame size {self.frame_width}x{self.frame_height}")
        if self.far_clip <= self.near_clip:
            raise ConfigError(f"Far clip ({self.far_clip}) must be beyond near clip ({self.near_clip})")
        if not isinstance(self.display_mode, DisplayMode):
            raise ConfigError(f"Unknown display mode: {self.display_mode!r}")

    @property
    def frame_pixels(self) -> int:
        return self.frame_width * self.frame_height

    @classmethod
    def from_terminal(cls, columns: int, lines: int, divisions: int = DEFAULT_DIVISIONS, **kwargs) -> "GridConfig":
        """
        Build a configuration sized to a terminal

        Args:
            columns: Terminal width in characters
            lines: Terminal height in lines
            divisions: Grid divisions per axis
            **kwargs: Remaining GridConfig fields

        Returns:
            GridConfig with box width and histogram rows filled in
        """
        if divisions < 1:
            raise ConfigError(f"Grid divisions must be at least 1, got {divisions}")
        return cls(
            divisions=divisions,
            box_width=box_width_for(columns, divisions),
            histogram_rows=histogram_rows_for(lines, divisions),
            **kwargs,
        )


def box_width_for(columns: int, divisions: int) -> int:
    """Grid box text width that fits `divisions` boxes across the terminal"""
    # Each box takes "| " + text + " ", plus one closing "|"
    return max(MIN_BOX_WIDTH, (columns - 1) // divisions - 3)


def histogram_rows_for(lines: int, divisions: int) -> int:
    """Bar rows per grid box that fit `divisions` box rows down the terminal"""
    # Banner and closing rule take two lines, each grid row has its own rule
    rows = (lines - 2) // divisions - 1
    return max(1, min(HISTOGRAM_SIZE, rows))
