#!/usr/bin/env python3
"""
Frame controller: runs each depth frame through reduction, statistics and rendering
"""

import sys
import logging
from threading import Event
from typing import List, NamedTuple, Optional, TextIO

import numpy as np

from depth_grid import config
from depth_grid.lut import build_lut
from depth_grid.reducer import CellMap, GridAccumulator, reduce_frame
from depth_grid.render import make_renderer
from depth_grid.stats import CellStats, aggregate, frame_out_of_range, frame_out_of_range_percent


class FrameShapeError(ValueError):
    """Raised when a frame does not match the configured dimensions"""


class FrameResult(NamedTuple):
    frame: int
    timestamp: int
    accumulator: GridAccumulator
    stats: List[List[CellStats]]
    out_of_range_percent: int
    out_of_range: bool


class FrameController:
    """Owns the per-run configuration and drives new frames through the pipeline

    The out_of_range event is written only here and read by the sensor loop
    to drive the indicator LED.
    """

    def __init__(self, grid_config: config.GridConfig, table: Optional[np.ndarray] = None,
                 stream: Optional[TextIO] = None, logger: Optional[logging.Logger] = None):
        self.config = grid_config
        self.table = build_lut() if table is None else table
        self.stream = sys.stdout if stream is None else stream
        self.logger = logger or logging.getLogger(config.LOG_NAME)

        self.cell_map = CellMap.for_config(grid_config)
        self.renderer = make_renderer(grid_config, self.table)
        self.out_of_range = Event()
        self.frame_count = 0

        self.logger.info(
            f"Frame controller ready: {grid_config.divisions}x{grid_config.divisions} grid, "
            f"mode={grid_config.display_mode.value}, box width {grid_config.box_width}"
        )

    def process_frame(self, frame, timestamp: int) -> FrameResult:
        """
        Reduce, aggregate and render one raw depth frame

        Args:
            frame: Raw 11-bit samples, width*height of them
            timestamp: Sensor timestamp of the frame

        Returns:
            FrameResult for the processed frame
        """
        frame = np.asarray(frame)
        if frame.size != self.config.frame_pixels:
            raise FrameShapeError(
                f"Frame has {frame.size} pixels, expected "
                f"{self.config.frame_width}x{self.config.frame_height}"
            )

        acc = reduce_frame(frame, self.config, self.cell_map)
        stats = aggregate(acc)
        percent = frame_out_of_range_percent(acc)

        out = self.stream
        out.write(config.CLEAR_SCREEN)
        out.write(f"Time: {timestamp} frame: {self.frame_count} out: {percent}%\n")
        self.renderer.render(stats, acc, out)
        out.flush()

        oor = frame_out_of_range(acc)
        self._set_out_of_range(oor, percent)

        result = FrameResult(self.frame_count, timestamp, acc, stats, percent, oor)
        self.frame_count += 1
        return result

    def _set_out_of_range(self, value: bool, percent: int):
        if value == self.out_of_range.is_set():
            return
        if value:
            self.logger.warning(f"Frame {self.frame_count}: {percent}% of pixels out of range")
            self.out_of_range.set()
        else:
            self.logger.info(f"Frame {self.frame_count}: back in range ({percent}% out)")
            self.out_of_range.clear()
