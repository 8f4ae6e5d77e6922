#!/usr/bin/env python3
"""
Text renderers for grid statistics
"""

from typing import List, TextIO

import numpy as np

from depth_grid import config
from depth_grid.lut import lutf
from depth_grid.reducer import GridAccumulator
from depth_grid.stats import CellStats


class GridRenderer:
    """Base class for the display modes, handles the bordered grid layout"""

    mode = None

    def __init__(self, grid_config: config.GridConfig, table: np.ndarray):
        self.config = grid_config
        self.table = table
        self.box_width = grid_config.box_width

    def render(self, stats: List[List[CellStats]], acc: GridAccumulator, stream: TextIO):
        raise NotImplementedError

    def hline(self) -> str:
        """Horizontal border between grid rows"""
        return ("+" + "-" * (self.box_width + 2)) * self.config.divisions + "+\n"

    def box(self, text: str) -> str:
        """Single row of a single grid box, text right-aligned and truncated"""
        width = self.box_width
        return f"| {text[:width]:>{width}} "

    def row(self, cells) -> str:
        return "".join(cells) + "|\n"

    def distance(self, raw) -> float:
        return float(self.table[int(raw)])


class StatsRenderer(GridRenderer):
    """Tabular per-cell statistics"""

    mode = config.DisplayMode.STATS

    def render(self, stats, acc, stream):
        for grid_row in stats:
            stream.write(self.hline())
            stream.write(self.row(self.box(f"Tot {cell.pixel_count}") for cell in grid_row))
            stream.write(self.row(self.box(f"Avg {lutf(self.table, cell.average):f}") for cell in grid_row))
            stream.write(self.row(self.box(f"Min {self.distance(cell.min_raw):f}") for cell in grid_row))
            stream.write(self.row(self.box(f"Med ~{self.distance(cell.median_raw):f}") for cell in grid_row))
            stream.write(self.row(self.box(f"Max {self.distance(cell.max_raw):f}") for cell in grid_row))
            stream.write(self.row(self.box(f"Out {cell.out_of_range_percent}%") for cell in grid_row))
        stream.write(self.hline())


class HistogramRenderer(GridRenderer):
    """Per-cell histogram drawn as horizontal bars"""

    mode = config.DisplayMode.HISTOGRAM
    bar_char = "#"

    def __init__(self, grid_config, table):
        super().__init__(grid_config, table)
        self.histogram_rows = min(grid_config.histogram_rows, config.HISTOGRAM_SIZE)

    def slices(self, size: int):
        """Bucket ranges covered by each bar row"""
        rows = self.histogram_rows
        return [(r * size // rows, (r + 1) * size // rows) for r in range(rows)]

    def bar_percent(self, count: int, in_range: int) -> int:
        if in_range <= 0:
            return 0
        return min(100, count * config.HISTOGRAM_SCALE * self.histogram_rows // in_range)

    def bar(self, percent: int) -> str:
        filled = self.box_width * percent // 100
        return " " + self.bar_char * filled + " " * (self.box_width - filled) + " "

    def render(self, stats, acc, stream):
        for row_index, grid_row in enumerate(stats):
            stream.write(self.hline())
            histograms = acc.histogram[row_index]
            for start, end in self.slices(acc.histogram_size):
                bars = []
                for col_index, cell in enumerate(grid_row):
                    count = int(np.sum(histograms[col_index, start:end]))
                    in_range = cell.pixel_count - cell.out_of_range
                    bars.append("|" + self.bar(self.bar_percent(count, in_range)))
                stream.write(self.row(bars))
        stream.write(self.hline())


class AsciiRenderer(GridRenderer):
    """Coarse depth map, one character per cell"""

    mode = config.DisplayMode.ASCII
    ramp = config.ASCII_RAMP
    out_of_range_char = config.ASCII_OUT_OF_RANGE

    def symbol(self, cell: CellStats) -> str:
        if cell.min_raw == config.OUT_OF_RANGE:
            return self.out_of_range_char

        near = self.config.near_clip
        far = self.config.far_clip
        level = int((self.distance(cell.min_raw) - near) * len(self.ramp) / (far - near))
        # The calibration curve passes its asymptote near raw 1093 and goes
        # negative, so readings past it clamp to the nearest symbol
        level = min(max(level, 0), len(self.ramp) - 1)
        return self.ramp[level]

    def render(self, stats, acc, stream):
        for grid_row in stats:
            stream.write("".join(self.symbol(cell) for cell in grid_row) + "\n")


RENDERERS = {cls.mode: cls for cls in (StatsRenderer, HistogramRenderer, AsciiRenderer)}


def make_renderer(grid_config: config.GridConfig, table: np.ndarray) -> GridRenderer:
    """Create the renderer for the configured display mode"""
    return RENDERERS[grid_config.display_mode](grid_config, table)
