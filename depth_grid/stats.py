#!/usr/bin/env python3
"""
Per-cell summary statistics derived from grid accumulators
"""

from typing import List, NamedTuple

import numpy as np

from depth_grid import config
from depth_grid.reducer import GridAccumulator


class CellStats(NamedTuple):
    """Summary of one grid cell, in raw sensor units"""

    pixel_count: int
    out_of_range: int
    average: float
    min_raw: int
    median_raw: int
    max_raw: int
    out_of_range_percent: int

    @property
    def has_data(self) -> bool:
        return self.out_of_range < self.pixel_count


def histogram_median(histogram, in_range: int) -> int:
    """
    Approximate median raw value from a cell histogram

    Walks buckets until half of the in-range pixels are counted and returns
    the midpoint raw value of the stopping bucket.

    Args:
        histogram: Bucket counts for one cell
        in_range: Number of in-range pixels in the cell

    Returns:
        Raw value at the middle of the median bucket
    """
    size = len(histogram)
    half = (in_range + 1) // 2
    running = 0
    bucket = size - 1
    for index, count in enumerate(histogram):
        running += int(count)
        if running >= half:
            bucket = index
            break

    return int((bucket + 0.5) * config.HISTOGRAM_RANGE / size + 0.5)


def out_of_range_percent(out_of_range: int, pixel_count: int) -> int:
    if pixel_count <= 0:
        return 0
    return out_of_range * 100 // pixel_count


def cell_stats(acc: GridAccumulator, row: int, col: int) -> CellStats:
    """Compute statistics for a single cell of an accumulator grid"""
    pixel_count = int(acc.pixel_count[row, col])
    out_of_range = int(acc.out_of_range[row, col])
    percent = out_of_range_percent(out_of_range, pixel_count)

    if out_of_range >= pixel_count:
        # No data: every figure reports the sentinel
        sentinel = config.OUT_OF_RANGE
        return CellStats(pixel_count, out_of_range, float(sentinel), sentinel, sentinel, sentinel, percent)

    in_range = pixel_count - out_of_range
    min_raw = int(acc.min_raw[row, col])
    max_raw = int(acc.max_raw[row, col])
    average = float(acc.total[row, col]) / in_range

    # Bucket midpoints can fall outside the observed range
    median = histogram_median(acc.histogram[row, col], in_range)
    median = min(max(median, min_raw), max_raw)

    return CellStats(pixel_count, out_of_range, average, min_raw, median, max_raw, percent)


def aggregate(acc: GridAccumulator) -> List[List[CellStats]]:
    """
    Compute statistics for every cell of an accumulator grid

    Args:
        acc: Accumulators from reduce_frame()

    Returns:
        Rows of CellStats, indexed [row][col]
    """
    return [[cell_stats(acc, row, col) for col in range(acc.divisions)] for row in range(acc.divisions)]


def frame_out_of_range_percent(acc: GridAccumulator) -> int:
    return out_of_range_percent(acc.frame_out_of_range, int(np.sum(acc.pixel_count)))


def frame_out_of_range(acc: GridAccumulator, threshold: int = config.OUT_OF_RANGE_THRESHOLD) -> bool:
    """True when more than `threshold` percent of the frame is out of range"""
    pixels = int(np.sum(acc.pixel_count))
    return acc.frame_out_of_range > pixels * threshold // 100
