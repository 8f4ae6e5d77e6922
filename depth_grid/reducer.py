#!/usr/bin/env python3
"""
Grid reduction of raw depth frames into per-cell accumulators
"""

from typing import Optional

import numpy as np

from depth_grid import config


class CellMap:
    """Pixel to grid cell assignment for one frame geometry

    The sensor image is mirrored left to right so that the grid matches
    what a viewer facing the sensor sees.
    """

    def __init__(self, divisions: int, width: int, height: int):
        self.divisions = divisions
        self.width = width
        self.height = height

        x = np.arange(width)
        y = np.arange(height)
        grid_x = (width - 1 - x) * divisions // width
        grid_y = y * divisions // height

        # Row-major flat cell index (row * divisions + col) for every pixel
        self.cells = (grid_y[:, np.newaxis] * divisions + grid_x[np.newaxis, :]).ravel()
        self.pixel_count = np.bincount(self.cells, minlength=divisions * divisions).reshape(divisions, divisions)

    @classmethod
    def for_config(cls, grid_config: config.GridConfig) -> "CellMap":
        return cls(grid_config.divisions, grid_config.frame_width, grid_config.frame_height)

    def cell_of(self, x: int, y: int):
        """Return the (row, col) grid cell of pixel (x, y)"""
        index = int(self.cells[y * self.width + x])
        return divmod(index, self.divisions)


class GridAccumulator:
    """Per-cell running totals for one frame, indexed [row, col]"""

    def __init__(self, divisions: int, histogram_size: int = config.HISTOGRAM_SIZE):
        shape = (divisions, divisions)
        self.divisions = divisions
        self.histogram_size = histogram_size
        self.pixel_count = np.zeros(shape, dtype=np.int64)
        self.out_of_range = np.zeros(shape, dtype=np.int64)
        self.total = np.zeros(shape, dtype=np.int64)
        self.min_raw = np.full(shape, config.OUT_OF_RANGE, dtype=np.int64)
        self.max_raw = np.zeros(shape, dtype=np.int64)
        self.histogram = np.zeros(shape + (histogram_size,), dtype=np.int64)
        self.frame_out_of_range = 0

    @property
    def in_range(self) -> np.ndarray:
        return self.pixel_count - self.out_of_range


def histogram_bucket(raw, histogram_size: int = config.HISTOGRAM_SIZE):
    """
    Histogram bucket for in-range raw values

    Buckets span only HISTOGRAM_RANGE raw units rather than the full 11-bit
    domain, which skews medians for far readings. Values past the histogram
    range land in the last bucket.
    """
    bucket = np.asarray(raw, dtype=np.int64) * histogram_size // config.HISTOGRAM_RANGE
    return np.minimum(bucket, histogram_size - 1)


def reduce_frame(frame, grid_config: config.GridConfig, cell_map: Optional[CellMap] = None) -> GridAccumulator:
    """
    Reduce one raw depth frame to a grid of accumulators

    Args:
        frame: width*height raw samples, row-major (flat or (height, width))
        grid_config: Grid configuration
        cell_map: Precomputed CellMap for grid_config, built if not given

    Returns:
        Populated GridAccumulator, including the frame out-of-range total
    """
    if cell_map is None:
        cell_map = CellMap.for_config(grid_config)

    divisions = grid_config.divisions
    cell_total = divisions * divisions
    size = config.HISTOGRAM_SIZE

    raw = np.asarray(frame).reshape(-1).astype(np.int64)
    acc = GridAccumulator(divisions, size)
    acc.pixel_count[:] = cell_map.pixel_count

    sentinel = raw == config.OUT_OF_RANGE
    acc.out_of_range[:] = np.bincount(cell_map.cells[sentinel], minlength=cell_total).reshape(divisions, divisions)
    acc.frame_out_of_range = int(np.count_nonzero(sentinel))

    valid = ~sentinel
    cells = cell_map.cells[valid]
    values = raw[valid]
    if values.size == 0:
        return acc

    acc.total[:] = np.bincount(cells, weights=values, minlength=cell_total).astype(np.int64).reshape(divisions, divisions)

    min_raw = acc.min_raw.reshape(-1)
    max_raw = acc.max_raw.reshape(-1)
    np.minimum.at(min_raw, cells, values)
    np.maximum.at(max_raw, cells, values)

    slots = cells * size + histogram_bucket(values, size)
    acc.histogram[:] = np.bincount(slots, minlength=cell_total * size).reshape(divisions, divisions, size)

    return acc
