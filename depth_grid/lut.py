#!/usr/bin/env python3
"""
Raw depth to distance lookup table
"""

import numpy as np

from depth_grid import config


def build_lut() -> np.ndarray:
    """
    Build the raw value to meters lookup table

    Returns:
        Array of RAW_RANGE distances indexed by raw sample value
    """
    raw = np.arange(config.RAW_RANGE, dtype=np.float64)
    table = config.LUT_SCALE * np.tan(raw / config.LUT_DIVISOR + config.LUT_OFFSET)
    table.setflags(write=False)
    return table


def lutf(table: np.ndarray, index: float) -> float:
    """
    Look up a fractional raw value, interpolating between neighbouring entries

    Args:
        table: Table from build_lut()
        index: Fractional raw value, e.g. a cell average

    Returns:
        Interpolated distance in meters
    """
    last = len(table) - 1
    if index <= 0:
        return float(table[0])
    if index >= last:
        return float(table[last])

    low = int(index)
    frac = index - low
    return float(table[low] * (1.0 - frac) + table[low + 1] * frac)
