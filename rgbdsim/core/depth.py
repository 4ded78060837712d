"""Fixed-point depth encoding.

Depth images are produced in float meters. The 16-bit variant stores whole
millimeters, truncated (not rounded), and saturates at ``MAX_DEPTH_16U_MM``.
"""
from __future__ import annotations

import numpy as np

from .image import ImageDepth16U, ImageDepth32F

MAX_DEPTH_16U_MM = np.iinfo(np.uint16).max - 1
MAX_VALID_DEPTH_16U_M = MAX_DEPTH_16U_MM / 1000.0


def convert_depth_to_millimeters(meters: np.ndarray | float) -> np.ndarray:
    """Convert depth in meters to saturated uint16 millimeters, per element.

    ``floor(meters * 1000)`` capped at 65534. Negative and NaN inputs map to 0.
    """
    m = np.asarray(meters, dtype=np.float64)
    mm = np.floor(m * 1000.0)
    mm = np.where(np.isnan(mm), 0.0, mm)
    mm = np.clip(mm, 0.0, float(MAX_DEPTH_16U_MM))
    return mm.astype(np.uint16)


def convert_depth_32f_to_16u(d32: ImageDepth32F, d16: ImageDepth16U) -> None:
    """Fill ``d16`` with the millimeter encoding of ``d32``."""
    if d32.shape != d16.shape:
        raise ValueError(f"Depth image shapes differ: {d32.shape} vs {d16.shape}")
    np.copyto(d16.data, convert_depth_to_millimeters(d32.data))
