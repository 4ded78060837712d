import math

import numpy as np
import pytest

from rgbdsim.core.depth import (
    MAX_DEPTH_16U_MM,
    MAX_VALID_DEPTH_16U_M,
    convert_depth_32f_to_16u,
    convert_depth_to_millimeters,
)
from rgbdsim.core.image import ImageDepth16U, ImageDepth32F


def test_limits_match_sixteen_bit_encoding() -> None:
    assert MAX_DEPTH_16U_MM == 65534
    assert MAX_VALID_DEPTH_16U_M == pytest.approx(65.534)


def test_conversion_truncates_in_valid_range() -> None:
    meters = np.array([0.0, 0.0015, 0.9999, 1.2345, 5.0, 12.3456789, 65.0], dtype=np.float64)
    mm = convert_depth_to_millimeters(meters)
    assert mm.dtype == np.uint16
    expected = [math.floor(d * 1000) for d in meters]
    np.testing.assert_array_equal(mm, np.array(expected, dtype=np.uint16))


def test_conversion_saturates_beyond_range() -> None:
    meters = np.array([65.5341, 65.535, 66.0, 100.0, 1e9, np.inf])
    mm = convert_depth_to_millimeters(meters)
    np.testing.assert_array_equal(mm, np.full(meters.shape, 65534, dtype=np.uint16))


def test_conversion_is_monotonic() -> None:
    meters = np.linspace(0.0, 70.0, 20001)
    mm = convert_depth_to_millimeters(meters).astype(np.int64)
    assert np.all(np.diff(mm) >= 0)


def test_negative_and_nan_map_to_zero() -> None:
    mm = convert_depth_to_millimeters(np.array([-1.0, -0.0004, np.nan]))
    np.testing.assert_array_equal(mm, np.zeros(3, dtype=np.uint16))


def test_scalar_input() -> None:
    assert int(convert_depth_to_millimeters(5.0)) == 5000


def test_image_conversion_per_pixel() -> None:
    d32 = ImageDepth32F(3, 2)
    d32.data[..., 0] = np.array([[0.5, 1.0, 2.25], [5.0, 70.0, np.inf]], dtype=np.float32)
    d16 = ImageDepth16U(3, 2)
    convert_depth_32f_to_16u(d32, d16)
    np.testing.assert_array_equal(
        d16.data[..., 0], np.array([[500, 1000, 2250], [5000, 65534, 65534]], dtype=np.uint16)
    )


def test_image_conversion_rejects_shape_mismatch() -> None:
    with pytest.raises(ValueError):
        convert_depth_32f_to_16u(ImageDepth32F(3, 2), ImageDepth16U(2, 3))
