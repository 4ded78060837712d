from __future__ import annotations
from dataclasses import dataclass, field
from typing import ClassVar, Sequence
import numpy as np

from ..motion.pose import Pose

# Label values reserved by the renderer contract.
LABEL_EMPTY = 32766
LABEL_UNSPECIFIED = 32765


@dataclass(eq=False)
class Image:
    """Fixed-shape image buffer stored as a (height, width, channels) array.

    Subclasses pin the pixel type through ``dtype`` and ``num_channels``.
    """
    width: int
    height: int
    data: np.ndarray = field(init=False, repr=False)

    dtype: ClassVar[type] = np.uint8
    num_channels: ClassVar[int] = 1

    def __post_init__(self) -> None:
        self.width = int(self.width)
        self.height = int(self.height)
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {self.width}x{self.height}")
        self.data = np.zeros((self.height, self.width, self.num_channels), dtype=self.dtype)

    @property
    def shape(self) -> tuple[int, int, int]:
        return (self.height, self.width, self.num_channels)

    def at(self, x: int, y: int) -> np.ndarray:
        """Channel values of pixel (x, y); a view into the buffer."""
        return self.data[y, x]

    def fill(self, value: float | Sequence[float]) -> None:
        self.data[...] = np.asarray(value, dtype=self.dtype)

    def copy_from(self, other: "Image") -> None:
        if type(other) is not type(self) or other.shape != self.shape:
            raise ValueError(
                f"Cannot copy {type(other).__name__}{other.shape} into {type(self).__name__}{self.shape}"
            )
        np.copyto(self.data, other.data)


class ImageRgba8U(Image):
    dtype = np.uint8
    num_channels = 4


class ImageDepth32F(Image):
    dtype = np.float32
    num_channels = 1


class ImageDepth16U(Image):
    dtype = np.uint16
    num_channels = 1


class ImageLabel16I(Image):
    dtype = np.int16
    num_channels = 1


@dataclass(eq=False)
class PoseVector:
    """Seven-element pose: translation (x, y, z) then quaternion (w, x, y, z)."""
    value: np.ndarray = field(
        default_factory=lambda: np.array([0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0])
    )

    def __post_init__(self) -> None:
        self.value = np.asarray(self.value, dtype=np.float64).reshape(7)

    @property
    def translation(self) -> np.ndarray:
        return self.value[:3]

    @property
    def rotation(self) -> np.ndarray:
        return self.value[3:]

    def set_translation(self, xyz: Sequence[float]) -> None:
        self.value[:3] = np.asarray(xyz, dtype=np.float64)

    def set_rotation(self, wxyz: Sequence[float]) -> None:
        self.value[3:] = np.asarray(wxyz, dtype=np.float64)

    def to_pose(self) -> Pose:
        return Pose.from_xyz_quaternion(self.translation, self.rotation)
