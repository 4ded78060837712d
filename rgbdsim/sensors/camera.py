from __future__ import annotations

import math
from dataclasses import dataclass, field

from ..motion.pose import Pose

# Legacy clipping planes used when a camera is built from simple properties.
DEFAULT_CLIP_NEAR = 0.01
DEFAULT_CLIP_FAR = 10.0


@dataclass(frozen=True)
class CameraInfo:
    """Pinhole intrinsics: image size, focal lengths and principal point (pixels)."""

    width: int
    height: int
    focal_x: float
    focal_y: float
    center_x: float
    center_y: float

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Camera dimensions must be positive, got {self.width}x{self.height}")
        if self.focal_x <= 0 or self.focal_y <= 0:
            raise ValueError("Focal lengths must be positive")

    @classmethod
    def from_fov(cls, width: int, height: int, fov_y: float) -> "CameraInfo":
        """Radially symmetric, centered intrinsics with vertical field of view ``fov_y`` (rad)."""
        if not 0.0 < fov_y < math.pi:
            raise ValueError("fov_y must be in (0, pi) radians")
        focal = height * 0.5 / math.tan(0.5 * fov_y)
        return cls(
            width=int(width),
            height=int(height),
            focal_x=focal,
            focal_y=focal,
            center_x=width / 2.0 + 0.5,
            center_y=height / 2.0 + 0.5,
        )

    @property
    def fov_x(self) -> float:
        return 2.0 * math.atan(self.width * 0.5 / self.focal_x)

    @property
    def fov_y(self) -> float:
        return 2.0 * math.atan(self.height * 0.5 / self.focal_y)

    def is_symmetric_and_centered(self) -> bool:
        return (
            self.focal_x == self.focal_y
            and self.center_x == self.width / 2.0 + 0.5
            and self.center_y == self.height / 2.0 + 0.5
        )


@dataclass(frozen=True)
class ClippingRange:
    near: float = DEFAULT_CLIP_NEAR
    far: float = DEFAULT_CLIP_FAR

    def __post_init__(self) -> None:
        if not 0.0 < self.near < self.far:
            raise ValueError(f"Clipping range requires 0 < near < far, got ({self.near}, {self.far})")


@dataclass(frozen=True)
class DepthRange:
    min_depth: float
    max_depth: float

    def __post_init__(self) -> None:
        if self.min_depth < 0.0 or self.max_depth < 0.0:
            raise ValueError("Depth range values must be non-negative")
        if self.max_depth <= self.min_depth:
            raise ValueError(
                f"Depth range requires max > min, got ({self.min_depth}, {self.max_depth})"
            )


@dataclass(frozen=True, eq=False)
class RenderCameraCore:
    """Renderer name, intrinsics, clip planes and the optical frame pose X_BS in the body."""

    renderer_name: str
    intrinsics: CameraInfo
    clipping: ClippingRange
    sensor_pose_in_camera_body: Pose = field(default_factory=Pose.identity)


@dataclass(frozen=True, eq=False)
class ColorRenderCamera:
    core: RenderCameraCore
    show_window: bool = False


@dataclass(frozen=True, eq=False)
class DepthRenderCamera:
    core: RenderCameraCore
    depth_range: DepthRange


@dataclass(frozen=True)
class CameraProperties:
    """Simplified color camera description handed to the renderer."""

    width: int
    height: int
    fov_y: float
    renderer_name: str


@dataclass(frozen=True)
class DepthCameraProperties(CameraProperties):
    z_near: float = 0.1
    z_far: float = 10.0


@dataclass(frozen=True, eq=False)
class CameraPoses:
    """Color (X_BC) and depth (X_BD) optical frames relative to the sensor body."""

    X_BC: Pose = field(default_factory=Pose.identity)
    X_BD: Pose = field(default_factory=Pose.identity)


def make_color_render_camera(
    props: CameraProperties, show_window: bool, X_BC: Pose
) -> ColorRenderCamera:
    return ColorRenderCamera(
        core=RenderCameraCore(
            renderer_name=props.renderer_name,
            intrinsics=CameraInfo.from_fov(props.width, props.height, props.fov_y),
            clipping=ClippingRange(DEFAULT_CLIP_NEAR, DEFAULT_CLIP_FAR),
            sensor_pose_in_camera_body=X_BC,
        ),
        show_window=show_window,
    )


def make_depth_render_camera(props: DepthCameraProperties, X_BD: Pose) -> DepthRenderCamera:
    return DepthRenderCamera(
        core=RenderCameraCore(
            renderer_name=props.renderer_name,
            intrinsics=CameraInfo.from_fov(props.width, props.height, props.fov_y),
            clipping=ClippingRange(DEFAULT_CLIP_NEAR, DEFAULT_CLIP_FAR),
            sensor_pose_in_camera_body=X_BD,
        ),
        depth_range=DepthRange(props.z_near, props.z_far),
    )
