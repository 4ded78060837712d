from __future__ import annotations
from typing import TYPE_CHECKING, NewType, Protocol, runtime_checkable

if TYPE_CHECKING:  # pragma: no cover
    from ..motion.pose import Pose
    from ..sensors.camera import CameraProperties, DepthCameraProperties
    from .image import ImageDepth32F, ImageLabel16I, ImageRgba8U

FrameId = NewType("FrameId", int)

WORLD_FRAME_ID = FrameId(0)


@runtime_checkable
class SceneQuery(Protocol):
    """Read-only view of a scene at one instant.

    Camera poses passed in are X_PC: the optical frame relative to
    ``parent_frame``. Implementations write into ``out`` and must not resize it.
    """

    def render_color_image(
        self,
        camera: "CameraProperties",
        parent_frame: FrameId,
        X_PC: "Pose",
        show_window: bool,
        out: "ImageRgba8U",
    ) -> None: ...

    def render_depth_image(
        self,
        camera: "DepthCameraProperties",
        parent_frame: FrameId,
        X_PC: "Pose",
        out: "ImageDepth32F",
    ) -> None: ...

    def render_label_image(
        self,
        camera: "CameraProperties",
        parent_frame: FrameId,
        X_PC: "Pose",
        show_window: bool,
        out: "ImageLabel16I",
    ) -> None: ...

    def X_WF(self, frame_id: FrameId) -> "Pose": ...
