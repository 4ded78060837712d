from __future__ import annotations

from typing import List, Optional

from ..core.depth import MAX_VALID_DEPTH_16U_M, convert_depth_32f_to_16u
from ..core.image import (
    ImageDepth16U,
    ImageDepth32F,
    ImageLabel16I,
    ImageRgba8U,
    PoseVector,
)
from ..core.scene import WORLD_FRAME_ID, FrameId, SceneQuery
from ..core.utils import get_logger
from ..motion.pose import Pose
from ..systems.framework import Context, InputPort, OutputPort, System
from ..systems.hold import ZeroOrderHold, latest_sample_index
from .camera import (
    CameraInfo,
    CameraPoses,
    CameraProperties,
    ColorRenderCamera,
    DepthCameraProperties,
    DepthRenderCamera,
    make_color_render_camera,
    make_depth_render_camera,
)

_log = get_logger()


class RgbdSensor(System):
    """Continuous RGB-D camera rigidly attached to a scene frame.

    The sensor body B is posed at X_PB in the parent frame P. The color and
    depth optical frames are posed in B by their render cameras. Every output
    is rendered from the ``geometry_query`` input when read.

    Outputs: ``color_image`` (RGBA8), ``depth_image_32f`` (meters),
    ``depth_image_16u`` (millimeters), ``label_image`` and ``X_WB``.
    """

    def __init__(
        self,
        parent_id: FrameId,
        X_PB: Pose,
        color_camera: ColorRenderCamera,
        depth_camera: DepthRenderCamera,
        name: Optional[str] = None,
    ) -> None:
        super().__init__(name)
        self._parent_frame_id = parent_id
        self._X_PB = X_PB
        self._color_camera = color_camera
        self._depth_camera = depth_camera

        color_info = self.color_camera_info
        depth_info = self.depth_camera_info
        if not (color_info.is_symmetric_and_centered() and depth_info.is_symmetric_and_centered()):
            _log.warning(
                "Constructing an RgbdSensor with a \"complex\" camera specification. For now, the "
                "camera must be radially symmetric and centered on the image. Cameras provided:\n"
                "  Color - focal lengths (%s, %s), principal point (%s, %s)\n"
                "  Depth - focal lengths (%s, %s), principal point (%s, %s)",
                color_info.focal_x, color_info.focal_y, color_info.center_x, color_info.center_y,
                depth_info.focal_x, depth_info.focal_y, depth_info.center_x, depth_info.center_y,
            )

        self._query_object_port = self.declare_input_port("geometry_query")
        self._color_image_port = self.declare_output_port(
            "color_image",
            lambda: ImageRgba8U(color_info.width, color_info.height),
            self.calc_color_image,
        )
        self._depth_image_32F_port = self.declare_output_port(
            "depth_image_32f",
            lambda: ImageDepth32F(depth_info.width, depth_info.height),
            self.calc_depth_image_32f,
        )
        self._depth_image_16U_port = self.declare_output_port(
            "depth_image_16u",
            lambda: ImageDepth16U(depth_info.width, depth_info.height),
            self.calc_depth_image_16u,
        )
        self._label_image_port = self.declare_output_port(
            "label_image",
            lambda: ImageLabel16I(color_info.width, color_info.height),
            self.calc_label_image,
        )
        self._X_WB_port = self.declare_output_port("X_WB", PoseVector, self.calc_X_WB)

        # 16-bit depth holds whole millimeters, so far depths saturate.
        max_depth = depth_camera.depth_range.max_depth
        if max_depth > MAX_VALID_DEPTH_16U_M:
            _log.warning(
                "Specified max depth is %s m > max valid depth for 16 bits %s m. "
                "depth_image_16u might not be able to capture the full depth range.",
                max_depth,
                MAX_VALID_DEPTH_16U_M,
            )

    @classmethod
    def from_properties(
        cls,
        parent_id: FrameId,
        X_PB: Pose,
        color_properties: CameraProperties,
        depth_properties: DepthCameraProperties,
        camera_poses: Optional[CameraPoses] = None,
        show_window: bool = False,
    ) -> "RgbdSensor":
        poses = camera_poses or CameraPoses()
        return cls(
            parent_id,
            X_PB,
            make_color_render_camera(color_properties, show_window, poses.X_BC),
            make_depth_render_camera(depth_properties, poses.X_BD),
        )

    @classmethod
    def from_depth_properties(
        cls,
        parent_id: FrameId,
        X_PB: Pose,
        properties: DepthCameraProperties,
        camera_poses: Optional[CameraPoses] = None,
        show_window: bool = False,
    ) -> "RgbdSensor":
        """Sensor whose color and depth cameras share one set of properties."""
        return cls.from_properties(parent_id, X_PB, properties, properties, camera_poses, show_window)

    # -- configuration --
    @property
    def parent_frame_id(self) -> FrameId:
        return self._parent_frame_id

    @property
    def X_PB(self) -> Pose:
        return self._X_PB

    @property
    def color_render_camera(self) -> ColorRenderCamera:
        return self._color_camera

    @property
    def depth_render_camera(self) -> DepthRenderCamera:
        return self._depth_camera

    @property
    def color_camera_info(self) -> CameraInfo:
        return self._color_camera.core.intrinsics

    @property
    def depth_camera_info(self) -> CameraInfo:
        return self._depth_camera.core.intrinsics

    # -- ports --
    def query_object_input_port(self) -> InputPort:
        return self._query_object_port

    def color_image_output_port(self) -> OutputPort:
        return self._color_image_port

    def depth_image_32F_output_port(self) -> OutputPort:
        return self._depth_image_32F_port

    def depth_image_16U_output_port(self) -> OutputPort:
        return self._depth_image_16U_port

    def label_image_output_port(self) -> OutputPort:
        return self._label_image_port

    def X_WB_output_port(self) -> OutputPort:
        return self._X_WB_port

    # -- calculations --
    def _get_query_object(self, context: Context) -> SceneQuery:
        return self._query_object_port.eval(context)

    def _color_properties(self) -> CameraProperties:
        core = self._color_camera.core
        return CameraProperties(
            width=core.intrinsics.width,
            height=core.intrinsics.height,
            fov_y=core.intrinsics.fov_y,
            renderer_name=core.renderer_name,
        )

    def calc_color_image(self, context: Context, color_image: ImageRgba8U) -> None:
        query_object = self._get_query_object(context)
        query_object.render_color_image(
            self._color_properties(),
            self._parent_frame_id,
            self._X_PB @ self._color_camera.core.sensor_pose_in_camera_body,
            self._color_camera.show_window,
            color_image,
        )

    def calc_depth_image_32f(self, context: Context, depth_image: ImageDepth32F) -> None:
        query_object = self._get_query_object(context)
        core = self._depth_camera.core
        depth_range = self._depth_camera.depth_range
        simple_camera = DepthCameraProperties(
            width=core.intrinsics.width,
            height=core.intrinsics.height,
            fov_y=core.intrinsics.fov_y,
            renderer_name=core.renderer_name,
            z_near=depth_range.min_depth,
            z_far=depth_range.max_depth,
        )
        query_object.render_depth_image(
            simple_camera,
            self._parent_frame_id,
            self._X_PB @ core.sensor_pose_in_camera_body,
            depth_image,
        )

    def calc_depth_image_16u(self, context: Context, depth_image: ImageDepth16U) -> None:
        depth32 = ImageDepth32F(depth_image.width, depth_image.height)
        self.calc_depth_image_32f(context, depth32)
        convert_depth_32f_to_16u(depth32, depth_image)

    def calc_label_image(self, context: Context, label_image: ImageLabel16I) -> None:
        query_object = self._get_query_object(context)
        query_object.render_label_image(
            self._color_properties(),
            self._parent_frame_id,
            self._X_PB @ self._color_camera.core.sensor_pose_in_camera_body,
            self._color_camera.show_window,
            label_image,
        )

    def calc_X_WB(self, context: Context, pose_vector: PoseVector) -> None:
        if self._parent_frame_id == WORLD_FRAME_ID:
            X_WB = self._X_PB
        else:
            query_object = self._get_query_object(context)
            X_WB = query_object.X_WF(self._parent_frame_id) @ self._X_PB
        pose_vector.set_translation(X_WB.t)
        pose_vector.set_rotation(X_WB.to_quaternion())

    convert_depth_32f_to_16u = staticmethod(convert_depth_32f_to_16u)


class RgbdSensorDiscrete(System):
    """Wraps an :class:`RgbdSensor` and samples its images at a fixed period.

    Each image output passes through its own zero-order hold; all holds are
    refreshed together at every multiple of ``period_s``. ``X_WB`` is forwarded
    from the inner sensor without sampling. When ``render_label_image`` is
    False the composite has no ``label_image`` port.
    """

    def __init__(
        self,
        sensor: RgbdSensor,
        period_s: float = 1.0 / 30,
        render_label_image: bool = True,
        name: Optional[str] = None,
    ) -> None:
        if period_s <= 0.0:
            raise ValueError("period_s must be positive")
        super().__init__(name)
        self._camera = sensor
        self._period = float(period_s)
        self._holds: List[ZeroOrderHold] = []
        self._sample_index_key = self.state_key("sample_index")

        self._query_object_port = self.export_input(sensor.query_object_input_port())
        self._color_image_port = self._export_held(sensor.color_image_output_port())
        self._depth_image_32F_port = self._export_held(sensor.depth_image_32F_output_port())
        self._depth_image_16U_port = self._export_held(sensor.depth_image_16U_output_port())
        self._label_image_port: Optional[OutputPort] = None
        if render_label_image:
            self._label_image_port = self._export_held(sensor.label_image_output_port())
        self._X_WB_port = self.export_output(sensor.X_WB_output_port(), "X_WB")

    def _export_held(self, source: OutputPort) -> OutputPort:
        hold = ZeroOrderHold(source.allocator, source, name=f"{self.name}/{source.name}_hold")
        self._holds.append(hold)
        return self.export_output(hold.output, source.name)

    @property
    def sensor(self) -> RgbdSensor:
        return self._camera

    @property
    def period(self) -> float:
        return self._period

    # -- ports --
    def query_object_input_port(self) -> InputPort:
        return self._query_object_port

    def color_image_output_port(self) -> OutputPort:
        return self._color_image_port

    def depth_image_32F_output_port(self) -> OutputPort:
        return self._depth_image_32F_port

    def depth_image_16U_output_port(self) -> OutputPort:
        return self._depth_image_16U_port

    def label_image_output_port(self) -> OutputPort:
        if self._label_image_port is None:
            raise RuntimeError("Label image rendering is disabled for this sensor")
        return self._label_image_port

    def X_WB_output_port(self) -> OutputPort:
        return self._X_WB_port

    # -- time advancement --
    def last_sample_time(self, context: Context) -> Optional[float]:
        k = context.state.get(self._sample_index_key)
        return None if k is None else k * self._period

    def initialize(self, context: Context) -> None:
        """Sample at the latest sample instant at or before ``context.time``."""
        self._sample(context, latest_sample_index(context.time, self._period))

    def advance_to(self, context: Context, time: float) -> None:
        """Move ``context`` forward to ``time``, refreshing holds at the last instant passed.

        Intermediate sample instants are skipped since each would be overwritten
        before it could be read.
        """
        if time < context.time:
            raise ValueError(f"Cannot advance backwards from t={context.time} to t={time}")
        k = latest_sample_index(time, self._period)
        last = context.state.get(self._sample_index_key)
        if last is None or k > last:
            self._sample(context, k)
        context.time = float(time)

    def _sample(self, context: Context, k: int) -> None:
        now = context.time
        context.time = k * self._period
        try:
            values = [(hold, hold.sample(context)) for hold in self._holds]
        finally:
            context.time = now
        # Every value is computed before any hold changes.
        for hold, value in values:
            hold.store(context, value)
        context.state[self._sample_index_key] = k
        _log.debug("%s: sampled %d outputs at t=%.6f", self.name, len(values), k * self._period)
