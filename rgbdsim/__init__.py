"""rgbdsim – simulated RGB-D camera.

This package contains the core components of the sensor:
- Camera specification records and builders (sensors.camera)
- Fixed-point depth encoding (core.depth)
- Image buffers and the 7-element pose vector (core.image)
- The scene-query contract the sensor renders through (core.scene)
- RgbdSensor and its fixed-rate sampled variant RgbdSensorDiscrete (sensors.rgbd)
- A minimal pull-based port layer and zero-order hold (systems)

An analytic planar scene (examples.synthetic) implements the scene-query
contract so captures can be run without an external renderer.
"""

from .core.depth import (MAX_DEPTH_16U_MM, MAX_VALID_DEPTH_16U_M,
                         convert_depth_to_millimeters, convert_depth_32f_to_16u)
from .core.image import (Image, ImageRgba8U, ImageDepth32F, ImageDepth16U,
                         ImageLabel16I, PoseVector, LABEL_EMPTY, LABEL_UNSPECIFIED)
from .core.scene import FrameId, SceneQuery, WORLD_FRAME_ID
from .motion.pose import Pose
from .sensors.camera import (
    CameraInfo, ClippingRange, DepthRange, RenderCameraCore,
    ColorRenderCamera, DepthRenderCamera, CameraProperties,
    DepthCameraProperties, CameraPoses,
    make_color_render_camera, make_depth_render_camera,
)
from .sensors.rgbd import RgbdSensor, RgbdSensorDiscrete
from .systems.framework import Context
from .systems.hold import ZeroOrderHold
