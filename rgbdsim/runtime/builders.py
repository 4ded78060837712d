from __future__ import annotations

import math
from typing import Dict, Union

from ..config import ScenarioConfig
from ..config.schema import FrameConfig, PoseConfig
from ..core.exporter import NpzFrameWriter
from ..examples.synthetic import PlanarScene, Plane
from ..motion.pose import Pose
from ..motion.trajectory import KeyframeTrajectory, StaticTrajectory, Trajectory
from ..sensors.camera import CameraPoses, CameraProperties, DepthCameraProperties
from ..sensors.rgbd import RgbdSensor, RgbdSensorDiscrete


def build_pose(cfg: PoseConfig) -> Pose:
    return Pose.from_xyz_rpy(cfg.xyz, cfg.rpy_deg)


def build_trajectory(frame_cfg: FrameConfig) -> Trajectory:
    if frame_cfg.kind == "static":
        return StaticTrajectory(Pose.from_xyz_rpy(frame_cfg.xyz, frame_cfg.rpy_deg))
    if frame_cfg.kind == "keyframes":
        return KeyframeTrajectory(
            frame_cfg.times_s,
            frame_cfg.positions,
            yaw_deg=frame_cfg.yaw_deg,
        )
    raise ValueError(f"Unsupported frame kind: {frame_cfg.kind}")


def build_scene(cfg: ScenarioConfig) -> PlanarScene:
    scene_cfg = cfg.scene
    if scene_cfg.kind != "planar":
        raise ValueError(f"Unsupported scene kind: {scene_cfg.kind}")
    planes = [
        Plane(point=p.point, normal=p.normal, label=p.label, rgba=p.rgba)
        for p in scene_cfg.planes
    ]
    frames: Dict[str, Trajectory] = {
        name: build_trajectory(frame_cfg) for name, frame_cfg in scene_cfg.frames.items()
    }
    return PlanarScene(planes, frames)


def build_sensor(cfg: ScenarioConfig, scene: PlanarScene) -> Union[RgbdSensor, RgbdSensorDiscrete]:
    """Continuous sensor, or the discrete wrapper when ``sensor.period_s`` is set."""
    sensor_cfg = cfg.sensor
    color_cfg = sensor_cfg.color
    depth_cfg = sensor_cfg.depth
    color_props = CameraProperties(
        width=color_cfg.width,
        height=color_cfg.height,
        fov_y=math.radians(color_cfg.fov_y_deg),
        renderer_name=color_cfg.renderer_name,
    )
    depth_props = DepthCameraProperties(
        width=depth_cfg.width,
        height=depth_cfg.height,
        fov_y=math.radians(depth_cfg.fov_y_deg),
        renderer_name=depth_cfg.renderer_name,
        z_near=depth_cfg.min_depth_m,
        z_far=depth_cfg.max_depth_m,
    )
    poses = CameraPoses(
        X_BC=build_pose(sensor_cfg.camera_poses.color),
        X_BD=build_pose(sensor_cfg.camera_poses.depth),
    )
    sensor = RgbdSensor.from_properties(
        scene.frame_id(sensor_cfg.parent_frame),
        Pose.from_xyz_rpy(sensor_cfg.xyz, sensor_cfg.rpy_deg),
        color_props,
        depth_props,
        camera_poses=poses,
        show_window=color_cfg.show_window,
    )
    if sensor_cfg.period_s is None:
        return sensor
    return RgbdSensorDiscrete(
        sensor,
        period_s=sensor_cfg.period_s,
        render_label_image=sensor_cfg.render_label_image,
    )


def build_writer(cfg: ScenarioConfig) -> NpzFrameWriter:
    out_cfg = cfg.output
    if out_cfg.format.lower() == "npz":
        return NpzFrameWriter(str(out_cfg.path))
    raise ValueError(f"Unsupported output format: {out_cfg.format}")
