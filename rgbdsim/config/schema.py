from __future__ import annotations

from pathlib import Path
from typing import Annotated, Dict, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, model_validator

from ..core.image import LABEL_UNSPECIFIED


class PoseConfig(BaseModel):
    xyz: tuple[float, float, float] = (0.0, 0.0, 0.0)
    rpy_deg: tuple[float, float, float] = (0.0, 0.0, 0.0)


class CameraPosesConfig(BaseModel):
    color: PoseConfig = PoseConfig()
    depth: PoseConfig = PoseConfig()


class ColorCameraConfig(BaseModel):
    renderer_name: str = "planar"
    width: int = Field(640, gt=0)
    height: int = Field(480, gt=0)
    fov_y_deg: float = Field(45.0, gt=0.0, lt=180.0)
    show_window: bool = False


class DepthCameraConfig(BaseModel):
    renderer_name: str = "planar"
    width: int = Field(640, gt=0)
    height: int = Field(480, gt=0)
    fov_y_deg: float = Field(45.0, gt=0.0, lt=180.0)
    min_depth_m: float = Field(0.1, ge=0.0)
    max_depth_m: float = Field(10.0, ge=0.0)

    @model_validator(mode="after")
    def _validate_range(self) -> "DepthCameraConfig":
        if self.max_depth_m <= self.min_depth_m:
            raise ValueError("max_depth_m must exceed min_depth_m")
        return self


class RgbdSensorConfig(BaseModel):
    parent_frame: str = "world"
    xyz: tuple[float, float, float] = (0.0, 0.0, 0.0)
    rpy_deg: tuple[float, float, float] = (0.0, 0.0, 0.0)
    color: ColorCameraConfig = ColorCameraConfig()
    depth: DepthCameraConfig = DepthCameraConfig()
    camera_poses: CameraPosesConfig = CameraPosesConfig()
    period_s: Optional[float] = Field(None, gt=0.0)
    render_label_image: bool = True


class PlaneConfig(BaseModel):
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    label: int = Field(LABEL_UNSPECIFIED, ge=-32768, le=32767)
    rgba: tuple[int, int, int, int] = (128, 128, 128, 255)


class StaticFrameConfig(BaseModel):
    kind: Literal["static"]
    xyz: tuple[float, float, float] = (0.0, 0.0, 0.0)
    rpy_deg: tuple[float, float, float] = (0.0, 0.0, 0.0)


class KeyframeFrameConfig(BaseModel):
    kind: Literal["keyframes"]
    times_s: List[float]
    positions: List[tuple[float, float, float]]
    yaw_deg: Optional[List[float]] = None

    @model_validator(mode="after")
    def _validate_lengths(self) -> "KeyframeFrameConfig":
        if len(self.times_s) < 2:
            raise ValueError("keyframes require at least two times")
        if len(self.positions) != len(self.times_s):
            raise ValueError("positions must have one entry per keyframe time")
        if self.yaw_deg is not None and len(self.yaw_deg) != len(self.times_s):
            raise ValueError("yaw_deg must have one entry per keyframe time")
        return self


FrameConfig = Annotated[
    Union[StaticFrameConfig, KeyframeFrameConfig],
    Field(discriminator="kind"),
]


class PlanarSceneConfig(BaseModel):
    kind: Literal["planar"] = "planar"
    planes: List[PlaneConfig] = Field(default_factory=list)
    frames: Dict[str, FrameConfig] = Field(default_factory=dict)


class CaptureConfig(BaseModel):
    duration_s: float = Field(1.0, ge=0.0)
    interval_s: Optional[float] = Field(None, gt=0.0)


class OutputConfig(BaseModel):
    path: Path
    format: Literal["npz"] = "npz"


class ScenarioConfig(BaseModel):
    sensor: RgbdSensorConfig = RgbdSensorConfig()
    scene: PlanarSceneConfig = PlanarSceneConfig()
    capture: CaptureConfig = CaptureConfig()
    output: OutputConfig

    @model_validator(mode="after")
    def _check_frames(self) -> "ScenarioConfig":
        parent = self.sensor.parent_frame
        if parent != "world" and parent not in self.scene.frames:
            raise ValueError(f"sensor.parent_frame '{parent}' is not defined in scene.frames")
        if "world" in self.scene.frames:
            raise ValueError("'world' is reserved and cannot be declared in scene.frames")
        return self

    def capture_interval_s(self) -> float:
        if self.capture.interval_s is not None:
            return self.capture.interval_s
        if self.sensor.period_s is not None:
            return self.sensor.period_s
        return 0.1


def load_config(path: str | Path) -> ScenarioConfig:
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError("Configuration root must be a mapping.")
    cfg = ScenarioConfig.model_validate(data)
    if not cfg.output.path.is_absolute():
        cfg.output.path = (path.parent / cfg.output.path).resolve()
    return cfg
