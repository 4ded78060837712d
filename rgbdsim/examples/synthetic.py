"""Analytic planar scenes implementing the scene-query contract.

Each pixel casts one ray through its center and keeps the nearest plane hit.
Useful for demos and tests; not a substitute for a real renderer.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Sequence, Tuple

import numpy as np

from ..core.image import LABEL_EMPTY, LABEL_UNSPECIFIED, ImageDepth32F, ImageLabel16I, ImageRgba8U
from ..core.scene import WORLD_FRAME_ID, FrameId
from ..core.utils import ensure_unit_vectors, get_logger
from ..motion.pose import Pose
from ..motion.trajectory import Trajectory
from ..sensors.camera import CameraProperties, DepthCameraProperties

_log = get_logger()

BACKGROUND_RGBA: Tuple[int, int, int, int] = (0, 0, 0, 0)


@dataclass
class Plane:
    point: np.ndarray
    normal: np.ndarray
    label: int = LABEL_UNSPECIFIED
    rgba: Tuple[int, int, int, int] = (128, 128, 128, 255)

    def __post_init__(self) -> None:
        self.point = np.asarray(self.point, dtype=np.float64).reshape(3)
        normal = np.asarray(self.normal, dtype=np.float64).reshape(3)
        if np.linalg.norm(normal) == 0.0:
            raise ValueError("Plane normal must be non-zero")
        self.normal = ensure_unit_vectors(normal)


@dataclass
class RayCast:
    depth: np.ndarray        # (H, W) z-depth in the camera frame, inf on miss
    plane_index: np.ndarray  # (H, W) index into the scene's planes, -1 on miss


class PlanarScene:
    """Planes fixed in the world plus named frames that move along trajectories."""

    def __init__(
        self,
        planes: Sequence[Plane],
        frames: Optional[Mapping[str, Trajectory]] = None,
    ) -> None:
        self.planes = list(planes)
        self._frame_ids: Dict[str, FrameId] = {"world": WORLD_FRAME_ID}
        self._trajectories: Dict[FrameId, Trajectory] = {}
        for name, trajectory in (frames or {}).items():
            if name in self._frame_ids:
                raise ValueError(f"Duplicate frame name '{name}'")
            frame_id = FrameId(len(self._frame_ids))
            self._frame_ids[name] = frame_id
            self._trajectories[frame_id] = trajectory

    def frame_id(self, name: str) -> FrameId:
        try:
            return self._frame_ids[name]
        except KeyError:
            raise KeyError(f"Unknown frame '{name}'; known frames: {sorted(self._frame_ids)}") from None

    def frame_names(self) -> list[str]:
        return list(self._frame_ids)

    def frame_pose(self, frame_id: FrameId, time: float) -> Pose:
        if frame_id == WORLD_FRAME_ID:
            return Pose.identity()
        try:
            trajectory = self._trajectories[frame_id]
        except KeyError:
            raise KeyError(f"Unknown frame id {frame_id}") from None
        return trajectory.sample(time)

    def query(self, time: float) -> "PlanarSceneQuery":
        return PlanarSceneQuery(self, time)


@dataclass
class PlanarSceneQuery:
    """Snapshot of a :class:`PlanarScene` at ``time``."""

    scene: PlanarScene
    time: float = 0.0
    _warned_window: bool = field(default=False, repr=False)

    def X_WF(self, frame_id: FrameId) -> Pose:
        return self.scene.frame_pose(frame_id, self.time)

    def cast(self, camera: CameraProperties, parent_frame: FrameId, X_PC: Pose) -> RayCast:
        width, height = int(camera.width), int(camera.height)
        focal = height * 0.5 / math.tan(0.5 * camera.fov_y)
        u = (np.arange(width, dtype=np.float64) + 0.5 - width / 2.0) / focal
        v = (np.arange(height, dtype=np.float64) + 0.5 - height / 2.0) / focal
        uu, vv = np.meshgrid(u, v)
        dirs_C = np.stack([uu, vv, np.ones_like(uu)], axis=-1)

        X_WC = self.X_WF(parent_frame) @ X_PC
        dirs_W = dirs_C @ X_WC.R.T
        origin = X_WC.t

        depth = np.full((height, width), np.inf, dtype=np.float64)
        plane_index = np.full((height, width), -1, dtype=np.int64)
        for idx, plane in enumerate(self.scene.planes):
            denom = dirs_W @ plane.normal
            numer = float((plane.point - origin) @ plane.normal)
            with np.errstate(divide="ignore", invalid="ignore"):
                t = numer / denom
            # Rays have unit z in the camera frame, so t is the z-depth.
            hit = (denom != 0.0) & (t > 0.0) & (t < depth)
            depth[hit] = t[hit]
            plane_index[hit] = idx
        return RayCast(depth=depth, plane_index=plane_index)

    def render_color_image(
        self,
        camera: CameraProperties,
        parent_frame: FrameId,
        X_PC: Pose,
        show_window: bool,
        out: ImageRgba8U,
    ) -> None:
        self._note_window(show_window)
        hits = self.cast(camera, parent_frame, X_PC)
        palette = np.array([p.rgba for p in self.scene.planes] + [BACKGROUND_RGBA], dtype=np.uint8)
        # Misses (-1) pick the trailing background entry.
        out.data[...] = palette[hits.plane_index]

    def render_depth_image(
        self,
        camera: DepthCameraProperties,
        parent_frame: FrameId,
        X_PC: Pose,
        out: ImageDepth32F,
    ) -> None:
        hits = self.cast(camera, parent_frame, X_PC)
        depth = hits.depth.copy()
        depth[depth > camera.z_far] = np.inf
        depth[depth < camera.z_near] = 0.0
        out.data[..., 0] = depth.astype(np.float32)

    def render_label_image(
        self,
        camera: CameraProperties,
        parent_frame: FrameId,
        X_PC: Pose,
        show_window: bool,
        out: ImageLabel16I,
    ) -> None:
        self._note_window(show_window)
        hits = self.cast(camera, parent_frame, X_PC)
        labels = np.array([p.label for p in self.scene.planes] + [LABEL_EMPTY], dtype=np.int16)
        out.data[..., 0] = labels[hits.plane_index]

    def _note_window(self, show_window: bool) -> None:
        if show_window and not self._warned_window:
            _log.info("show_window requested; the planar scene has no display window")
            self._warned_window = True
