from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence

import numpy as np

from .pose import Pose


class Trajectory:
    """Base interface for frame motion over time."""

    def sample(self, t: float) -> Pose:
        raise NotImplementedError

    def timeline(self) -> Iterable[tuple[float, Pose]]:
        raise NotImplementedError


@dataclass
class StaticTrajectory(Trajectory):
    """A trajectory with a single, fixed pose."""

    pose: Pose
    start_time_s: float = 0.0

    def sample(self, t: float) -> Pose:
        return self.pose

    def timeline(self) -> Iterable[tuple[float, Pose]]:
        yield (self.start_time_s, self.pose)


class KeyframeTrajectory(Trajectory):
    """Piecewise-linear motion through timestamped keyframes.

    Position is interpolated linearly between keyframes and the heading (yaw
    about +z) is interpolated linearly in angle. Outside the keyframe span the
    first/last keyframe pose is held.
    """

    def __init__(
        self,
        times_s: Sequence[float],
        positions: Sequence[Sequence[float]],
        yaw_deg: Sequence[float] | None = None,
    ) -> None:
        if len(times_s) < 2:
            raise ValueError("KeyframeTrajectory requires at least two keyframes.")
        if len(positions) != len(times_s):
            raise ValueError("positions must have one entry per keyframe time.")
        if yaw_deg is not None and len(yaw_deg) != len(times_s):
            raise ValueError("yaw_deg must have one entry per keyframe time.")

        self._times = np.asarray(times_s, dtype=np.float64)
        if np.any(np.diff(self._times) <= 0.0):
            raise ValueError("Keyframe times must be strictly increasing.")
        self._points = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
        if yaw_deg is None:
            self._yaw = np.zeros_like(self._times)
        else:
            self._yaw = np.asarray(yaw_deg, dtype=np.float64)
        self._poses: List[Pose] = [
            Pose.from_xyz_rpy(tuple(p), (0.0, 0.0, float(y)))
            for p, y in zip(self._points, self._yaw)
        ]

    def sample(self, t: float) -> Pose:
        if t <= self._times[0]:
            return self._poses[0]
        if t >= self._times[-1]:
            return self._poses[-1]

        idx = int(np.searchsorted(self._times, t, side="right")) - 1
        t0, t1 = self._times[idx], self._times[idx + 1]
        alpha = (t - t0) / (t1 - t0)
        pos = (1.0 - alpha) * self._points[idx] + alpha * self._points[idx + 1]
        yaw = (1.0 - alpha) * self._yaw[idx] + alpha * self._yaw[idx + 1]
        return Pose.from_xyz_rpy(tuple(pos), (0.0, 0.0, float(yaw)))

    def timeline(self) -> Iterable[tuple[float, Pose]]:
        for t, pose in zip(self._times, self._poses):
            yield (float(t), pose)
