from __future__ import annotations
from dataclasses import dataclass
import math
from typing import Sequence, Tuple
import numpy as np

@dataclass(eq=False)
class Pose:
    """Rigid transform X_AB: rotation R and translation t of frame B in frame A.

    Composition follows the frame subscripts: ``X_AC = X_AB @ X_BC``.
    """
    t: np.ndarray   # (3,)
    R: np.ndarray   # (3,3)

    def __post_init__(self) -> None:
        self.t = np.asarray(self.t, dtype=np.float64).reshape(3)
        self.R = np.asarray(self.R, dtype=np.float64).reshape(3, 3)

    @staticmethod
    def identity() -> "Pose":
        return Pose(t=np.zeros(3), R=np.eye(3))

    @staticmethod
    def from_xyz_rpy(xyz: Sequence[float], rpy_deg: Sequence[float]) -> "Pose":
        rx, ry, rz = np.deg2rad(rpy_deg)
        cx, sx = np.cos(rx), np.sin(rx)
        cy, sy = np.cos(ry), np.sin(ry)
        cz, sz = np.cos(rz), np.sin(rz)
        Rx = np.array([[1,0,0],[0,cx,-sx],[0,sx,cx]])
        Ry = np.array([[cy,0,sy],[0,1,0],[-sy,0,cy]])
        Rz = np.array([[cz,-sz,0],[sz,cz,0],[0,0,1]])
        R = Rz @ Ry @ Rx
        return Pose(t=np.array(xyz, dtype=float), R=R.astype(float))

    @staticmethod
    def from_xyz_quaternion(xyz: Sequence[float], wxyz: Sequence[float]) -> "Pose":
        w, x, y, z = (float(v) for v in wxyz)
        n = math.sqrt(w*w + x*x + y*y + z*z)
        if n < 1e-12:
            raise ValueError("Quaternion must have non-zero norm.")
        w, x, y, z = w/n, x/n, y/n, z/n
        xx, yy, zz = x*x, y*y, z*z
        xy, xz, yz = x*y, x*z, y*z
        wx, wy, wz = w*x, w*y, w*z
        R = np.array([
            [1.0 - 2.0*(yy + zz), 2.0*(xy - wz), 2.0*(xz + wy)],
            [2.0*(xy + wz), 1.0 - 2.0*(xx + zz), 2.0*(yz - wx)],
            [2.0*(xz - wy), 2.0*(yz + wx), 1.0 - 2.0*(xx + yy)],
        ])
        return Pose(t=np.array(xyz, dtype=float), R=R)

    def to_quaternion(self) -> Tuple[float, float, float, float]:
        """Unit quaternion (w, x, y, z) of ``R`` with w >= 0."""
        R = self.R
        trace = float(np.trace(R))
        if trace > 0:
            s = 0.5 / math.sqrt(trace + 1.0)
            w = 0.25 / s
            x = (R[2, 1] - R[1, 2]) * s
            y = (R[0, 2] - R[2, 0]) * s
            z = (R[1, 0] - R[0, 1]) * s
        elif R[0, 0] > R[1, 1] and R[0, 0] > R[2, 2]:
            s = 2.0 * math.sqrt(1.0 + R[0, 0] - R[1, 1] - R[2, 2])
            w = (R[2, 1] - R[1, 2]) / s
            x = 0.25 * s
            y = (R[0, 1] + R[1, 0]) / s
            z = (R[0, 2] + R[2, 0]) / s
        elif R[1, 1] > R[2, 2]:
            s = 2.0 * math.sqrt(1.0 + R[1, 1] - R[0, 0] - R[2, 2])
            w = (R[0, 2] - R[2, 0]) / s
            x = (R[0, 1] + R[1, 0]) / s
            y = 0.25 * s
            z = (R[1, 2] + R[2, 1]) / s
        else:
            s = 2.0 * math.sqrt(1.0 + R[2, 2] - R[0, 0] - R[1, 1])
            w = (R[1, 0] - R[0, 1]) / s
            x = (R[0, 2] + R[2, 0]) / s
            y = (R[1, 2] + R[2, 1]) / s
            z = 0.25 * s
        n = math.sqrt(w*w + x*x + y*y + z*z)
        sign = -1.0 if w < 0 else 1.0
        return (sign*w/n, sign*x/n, sign*y/n, sign*z/n)

    def inverse(self) -> "Pose":
        R_inv = self.R.T
        return Pose(t=-(R_inv @ self.t), R=R_inv)

    def __matmul__(self, other: "Pose") -> "Pose":
        if not isinstance(other, Pose):
            return NotImplemented
        return Pose(t=self.R @ other.t + self.t, R=self.R @ other.R)

    def allclose(self, other: "Pose", atol: float = 1e-12) -> bool:
        return bool(np.allclose(self.t, other.t, atol=atol) and np.allclose(self.R, other.R, atol=atol))
