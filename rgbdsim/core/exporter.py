from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional
import numpy as np
import pathlib

from .image import ImageDepth16U, ImageDepth32F, ImageLabel16I, ImageRgba8U, PoseVector
from .utils import get_logger

_log = get_logger()


@dataclass
class SensorFrame:
    """One capture of every sensor output at ``time``."""
    time: float
    color: ImageRgba8U
    depth_32f: ImageDepth32F
    depth_16u: ImageDepth16U
    X_WB: PoseVector
    label: Optional[ImageLabel16I] = None


class NpzFrameWriter:
    """Buffers frames and writes them stacked into one compressed ``.npz`` on close.

    Arrays: ``time`` (N,), ``color`` (N, H, W, 4), ``depth_32f`` and
    ``depth_16u`` (N, H, W), ``label`` (N, H, W) when every frame has one, and
    ``X_WB`` (N, 7).
    """
    def __init__(self, path: str) -> None:
        self.path = path
        self._frames: List[SensorFrame] = []

    def write_frame(self, frame: SensorFrame) -> None:
        self._frames.append(frame)

    def close(self) -> None:
        if not self._frames:
            _log.warning("No frames captured; nothing written to %s", self.path)
            return
        path = pathlib.Path(self.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        frames = self._frames
        out: Dict[str, np.ndarray] = {
            "time": np.array([f.time for f in frames], dtype=np.float64),
            "color": np.stack([f.color.data for f in frames]),
            "depth_32f": np.stack([f.depth_32f.data[..., 0] for f in frames]),
            "depth_16u": np.stack([f.depth_16u.data[..., 0] for f in frames]),
            "X_WB": np.stack([f.X_WB.value for f in frames]),
        }
        if all(f.label is not None for f in frames):
            out["label"] = np.stack([f.label.data[..., 0] for f in frames])  # type: ignore[union-attr]
        np.savez_compressed(path, **out)
        _log.info("Wrote %d frames to %s", len(frames), path)
        self._frames.clear()
