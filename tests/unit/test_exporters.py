import logging

import numpy as np

from rgbdsim.core.exporter import NpzFrameWriter, SensorFrame
from rgbdsim.core.image import ImageDepth16U, ImageDepth32F, ImageLabel16I, ImageRgba8U, PoseVector


def _frame(time: float, depth_m: float, with_label: bool = True) -> SensorFrame:
    color = ImageRgba8U(4, 3)
    color.fill((10, 20, 30, 255))
    depth_32f = ImageDepth32F(2, 2)
    depth_32f.fill(depth_m)
    depth_16u = ImageDepth16U(2, 2)
    depth_16u.fill(int(depth_m * 1000))
    label = None
    if with_label:
        label = ImageLabel16I(4, 3)
        label.fill(7)
    pose = PoseVector()
    pose.set_translation((time, 0.0, 0.0))
    return SensorFrame(time=time, color=color, depth_32f=depth_32f, depth_16u=depth_16u, X_WB=pose, label=label)


def test_npz_writer_stacks_frames(tmp_path) -> None:
    path = tmp_path / "frames.npz"
    writer = NpzFrameWriter(str(path))
    writer.write_frame(_frame(0.0, 1.0))
    writer.write_frame(_frame(0.5, 2.0))
    writer.close()

    with np.load(path) as data:
        np.testing.assert_array_equal(data["time"], [0.0, 0.5])
        assert data["color"].shape == (2, 3, 4, 4)
        assert data["depth_32f"].shape == (2, 2, 2)
        assert data["depth_16u"].dtype == np.uint16
        np.testing.assert_array_equal(data["depth_16u"][1], np.full((2, 2), 2000, dtype=np.uint16))
        assert data["label"].shape == (2, 3, 4)
        np.testing.assert_array_equal(data["X_WB"][:, 0], [0.0, 0.5])
        assert data["X_WB"].shape == (2, 7)


def test_npz_writer_omits_label_when_missing(tmp_path) -> None:
    path = tmp_path / "nolabel.npz"
    writer = NpzFrameWriter(str(path))
    writer.write_frame(_frame(0.0, 1.0, with_label=False))
    writer.close()
    with np.load(path) as data:
        assert "label" not in data.files


def test_npz_writer_without_frames_writes_nothing(tmp_path, caplog) -> None:
    path = tmp_path / "empty.npz"
    writer = NpzFrameWriter(str(path))
    with caplog.at_level(logging.WARNING, logger="rgbdsim"):
        writer.close()
    assert not path.exists()
    assert any("No frames captured" in r.getMessage() for r in caplog.records)
