from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import yaml
from typer.testing import CliRunner

from rgbdsim.cli.main import app


def _write_config(path: Path, **sensor_overrides) -> None:
    sensor = {
        "xyz": [0.0, 0.0, 0.5],
        "color": {"width": 16, "height": 12, "fov_y_deg": 45.0},
        "depth": {"width": 8, "height": 6, "fov_y_deg": 45.0, "min_depth_m": 0.2, "max_depth_m": 5.0},
    }
    sensor.update(sensor_overrides)
    config = {
        "sensor": sensor,
        "scene": {"planes": [{"point": [0.0, 0.0, 2.5], "normal": [0.0, 0.0, -1.0], "label": 9}]},
        "capture": {"duration_s": 0.2, "interval_s": 0.1},
        "output": {"path": "out_frames.npz"},
    }
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config, f)


def test_cli_capture_npz(tmp_path: Path) -> None:
    cfg_path = tmp_path / "config.yaml"
    _write_config(cfg_path)

    runner = CliRunner()
    result = runner.invoke(app, ["capture", str(cfg_path)])

    assert result.exit_code == 0, result.stdout
    assert "Captured 3 frames" in result.stdout
    out_path = tmp_path / "out_frames.npz"
    assert out_path.exists()
    with np.load(out_path) as data:
        assert data["color"].shape == (3, 12, 16, 4)
        assert data["depth_16u"].shape == (3, 6, 8)
        assert np.all(data["depth_16u"] == 2000)
        assert np.all(data["label"] == 9)


def test_cli_capture_with_overrides(tmp_path: Path) -> None:
    cfg_path = tmp_path / "config.yaml"
    _write_config(cfg_path, period_s=0.1)
    override_path = tmp_path / "custom.npz"

    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "capture",
            str(cfg_path),
            "--output",
            str(override_path),
            "--duration-s",
            "0.5",
            "--log-level",
            "DEBUG",
        ],
    )

    assert result.exit_code == 0, result.stdout
    assert override_path.exists()
    with np.load(override_path) as data:
        assert data["time"].shape == (6,)


def test_cli_capture_rejects_bad_output(tmp_path: Path) -> None:
    cfg_path = tmp_path / "config.yaml"
    _write_config(cfg_path)

    runner = CliRunner()
    result = runner.invoke(app, ["capture", str(cfg_path), "--output", str(tmp_path / "out.las")])

    assert result.exit_code != 0
    assert not (tmp_path / "out.las").exists()


def test_cli_describe(tmp_path: Path) -> None:
    cfg_path = tmp_path / "config.yaml"
    _write_config(cfg_path, period_s=0.25, render_label_image=False)

    runner = CliRunner()
    result = runner.invoke(app, ["describe", str(cfg_path)])

    assert result.exit_code == 0, result.stdout
    assert "parent frame: world" in result.stdout
    assert "color: 16x12" in result.stdout
    assert "fov_y=45.000 deg" in result.stdout
    assert "fov_x=" in result.stdout
    assert "center=(8.500, 6.500)" in result.stdout
    assert "depth: 8x6" in result.stdout
    assert "depth range: [0.2, 5.0] m" in result.stdout
    assert "discrete: period=0.25 s" in result.stdout
    assert "label_image" not in result.stdout


def test_cli_describe_warns_about_16bit_range(tmp_path: Path, caplog) -> None:
    cfg_path = tmp_path / "config.yaml"
    _write_config(cfg_path, depth={"width": 8, "height": 6, "min_depth_m": 0.5, "max_depth_m": 80.0})

    runner = CliRunner()
    with caplog.at_level(logging.WARNING, logger="rgbdsim"):
        result = runner.invoke(app, ["describe", str(cfg_path)])

    assert result.exit_code == 0, result.stdout
    assert "discrete: no (continuous)" in result.stdout
    assert any("max valid depth for 16 bits" in r.getMessage() for r in caplog.records)


def test_cli_convert_depth(tmp_path: Path) -> None:
    source = tmp_path / "depth.npy"
    np.save(source, np.array([[0.0, 1.2345, 5.0], [70.0, np.inf, -1.0]], dtype=np.float32))
    output = tmp_path / "depth_mm.npy"

    runner = CliRunner()
    result = runner.invoke(app, ["convert-depth", str(source), str(output)])

    assert result.exit_code == 0, result.stdout
    assert "Converted 6 depths (2 saturated)" in result.stdout
    millimeters = np.load(output)
    assert millimeters.dtype == np.uint16
    np.testing.assert_array_equal(millimeters, [[0, 1234, 5000], [65534, 65534, 0]])
