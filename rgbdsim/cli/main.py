from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Optional

import numpy as np
import typer

from ..config import load_config
from ..core.depth import MAX_VALID_DEPTH_16U_M, convert_depth_to_millimeters
from ..runtime.builders import build_scene, build_sensor
from ..sdk.run import capture_from_config
from ..sensors.camera import CameraInfo
from ..sensors.rgbd import RgbdSensorDiscrete

app = typer.Typer(help="rgbdsim RGB-D camera simulation utilities")


def _configure_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric, format="[%(levelname)s] %(message)s")
    logging.getLogger("rgbdsim").setLevel(numeric)


def _describe_intrinsics(label: str, info: CameraInfo) -> str:
    return (
        f"{label}: {info.width}x{info.height}, fov_x={math.degrees(info.fov_x):.3f} deg, "
        f"fov_y={math.degrees(info.fov_y):.3f} deg, "
        f"focal=({info.focal_x:.3f}, {info.focal_y:.3f}), center=({info.center_x:.3f}, {info.center_y:.3f})"
    )


@app.command("capture")
def capture(
    config: Path = typer.Argument(..., exists=True, readable=True, help="Path to YAML configuration file."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Override output path (.npz)."),
    duration_s: Optional[float] = typer.Option(None, "--duration-s", help="Override capture duration in seconds."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Capture RGB-D frames for a scenario specified by a YAML config."""

    _configure_logging(log_level)
    if output is not None and output.suffix.lower() != ".npz":
        raise typer.BadParameter("Output must end with .npz", param_hint="--output")
    if duration_s is not None and duration_s < 0:
        raise typer.BadParameter("duration must be non-negative", param_hint="--duration-s")
    result = capture_from_config(config, output=output, duration_s=duration_s)
    typer.echo(f"Captured {result.stats['frames']} frames → {result.output_path}")


@app.command("describe")
def describe(
    config: Path = typer.Argument(..., exists=True, readable=True, help="Path to YAML configuration file."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Build the sensor from a config and print its camera specification."""

    _configure_logging(log_level)
    cfg = load_config(config)
    scene = build_scene(cfg)
    built = build_sensor(cfg, scene)
    sensor = built.sensor if isinstance(built, RgbdSensorDiscrete) else built

    depth_range = sensor.depth_render_camera.depth_range
    typer.echo(f"parent frame: {cfg.sensor.parent_frame}")
    typer.echo(f"X_PB translation: {np.array2string(sensor.X_PB.t, precision=4)}")
    typer.echo(_describe_intrinsics("color", sensor.color_camera_info))
    typer.echo(_describe_intrinsics("depth", sensor.depth_camera_info))
    typer.echo(f"depth range: [{depth_range.min_depth}, {depth_range.max_depth}] m")
    if isinstance(built, RgbdSensorDiscrete):
        typer.echo(f"discrete: period={built.period} s")
    else:
        typer.echo("discrete: no (continuous)")
    typer.echo(f"outputs: {', '.join(built.output_port_names())}")


@app.command("convert-depth")
def convert_depth(
    source: Path = typer.Argument(..., exists=True, readable=True, help="Input .npy of float depths in meters."),
    output: Path = typer.Argument(..., help="Output .npy of uint16 depths in millimeters."),
) -> None:
    """Convert a float depth array (meters) to saturated 16-bit millimeters."""

    if source.suffix.lower() != ".npy":
        raise typer.BadParameter("Input must be a .npy file", param_hint="SOURCE")
    meters = np.load(source)
    millimeters = convert_depth_to_millimeters(meters)
    saturated = int(np.count_nonzero(np.asarray(meters) > MAX_VALID_DEPTH_16U_M))
    output.parent.mkdir(parents=True, exist_ok=True)
    np.save(output, millimeters)
    typer.echo(f"Converted {millimeters.size} depths ({saturated} saturated) → {output}")


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
