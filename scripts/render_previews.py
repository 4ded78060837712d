from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

import matplotlib
import matplotlib.pyplot as plt
import numpy as np

from rgbdsim.core.depth import MAX_DEPTH_16U_MM
from rgbdsim.core.image import LABEL_EMPTY
from rgbdsim.sdk import capture_from_config

matplotlib.use("Agg")

DEFAULT_CONFIGS: List[Path] = [Path("configs/hallway.yaml")]
OUTPUT_DIR = Path("outputs")
IMAGE_DIR = Path("outputs/images")


def _ensure_dirs() -> None:
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    IMAGE_DIR.mkdir(parents=True, exist_ok=True)


def run_config(config_path: Path, overwrite: bool = True) -> Path:
    out_path = OUTPUT_DIR / f"{config_path.stem}.npz"
    if out_path.exists() and not overwrite:
        logging.info("Skipping %s (output exists)", config_path.stem)
        return out_path
    result = capture_from_config(config_path, output=out_path)
    logging.info("Captured %d frames for '%s'", result.stats["frames"], config_path.stem)
    return result.output_path


def render_frame(name: str, npz_path: Path, index: Optional[int] = None) -> Path:
    with np.load(npz_path) as data:
        count = data["time"].shape[0]
        if count == 0:
            raise ValueError(f"No frames to render for {name}")
        k = count - 1 if index is None else index
        time = float(data["time"][k])
        color = data["color"][k]
        depth = data["depth_16u"][k].astype(np.float32)
        label = data["label"][k] if "label" in data.files else None

    # Unknown and saturated depths render as masked pixels.
    depth = np.ma.masked_where((depth == 0) | (depth >= MAX_DEPTH_16U_MM), depth / 1000.0)

    panels = 3 if label is not None else 2
    fig = plt.figure(figsize=(4 * panels, 3.5), dpi=150)
    ax_color = fig.add_subplot(1, panels, 1)
    ax_color.imshow(color)
    ax_color.set_title(f"Color (t={time:.2f} s)")
    ax_color.axis("off")

    ax_depth = fig.add_subplot(1, panels, 2)
    im = ax_depth.imshow(depth, cmap="viridis")
    ax_depth.set_title("Depth 16U")
    ax_depth.axis("off")
    fig.colorbar(im, ax=ax_depth, fraction=0.046, pad=0.04, label="Depth [m]")

    if label is not None:
        ax_label = fig.add_subplot(1, panels, 3)
        ax_label.imshow(np.ma.masked_equal(label, LABEL_EMPTY), cmap="tab10", interpolation="nearest")
        ax_label.set_title("Label")
        ax_label.axis("off")

    fig.tight_layout()
    out_path = IMAGE_DIR / f"{name}.png"
    fig.savefig(out_path)
    plt.close(fig)
    return out_path


def generate_previews(configs: List[Path], overwrite_outputs: bool, frame: Optional[int]) -> None:
    _ensure_dirs()
    for config_path in configs:
        if not config_path.exists():
            logging.warning("Skipping '%s' (config not found)", config_path)
            continue
        logging.info("Running '%s'", config_path)
        out_path = run_config(config_path, overwrite=overwrite_outputs)
        if not out_path.exists():
            logging.warning("Output %s missing, skipping render", out_path)
            continue
        image_path = render_frame(config_path.stem, out_path, frame)
        logging.info("Saved %s", image_path)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Capture rgbdsim scenarios and save preview images.")
    parser.add_argument("--config", "-c", action="append", type=Path, help="Scenario config to run (default: bundled).")
    parser.add_argument("--frame", type=int, default=None, help="Frame index to render (default: last).")
    parser.add_argument("--no-overwrite", action="store_true", help="Skip capturing if the output already exists.")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO).")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format="[%(levelname)s] %(message)s")
    generate_previews(args.config or DEFAULT_CONFIGS, overwrite_outputs=not args.no_overwrite, frame=args.frame)


if __name__ == "__main__":
    main()
