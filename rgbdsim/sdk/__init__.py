"""Programmatic entry points for running capture scenarios."""

from .run import CaptureRunResult, capture_frames, capture_from_config, frame_times

__all__ = ["CaptureRunResult", "capture_frames", "capture_from_config", "frame_times"]
