# cli/surface_stream.py
"""Run the depth to surface patch pipeline on synthetic or recorded frames."""

from __future__ import annotations

import argparse
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import numpy as np
import open3d as o3d

from utils.cli import Command, CommandDispatcher
from utils.error_tracker import ErrorTracker
from utils.io import list_depth_files, load_camera_json, read_depth
from utils.logger import Logger
from utils.settings import DEPTH_SCALE
from vision.frame import DepthFrame
from vision.orchestrator import FrameOrchestrator, FrameResult, build_orchestrator
from vision.synthetic import blob_anchors, point_blobs, wall_frame

logger = Logger.get_logger("cli.surface_stream")


def _log_result(result: FrameResult) -> None:
    m = result.metrics
    message = (
        f"Frame {result.sequence}: {m.point_count} points, "
        f"{m.surface_count} surfaces, {m.fps:.1f} fps"
    )
    if not result.diff.is_empty:
        message += (
            f", created={list(result.diff.created)} removed={list(result.diff.removed)}"
        )
    logger.info(message)


def _show(result: FrameResult | None, points: np.ndarray | None = None) -> None:
    if result is None or not result.patches:
        logger.warning("Nothing to show")
        return
    geometries = [patch.to_open3d() for patch in result.patches]
    if points is not None and len(points):
        pcd = o3d.geometry.PointCloud(o3d.utility.Vector3dVector(points))
        pcd.paint_uniform_color([1.0, 0.6, 0.0])
        geometries.append(pcd)
    o3d.visualization.draw_geometries(geometries, window_name="Surface patches")


@contextmanager
def _orchestrator(args: argparse.Namespace) -> Iterator[FrameOrchestrator]:
    """Build an orchestrator that is stopped on exit or on a fatal error."""
    orchestrator = build_orchestrator()
    ErrorTracker.register_cleanup(orchestrator.stop)
    try:
        yield orchestrator
    finally:
        orchestrator.stop()
        ErrorTracker.unregister_cleanup(orchestrator.stop)


def _run_synthetic(args: argparse.Namespace) -> None:
    points = None
    with _orchestrator(args) as orchestrator:
        if args.scene == "wall":
            result = orchestrator.process_frame(wall_frame(args.depth))
        else:
            points = point_blobs()
            result = orchestrator.process_mesh_anchors(blob_anchors(points))
    if result is None:
        logger.error("Synthetic frame failed, see log above")
        return
    _log_result(result)
    if args.show:
        _show(result, points)


def _run_replay(args: argparse.Namespace) -> None:
    K, pose = load_camera_json(args.camera)
    files = list_depth_files(args.input)
    if not files:
        logger.error(f"No depth recordings found in {args.input}")
        return
    logger.info(f"Replaying {len(files)} depth frames from {args.input}")

    last = None
    with _orchestrator(args) as orchestrator:
        orchestrator.start()
        for path in Logger.progress(files, desc="Frames"):
            depth = read_depth(path, args.depth_scale)
            frame = DepthFrame(
                depth=depth,
                width=depth.shape[1],
                height=depth.shape[0],
                intrinsics=K,
                cam_to_world=pose,
                timestamp=time.time(),
            )
            orchestrator.submit(frame)
            if args.interval > 0:
                time.sleep(args.interval)
            result = orchestrator.get_result(timeout=0)
            while result is not None:
                _log_result(result)
                last = result
                result = orchestrator.get_result(timeout=0)
        result = orchestrator.get_result(timeout=args.drain)
        while result is not None:
            _log_result(result)
            last = result
            result = orchestrator.get_result(timeout=args.drain)
        logger.info(f"Final metrics: {orchestrator.metrics}")
    if args.show:
        _show(last)


def _add_synthetic_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--scene", choices=("wall", "blobs"), default="wall")
    parser.add_argument("--depth", type=float, default=2.0, help="Wall distance, m")
    parser.add_argument("--show", action="store_true", help="Open an Open3D viewer")


def _add_replay_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--input", type=Path, required=True, help="Depth map directory")
    parser.add_argument(
        "--camera", type=Path, required=True, help='JSON with "K" and optional "pose"'
    )
    parser.add_argument("--depth-scale", type=float, default=DEPTH_SCALE)
    parser.add_argument(
        "--interval", type=float, default=1.0 / 30, help="Delay between frames, s"
    )
    parser.add_argument(
        "--drain", type=float, default=1.0, help="Wait for late results, s"
    )
    parser.add_argument("--show", action="store_true", help="Open an Open3D viewer")


def main(argv: list[str] | None = None) -> None:
    dispatcher = CommandDispatcher(
        description="Depth frame to surface patch pipeline",
        commands=[
            Command(
                "synthetic",
                _run_synthetic,
                _add_synthetic_args,
                help="Process a synthetic wall or two-blob scene",
            ),
            Command(
                "replay",
                _run_replay,
                _add_replay_args,
                help="Stream recorded depth maps through the worker pool",
            ),
        ],
    )
    dispatcher.run(argv)


if __name__ == "__main__":
    main()
