"""Per-frame orchestration: worker pool, result publication and patch diffing.

The host pushes depth frames (or mesh anchor sets) with :meth:`FrameOrchestrator.submit`
and never blocks: frames go into a bounded channel and the oldest pending frame is
dropped when the channel is full. Worker threads run sampling and surface
generation independently per frame, so completion order is not guaranteed. Only a
result newer than the last published one is published; late results are dropped.
Each published :class:`FrameResult` carries the full patch list, the
create/update/remove diff against the previous published set and a metrics
snapshot.
"""

from __future__ import annotations

import itertools
import queue
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Sequence

from utils.config import Config
from utils.error_tracker import PipelineStoppedError, SurfaceError
from utils.logger import Logger, LoggerType
from utils.settings import (
    PipelineCfg,
    cluster as CLUSTER_CFG,
    material as MATERIAL_CFG,
    pipeline as PIPELINE_CFG,
    sampler as SAMPLER_CFG,
    surface as SURFACE_CFG,
)
from vision.frame import DepthFrame, MeshAnchor
from vision.pointcloud.clusterer import SpatialClusterer
from vision.pointcloud.sampler import PointSampler
from vision.surface.generator import SurfaceGenerator
from vision.surface.grid_fitter import GridFitter
from vision.surface.patch import Material, PatchBuilder, SurfacePatch
from vision.surface.tessellator import Tessellator

_DEPTH = "depth"
_ANCHORS = "anchors"


@dataclass(frozen=True)
class PatchDiff:
    """Identities created, updated in place and removed by one publication."""

    created: tuple[str, ...] = ()
    updated: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.created or self.updated or self.removed)


class PatchRegistry:
    """Identity-keyed map of the patches currently on display."""

    def __init__(self) -> None:
        self._entries: dict[str, SurfacePatch] = {}
        self._lock = threading.Lock()

    def apply(self, patches: Sequence[SurfacePatch]) -> PatchDiff:
        """Replace the displayed set with ``patches`` and return the diff."""
        with self._lock:
            current = {patch.patch_id: patch for patch in patches}
            created = tuple(pid for pid in current if pid not in self._entries)
            updated = tuple(pid for pid in current if pid in self._entries)
            removed = tuple(pid for pid in self._entries if pid not in current)
            self._entries = current
        return PatchDiff(created=created, updated=updated, removed=removed)

    def snapshot(self) -> dict[str, SurfacePatch]:
        with self._lock:
            return dict(self._entries)

    def clear(self) -> PatchDiff:
        return self.apply([])

    def __contains__(self, patch_id: str) -> bool:
        with self._lock:
            return patch_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class FrameRateMeter:
    """Count delivered frames and report the rate once per window."""

    def __init__(
        self, window: float = PIPELINE_CFG.fps_window, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self.window = window
        self._clock = clock
        self._start = clock()
        self._frames = 0
        self.fps = 0.0

    def tick(self) -> float:
        self._frames += 1
        now = self._clock()
        elapsed = now - self._start
        if elapsed >= self.window:
            self.fps = self._frames / elapsed
            self._frames = 0
            self._start = now
        return self.fps


@dataclass(frozen=True)
class PipelineMetrics:
    fps: float = 0.0
    point_count: int = 0
    surface_count: int = 0
    dropped_frames: int = 0
    failed_frames: int = 0


@dataclass(frozen=True)
class FrameResult:
    """Snapshot published once per completed frame."""

    sequence: int
    timestamp: float
    patches: tuple[SurfacePatch, ...]
    diff: PatchDiff
    metrics: PipelineMetrics


class FrameOrchestrator:
    """Run the point cloud to patch pipeline on a pool of worker threads."""

    def __init__(
        self,
        sampler: PointSampler | None = None,
        generator: SurfaceGenerator | None = None,
        cfg: PipelineCfg = PIPELINE_CFG,
        logger: LoggerType | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.cfg = cfg
        self.logger = logger or Logger.get_logger("vision.orchestrator")
        self.sampler = sampler or PointSampler()
        self.generator = generator or SurfaceGenerator(
            builder=PatchBuilder(prefix=cfg.patch_prefix)
        )
        self.registry = PatchRegistry()
        self.meter = FrameRateMeter(cfg.fps_window, clock)
        self._clock = clock

        self._inbox: queue.Queue = queue.Queue(maxsize=cfg.input_queue_size)
        self._outbox: queue.Queue = queue.Queue(maxsize=cfg.output_queue_size)
        self._sequence = itertools.count(1)
        self._submit_lock = threading.Lock()
        self._publish_lock = threading.Lock()
        self._stop = threading.Event()
        self._workers: list[threading.Thread] = []

        self._last_published = 0
        self._latest: FrameResult | None = None
        self._metrics = PipelineMetrics()
        self._dropped = 0
        self._failed = 0

    # lifecycle
    @property
    def running(self) -> bool:
        return bool(self._workers) and not self._stop.is_set()

    def start(self) -> None:
        if self.running:
            return
        self._workers = [worker for worker in self._workers if worker.is_alive()]
        if self._workers:
            raise RuntimeError(
                f"{len(self._workers)} workers from the previous run are still alive"
            )
        self._stop.clear()
        self._workers = [
            threading.Thread(
                target=self._worker_loop, name=f"surface-worker-{i}", daemon=True
            )
            for i in range(max(1, self.cfg.workers))
        ]
        for worker in self._workers:
            worker.start()
        self.logger.info(f"Started {len(self._workers)} surface workers")

    def stop(self, timeout: float = 2.0) -> None:
        """Stop workers; pending frames are discarded."""
        if not self._workers:
            return
        self._stop.set()
        for worker in self._workers:
            worker.join(timeout=timeout)
        self._workers = [worker for worker in self._workers if worker.is_alive()]
        if self._workers:
            self.logger.warning(
                f"{len(self._workers)} workers did not stop within {timeout}s"
            )
        discarded = 0
        while True:
            try:
                self._inbox.get_nowait()
                discarded += 1
            except queue.Empty:
                break
        self.logger.info(f"Surface workers stopped, {discarded} pending frames discarded")

    def __enter__(self) -> "FrameOrchestrator":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    # producer side
    def submit(self, frame: DepthFrame) -> int:
        """Queue a depth frame for processing and return its sequence number."""
        return self._enqueue(_DEPTH, frame)

    def submit_mesh_anchors(self, anchors: Iterable[MeshAnchor]) -> int:
        """Queue a mesh anchor set for processing and return its sequence number."""
        return self._enqueue(_ANCHORS, tuple(anchors))

    def _enqueue(self, kind: str, payload) -> int:
        if not self.running:
            raise PipelineStoppedError("Orchestrator is not running")
        with self._submit_lock:
            seq = next(self._sequence)
            self.meter.tick()
            while True:
                try:
                    self._inbox.put_nowait((seq, kind, payload))
                    break
                except queue.Full:
                    try:
                        dropped_seq, _, _ = self._inbox.get_nowait()
                    except queue.Empty:
                        continue
                    self._dropped += 1
                    self.logger.debug(f"Input channel full, dropped frame {dropped_seq}")
        return seq

    # synchronous path
    def process_frame(self, frame: DepthFrame) -> FrameResult | None:
        """Run one depth frame on the calling thread."""
        return self._process_now(_DEPTH, frame)

    def process_mesh_anchors(self, anchors: Iterable[MeshAnchor]) -> FrameResult | None:
        """Run one mesh anchor set on the calling thread."""
        return self._process_now(_ANCHORS, tuple(anchors))

    def _process_now(self, kind: str, payload) -> FrameResult | None:
        with self._submit_lock:
            seq = next(self._sequence)
            self.meter.tick()
        return self._run(seq, kind, payload)

    # consumer side
    def get_result(self, timeout: float | None = None) -> FrameResult | None:
        """Return the next published result, or ``None`` on timeout."""
        try:
            return self._outbox.get(timeout=timeout)
        except queue.Empty:
            return None

    @property
    def latest(self) -> FrameResult | None:
        return self._latest

    @property
    def metrics(self) -> PipelineMetrics:
        return self._metrics

    # workers
    def _worker_loop(self) -> None:
        while not self._stop.is_set():
            try:
                seq, kind, payload = self._inbox.get(timeout=0.1)
            except queue.Empty:
                continue
            self._run(seq, kind, payload)

    def _run(self, seq: int, kind: str, payload) -> FrameResult | None:
        try:
            if kind == _DEPTH:
                points = self.sampler.sample_depth(payload)
                timestamp = payload.timestamp
            else:
                points = self.sampler.sample_mesh_anchors(payload)
                timestamp = self._clock()
            patches = self.generator.generate(points)
        except SurfaceError as e:
            self._record_failure()
            self.logger.warning(f"Skipping frame {seq}: {e}")
            return None
        except Exception:
            self._record_failure()
            self.logger.exception(f"Unexpected error while processing frame {seq}")
            return None
        return self._publish(seq, timestamp, len(points), patches)

    def _record_failure(self) -> None:
        with self._publish_lock:
            self._failed += 1
            self._metrics = PipelineMetrics(
                fps=self.meter.fps,
                point_count=self._metrics.point_count,
                surface_count=self._metrics.surface_count,
                dropped_frames=self._dropped,
                failed_frames=self._failed,
            )

    def _publish(
        self, seq: int, timestamp: float, point_count: int, patches: list[SurfacePatch]
    ) -> FrameResult | None:
        with self._publish_lock:
            if seq <= self._last_published:
                self.logger.debug(
                    f"Discarding late frame {seq} (published {self._last_published})"
                )
                return None
            self._last_published = seq
            diff = self.registry.apply(patches)
            self._metrics = PipelineMetrics(
                fps=self.meter.fps,
                point_count=point_count,
                surface_count=len(patches),
                dropped_frames=self._dropped,
                failed_frames=self._failed,
            )
            result = FrameResult(
                sequence=seq,
                timestamp=timestamp,
                patches=tuple(patches),
                diff=diff,
                metrics=self._metrics,
            )
            self._latest = result
            self._offer(result)
        self.logger.debug(
            f"Frame {seq}: {point_count} points, {len(patches)} patches "
            f"(+{len(diff.created)} ~{len(diff.updated)} -{len(diff.removed)})"
        )
        return result

    def _offer(self, result: FrameResult) -> None:
        while True:
            try:
                self._outbox.put_nowait(result)
                return
            except queue.Full:
                try:
                    self._outbox.get_nowait()
                except queue.Empty:
                    pass


def build_orchestrator(
    config_path: str | Path | None = None, logger: LoggerType | None = None
) -> FrameOrchestrator:
    """Wire an orchestrator from ``Config`` with settings defaults as fallback."""
    if config_path is not None:
        Config.load(config_path, force_reload=True)
    sampler_cfg = Config.section("sampler", SAMPLER_CFG)
    cluster_cfg = Config.section("cluster", CLUSTER_CFG)
    surface_cfg = Config.section("surface", SURFACE_CFG)
    material_cfg = Config.section("material", MATERIAL_CFG)
    pipeline_cfg = Config.section("pipeline", PIPELINE_CFG)

    generator = SurfaceGenerator(
        clusterer=SpatialClusterer(cluster_cfg),
        fitter=GridFitter(surface_cfg),
        tessellator=Tessellator(surface_cfg),
        builder=PatchBuilder(Material.from_cfg(material_cfg), prefix=pipeline_cfg.patch_prefix),
    )
    return FrameOrchestrator(
        sampler=PointSampler(sampler_cfg),
        generator=generator,
        cfg=pipeline_cfg,
        logger=logger,
    )
