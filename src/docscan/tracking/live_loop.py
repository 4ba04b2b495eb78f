"""
Live Tracking Loop

Runs the detection pipeline on a live preview stream at a fixed cadence
and publishes the resulting quadrilateral (or None) as the overlay
target.

Backpressure: at most one detection pass is in flight. A tick that fires
while a pass is still running is skipped, never queued. This holds
across stop/start: a pass left over from before a restart still counts
as in flight until it finishes. ``stop()`` is
synchronous and any pass still running at that point has its result
dropped.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

import numpy as np

from docscan.common.exceptions import DocScanError
from docscan.common.types import Quadrilateral
from docscan.config_loader import TrackingConfig
from docscan.detection.processor import QuadrilateralDetector

logger = logging.getLogger(__name__)

FrameSource = Callable[[], Optional[np.ndarray]]
QuadListener = Callable[[Optional[Quadrilateral]], None]


class LiveTracker:
    """
    Background detection loop for the preview overlay.

    The listener is called from a worker thread and must not call back
    into the tracker.

    Args:
        detector: Detector used in "live" mode.
        frame_source: Returns the latest frame, or None if none is available.
        on_update: Receives each published quad (None when nothing found).
        config: Tick interval settings.

    Example:
        >>> tracker = LiveTracker(detector, camera.latest_frame, overlay.set_quad)
        >>> tracker.start()
        >>> ...
        >>> tracker.stop()
    """

    def __init__(
        self,
        detector: QuadrilateralDetector,
        frame_source: FrameSource,
        on_update: Optional[QuadListener] = None,
        config: Optional[TrackingConfig] = None,
    ):
        self.detector = detector
        self.frame_source = frame_source
        self.on_update = on_update
        self.config = config or TrackingConfig()

        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._running = False
        self._in_flight = False
        self._pass_seq = 0
        self._pass_future: Optional[Future] = None
        self._generation = 0

        self.latest_quad: Optional[Quadrilateral] = None
        self.skipped_ticks = 0
        self.completed_passes = 0

    @property
    def interval_s(self) -> float:
        return self.config.interval_ms / 1000.0

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def start(self, spawn_thread: bool = True) -> None:
        """
        Start tracking.

        Args:
            spawn_thread: If False, no ticker thread is started and the
                caller drives the loop through ``tick()``.
        """
        with self._lock:
            if self._running:
                return
            self._running = True
            self._stop_event.clear()
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="docscan-live"
            )
            if spawn_thread:
                self._thread = threading.Thread(
                    target=self._run, name="docscan-live-ticker", daemon=True
                )
                self._thread.start()

        logger.info(f"Live tracking started (interval={self.config.interval_ms}ms)")

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval_s):
            self.tick()

    def tick(self) -> bool:
        """
        Run one scheduled tick.

        Returns:
            True if a detection pass was submitted, False if the tick was
            skipped (pass in flight, no frame, or tracker stopped).
        """
        with self._lock:
            if not self._running or self._executor is None:
                return False
            if self._in_flight:
                self.skipped_ticks += 1
                logger.debug("Live tick skipped: previous pass still in flight")
                return False

            frame = self.frame_source()
            if frame is None:
                return False

            self._in_flight = True
            self._pass_seq += 1
            self._pass_future = self._executor.submit(
                self._detect_pass, frame, self._generation, self._pass_seq
            )
            return True

    def _finish_pass(self, seq: int) -> None:
        # Only the most recently submitted pass owns the in-flight flag
        if seq == self._pass_seq:
            self._in_flight = False
            self._pass_future = None

    def _detect_pass(self, frame: np.ndarray, generation: int, seq: int) -> None:
        try:
            quad = self.detector.detect(frame, mode="live")
        except DocScanError as e:
            logger.warning(f"Live detection pass failed: {e}")
            quad = None
        except Exception:
            with self._lock:
                self._finish_pass(seq)
            logger.exception("Unexpected error in live detection pass")
            raise

        with self._lock:
            self._finish_pass(seq)
            if not self._running or generation != self._generation:
                logger.debug("Dropping live result from a stopped tracker")
                return
            self.completed_passes += 1
            self.latest_quad = quad
            if self.on_update is not None:
                self.on_update(quad)

    def stop(self) -> None:
        """
        Stop tracking immediately.

        Results of a pass still in flight are discarded. Does not wait for
        that pass to finish; it keeps the tracker busy until it does, even
        if the tracker is started again.
        """
        with self._lock:
            if not self._running:
                return
            self._running = False
            self._generation += 1
            self._stop_event.set()
            if self._pass_future is not None and self._pass_future.cancel():
                self._finish_pass(self._pass_seq)
            executor, self._executor = self._executor, None
            thread, self._thread = self._thread, None
            self.latest_quad = None

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=max(1.0, 2 * self.interval_s))
        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)

        logger.info(
            f"Live tracking stopped ({self.completed_passes} passes, "
            f"{self.skipped_ticks} skipped ticks)"
        )
