"""
Capture Session

Owns one scan flow from frame capture to extracted record:

    idle -> cropping -> transforming -> analyzing -> complete
    any  -> idle  (discard)

Stage transitions are strictly sequential. Results that arrive after a
discard (rectification or extraction finishing on a worker thread) are
dropped silently: every session run carries a generation number and
stale generations never write state.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional, Union

import numpy as np

from docscan.common.exceptions import InvalidStageTransitionError
from docscan.common.types import PointLike, Quadrilateral, image_size, validate_image
from docscan.config_loader import ScanConfig, get_default_config
from docscan.detection.processor import QuadrilateralDetector
from docscan.editor.corner_editor import CornerEditor, DragTarget, PeekRegion
from docscan.extraction.client import FieldExtractor
from docscan.extraction.types import DocumentRecord
from docscan.rectification.rectifier import PerspectiveRectifier
from docscan.rectification.types import RectifiedImage
from docscan.session.types import ScanStage, is_allowed_transition
from docscan.tracking.live_loop import FrameSource, LiveTracker, QuadListener
from docscan.vision import OpenCVVisionOperations, VisionOperations

logger = logging.getLogger(__name__)

StageListener = Callable[[ScanStage], None]


class CaptureSession:
    """
    Stage machine around detection, editing, rectification and extraction.

    The session's quad is authoritative and only changes through the
    editor or a new capture. The live tracker merely proposes quads
    (``live_quad``) while the session is idle.

    Example:
        >>> session = CaptureSession(extractor=GeminiFieldExtractor(), locale="en")
        >>> session.load_image(cv2.imread("passport.jpg"))
        >>> session.drag_edge(0, 0.0, -1.5)
        >>> record = session.confirm()
        >>> cv2.imwrite("passport_flat.jpg", session.rectified.data)
    """

    def __init__(
        self,
        config: Optional[ScanConfig] = None,
        detector: Optional[QuadrilateralDetector] = None,
        rectifier: Optional[PerspectiveRectifier] = None,
        extractor: Optional[FieldExtractor] = None,
        locale: str = "en",
        ops: Optional[VisionOperations] = None,
        on_stage_change: Optional[StageListener] = None,
    ):
        self.config = config or get_default_config()
        self.ops = ops or OpenCVVisionOperations()
        self.detector = detector or QuadrilateralDetector(config=self.config, ops=self.ops)
        self.rectifier = rectifier or PerspectiveRectifier(
            config=self.config.rectification, ops=self.ops
        )
        self.extractor = extractor
        self.locale = locale
        self.on_stage_change = on_stage_change

        self._lock = threading.RLock()
        self._stage = ScanStage.IDLE
        self._generation = 0
        self._executor: Optional[ThreadPoolExecutor] = None
        self._tracker: Optional[LiveTracker] = None
        self._live_listener: Optional[QuadListener] = None

        self.image: Optional[np.ndarray] = None
        self.editor: Optional[CornerEditor] = None
        self.rectified: Optional[RectifiedImage] = None
        self.result: Optional[DocumentRecord] = None
        self.extraction_error: Optional[str] = None
        self.live_quad: Optional[Quadrilateral] = None

    # ------------------------------------------------------------------ #
    # State                                                               #
    # ------------------------------------------------------------------ #

    @property
    def stage(self) -> ScanStage:
        return self._stage

    @property
    def quad(self) -> Optional[Quadrilateral]:
        """Authoritative working quad (percentage space), None when idle."""
        return self.editor.quad if self.editor is not None else None

    @property
    def image_aspect(self) -> Optional[float]:
        """Width / height of the current reference image.

        The reference is the rectified image once it exists, otherwise the
        captured source image.
        """
        if self.rectified is not None:
            return self.rectified.aspect_ratio
        if self.image is not None:
            width, height = image_size(self.image)
            return width / height
        return None

    @property
    def is_tracking(self) -> bool:
        return self._tracker is not None and self._tracker.is_running

    def _require_stage(self, *stages: ScanStage) -> None:
        if self._stage not in stages:
            allowed = ", ".join(s.value for s in stages)
            raise InvalidStageTransitionError(
                f"Operation requires stage {allowed}, session is {self._stage.value}"
            )

    def _transition(self, target: ScanStage) -> None:
        if not is_allowed_transition(self._stage, target):
            raise InvalidStageTransitionError(
                f"Invalid stage transition {self._stage.value} -> {target.value}"
            )
        logger.info(f"Session stage: {self._stage.value} -> {target.value}")
        self._stage = target
        if self.on_stage_change is not None:
            self.on_stage_change(target)

    # ------------------------------------------------------------------ #
    # Idle: live tracking and capture                                     #
    # ------------------------------------------------------------------ #

    def start_live_tracking(
        self,
        frame_source: FrameSource,
        on_update: Optional[QuadListener] = None,
        spawn_thread: bool = True,
    ) -> LiveTracker:
        """
        Start proposing quads from a live frame source.

        Only allowed while idle; leaving idle stops the tracker.
        """
        with self._lock:
            self._require_stage(ScanStage.IDLE)
            if self._tracker is not None and self._tracker.is_running:
                return self._tracker
            self._live_listener = on_update
            self._tracker = LiveTracker(
                self.detector,
                frame_source,
                on_update=self._on_live_quad,
                config=self.config.tracking,
            )
            tracker = self._tracker
        tracker.start(spawn_thread=spawn_thread)
        return tracker

    def stop_live_tracking(self) -> None:
        """Stop the live tracker synchronously. Must not be called under the session lock."""
        tracker, self._tracker = self._tracker, None
        if tracker is not None:
            tracker.stop()

    def _on_live_quad(self, quad: Optional[Quadrilateral]) -> None:
        with self._lock:
            if self._stage is not ScanStage.IDLE:
                return
            self.live_quad = quad
            listener = self._live_listener
        if listener is not None:
            listener(quad)

    def capture(self, frame: np.ndarray) -> Quadrilateral:
        """
        Freeze a live frame and enter cropping.

        The seed quad is the latest live proposal, else a still-image
        detection, else the default inset box.

        Returns:
            The seeded working quad.
        """
        validate_image(frame)
        with self._lock:
            self._require_stage(ScanStage.IDLE)
            proposal = self.live_quad
        self.stop_live_tracking()

        seed = proposal if proposal is not None else self.detector.detect_or_default(frame, "still")
        return self._begin_cropping(frame, seed)

    def load_image(self, image: np.ndarray, seed: Optional[Quadrilateral] = None) -> Quadrilateral:
        """
        Load a still image (e.g. from a file) and enter cropping.

        Returns:
            The seeded working quad.
        """
        validate_image(image)
        with self._lock:
            self._require_stage(ScanStage.IDLE)
        self.stop_live_tracking()

        if seed is None:
            seed = self.detector.detect_or_default(image, "still")
        return self._begin_cropping(image, seed)

    def _begin_cropping(self, image: np.ndarray, seed: Quadrilateral) -> Quadrilateral:
        width, height = image_size(image)
        with self._lock:
            self._require_stage(ScanStage.IDLE)
            self.image = image
            self.editor = CornerEditor(
                seed, width, height, config=self.config.editor, ops=self.ops
            )
            self.live_quad = None
            self._transition(ScanStage.CROPPING)
            return self.editor.quad

    # ------------------------------------------------------------------ #
    # Cropping: editor pass-throughs                                      #
    # ------------------------------------------------------------------ #

    def drag_corner(self, index: int, new_point: PointLike) -> Quadrilateral:
        with self._lock:
            self._require_stage(ScanStage.CROPPING)
            return self.editor.drag_corner(index, new_point)

    def drag_edge(self, edge_index: int, delta_x: float, delta_y: float) -> Quadrilateral:
        with self._lock:
            self._require_stage(ScanStage.CROPPING)
            return self.editor.drag_edge(edge_index, delta_x, delta_y)

    def peek(self, target: Union[DragTarget, int, str]) -> PeekRegion:
        with self._lock:
            self._require_stage(ScanStage.CROPPING)
            return self.editor.peek(target)

    # ------------------------------------------------------------------ #
    # Transforming / analyzing                                            #
    # ------------------------------------------------------------------ #

    def confirm(self) -> Optional[DocumentRecord]:
        """
        Confirm the crop: rectify, then run extraction.

        If rectification raises, the session goes back to cropping with the
        quad intact before the error propagates.

        Returns:
            The extracted record (a placeholder if extraction failed, None
            if no extractor is configured or the session was discarded
            while working).

        Raises:
            DegenerateQuadrilateralError: If the corners cannot be
                rectified, so the user can fix them.
        """
        with self._lock:
            self._require_stage(ScanStage.CROPPING)
            self._transition(ScanStage.TRANSFORMING)
            generation = self._generation
            image = self.image
            quad = self.editor.quad

        try:
            rectified = self.rectifier.rectify(image, quad)
        except Exception as e:
            with self._lock:
                if generation == self._generation:
                    logger.warning(f"Rectification failed, back to cropping: {e}")
                    self._transition(ScanStage.CROPPING)
            raise

        with self._lock:
            if generation != self._generation:
                logger.debug("Dropping rectification result of a discarded session")
                return None
            self.rectified = rectified
            self._transition(ScanStage.ANALYZING)

        return self._run_extraction(generation)

    def confirm_async(self, executor: Optional[ThreadPoolExecutor] = None) -> "Future[Optional[DocumentRecord]]":
        """Run ``confirm`` off the calling thread and return its future."""
        if executor is None:
            with self._lock:
                if self._executor is None:
                    self._executor = ThreadPoolExecutor(
                        max_workers=1, thread_name_prefix="docscan-session"
                    )
                executor = self._executor
        return executor.submit(self.confirm)

    def retry_extraction(self) -> Optional[DocumentRecord]:
        """Re-run extraction on the kept rectified image (complete -> analyzing)."""
        with self._lock:
            self._require_stage(ScanStage.COMPLETE)
            if self.rectified is None:
                raise InvalidStageTransitionError("No rectified image to analyze")
            self._transition(ScanStage.ANALYZING)
            generation = self._generation
        return self._run_extraction(generation)

    def _run_extraction(self, generation: int) -> Optional[DocumentRecord]:
        with self._lock:
            rectified = self.rectified
            locale = self.locale

        record: Optional[DocumentRecord] = None
        error: Optional[str] = None
        if self.extractor is None:
            logger.info("No extractor configured, skipping analysis")
        else:
            try:
                record = self.extractor.extract(rectified, locale)
            except Exception as e:
                error = str(e) or type(e).__name__
                logger.error(f"Field extraction failed: {error}")
                record = DocumentRecord.placeholder(f"Extraction failed: {error}")

        with self._lock:
            if generation != self._generation:
                logger.debug("Dropping extraction result of a discarded session")
                return None
            self.result = record
            self.extraction_error = error
            self._transition(ScanStage.COMPLETE)
            return record

    # ------------------------------------------------------------------ #
    # Discard                                                             #
    # ------------------------------------------------------------------ #

    def discard(self) -> None:
        """
        Reset the session to idle from any stage.

        Synchronous: live tracking stops before this returns, and any
        rectification or extraction still running will not apply its
        result.
        """
        self.stop_live_tracking()
        with self._lock:
            self._generation += 1
            self.image = None
            self.editor = None
            self.rectified = None
            self.result = None
            self.extraction_error = None
            self.live_quad = None
            previous = self._stage
            self._transition(ScanStage.IDLE)
        logger.info(f"Session discarded from {previous.value}")

    def close(self) -> None:
        """Discard and release the worker executor."""
        self.discard()
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=False)
