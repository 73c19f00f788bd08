"""Frame loop driving an :class:`ExerciseSession` from a pose estimator.

The runner owns the start/stop lifecycle. Each source image is handed to the
estimator, and the resulting keypoint frame is processed before the next image
is requested, so frames are evaluated strictly in arrival order and never
concurrently. Estimator failures drop the frame and the loop carries on.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterable, Optional

from reptrack.config import SessionConfig
from reptrack.quality.failures import SessionStoppedError, SkipReason
from reptrack.session import ExerciseSession, FrameResult
from reptrack.vision.keypoints import KeypointFrame

logger = logging.getLogger(__name__)

# Returns None when no person was detected in the image.
PoseEstimator = Callable[[Any], Optional[KeypointFrame]]
FrameCallback = Callable[[KeypointFrame, FrameResult], None]


class SessionRunner:
    """Pulls images through an estimator and into a session.

    Args:
        session: Session receiving the keypoint frames.
        estimator: Callable mapping a source image to a keypoint frame.
        pace: Sleep between frames to hold ``session.config.frame_rate``.
        on_frame: Optional callback for each processed frame, typically a
            renderer drawing the overlay and count.
    """

    def __init__(
        self,
        session: ExerciseSession,
        estimator: PoseEstimator,
        *,
        pace: bool = False,
        on_frame: Optional[FrameCallback] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.session = session
        self.estimator = estimator
        self.pace = pace
        self.on_frame = on_frame
        self._clock = clock
        self._sleep = sleep
        self._running = False
        self._frames_seen = 0
        self.dropped = 0

    @property
    def config(self) -> SessionConfig:
        return self.session.config

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        self._running = True
        logger.info("Started %s session", self.session.exercise)

    def stop(self) -> None:
        if self._running:
            logger.info("Stopped %s session at %d reps", self.session.exercise, self.session.count)
        self._running = False

    def step(self, image: Any) -> FrameResult:
        """Estimate and process a single image."""
        if not self._running:
            raise SessionStoppedError("Runner is stopped; call start() first")

        frame_index = self._frames_seen
        self._frames_seen += 1
        try:
            frame = self.estimator(image)
        except Exception as exc:
            self.dropped += 1
            logger.warning("Pose estimation failed for frame %d: %s", frame_index, exc)
            return self.session.skip(frame_index, SkipReason.INFERENCE_FAILED)

        if frame is None:
            return self.session.skip(frame_index, SkipReason.MISSING_LANDMARK)

        result = self.session.process_frame(frame)
        if self.on_frame is not None:
            self.on_frame(frame, result)
        return result

    def run(self, images: Iterable[Any]) -> int:
        """Process ``images`` until exhausted or :meth:`stop` is called.

        Returns the number of images handed to the estimator.
        """
        if not self._running:
            self.start()

        processed = 0
        interval = self.config.frame_interval
        for image in images:
            if not self._running:
                break
            started = self._clock()
            self.step(image)
            processed += 1
            if self.pace:
                remaining = interval - (self._clock() - started)
                if remaining > 0:
                    self._sleep(remaining)
        return processed
