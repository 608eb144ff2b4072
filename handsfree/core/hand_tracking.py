"""
Hand landmark tracking for HandsFree banking using MediaPipe.
"""

import cv2
import logging
from typing import Optional

from ..utils.config import Config, config
from .landmarks import FrameSample, sample_from_results

logger = logging.getLogger(__name__)


class HandTracker:
    """Wraps MediaPipe Hands and emits one FrameSample per video frame."""

    def __init__(self, cfg: Config = config):
        self.cfg = cfg
        self.mirrored = cfg.MIRRORED
        self.mp_hands = None
        self.hands = None
        self.mp_drawing = None
        self._last_results = None
        self.model_ready = self._initialize_mediapipe()

    def _initialize_mediapipe(self) -> bool:
        """Initialize MediaPipe hands detection."""
        try:
            import mediapipe as mp
            self.mp_hands = mp.solutions.hands
            self.hands = self.mp_hands.Hands(
                static_image_mode=False,
                max_num_hands=self.cfg.MAX_NUM_HANDS,
                min_detection_confidence=self.cfg.MIN_DETECTION_CONFIDENCE,
                min_tracking_confidence=self.cfg.MIN_TRACKING_CONFIDENCE,
            )
            self.mp_drawing = mp.solutions.drawing_utils
            logger.info("✓ MediaPipe hands initialized")
            return True
        except ImportError:
            logger.warning("MediaPipe not available. Hand detection disabled.")
            return False
        except Exception as e:
            logger.error(f"Failed to initialize MediaPipe: {e}")
            return False

    def process(self, frame, timestamp: float) -> FrameSample:
        """Detect the hand in a BGR frame.

        Raises whatever MediaPipe raises; the caller treats that as a
        runtime tracker error.
        """
        if self.hands is None:
            return FrameSample(timestamp=timestamp)

        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        results = self.hands.process(rgb_frame)
        self._last_results = results
        return sample_from_results(results, timestamp, self.mirrored)

    def draw(self, frame) -> None:
        """Draw the last detected hand's landmarks on the frame."""
        results = self._last_results
        if results is None or self.mp_drawing is None:
            return
        if not results.multi_hand_landmarks:
            return
        for hand_landmarks in results.multi_hand_landmarks:
            self.mp_drawing.draw_landmarks(
                frame,
                hand_landmarks,
                self.mp_hands.HAND_CONNECTIONS,
                self.mp_drawing.DrawingSpec(color=(0, 255, 0), thickness=2, circle_radius=2),
                self.mp_drawing.DrawingSpec(color=(0, 0, 255), thickness=2),
            )

    def close(self) -> None:
        if self.hands is not None:
            self.hands.close()
            self.hands = None
