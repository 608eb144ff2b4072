"""
Push-style entry points for the two sensing modalities.
"""

import logging
from typing import Callable, Optional

from ..utils.command_router import CommandRouter
from ..utils.config import Config, config
from .dispatcher import CommandDispatcher
from .features import FeatureExtractor, FeatureVector
from .gestures import GestureCandidate, GestureClassifier
from .landmarks import FrameSample, Handedness
from .session import GestureDebouncer, SessionState
from .voice import ListenerLoop, VoiceMatch, VoiceState, VoiceUtteranceMatcher

logger = logging.getLogger(__name__)


class GesturePipeline:
    """FrameSample -> features -> candidate -> debouncer -> dispatcher."""

    def __init__(self, dispatcher: CommandDispatcher,
                 router: Optional[CommandRouter] = None,
                 cfg: Config = config,
                 model_ready: bool = True):
        self.dispatcher = dispatcher
        self.model_ready = model_ready
        self.extractor = FeatureExtractor(
            mirrored=cfg.MIRRORED,
            default_handedness=Handedness.parse(cfg.DEFAULT_HANDEDNESS) or Handedness.RIGHT,
        )
        self.classifier = GestureClassifier(cfg.GESTURE_CONFIDENCE)
        self.debouncer = GestureDebouncer(dispatcher, router, cfg)
        self.running = False
        self.last_features: FeatureVector = FeatureVector.no_hand()
        self.last_candidate: GestureCandidate = GestureCandidate.none()

    @property
    def state(self) -> SessionState:
        return self.debouncer.state

    @property
    def session(self):
        return self.debouncer.session

    def start(self) -> bool:
        if not self.model_ready:
            logger.warning("⚠️  Hand landmark model not ready; gesture input disabled")
            return False
        self.running = True
        logger.info("✋ Gesture recognition started")
        return True

    def stop(self) -> None:
        self.running = False
        self.debouncer.reset()
        self.last_features = FeatureVector.no_hand()
        self.last_candidate = GestureCandidate.none()
        logger.info("✋ Gesture recognition stopped")

    def on_frame(self, sample: FrameSample) -> Optional[GestureCandidate]:
        """Process one frame. Returns the frame's candidate, or None if stopped."""
        if not self.running:
            return None

        self.dispatcher.poll(sample.timestamp)
        features = self.extractor.extract(sample.landmark, sample.handedness)
        candidate = self.classifier.classify(features, sample.landmark)
        self.debouncer.update(candidate, sample.timestamp, hand_present=features.hand_present)

        self.last_features = features
        self.last_candidate = candidate
        return candidate

    def on_engine_error(self, error: str) -> None:
        """Tracker failed mid-stream; drop back to Idle and keep running."""
        logger.warning(f"⚠️  Hand tracker error: {error}")
        self.debouncer.reset()
        self.last_features = FeatureVector.no_hand()
        self.last_candidate = GestureCandidate.none()


class VoicePipeline:
    """Transcript stream -> wake/keyword matcher -> dispatcher."""

    def __init__(self, dispatcher: CommandDispatcher,
                 router: Optional[CommandRouter] = None,
                 cfg: Config = config,
                 speech_supported: bool = True,
                 start_engine: Optional[Callable[[], None]] = None):
        self.dispatcher = dispatcher
        self.speech_supported = speech_supported
        self.matcher = VoiceUtteranceMatcher(dispatcher, router, cfg)
        self.listener = ListenerLoop(start_engine or (lambda: None), cfg,
                                     on_reset=self.matcher.reset)
        self.running = False
        self.raw_transcript = ""

    @property
    def state(self) -> VoiceState:
        return self.matcher.state

    def start(self, now: float) -> bool:
        if not self.speech_supported:
            logger.warning("⚠️  Speech recognition not supported; voice input disabled")
            return False
        self.running = True
        logger.info("🎙️  Voice recognition started")
        return self.listener.start(now)

    def stop(self) -> None:
        self.running = False
        self.listener.stop()
        self.matcher.reset()
        self.raw_transcript = ""
        logger.info("🎙️  Voice recognition stopped")

    def on_transcript(self, text: str, is_final: bool, now: float) -> Optional[VoiceMatch]:
        """Interim text only updates ``raw_transcript``; final text is matched."""
        if not self.running:
            return None

        self.dispatcher.poll(now)
        self.raw_transcript = (text or "").lower().strip()
        if not is_final:
            return None

        self.listener.on_result()
        return self.matcher.process(text, now)

    def on_engine_end(self, now: float) -> None:
        if self.running:
            self.listener.on_end(now)

    def on_engine_error(self, now: float, error: str) -> None:
        if self.running:
            self.listener.on_error(now, error)

    def tick(self, now: float) -> None:
        if not self.running:
            return
        self.dispatcher.poll(now)
        self.matcher.tick(now)
        self.listener.tick(now)
