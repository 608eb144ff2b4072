"""
Cross-frame recognition state and the gesture debouncer.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..utils.command_router import CommandRouter
from ..utils.config import Config, config
from .dispatcher import CommandDispatcher, CommandEvent
from .gestures import GestureCandidate, GestureLabel

logger = logging.getLogger(__name__)


class SessionState(Enum):
    IDLE = "idle"
    CANDIDATE = "candidate"
    DISPATCHED = "dispatched"


@dataclass
class RecognitionSession:
    """The only state that survives from one sample to the next.

    ``epoch`` changes whenever the session is reset, so a dispatch started
    before the reset can tell it no longer belongs to this session.
    """

    state: SessionState = SessionState.IDLE
    current_label: GestureLabel = GestureLabel.NONE
    current_confidence: float = 0.0
    last_dispatched_action: Optional[str] = None
    dispatch_in_flight: bool = False
    wake_active: bool = False
    wake_expiry: float = 0.0
    epoch: int = 0


def _round(value: float) -> float:
    return round(value, 4)


class GestureDebouncer:
    """Turns a per-frame stream of candidates into single dispatches.

    Idle -> Candidate once a labelled candidate reaches the detect
    threshold; Candidate -> Dispatched once the session confidence reaches
    the dispatch threshold and nothing is in flight. Holding the same label
    never fires again. Frames without a qualifying candidate decay the
    confidence until it falls under the release threshold.
    """

    def __init__(self, dispatcher: CommandDispatcher,
                 router: Optional[CommandRouter] = None,
                 cfg: Config = config):
        self.dispatcher = dispatcher
        self.router = router or CommandRouter()
        self.detect_threshold = cfg.DETECT_THRESHOLD
        self.dispatch_threshold = cfg.DISPATCH_THRESHOLD
        self.decay_step = cfg.DECAY_STEP
        self.release_threshold = cfg.RELEASE_THRESHOLD
        self.rise_step = cfg.CONFIDENCE_RISE_STEP
        self.settle_s = cfg.GESTURE_SETTLE_S
        self.session = RecognitionSession()

    @property
    def state(self) -> SessionState:
        return self.session.state

    def reset(self) -> None:
        """Return to the initial Idle session; in-flight results are discarded."""
        self.session = RecognitionSession(epoch=self.session.epoch + 1)

    def update(self, candidate: GestureCandidate, now: float,
               hand_present: bool = True) -> SessionState:
        s = self.session
        if not hand_present:
            self._release()
            return s.state

        if (candidate.label is not GestureLabel.NONE
                and candidate.confidence >= self.detect_threshold):
            if candidate.label is not s.current_label:
                if s.current_label is not GestureLabel.NONE:
                    logger.debug(f"Gesture changed {s.current_label.value} -> {candidate.label.value}")
                s.current_label = candidate.label
                s.current_confidence = _round(candidate.confidence)
                s.state = SessionState.CANDIDATE
            else:
                risen = min(1.0, s.current_confidence + self.rise_step)
                s.current_confidence = _round(max(candidate.confidence, risen))

            if (s.state is SessionState.CANDIDATE
                    and s.current_confidence >= self.dispatch_threshold):
                self._try_dispatch(now)
            return s.state

        if s.current_label is GestureLabel.NONE:
            return s.state
        s.current_confidence = _round(max(0.0, s.current_confidence - self.decay_step))
        if s.current_confidence < self.release_threshold:
            self._release()
        return s.state

    def _release(self) -> None:
        s = self.session
        if s.state is not SessionState.IDLE:
            logger.debug(f"Released gesture {s.current_label.value}")
        s.state = SessionState.IDLE
        s.current_label = GestureLabel.NONE
        s.current_confidence = 0.0

    def _try_dispatch(self, now: float) -> None:
        s = self.session
        if s.dispatch_in_flight or self.dispatcher.busy:
            return

        command = self.router.for_gesture(s.current_label)
        if command is None:
            return

        epoch = s.epoch
        started = self.dispatcher.dispatch(
            command.action,
            command.response,
            now,
            self.settle_s,
            urgent=command.urgent,
            source="gesture",
            is_current=lambda: self.session.epoch == epoch,
            on_settled=self._on_settled,
        )
        if started:
            logger.info(f"👋 Gesture {s.current_label.display_name} -> {command.action} "
                        f"({s.current_confidence:.2f})")
            s.state = SessionState.DISPATCHED
            s.dispatch_in_flight = True
            s.last_dispatched_action = command.action

    def _on_settled(self, event: Optional[CommandEvent]) -> None:
        self.session.dispatch_in_flight = False
