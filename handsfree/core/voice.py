"""
Voice command session: wake phrase detection, keyword matching and the
self-restarting listen loop.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

from ..utils.command_router import CommandRouter
from ..utils.config import Config, config
from .dispatcher import CommandDispatcher, CommandEvent
from .session import RecognitionSession

logger = logging.getLogger(__name__)

WAKE_PHRASES: Tuple[str, ...] = (
    "hey bank",
    "hello bank",
    "bank assistant",
    "hey banking",
    "hello banking",
)

FILLER_PREFIXES: Tuple[str, ...] = (
    "please",
    "can you",
    "could you",
    "i want to",
    "i need to",
    "help me",
)

LISTENING_PROMPT = "I'm listening. What would you like me to help you with?"
READY_PROMPT = "Voice banking is ready. Say hey bank followed by your command."

_FILLER_RE = re.compile(r"^(?:%s)\b" % "|".join(re.escape(f) for f in FILLER_PREFIXES))


class VoiceState(Enum):
    DORMANT = "dormant"
    AWAKE = "awake"


@dataclass(frozen=True)
class VoiceMatch:
    """Outcome of one final utterance."""

    command_text: str
    action: Optional[str]
    response_text: str
    urgent: bool = False
    wake_phrase: Optional[str] = None


def find_wake_phrase(text: str, phrases: Tuple[str, ...] = WAKE_PHRASES) -> Optional[str]:
    """Longest wake phrase contained in the text, so "hello banking" beats "hello bank"."""
    for phrase in sorted(phrases, key=len, reverse=True):
        if phrase in text:
            return phrase
    return None


def strip_fillers(text: str) -> str:
    """Remove leading filler words ("please", "can you", ...)."""
    text = text.strip()
    while True:
        stripped = _FILLER_RE.sub("", text, count=1).strip()
        if stripped == text:
            return text
        text = stripped


class VoiceUtteranceMatcher:
    """Dormant/Awake state machine over final transcripts.

    A wake phrase moves the matcher to Awake for a fixed window; every
    utterance handled while Awake pushes the deadline out again. Expiry is
    a deadline compared on each call, so there is no timer to cancel.
    """

    def __init__(self, dispatcher: CommandDispatcher,
                 router: Optional[CommandRouter] = None,
                 cfg: Config = config,
                 wake_phrases: Tuple[str, ...] = WAKE_PHRASES):
        self.dispatcher = dispatcher
        self.router = router or CommandRouter()
        self.wake_phrases = tuple(p.lower() for p in wake_phrases)
        self.window_s = cfg.WAKE_WINDOW_S
        self.settle_s = cfg.VOICE_SETTLE_S
        self.session = RecognitionSession()

    @property
    def state(self) -> VoiceState:
        return VoiceState.AWAKE if self.session.wake_active else VoiceState.DORMANT

    def reset(self) -> None:
        self.session = RecognitionSession(epoch=self.session.epoch + 1)

    def tick(self, now: float) -> None:
        s = self.session
        if s.wake_active and now >= s.wake_expiry:
            logger.info("😴 Wake window expired")
            s.wake_active = False

    def match(self, command_text: str, wake_phrase: Optional[str] = None) -> VoiceMatch:
        """Resolve command text without touching session state."""
        command = self.router.process_command(command_text)
        if command is None:
            return VoiceMatch(command_text, None, self.router.not_understood(command_text),
                              wake_phrase=wake_phrase)
        return VoiceMatch(command_text, command.action, command.response,
                          urgent=command.urgent, wake_phrase=wake_phrase)

    def process(self, transcript: str, now: float) -> Optional[VoiceMatch]:
        """Handle one final transcript. Returns None when it is ignored."""
        self.tick(now)
        s = self.session
        text = (transcript or "").lower().strip()
        if not text:
            return None

        wake = find_wake_phrase(text, self.wake_phrases)
        if wake is None and not s.wake_active:
            logger.debug(f"Dormant; ignored {text!r}")
            return None

        if not s.wake_active:
            logger.info(f"👂 Wake phrase heard: {wake}")
        s.wake_active = True
        s.wake_expiry = now + self.window_s

        command_text = text
        if wake is not None:
            command_text = strip_fillers(text.replace(wake, "", 1))

        if command_text:
            result = self.match(command_text, wake)
        elif wake is not None:
            result = VoiceMatch("", None, LISTENING_PROMPT, wake_phrase=wake)
        else:
            return None

        self._dispatch(result, now)
        return result

    def _dispatch(self, result: VoiceMatch, now: float) -> None:
        s = self.session
        epoch = s.epoch
        started = self.dispatcher.dispatch(
            result.action,
            result.response_text,
            now,
            self.settle_s,
            urgent=result.urgent,
            source="voice",
            is_current=lambda: self.session.epoch == epoch,
            on_settled=self._on_settled,
        )
        if started:
            s.dispatch_in_flight = True
            if result.action is not None:
                s.last_dispatched_action = result.action

    def _on_settled(self, event: Optional[CommandEvent]) -> None:
        self.session.dispatch_in_flight = False


class ListenerState(Enum):
    STOPPED = "stopped"
    LISTENING = "listening"
    RESTARTING = "restarting"
    FAILED = "failed"


# Engine errors that restarting cannot fix
FATAL_ERRORS = frozenset({"not-allowed", "service-not-allowed", "model-missing"})


class ListenerLoop:
    """Keeps a speech engine listening across end-of-stream and errors.

    End-of-stream schedules a quick restart. Errors back off exponentially
    and give up after too many in a row. Restarts are deadlines checked in
    ``tick``.
    """

    def __init__(self, start_engine: Callable[[], None], cfg: Config = config,
                 on_reset: Optional[Callable[[], None]] = None):
        self.start_engine = start_engine
        self.on_reset = on_reset
        self.restart_delay_s = cfg.LISTEN_RESTART_DELAY_S
        self.error_delay_s = cfg.LISTEN_ERROR_DELAY_S
        self.max_backoff_s = cfg.LISTEN_MAX_BACKOFF_S
        self.max_retries = cfg.LISTEN_MAX_RETRIES
        self.state = ListenerState.STOPPED
        self.consecutive_errors = 0
        self.restart_at: Optional[float] = None
        self.last_error: Optional[str] = None

    def start(self, now: float) -> bool:
        self.consecutive_errors = 0
        self.last_error = None
        return self._start_engine(now)

    def stop(self) -> None:
        self.state = ListenerState.STOPPED
        self.restart_at = None

    def on_result(self) -> None:
        self.consecutive_errors = 0

    def on_end(self, now: float) -> None:
        if self.state is not ListenerState.LISTENING:
            return
        self.state = ListenerState.RESTARTING
        self.restart_at = now + self.restart_delay_s

    def on_error(self, now: float, error: str) -> None:
        if self.state in (ListenerState.STOPPED, ListenerState.FAILED):
            return
        logger.warning(f"⚠️  Speech engine error: {error}")
        self.last_error = error
        if self.on_reset is not None:
            self.on_reset()

        self.consecutive_errors += 1
        if error in FATAL_ERRORS or self.consecutive_errors > self.max_retries:
            logger.error(f"❌ Speech listening stopped after error: {error}")
            self.state = ListenerState.FAILED
            self.restart_at = None
            return

        delay = self.error_delay_s * (2 ** (self.consecutive_errors - 1))
        self.state = ListenerState.RESTARTING
        self.restart_at = now + min(delay, self.max_backoff_s)

    def tick(self, now: float) -> None:
        if (self.state is ListenerState.RESTARTING and self.restart_at is not None
                and now >= self.restart_at):
            self.restart_at = None
            self._start_engine(now)

    def _start_engine(self, now: float) -> bool:
        try:
            self.start_engine()
        except Exception as e:
            logger.error(f"❌ Could not start speech engine: {e}", exc_info=True)
            self.state = ListenerState.LISTENING
            self.on_error(now, str(e))
            return False
        self.state = ListenerState.LISTENING
        return True
