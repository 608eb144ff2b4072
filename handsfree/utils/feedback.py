"""
Feedback collaborators that react to dispatched commands.
"""

import logging
import time
from typing import Callable, List, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

URGENT_PATTERN_MS = [200, 100, 200, 100, 200]
NORMAL_PATTERN_MS = [100, 50, 100]


@runtime_checkable
class FeedbackSink(Protocol):
    """Anything that consumes command events."""

    def on_command(self, action: Optional[str], response_text: str, urgent: bool) -> None:
        ...


def haptic_pattern(urgent: bool) -> List[int]:
    """Vibration pattern (on/off milliseconds) for a command."""
    return list(URGENT_PATTERN_MS if urgent else NORMAL_PATTERN_MS)


class HapticFeedback:
    """Selects a pulse pattern and hands it to an actuator."""

    def __init__(self, actuator: Optional[Callable[[List[int]], None]] = None):
        self.actuator = actuator or self._log_pattern
        self.last_pattern: List[int] = []

    @staticmethod
    def _log_pattern(pattern: List[int]) -> None:
        logger.info(f"📳 Haptic pulse: {pattern}")

    def on_command(self, action: Optional[str], response_text: str, urgent: bool) -> None:
        # Only recognized actions buzz
        if action is None:
            return
        self.last_pattern = haptic_pattern(urgent)
        self.actuator(self.last_pattern)


class SpeechFeedback:
    """Submits response text to a text-to-speech callable."""

    def __init__(self, speak: Optional[Callable[[str], None]] = None):
        self.speak = speak or (lambda text: logger.info(f"🔊 Say: {text}"))

    def on_command(self, action: Optional[str], response_text: str, urgent: bool) -> None:
        if response_text:
            self.speak(response_text)


class ResponseDisplay:
    """Holds the latest response for the overlay and clears it after a delay."""

    def __init__(self, clear_after_s: float = 5.0,
                 clock: Callable[[], float] = time.monotonic):
        self.clear_after_s = clear_after_s
        self.clock = clock
        self.text = ""
        self.urgent = False
        self._clear_at: Optional[float] = None

    def on_command(self, action: Optional[str], response_text: str, urgent: bool) -> None:
        self.text = response_text
        self.urgent = urgent
        self._clear_at = self.clock() + self.clear_after_s

    def tick(self, now: float) -> None:
        if self._clear_at is not None and now >= self._clear_at:
            self.text = ""
            self.urgent = False
            self._clear_at = None

    def clear(self) -> None:
        self.text = ""
        self.urgent = False
        self._clear_at = None
