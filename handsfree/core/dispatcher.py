"""
Single choke point that turns qualified recognitions into command events.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..utils.feedback import FeedbackSink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandEvent:
    """A dispatched command, ready for the feedback collaborators."""

    action: Optional[str]
    response_text: str
    triggered_at: float
    urgent: bool = False
    source: str = "gesture"


@dataclass
class _PendingDispatch:
    action: Optional[str]
    response_text: str
    urgent: bool
    source: str
    requested_at: float
    ready_at: float
    is_current: Optional[Callable[[], bool]]
    on_settled: Optional[Callable[[Optional[CommandEvent]], None]]


class CommandDispatcher:
    """Runs at most one dispatch at a time.

    A dispatch is a scheduled continuation: ``dispatch()`` records it and
    ``poll(now)`` completes it once the settle delay has passed. Callers keep
    processing frames in between; a second ``dispatch()`` while one is
    pending is dropped.
    """

    def __init__(self, sinks: Optional[List[FeedbackSink]] = None):
        self._sinks: List[FeedbackSink] = list(sinks or [])
        self._pending: Optional[_PendingDispatch] = None
        self.last_event: Optional[CommandEvent] = None

    @property
    def busy(self) -> bool:
        return self._pending is not None

    def dispatch(self, action: Optional[str], response_text: str, now: float,
                 settle_s: float, urgent: bool = False, source: str = "gesture",
                 is_current: Optional[Callable[[], bool]] = None,
                 on_settled: Optional[Callable[[Optional[CommandEvent]], None]] = None) -> bool:
        """Start a dispatch. Returns False, doing nothing, while busy."""
        if self._pending is not None:
            logger.debug(f"Dispatcher busy; dropped {source} action {action!r}")
            return False

        self._pending = _PendingDispatch(
            action=action,
            response_text=response_text,
            urgent=urgent,
            source=source,
            requested_at=now,
            ready_at=now + settle_s,
            is_current=is_current,
            on_settled=on_settled,
        )
        logger.info(f"⏳ Processing {source} command: {action or 'none'}")
        return True

    def poll(self, now: float) -> Optional[CommandEvent]:
        """Complete the pending dispatch if its settle delay has elapsed."""
        pending = self._pending
        if pending is None or now < pending.ready_at:
            return None

        self._pending = None
        if pending.is_current is not None and not pending.is_current():
            logger.info(f"🗑️  Discarded {pending.source} command after session reset")
            if pending.on_settled is not None:
                pending.on_settled(None)
            return None

        event = CommandEvent(
            action=pending.action,
            response_text=pending.response_text,
            triggered_at=pending.requested_at,
            urgent=pending.urgent,
            source=pending.source,
        )
        self.last_event = event
        if pending.on_settled is not None:
            pending.on_settled(event)
        self._deliver(event)
        return event

    def _deliver(self, event: CommandEvent) -> None:
        logger.info(f"✅ Command {event.action or 'none'}: {event.response_text}")
        for sink in self._sinks:
            try:
                sink.on_command(event.action, event.response_text, event.urgent)
            except Exception as e:
                logger.error(f"❌ Feedback sink {type(sink).__name__} failed: {e}", exc_info=True)
