"""
Utility modules for HandsFree banking.

Contains configuration management, command routing and feedback sinks.
"""

from .config import Config
from .command_router import CommandRouter
from .feedback import HapticFeedback, ResponseDisplay, SpeechFeedback

__all__ = ["Config", "CommandRouter", "HapticFeedback", "ResponseDisplay", "SpeechFeedback"]
