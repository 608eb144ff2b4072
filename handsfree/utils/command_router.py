"""
Command table and keyword routing for HandsFree banking.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from ..core.gestures import GestureLabel

NOT_UNDERSTOOD = (
    'I heard "{text}" but didn\'t understand. '
    "Try saying: balance, transactions, transfer, bills, or help."
)


@dataclass(frozen=True)
class CommandDefinition:
    """Static mapping from a gesture or spoken keywords to an action."""

    action: str
    description: str
    response: str
    gestures: Tuple[GestureLabel, ...] = ()
    keywords: Tuple[str, ...] = ()
    phrases: Tuple[str, ...] = ()
    urgent: bool = False


COMMANDS: Tuple[CommandDefinition, ...] = (
    CommandDefinition(
        action="balance",
        description="Show account balance",
        response="Your current balance is $2,847.32",
        gestures=(GestureLabel.OPEN_PALM,),
        keywords=("balance", "money"),
        phrases=("check balance", "show balance", "account balance", "balance", "money"),
    ),
    CommandDefinition(
        action="transactions",
        description="Recent transactions",
        response="Your last transaction was a $45.67 payment to Metro Grocery on December 20th",
        gestures=(GestureLabel.ONE_FINGER,),
        keywords=("transaction", "history"),
        phrases=("recent transactions", "transactions", "history"),
    ),
    CommandDefinition(
        action="transfer",
        description="Transfer money",
        response="I can help you transfer money. Please specify the amount and recipient.",
        gestures=(GestureLabel.TWO_FINGERS,),
        keywords=("transfer", "send"),
        phrases=("transfer money", "transfer", "send money"),
    ),
    CommandDefinition(
        action="bills",
        description="Pending bills",
        response="You have 2 pending bills: Electric bill $89.45 and Internet $59.99",
        keywords=("bill", "pay"),
        phrases=("pay bills", "bills"),
    ),
    CommandDefinition(
        action="help",
        description="Help menu",
        response=("I can help you with: check balance, recent transactions, "
                  "transfer money, pay bills, or emergency lock."),
        gestures=(GestureLabel.THREE_FINGERS,),
        keywords=("help", "what can you do"),
        phrases=("help",),
    ),
    CommandDefinition(
        action="emergency",
        description="Emergency lock account",
        response="Emergency lock activated! Your account has been secured immediately.",
        gestures=(GestureLabel.CLOSED_FIST,),
        keywords=("emergency", "lock"),
        phrases=("emergency lock", "lock account", "emergency"),
        urgent=True,
    ),
    CommandDefinition(
        action="confirm",
        description="Confirm action",
        response="Action confirmed successfully!",
        gestures=(GestureLabel.THUMBS_UP,),
    ),
)


class CommandRouter:
    """Resolves gestures and command text to CommandDefinitions."""

    def __init__(self, commands: Iterable[CommandDefinition] = COMMANDS):
        self._commands: Tuple[CommandDefinition, ...] = tuple(commands)
        self._by_gesture: Dict[GestureLabel, CommandDefinition] = {}
        for command in self._commands:
            for gesture in command.gestures:
                self._by_gesture[gesture] = command

    def for_gesture(self, label: GestureLabel) -> Optional[CommandDefinition]:
        """Get the command bound to a gesture, if any."""
        return self._by_gesture.get(label)

    def match_keywords(self, text: str) -> Optional[CommandDefinition]:
        """Check keyword categories in table order; first hit wins."""
        for command in self._commands:
            if any(keyword in text for keyword in command.keywords):
                return command
        return None

    def match_phrase(self, text: str) -> Optional[CommandDefinition]:
        """Bidirectional substring match against the literal phrase table."""
        for command in self._commands:
            for phrase in command.phrases:
                if phrase in text or text in phrase:
                    return command
        return None

    def process_command(self, recognized_text: str) -> Optional[CommandDefinition]:
        """Resolve command text to a CommandDefinition, or None."""
        text = (recognized_text or "").lower().strip()
        if not text:
            return None
        return self.match_keywords(text) or self.match_phrase(text)

    def not_understood(self, recognized_text: str) -> str:
        return NOT_UNDERSTOOD.format(text=recognized_text.lower().strip())

    def gesture_menu(self) -> List[Tuple[str, str]]:
        """(gesture name, description) pairs for on-screen help."""
        return [
            (gesture.display_name, command.description)
            for command in self._commands
            for gesture in command.gestures
        ]
