"""
Rule-based gesture classification from finger features.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from .features import FeatureVector
from .landmarks import HandLandmarkIndex, Landmark


class GestureLabel(Enum):
    """Recognized static hand gestures."""

    NONE = "none"
    CLOSED_FIST = "closed_fist"
    ONE_FINGER = "one_finger"
    TWO_FINGERS = "two_fingers"
    THREE_FINGERS = "three_fingers"
    FOUR_FINGERS = "four_fingers"
    OPEN_PALM = "open_palm"
    THUMBS_UP = "thumbs_up"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


COUNT_LABELS = {
    0: GestureLabel.CLOSED_FIST,
    1: GestureLabel.ONE_FINGER,
    2: GestureLabel.TWO_FINGERS,
    3: GestureLabel.THREE_FINGERS,
    4: GestureLabel.FOUR_FINGERS,
    5: GestureLabel.OPEN_PALM,
}

DEFAULT_CONFIDENCE = {
    GestureLabel.THUMBS_UP: 0.92,
    GestureLabel.CLOSED_FIST: 0.9,
    GestureLabel.OPEN_PALM: 0.9,
    GestureLabel.ONE_FINGER: 0.8,
    GestureLabel.TWO_FINGERS: 0.8,
    GestureLabel.THREE_FINGERS: 0.8,
    GestureLabel.FOUR_FINGERS: 0.8,
}


@dataclass(frozen=True)
class GestureCandidate:
    label: GestureLabel
    confidence: float

    @classmethod
    def none(cls) -> "GestureCandidate":
        return cls(GestureLabel.NONE, 0.0)


class GestureClassifier:
    """Maps a FeatureVector to a GestureCandidate.

    First matching rule wins:

    1. one finger up with the thumb tip above the index and pinky PIP
       joints is a thumbs-up;
    2. otherwise the finger count picks the label;
    3. anything else is NONE.

    Confidences are fixed per rule, so the result is a pure function of
    the inputs.
    """

    def __init__(self, confidences: Optional[Dict[str, float]] = None):
        self.confidences = dict(DEFAULT_CONFIDENCE)
        for name, value in (confidences or {}).items():
            self.confidences[GestureLabel(name)] = float(value)

    def is_thumbs_up(self, landmark: Landmark) -> bool:
        thumb_tip_y = landmark[HandLandmarkIndex.THUMB_TIP].y
        return (thumb_tip_y < landmark[HandLandmarkIndex.INDEX_PIP].y
                and thumb_tip_y < landmark[HandLandmarkIndex.PINKY_PIP].y)

    def classify(self, features: FeatureVector,
                 landmark: Optional[Landmark]) -> GestureCandidate:
        if not features.hand_present or landmark is None:
            return GestureCandidate.none()

        if features.finger_count == 1 and self.is_thumbs_up(landmark):
            return GestureCandidate(GestureLabel.THUMBS_UP,
                                    self.confidences[GestureLabel.THUMBS_UP])

        label = COUNT_LABELS.get(features.finger_count)
        if label is None:
            return GestureCandidate.none()
        return GestureCandidate(label, self.confidences[label])
