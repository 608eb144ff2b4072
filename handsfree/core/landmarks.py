"""
Hand landmark types shared by the gesture pipeline.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

LANDMARK_COUNT = 21


class HandLandmarkIndex:
    """MediaPipe hand landmark indices (21 per hand)."""

    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


# (tip, pip) pairs for index, middle, ring, pinky
FINGER_JOINTS: Tuple[Tuple[int, int], ...] = (
    (HandLandmarkIndex.INDEX_TIP, HandLandmarkIndex.INDEX_PIP),
    (HandLandmarkIndex.MIDDLE_TIP, HandLandmarkIndex.MIDDLE_PIP),
    (HandLandmarkIndex.RING_TIP, HandLandmarkIndex.RING_PIP),
    (HandLandmarkIndex.PINKY_TIP, HandLandmarkIndex.PINKY_PIP),
)


class Handedness(Enum):
    """Anatomical hand side, independent of camera mirroring."""

    LEFT = "Left"
    RIGHT = "Right"

    @classmethod
    def parse(cls, label: Optional[str]) -> Optional["Handedness"]:
        if not label:
            return None
        for member in cls:
            if member.value.lower() == label.strip().lower():
                return member
        return None

    def opposite(self) -> "Handedness":
        return Handedness.LEFT if self is Handedness.RIGHT else Handedness.RIGHT


@dataclass(frozen=True)
class Point:
    """Normalized landmark position; x and y in [0, 1], origin top-left."""

    x: float
    y: float
    z: float = 0.0


Landmark = Tuple[Point, ...]


def make_landmark(points: Optional[Sequence]) -> Optional[Landmark]:
    """Build a 21-point Landmark from points or (x, y[, z]) tuples.

    Anything other than exactly 21 points gives None, which callers treat
    as a no-hand frame.
    """
    if points is None or len(points) != LANDMARK_COUNT:
        return None
    result = []
    for p in points:
        if isinstance(p, Point):
            result.append(p)
        else:
            result.append(Point(*p))
    return tuple(result)


@dataclass(frozen=True)
class FrameSample:
    """One video frame's worth of hand-tracking output."""

    timestamp: float
    landmark: Optional[Landmark] = None
    handedness: Optional[Handedness] = None

    @property
    def has_hand(self) -> bool:
        return self.landmark is not None and len(self.landmark) == LANDMARK_COUNT


def sample_from_results(results, timestamp: float, mirrored: bool) -> FrameSample:
    """Convert MediaPipe Hands results into a FrameSample.

    Only the first detected hand is used. MediaPipe labels handedness as if
    the input image were mirrored, so the label is swapped for unmirrored
    input to recover the anatomical side.
    """
    if results is None or not getattr(results, "multi_hand_landmarks", None):
        return FrameSample(timestamp=timestamp)

    hand_landmarks = results.multi_hand_landmarks[0]
    landmark = make_landmark(
        [(lm.x, lm.y, getattr(lm, "z", 0.0)) for lm in hand_landmarks.landmark]
    )

    handedness = None
    multi_handedness = getattr(results, "multi_handedness", None)
    if multi_handedness:
        handedness = Handedness.parse(multi_handedness[0].classification[0].label)
        if handedness is not None and not mirrored:
            handedness = handedness.opposite()

    return FrameSample(timestamp=timestamp, landmark=landmark, handedness=handedness)
