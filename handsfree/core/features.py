"""
Per-finger extended/flexed features derived from hand landmarks.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .landmarks import (
    FINGER_JOINTS,
    LANDMARK_COUNT,
    HandLandmarkIndex,
    Handedness,
    Landmark,
)

FINGER_NAMES = ("thumb", "index", "middle", "ring", "pinky")


@dataclass(frozen=True)
class FeatureVector:
    """Extended state for thumb, index, middle, ring, pinky."""

    finger_extended: Tuple[bool, bool, bool, bool, bool]
    finger_count: int
    hand_present: bool = True

    @classmethod
    def no_hand(cls) -> "FeatureVector":
        return cls((False,) * 5, 0, hand_present=False)

    def as_dict(self) -> dict:
        return dict(zip(FINGER_NAMES, self.finger_extended))


class FeatureExtractor:
    """Turns a 21-point landmark into a FeatureVector.

    The thumb direction depends on the anatomical hand and on whether the
    camera view is mirrored. Both are fixed when the extractor is created
    and never guessed per frame.
    """

    def __init__(self, mirrored: bool = True,
                 default_handedness: Handedness = Handedness.RIGHT):
        self.mirrored = mirrored
        self.default_handedness = default_handedness

    def thumb_points_left(self, handedness: Optional[Handedness]) -> bool:
        """True when an extended thumb lies at smaller x than its IP joint.

        Palm facing the camera, a right hand seen unmirrored has its thumb
        on the image's right side (larger x). Mirroring or a left hand
        flips that.
        """
        hand = handedness or self.default_handedness
        return (hand is Handedness.LEFT) != self.mirrored

    def extract(self, landmark: Optional[Landmark],
                handedness: Optional[Handedness] = None) -> FeatureVector:
        if landmark is None or len(landmark) != LANDMARK_COUNT:
            return FeatureVector.no_hand()

        tip = landmark[HandLandmarkIndex.THUMB_TIP]
        ip = landmark[HandLandmarkIndex.THUMB_IP]
        if self.thumb_points_left(handedness):
            thumb = tip.x < ip.x
        else:
            thumb = tip.x > ip.x

        # Image origin is top-left, so a raised fingertip has the smaller y
        others = [landmark[t].y < landmark[p].y for t, p in FINGER_JOINTS]

        extended = (thumb, *others)
        return FeatureVector(extended, sum(extended))
