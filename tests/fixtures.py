"""
Synthetic hand poses and helpers shared by the test suites.

Poses are drawn as a hand held palm towards the camera. The reference
geometry is a right hand in an unmirrored frame, where the thumb sits on
the image's right (larger x). A left hand, or a mirrored frame, is the
same drawing flipped horizontally.
"""

from handsfree.core.landmarks import FrameSample, Handedness, Point

WRIST = (0.50, 0.85)

THUMB_OUT = ((0.58, 0.80), (0.64, 0.72), (0.69, 0.65), (0.74, 0.59))
# Tip folded back across the palm
THUMB_TUCKED = ((0.58, 0.80), (0.63, 0.73), (0.66, 0.66), (0.60, 0.64))
# Fist turned with the thumb pointing at the ceiling
THUMB_RAISED = ((0.58, 0.72), (0.62, 0.58), (0.63, 0.46), (0.65, 0.34))

# (mcp, pip, dip, tip) for index, middle, ring, pinky
FINGERS_UP = (
    ((0.58, 0.55), (0.60, 0.42), (0.61, 0.34), (0.62, 0.27)),
    ((0.50, 0.53), (0.50, 0.39), (0.50, 0.30), (0.50, 0.22)),
    ((0.43, 0.55), (0.41, 0.42), (0.40, 0.34), (0.39, 0.27)),
    ((0.36, 0.60), (0.33, 0.50), (0.31, 0.44), (0.30, 0.38)),
)


def _curled(mcp):
    x, y = mcp
    return (mcp, (x, y - 0.06), (x, y - 0.02), (x, y + 0.03))


def hand(index=False, middle=False, ring=False, pinky=False, thumb="tucked",
         handedness=Handedness.RIGHT, mirrored=True):
    """Build a 21-point landmark for a palm-facing hand.

    ``thumb`` is "out", "tucked" or "raised". The defaults match the
    selfie view the app runs in.
    """
    thumb_joints = {"out": THUMB_OUT, "tucked": THUMB_TUCKED, "raised": THUMB_RAISED}[thumb]
    coords = [WRIST, *thumb_joints]
    for joints, up in zip(FINGERS_UP, (index, middle, ring, pinky)):
        coords.extend(joints if up else _curled(joints[0]))

    flip = (handedness is Handedness.LEFT) != mirrored
    points = tuple(Point(round(1.0 - x, 4) if flip else x, y) for x, y in coords)
    return points


def open_palm(**view):
    return hand(True, True, True, True, thumb="out", **view)


def closed_fist(**view):
    return hand(**view)


def one_finger(**view):
    return hand(index=True, **view)


def thumbs_up(**view):
    return hand(thumb="raised", **view)


def frame(timestamp, landmark=None, handedness=Handedness.RIGHT):
    if landmark is None:
        return FrameSample(timestamp=timestamp)
    return FrameSample(timestamp=timestamp, landmark=landmark, handedness=handedness)


class RecordingSink:
    """Feedback sink that remembers every command it receives."""

    def __init__(self):
        self.commands = []

    def on_command(self, action, response_text, urgent):
        self.commands.append((action, response_text, urgent))

    @property
    def actions(self):
        return [c[0] for c in self.commands]
