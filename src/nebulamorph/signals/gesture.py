"""
Gesture signal adapter.

Converts detected hand landmarks (21 normalized points per hand, as
produced by the usual hand-landmark models) into a ``GestureState``:

  - left hand  -> grip control: fist contracts, open palm explodes
  - right hand -> interaction: open palm = RAIN, anything else = TOUCH
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Sequence

import numpy as np

WRIST = 0
MIDDLE_TIP = 12
INDEX_TIP = 8

# (tip, base) landmark pairs for index, middle, ring and pinky
FINGERS = ((8, 5), (12, 9), (16, 13), (20, 17))

FIST_DISTANCE = 0.25
GRIP_PIVOT = 0.3
EXTENSION_RATIO = 1.1


class HandGesture(Enum):
    NONE = "NONE"
    TOUCH = "TOUCH"
    RAIN = "RAIN"


@dataclass(frozen=True)
class LeftHand:
    active: bool = False
    is_fist: bool = False   # True = contract, False = explode
    strength: float = 0.0   # grip strength or openness, [0, 1]


@dataclass(frozen=True)
class RightHand:
    active: bool = False
    x: float = 0.0          # [-1, 1]
    y: float = 0.0          # [-1, 1], up is positive
    gesture: HandGesture = HandGesture.NONE


@dataclass(frozen=True)
class GestureState:
    left_hand: LeftHand = field(default_factory=LeftHand)
    right_hand: RightHand = field(default_factory=RightHand)

    @classmethod
    def neutral(cls) -> "GestureState":
        return cls()


@dataclass
class DetectedHand:
    """One hand from the landmark detector."""

    handedness: str         # "Left" or "Right", from the person's view
    landmarks: np.ndarray   # (21, 2+) normalized image coordinates


def _distance(a: Sequence[float], b: Sequence[float]) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def read_left_hand(landmarks: np.ndarray) -> LeftHand:
    d = _distance(landmarks[WRIST], landmarks[MIDDLE_TIP])
    is_fist = d < FIST_DISTANCE
    if is_fist:
        strength = max(0.0, (GRIP_PIVOT - d) * 5.0)
    else:
        strength = min(1.0, (d - GRIP_PIVOT) * 2.0)
    return LeftHand(active=True, is_fist=is_fist, strength=min(1.0, max(0.0, strength)))


def _finger_extended(landmarks: np.ndarray, tip: int, base: int) -> bool:
    wrist = landmarks[WRIST]
    return _distance(landmarks[tip], wrist) > _distance(landmarks[base], wrist) * EXTENSION_RATIO


def read_right_hand(landmarks: np.ndarray) -> RightHand:
    tip = landmarks[INDEX_TIP]
    open_palm = all(_finger_extended(landmarks, t, b) for t, b in FINGERS)
    return RightHand(
        active=True,
        x=float((tip[0] - 0.5) * 2.0),
        y=float(-(tip[1] - 0.5) * 2.0),
        gesture=HandGesture.RAIN if open_palm else HandGesture.TOUCH,
    )


def classify_hands(hands: Iterable[DetectedHand]) -> GestureState:
    """Build a fresh gesture state from this frame's detections."""
    left = LeftHand()
    right = RightHand()
    for hand in hands:
        landmarks = np.asarray(hand.landmarks, dtype=np.float64)
        if landmarks.shape[0] < 21:
            continue
        if hand.handedness == "Left":
            left = read_left_hand(landmarks)
        elif hand.handedness == "Right":
            right = read_right_hand(landmarks)
    return GestureState(left_hand=left, right_hand=right)
