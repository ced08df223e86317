"""Input adapters: audio spectrum, hand gestures, latest-value slots."""

from nebulamorph.signals.audio import AudioFrame, SpectrumAnalyser, audio_frame, treble_level
from nebulamorph.signals.gesture import (
    DetectedHand,
    GestureState,
    HandGesture,
    LeftHand,
    RightHand,
    classify_hands,
)
from nebulamorph.signals.snapshot import LatestSnapshot

__all__ = [
    "AudioFrame",
    "SpectrumAnalyser",
    "audio_frame",
    "treble_level",
    "DetectedHand",
    "GestureState",
    "HandGesture",
    "LeftHand",
    "RightHand",
    "classify_hands",
    "LatestSnapshot",
]
