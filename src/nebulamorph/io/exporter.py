"""
Control-signal serialization module.

Exports the per-frame ControlSignals of an offline session to JSON or
NumPy archives so a renderer can replay the animation without running
the controller itself.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Union

import numpy as np

from nebulamorph.core.colors import rgb_to_hex
from nebulamorph.core.controller import ControlSignals

if TYPE_CHECKING:
    from nebulamorph.pipeline import SessionResult


# Per-frame float series written to both JSON frames and npz archives
_SCALAR_FIELDS = (
    "time",
    "beat",
    "treble",
    "warp",
    "shrink",
    "hand_grip",
    "rain_state",
    "size",
    "brightness",
    "bloom_intensity",
)


@dataclass
class ManifestMetadata:
    """Metadata header for the control-signal manifest."""

    fps: int
    duration: float
    n_frames: int
    capacity: int
    initial_shape: str
    version: str = "1.0"


class SignalExporter:
    """Exports session control signals to JSON manifest or npz format."""

    def __init__(self, precision: int = 4):
        """
        Args:
            precision: Decimal places for floating point values.
        """
        self.precision = precision

    def _round(self, value: float) -> float:
        return round(float(value), self.precision)

    def _build_frame(self, index: int, signals: ControlSignals) -> dict[str, Any]:
        frame = {
            "frame_index": index,
            "shape": signals.shape.value,
            "shape_mode": int(signals.shape_mode),
            "shape_switched": bool(signals.shape_switched),
            "touch_active": bool(signals.touch_active),
            "touch_point": [self._round(v) for v in signals.touch_point],
            "visible_count": int(signals.visible_count),
            "colors": [rgb_to_hex(c) for c in signals.colors],
        }
        for name in _SCALAR_FIELDS:
            frame[name] = self._round(getattr(signals, name))
        return frame

    def build_manifest(self, result: "SessionResult") -> dict[str, Any]:
        """
        Build the complete manifest dictionary.

        Args:
            result: Output of SessionRunner.run.

        Returns:
            Manifest dictionary ready for serialization.
        """
        initial = result.signals[0].shape.value if result.signals else ""
        metadata = ManifestMetadata(
            fps=result.fps,
            duration=self._round(result.duration),
            n_frames=result.n_frames,
            capacity=int(result.final_positions.shape[0]),
            initial_shape=initial,
        )

        return {
            "metadata": {
                "fps": metadata.fps,
                "duration": metadata.duration,
                "n_frames": metadata.n_frames,
                "capacity": metadata.capacity,
                "initial_shape": metadata.initial_shape,
                "version": metadata.version,
            },
            "frames": [self._build_frame(i, s) for i, s in enumerate(result.signals)],
        }

    def export_json(
        self,
        result: "SessionResult",
        output_path: Union[str, Path],
        indent: int = 2,
    ) -> Path:
        """Write the manifest to a JSON file and return its path."""
        manifest = self.build_manifest(result)
        output_path = Path(output_path)

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(manifest, f, indent=indent)

        return output_path

    def export_numpy(
        self,
        result: "SessionResult",
        output_path: Union[str, Path],
    ) -> Path:
        """
        Export per-frame series and final positions as a .npz archive.

        Shapes are stored as their string values; colors as an
        (n_frames, 3, 3) float array.
        """
        output_path = Path(output_path)
        signals = result.signals
        n = len(signals)

        series = {
            name: np.array([getattr(s, name) for s in signals], dtype=np.float32)
            for name in _SCALAR_FIELDS
        }
        colors = (
            np.stack([s.colors for s in signals]).astype(np.float32)
            if n else np.zeros((0, 3, 3), dtype=np.float32)
        )

        np.savez_compressed(
            output_path,
            shape=np.array([s.shape.value for s in signals], dtype=str),
            shape_mode=np.array([int(s.shape_mode) for s in signals], dtype=np.int8),
            shape_switched=np.array([s.shape_switched for s in signals], dtype=bool),
            touch_active=np.array([s.touch_active for s in signals], dtype=bool),
            touch_point=np.array([s.touch_point for s in signals], dtype=np.float32).reshape(n, 2),
            visible_count=np.array([s.visible_count for s in signals], dtype=np.int32),
            colors=colors,
            final_positions=result.final_positions,
            fps=result.fps,
            duration=result.duration,
            n_frames=n,
            **series,
        )

        return output_path
