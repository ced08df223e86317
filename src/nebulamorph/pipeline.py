"""
Offline session driver.

Plays an audio file through the analyser and animation controller at a
fixed frame rate, the way a live session would, and collects every
frame's control signals for export.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Union

import librosa
import numpy as np

from nebulamorph.config import PARTICLE_CAPACITY, VisualConfig, VisualSettings
from nebulamorph.core.controller import AnimationController, ControlSignals
from nebulamorph.core.particles import ParticlePool
from nebulamorph.io.exporter import SignalExporter
from nebulamorph.signals.audio import SpectrumAnalyser
from nebulamorph.signals.gesture import GestureState

logger = logging.getLogger(__name__)

GestureSource = Callable[[int], GestureState]


@dataclass
class SessionResult:
    """Collected output of one offline session."""

    signals: list[ControlSignals]
    final_positions: np.ndarray
    duration: float
    fps: int

    @property
    def n_frames(self) -> int:
        return len(self.signals)


class SessionRunner:
    """
    Audio-file-to-control-signals driver.

    Each frame takes the most recent ``fft_size`` samples ending at that
    frame's playback position, so the analyser sees the same sliding
    window a live analyser node would.
    """

    def __init__(
        self,
        fps: int = 60,
        sample_rate: int = 22050,
        capacity: int = PARTICLE_CAPACITY,
        settings: VisualSettings | None = None,
        seed: int | None = None,
    ):
        """
        Args:
            fps: Frames per second of the simulated render loop.
            sample_rate: Audio sample rate for loading.
            capacity: Particle pool size.
            settings: User visual settings.
            seed: Seed for pool attributes and controller randomness.
        """
        if fps <= 0:
            raise ValueError(f"fps must be positive, got {fps}")
        self.fps = fps
        self.sample_rate = sample_rate
        self.capacity = capacity
        self.settings = settings
        self.seed = seed
        self.exporter = SignalExporter()

    def load(
        self,
        audio_path: Union[str, Path],
        max_duration: float | None = None,
    ) -> tuple[np.ndarray, int]:
        y, sr = librosa.load(audio_path, sr=self.sample_rate, mono=True, duration=max_duration)
        return y, sr

    def run_signal(
        self,
        y: np.ndarray,
        sr: int,
        config: VisualConfig | None = None,
        gestures: GestureSource | None = None,
    ) -> SessionResult:
        """
        Drive the controller over an in-memory mono signal.

        Args:
            y: Mono audio samples.
            sr: Sample rate of ``y``.
            config: Visual config to start from; defaults apply when None.
            gestures: Optional frame index -> GestureState callable.

        Returns:
            SessionResult with one ControlSignals per frame.
        """
        y = np.asarray(y, dtype=np.float32).reshape(-1)
        duration = len(y) / float(sr) if sr else 0.0
        hop = sr / float(self.fps)
        n_frames = int(np.floor(len(y) / hop)) if hop > 0 else 0

        pool = ParticlePool(self.capacity, seed=self.seed)
        controller = AnimationController(
            pool,
            config=config,
            settings=self.settings,
            seed=self.seed,
        )
        analyser = SpectrumAnalyser()
        delta = 1.0 / self.fps

        logger.info(
            "Running %d frames at %d fps (%.2fs, %d particles)",
            n_frames, self.fps, duration, pool.capacity,
        )

        signals = []
        for i in range(n_frames):
            end = int(round((i + 1) * hop))
            block = y[max(0, end - analyser.fft_size):end]
            audio = analyser.frame(block)
            gesture = gestures(i) if gestures is not None else None
            frame_signals = controller.step(delta, audio=audio, gesture=gesture, is_playing=True)
            if frame_signals.shape_switched:
                logger.debug("Frame %d: shape -> %s", i, frame_signals.shape.value)
            signals.append(frame_signals)

        return SessionResult(
            signals=signals,
            final_positions=pool.positions.copy(),
            duration=duration,
            fps=self.fps,
        )

    def run(
        self,
        audio_path: Union[str, Path],
        config: VisualConfig | None = None,
        gestures: GestureSource | None = None,
        max_duration: float | None = None,
    ) -> SessionResult:
        """
        Load an audio file and run a full session over it.

        Args:
            audio_path: Path to input audio file.
            config: Starting visual config.
            gestures: Optional frame index -> GestureState callable.
            max_duration: Only the first ``max_duration`` seconds are played.
        """
        y, sr = self.load(audio_path, max_duration=max_duration)
        return self.run_signal(y, sr, config=config, gestures=gestures)

    def export(
        self,
        result: SessionResult,
        output_path: Union[str, Path],
        format: str = "json",
    ) -> Path:
        """Write a session to disk as "json" or "numpy"."""
        if format == "numpy":
            return self.exporter.export_numpy(result, output_path)
        return self.exporter.export_json(result, output_path)

    def process(
        self,
        audio_path: Union[str, Path],
        output_path: Union[str, Path] | None = None,
        config: VisualConfig | None = None,
        format: str = "json",
        max_duration: float | None = None,
    ) -> dict[str, Any]:
        """
        Run a session and optionally export it.

        Returns:
            Dictionary with the manifest and processing info.
        """
        result = self.run(audio_path, config=config, max_duration=max_duration)
        switches = sum(1 for s in result.signals if s.shape_switched)

        info = {
            "manifest": self.exporter.build_manifest(result),
            "duration": result.duration,
            "n_frames": result.n_frames,
            "fps": self.fps,
            "switches": switches,
        }

        if output_path:
            written = self.export(result, output_path, format)
            info["output_path"] = str(written)

        return info
