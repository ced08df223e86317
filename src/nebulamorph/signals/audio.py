"""
Audio signal adapter.

Turns raw PCM blocks into the per-frame ``AudioFrame`` the controller
consumes: a byte spectrum (0-255 per bin) and an average loudness in
[0, 1]. ``SpectrumAnalyser`` reproduces the browser analyser-node
pipeline: Blackman window, FFT magnitude, temporal smoothing, then a dB
range mapped onto bytes.
"""

from dataclasses import dataclass, field

import numpy as np
from scipy import signal as scipy_signal

from nebulamorph.config import ANALYSER_FFT_SIZE


@dataclass(frozen=True, eq=False)
class AudioFrame:
    """One frame of frequency data."""

    frequency_magnitudes: np.ndarray = field(
        default_factory=lambda: np.zeros(0, dtype=np.uint8)
    )
    average_loudness: float = 0.0

    @classmethod
    def silent(cls, bins: int = ANALYSER_FFT_SIZE // 2) -> "AudioFrame":
        return cls(np.zeros(bins, dtype=np.uint8), 0.0)


def audio_frame(magnitudes) -> AudioFrame:
    """Build a frame from byte magnitudes; loudness is their mean / 255."""
    data = np.clip(np.asarray(magnitudes, dtype=np.float64), 0, 255).astype(np.uint8)
    loudness = float(data.mean()) / 255.0 if data.size else 0.0
    return AudioFrame(data, loudness)


def treble_level(magnitudes, fraction: float = 0.3) -> float:
    """
    Average magnitude of the top ``fraction`` of the spectrum in [0, 1].

    Empty input yields 0.
    """
    data = np.asarray(magnitudes, dtype=np.float64)
    n = data.size
    if n == 0:
        return 0.0
    lower = int(np.floor(n * (1.0 - fraction)))
    top = data[lower:]
    if top.size == 0:
        return 0.0
    return float(top.mean()) / 255.0


class SpectrumAnalyser:
    """
    Stateful byte-spectrum analyser.

    Successive calls to :meth:`frame` smooth magnitudes over time, so one
    analyser should be fed the blocks of a single stream in order.
    """

    def __init__(
        self,
        fft_size: int = ANALYSER_FFT_SIZE,
        smoothing: float = 0.8,
        min_db: float = -100.0,
        max_db: float = -30.0,
    ):
        """
        Args:
            fft_size: Window length in samples (power of two).
            smoothing: Time constant blending each frame with the previous.
            min_db: Level mapped to byte 0.
            max_db: Level mapped to byte 255.
        """
        self.fft_size = int(fft_size)
        self.smoothing = smoothing
        self.min_db = min_db
        self.max_db = max_db
        self.window = scipy_signal.get_window("blackman", self.fft_size)
        self._smoothed = np.zeros(self.fft_size // 2)

    @property
    def bins(self) -> int:
        return self.fft_size // 2

    def reset(self):
        self._smoothed[:] = 0.0

    def byte_spectrum(self, block: np.ndarray) -> np.ndarray:
        """
        Byte magnitudes for the most recent ``fft_size`` samples of a block.

        Shorter blocks are zero-padded at the front.
        """
        samples = np.asarray(block, dtype=np.float64).reshape(-1)[-self.fft_size:]
        if samples.size < self.fft_size:
            samples = np.concatenate([np.zeros(self.fft_size - samples.size), samples])

        spectrum = np.fft.rfft(samples * self.window)[: self.bins]
        magnitude = np.abs(spectrum) / self.fft_size

        self._smoothed = self.smoothing * self._smoothed + (1.0 - self.smoothing) * magnitude

        with np.errstate(divide="ignore"):
            db = 20.0 * np.log10(self._smoothed)
        db = np.nan_to_num(db, nan=self.min_db, neginf=self.min_db)

        scaled = (db - self.min_db) * (255.0 / (self.max_db - self.min_db))
        return np.clip(np.floor(scaled), 0, 255).astype(np.uint8)

    def frame(self, block: np.ndarray) -> AudioFrame:
        if np.size(block) == 0:
            return AudioFrame.silent(self.bins)
        return audio_frame(self.byte_spectrum(block))
