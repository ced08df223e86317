"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from nebulamorph.core.particles import ParticlePool

# Default sample rate for test audio
TEST_SR = 22050


@pytest.fixture
def sample_rate() -> int:
    """Default sample rate for tests."""
    return TEST_SR


@pytest.fixture
def pure_sine(sample_rate: int) -> tuple[np.ndarray, int]:
    """
    Generate a pure 440Hz sine wave (A4 note).

    Returns:
        Tuple of (audio_signal, sample_rate).
    """
    duration = 2.0
    t = np.linspace(0, duration, int(sample_rate * duration), endpoint=False)
    y = 0.5 * np.sin(2 * np.pi * 440.0 * t)
    return y.astype(np.float32), sample_rate


@pytest.fixture
def high_sine(sample_rate: int) -> tuple[np.ndarray, int]:
    """A 9kHz tone that lands in the top of the analyser spectrum."""
    duration = 1.0
    t = np.linspace(0, duration, int(sample_rate * duration), endpoint=False)
    y = 0.5 * np.sin(2 * np.pi * 9000.0 * t)
    return y.astype(np.float32), sample_rate


@pytest.fixture
def white_noise(sample_rate: int) -> tuple[np.ndarray, int]:
    """
    Generate white noise.

    Returns:
        Tuple of (audio_signal, sample_rate).
    """
    rng = np.random.default_rng(42)
    duration = 2.0
    samples = int(sample_rate * duration)
    y = rng.standard_normal(samples).astype(np.float32) * 0.3
    return y, sample_rate


@pytest.fixture
def silence(sample_rate: int) -> tuple[np.ndarray, int]:
    return np.zeros(sample_rate, dtype=np.float32), sample_rate


@pytest.fixture
def small_pool() -> ParticlePool:
    """A pool small enough to regenerate many times per test."""
    return ParticlePool(capacity=2000, seed=7)


@pytest.fixture
def temp_audio_file(tmp_path, white_noise):
    """Create a temporary audio file for testing file I/O."""
    import soundfile as sf

    y, sr = white_noise
    audio_path = tmp_path / "test_audio.wav"
    sf.write(audio_path, y[: sr], sr)
    return audio_path
