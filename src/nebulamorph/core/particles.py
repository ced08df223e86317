"""
Fixed-capacity particle pool (structure of arrays).

The pool is allocated once. Only ``positions`` changes after construction;
the per-particle attributes (scale, color mix, sprite type, flash speed,
index) stay fixed for the lifetime of the process.
"""

from enum import IntEnum

import numpy as np

from nebulamorph.config import PARTICLE_CAPACITY


class SpriteType(IntEnum):
    DOT = 0
    NOTE_A = 1
    NOTE_B = 2


# Upper fractions of a uniform draw that become note glyphs (~1.5% each)
NOTE_A_THRESHOLD = 0.97
NOTE_B_THRESHOLD = 0.985


class ParticlePool:
    """Per-particle buffers shared with the rendering side."""

    def __init__(self, capacity: int = PARTICLE_CAPACITY, seed: int | None = None):
        self.capacity = max(0, int(capacity))
        rng = np.random.default_rng(seed)
        n = self.capacity

        self.positions = np.zeros((n, 3), dtype=np.float32)
        self.scale = (rng.random(n) * 0.5 + 0.5).astype(np.float32)

        self.color_mix = np.zeros((n, 3), dtype=np.float32)
        self.color_mix[:, 0] = rng.random(n)
        self.color_mix[:, 1] = rng.random(n) * 0.5

        self.flash_speed = (0.5 + rng.random(n) * 2.0).astype(np.float32)
        self.index = np.arange(n, dtype=np.float32)

        roll = rng.random(n)
        self.sprite_type = np.full(n, SpriteType.DOT, dtype=np.uint8)
        self.sprite_type[roll > NOTE_A_THRESHOLD] = SpriteType.NOTE_A
        self.sprite_type[roll > NOTE_B_THRESHOLD] = SpriteType.NOTE_B

        for arr in (self.scale, self.color_mix, self.flash_speed, self.index, self.sprite_type):
            arr.flags.writeable = False

    def __len__(self) -> int:
        return self.capacity

    @property
    def flat_positions(self) -> np.ndarray:
        """Interleaved xyz view of the position buffer (no copy)."""
        return self.positions.reshape(-1)
