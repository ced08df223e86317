"""
Mood advisory boundary.

A ``MoodAdvisor`` suggests a starting VisualConfig for a track (shape,
palette, speed, chaos, description). Lookups can be slow, so
``MoodLookup`` runs them on worker threads and tags each one with the
track it was issued for. A result that arrives after the track has
changed is stale and is dropped.

Failures and timeouts fall back, once, to a randomized configuration.
"""

import abc
import json
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import replace
from pathlib import Path
from typing import Any, Hashable, Sequence, Union

import numpy as np

from nebulamorph.config import (
    ALL_SHAPES,
    DEFAULT_COLORS,
    DEFAULT_VISUAL_CONFIG,
    VisualConfig,
    parse_shape,
)
from nebulamorph.core.colors import is_hex_color

logger = logging.getLogger(__name__)

FALLBACK_DESCRIPTION = "AI Offline - Random Gen"

_SUGGESTION_COLORS = ("#ffffff", "#888888", "#000000")


class MoodAdvisor(abc.ABC):
    """Source of per-track visual suggestions."""

    @abc.abstractmethod
    def suggest(self, track_id: Hashable, track_name: str) -> VisualConfig | None:
        """
        Return a suggested config, or None if there is nothing to suggest.

        May block and may raise; callers run it off the frame loop.
        """


def config_from_suggestion(data: dict[str, Any]) -> VisualConfig | None:
    """
    Validate a JSON-like suggestion into a VisualConfig.

    Returns None when the shape is not part of the catalog. Missing or
    falsy speed/chaos/description take the usual defaults, and a palette
    with fewer than three valid hex colors is replaced wholesale.
    """
    if not isinstance(data, dict):
        return None
    try:
        shape = parse_shape(data.get("shape"))
    except ValueError:
        return None

    colors = data.get("colors") or []
    if len(colors) >= 3 and all(is_hex_color(c) for c in colors[:3]):
        palette = (str(colors[0]), str(colors[1]), str(colors[2]))
    else:
        palette = _SUGGESTION_COLORS

    return VisualConfig(
        shape=shape,
        colors=palette,
        speed=float(data.get("speed") or 1.0),
        chaos=float(data.get("chaos") or 0.5),
        description=str(data.get("description") or "Cosmic energy"),
    )


def fallback_config(rng: np.random.Generator | None = None) -> VisualConfig:
    """Random catalog shape on the default palette."""
    rng = rng if rng is not None else np.random.default_rng()
    shape = ALL_SHAPES[int(rng.integers(len(ALL_SHAPES)))]
    return replace(
        DEFAULT_VISUAL_CONFIG,
        shape=shape,
        colors=DEFAULT_COLORS,
        description=FALLBACK_DESCRIPTION,
    )


class JsonMoodAdvisor(MoodAdvisor):
    """Suggestions keyed by track name, loaded from a JSON object file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Mood file must hold a JSON object: {self.path}")
        self.suggestions: dict[str, Any] = data

    def suggest(self, track_id: Hashable, track_name: str) -> VisualConfig | None:
        entry = self.suggestions.get(track_name)
        if entry is None:
            return None
        return config_from_suggestion(entry)


class MoodLookup:
    """
    Coordinates advisory lookups with track changes.

    ``active`` is always a complete VisualConfig: updates swap the whole
    object under a lock, so readers never see a half-applied config.
    """

    def __init__(
        self,
        advisor: MoodAdvisor | None = None,
        initial: VisualConfig | None = None,
        timeout: float = 8.0,
        seed: int | None = None,
    ):
        self.advisor = advisor
        self.timeout = timeout
        self.rng = np.random.default_rng(seed)

        self._lock = threading.Lock()
        self._active = initial or DEFAULT_VISUAL_CONFIG
        self._current_track: Hashable | None = None
        self._pending: Future | None = None

        # Coordinators block on advisor futures, so they get their own pool
        self._coordinators = ThreadPoolExecutor(max_workers=2, thread_name_prefix="mood")
        self._advisors = ThreadPoolExecutor(max_workers=4, thread_name_prefix="mood-advisor")

    @property
    def active(self) -> VisualConfig:
        with self._lock:
            return self._active

    @property
    def current_track(self) -> Hashable | None:
        with self._lock:
            return self._current_track

    @property
    def analysing(self) -> bool:
        with self._lock:
            return self._pending is not None and not self._pending.done()

    def request(self, track_id: Hashable, track_name: str) -> Future:
        """
        Make ``track_id`` current and start its lookup.

        The returned future resolves to True if the result was applied and
        False if it was discarded as stale.
        """
        with self._lock:
            self._current_track = track_id
            future = self._coordinators.submit(self._resolve, track_id, track_name)
            self._pending = future
        return future

    def update_colors(self, colors: Sequence[str]) -> VisualConfig:
        """Swap in a user-picked palette for the active config."""
        with self._lock:
            self._active = replace(self._active, colors=tuple(colors))
            return self._active

    def close(self):
        self._coordinators.shutdown(wait=False, cancel_futures=True)
        self._advisors.shutdown(wait=False, cancel_futures=True)

    def _ask(self, track_id: Hashable, track_name: str) -> VisualConfig | None:
        if self.advisor is None:
            return None
        pending = self._advisors.submit(self.advisor.suggest, track_id, track_name)
        try:
            return pending.result(timeout=self.timeout)
        except FutureTimeout:
            logger.warning("Mood lookup for %r timed out after %.1fs", track_name, self.timeout)
        except Exception as e:
            logger.warning("Mood lookup for %r failed: %s", track_name, e)
        return None

    def _resolve(self, track_id: Hashable, track_name: str) -> bool:
        config = self._ask(track_id, track_name)
        if config is None:
            config = fallback_config(self.rng)
            logger.info("Using fallback visuals for %r: %s", track_name, config.shape.value)
        return self._apply(track_id, config)

    def _apply(self, track_id: Hashable, config: VisualConfig) -> bool:
        with self._lock:
            if track_id != self._current_track:
                logger.debug("Discarding stale mood result for track %r", track_id)
                return False
            self._active = config
            return True
