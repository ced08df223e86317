"""Tests for mood suggestions and the lookup coordinator."""

import json
import threading

import numpy as np
import pytest

from nebulamorph.config import ALL_SHAPES, DEFAULT_COLORS, VisualConfig, VisualShape
from nebulamorph.mood import (
    FALLBACK_DESCRIPTION,
    JsonMoodAdvisor,
    MoodAdvisor,
    MoodLookup,
    config_from_suggestion,
    fallback_config,
)


class StaticAdvisor(MoodAdvisor):
    """Returns a fixed config per track name, optionally waiting on a gate."""

    def __init__(self, configs, gates=None):
        self.configs = configs
        self.gates = gates or {}

    def suggest(self, track_id, track_name):
        gate = self.gates.get(track_name)
        if gate is not None:
            gate.wait(timeout=5.0)
        return self.configs.get(track_name)


class FailingAdvisor(MoodAdvisor):
    def __init__(self):
        self.calls = 0

    def suggest(self, track_id, track_name):
        self.calls += 1
        raise RuntimeError("service unavailable")


@pytest.fixture
def lookup_factory():
    created = []

    def make(*args, **kwargs):
        lookup = MoodLookup(*args, **kwargs)
        created.append(lookup)
        return lookup

    yield make
    for lookup in created:
        lookup.close()


class TestConfigFromSuggestion:
    """Validation of raw suggestion payloads."""

    def test_valid_payload(self):
        config = config_from_suggestion(
            {
                "shape": "TORUS",
                "colors": ["#112233", "#445566", "#778899"],
                "speed": 2.0,
                "chaos": 0.8,
                "description": "Rolling thunder",
            }
        )
        assert config.shape is VisualShape.TORUS
        assert config.colors == ("#112233", "#445566", "#778899")
        assert config.speed == 2.0
        assert config.chaos == 0.8

    def test_invalid_shape_is_rejected(self):
        assert config_from_suggestion({"shape": "HYPERCUBE"}) is None
        assert config_from_suggestion({}) is None
        assert config_from_suggestion(["SPHERE"]) is None

    def test_short_palette_is_replaced(self):
        config = config_from_suggestion({"shape": "SPHERE", "colors": ["#ff0000"]})
        assert config.colors == ("#ffffff", "#888888", "#000000")

    def test_bad_hex_palette_is_replaced(self):
        config = config_from_suggestion({"shape": "SPHERE", "colors": ["red", "green", "blue"]})
        assert config.colors == ("#ffffff", "#888888", "#000000")

    def test_falsy_fields_take_defaults(self):
        config = config_from_suggestion({"shape": "SPHERE", "speed": 0, "chaos": None, "description": ""})
        assert config.speed == 1.0
        assert config.chaos == 0.5
        assert config.description == "Cosmic energy"


class TestFallback:

    def test_fallback_profile(self):
        config = fallback_config(np.random.default_rng(0))
        assert config.shape in ALL_SHAPES
        assert config.colors == DEFAULT_COLORS
        assert config.speed == 1.0
        assert config.chaos == 0.5
        assert config.description == FALLBACK_DESCRIPTION


class TestJsonMoodAdvisor:

    def test_lookup_by_track_name(self, tmp_path):
        path = tmp_path / "moods.json"
        path.write_text(json.dumps({"storm": {"shape": "LORENZ_ATTRACTOR", "speed": 2.5}}))

        advisor = JsonMoodAdvisor(path)

        assert advisor.suggest(1, "storm").shape is VisualShape.LORENZ_ATTRACTOR
        assert advisor.suggest(2, "calm") is None

    def test_non_object_file_rejected(self, tmp_path):
        path = tmp_path / "moods.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(ValueError):
            JsonMoodAdvisor(path)


class TestMoodLookup:
    """Track-tagged asynchronous lookups."""

    def test_result_is_applied(self, lookup_factory):
        wanted = VisualConfig(shape=VisualShape.KLEIN_BOTTLE)
        lookup = lookup_factory(StaticAdvisor({"a": wanted}))

        assert lookup.request("id-a", "a").result(timeout=5.0) is True
        assert lookup.active == wanted
        assert not lookup.analysing

    def test_stale_result_is_discarded(self, lookup_factory):
        gate = threading.Event()
        config_a = VisualConfig(shape=VisualShape.TORUS, description="A")
        config_b = VisualConfig(shape=VisualShape.DNA_HELIX, description="B")
        lookup = lookup_factory(StaticAdvisor({"a": config_a, "b": config_b}, gates={"a": gate}))

        future_a = lookup.request("id-a", "a")
        future_b = lookup.request("id-b", "b")
        assert future_b.result(timeout=5.0) is True
        assert lookup.active == config_b

        gate.set()
        assert future_a.result(timeout=5.0) is False
        assert lookup.active == config_b
        assert lookup.current_track == "id-b"

    def test_failure_falls_back_once(self, lookup_factory, caplog):
        advisor = FailingAdvisor()
        lookup = lookup_factory(advisor, seed=3)

        with caplog.at_level("WARNING", logger="nebulamorph.mood"):
            assert lookup.request("id", "song").result(timeout=5.0) is True

        assert advisor.calls == 1
        assert lookup.active.description == FALLBACK_DESCRIPTION
        assert any("failed" in r.message for r in caplog.records)

    def test_timeout_falls_back(self, lookup_factory, caplog):
        gate = threading.Event()
        lookup = lookup_factory(StaticAdvisor({}, gates={"slow": gate}), timeout=0.05)

        with caplog.at_level("WARNING", logger="nebulamorph.mood"):
            assert lookup.request("id", "slow").result(timeout=5.0) is True
        gate.set()

        assert lookup.active.description == FALLBACK_DESCRIPTION
        assert any("timed out" in r.message for r in caplog.records)

    def test_no_advisor_uses_fallback(self, lookup_factory):
        lookup = lookup_factory(None, seed=1)
        lookup.request(1, "x").result(timeout=5.0)
        assert lookup.active.description == FALLBACK_DESCRIPTION

    def test_update_colors_replaces_whole_config(self, lookup_factory):
        initial = VisualConfig(shape=VisualShape.TORUS)
        lookup = lookup_factory(None, initial=initial)

        updated = lookup.update_colors(["#000000", "#111111", "#222222"])

        assert updated.shape is VisualShape.TORUS
        assert lookup.active.colors == ("#000000", "#111111", "#222222")
        assert initial.colors == DEFAULT_COLORS
