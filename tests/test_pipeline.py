"""Tests for the offline session driver and CLI."""

import json

import numpy as np
import pytest

from nebulamorph.cli import main
from nebulamorph.config import VisualConfig, VisualShape
from nebulamorph.pipeline import SessionResult, SessionRunner
from nebulamorph.signals.gesture import GestureState, LeftHand


class TestSessionRunner:
    """In-memory and file-backed sessions."""

    @pytest.fixture
    def runner(self) -> SessionRunner:
        return SessionRunner(fps=30, capacity=1500, seed=5)

    def test_frame_count_follows_fps(self, runner, white_noise):
        y, sr = white_noise
        result = runner.run_signal(y, sr)

        assert isinstance(result, SessionResult)
        assert result.n_frames == 60
        assert result.duration == pytest.approx(2.0)
        assert result.final_positions.shape == (1500, 3)

    def test_music_time_advances(self, runner, white_noise):
        y, sr = white_noise
        result = runner.run_signal(y, sr)
        times = [s.time for s in result.signals]
        assert all(b > a for a, b in zip(times, times[1:]))

    def test_silence_has_zero_beat(self, runner, silence):
        y, sr = silence
        result = runner.run_signal(y, sr)
        assert all(s.beat == 0.0 for s in result.signals)

    def test_starting_config(self, runner, pure_sine):
        y, sr = pure_sine
        result = runner.run_signal(y, sr, config=VisualConfig(shape=VisualShape.TORUS))
        assert result.signals[0].shape is VisualShape.TORUS

    def test_gesture_source_is_called_per_frame(self, runner, pure_sine):
        y, sr = pure_sine
        seen = []
        fist = GestureState(left_hand=LeftHand(active=True, is_fist=True, strength=1.0))

        def gestures(index):
            seen.append(index)
            return fist

        result = runner.run_signal(y, sr, gestures=gestures)

        assert seen == list(range(result.n_frames))
        assert result.signals[-1].hand_grip > 0.9

    def test_same_seed_same_session(self, white_noise):
        y, sr = white_noise
        a = SessionRunner(fps=30, capacity=800, seed=1).run_signal(y, sr)
        b = SessionRunner(fps=30, capacity=800, seed=1).run_signal(y, sr)
        np.testing.assert_array_equal(a.final_positions, b.final_positions)

    def test_invalid_fps(self):
        with pytest.raises(ValueError):
            SessionRunner(fps=0)

    def test_run_from_file(self, runner, temp_audio_file):
        result = runner.run(temp_audio_file, max_duration=0.5)
        assert result.duration == pytest.approx(0.5, abs=0.01)
        assert result.n_frames == 15

    def test_process_writes_output(self, runner, temp_audio_file, tmp_path):
        output = tmp_path / "signals.json"
        info = runner.process(temp_audio_file, output_path=output)

        assert output.exists()
        assert info["output_path"] == str(output)
        assert info["n_frames"] == len(info["manifest"]["frames"])


class TestCli:

    def test_missing_input_exits(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main([str(tmp_path / "missing.wav")])
        assert exc.value.code == 1
        assert "not found" in capsys.readouterr().err

    def test_json_run(self, temp_audio_file, tmp_path):
        output = tmp_path / "out.json"
        code = main(
            [
                str(temp_audio_file),
                "-o", str(output),
                "--fps", "20",
                "--shape", "dna_helix",
                "--particles", "500",
                "--seed", "3",
                "-q",
            ]
        )

        assert code == 0
        manifest = json.loads(output.read_text())
        assert manifest["metadata"]["fps"] == 20
        assert manifest["metadata"]["initial_shape"] == "DNA_HELIX"
        assert manifest["frames"][0]["visible_count"] == 500

    def test_numpy_run(self, temp_audio_file, tmp_path):
        output = tmp_path / "out.npz"
        main([str(temp_audio_file), "-o", str(output), "--format", "numpy", "--fps", "10", "-q"])

        with np.load(output) as data:
            assert data["beat"].shape == (10,)

    def test_moods_file_sets_shape(self, temp_audio_file, tmp_path):
        moods = tmp_path / "moods.json"
        moods.write_text(json.dumps({temp_audio_file.stem: {"shape": "KLEIN_BOTTLE"}}))
        output = tmp_path / "out.json"

        main([str(temp_audio_file), "-o", str(output), "--moods", str(moods), "--fps", "10", "-q"])

        manifest = json.loads(output.read_text())
        assert manifest["metadata"]["initial_shape"] == "KLEIN_BOTTLE"

    @pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]"])
    def test_bad_moods_file_exits(self, temp_audio_file, tmp_path, capsys, content):
        moods = tmp_path / "moods.json"
        moods.write_text(content)

        with pytest.raises(SystemExit) as exc:
            main([str(temp_audio_file), "--moods", str(moods), "-q"])

        assert exc.value.code == 1
        assert "Invalid moods file" in capsys.readouterr().err

    def test_unknown_shape_rejected(self, temp_audio_file):
        with pytest.raises(SystemExit) as exc:
            main([str(temp_audio_file), "--shape", "HYPERCUBE"])
        assert exc.value.code == 2
