"""Tests for the silencecut CLI."""

import json
from unittest.mock import patch

import numpy as np
import pytest
import scipy.io.wavfile as wavfile

from silencecut.cli import main, parse_args
from silencecut.errors import ExportError
from silencecut.pipeline import ProcessResult
from silencecut.timeline import Timeline
from silencecut.types import ExportProgress


def _result(source, wav_dir) -> ProcessResult:
    wav = wav_dir / "audio.wav"
    wavfile.write(str(wav), 1000, np.zeros(10000, dtype=np.int16))
    timeline = Timeline(10.0, source)
    timeline.split_by_silence([(3.0, 5.0)])
    return ProcessResult(timeline=timeline, wav_path=wav)


class TestParseArgs:
    def test_analyze_defaults(self):
        args = parse_args(["analyze", "video.mp4"])
        assert args.command == "analyze"
        assert args.input_file == "video.mp4"
        assert args.threshold_db == -35.0
        assert args.min_silence == 0.3
        assert args.softness == 0
        assert args.delete_silence is False
        assert args.json_path is None
        assert args.no_cache is False

    def test_analyze_options(self):
        args = parse_args([
            "analyze", "video.mp4",
            "--threshold-db", "-40",
            "--min-silence", "0.5",
            "--softness", "30",
            "--delete-silence",
            "--no-cache",
        ])
        assert args.threshold_db == -40.0
        assert args.min_silence == 0.5
        assert args.softness == 30
        assert args.delete_silence is True
        assert args.no_cache is True

    def test_export_args(self):
        args = parse_args(["export", "in.mp4", "out.mp4", "--keep-silence"])
        assert args.command == "export"
        assert args.input_file == "in.mp4"
        assert args.output_file == "out.mp4"
        assert args.keep_silence is True

    def test_waveform_args(self):
        args = parse_args(["waveform", "in.mp4", "--bucket-ms", "20"])
        assert args.bucket_ms == 20

    def test_softness_out_of_range(self):
        with pytest.raises(SystemExit):
            parse_args(["analyze", "video.mp4", "--softness", "120"])

    @pytest.mark.parametrize("bucket_ms", ["0", "-10"])
    def test_bucket_ms_must_be_positive(self, bucket_ms):
        with pytest.raises(SystemExit):
            parse_args(["waveform", "in.mp4", "--bucket-ms", bucket_ms])

    def test_no_command(self):
        with pytest.raises(SystemExit):
            parse_args([])


class TestRunAnalyze:
    def test_prints_segments(self, tmp_path, capsys):
        source = tmp_path / "video.mp4"
        source.touch()
        with patch("silencecut.session.process_video",
                   return_value=_result(source, tmp_path)) as process:
            main(["analyze", str(source), "--threshold-db", "-40"])

        config = process.call_args[0][1]
        assert config.threshold_db == -40.0
        out = capsys.readouterr().out
        assert "Segments: 3" in out
        assert "silence" in out
        assert "Included duration: 8.00s" in out

    def test_delete_silence_and_json(self, tmp_path, capsys):
        source = tmp_path / "video.mp4"
        source.touch()
        json_path = tmp_path / "out" / "timeline.json"
        with patch("silencecut.session.process_video", return_value=_result(source, tmp_path)):
            main(["analyze", str(source), "--delete-silence", "--json", str(json_path)])

        data = json.loads(json_path.read_text())
        assert len(data["clips"]) == 2
        assert data["clips"][1]["timeline_start"] == 3.0
        assert "Segments: 2" in capsys.readouterr().out

    def test_softness_applied(self, tmp_path, capsys):
        source = tmp_path / "video.mp4"
        source.touch()
        json_path = tmp_path / "timeline.json"
        with patch("silencecut.session.process_video", return_value=_result(source, tmp_path)):
            main(["analyze", str(source), "--softness", "50", "--json", str(json_path)])
        silence = json.loads(json_path.read_text())["clips"][1]
        assert silence["source_start"] == pytest.approx(3.2)

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["analyze", str(tmp_path / "missing.mp4")])
        assert exc.value.code == 1
        assert "file not found" in capsys.readouterr().err


class TestRunExport:
    def test_export_reports_progress(self, tmp_path, capsys):
        source = tmp_path / "video.mp4"
        source.touch()
        events = [ExportProgress(50.0, 4.0, 8.0), ExportProgress(100.0, 8.0, 8.0)]
        with patch("silencecut.session.process_video", return_value=_result(source, tmp_path)), \
             patch("silencecut.session.render", return_value=iter(events)) as render:
            main(["export", str(source), str(tmp_path / "out.mp4")])

        clips = render.call_args[0][0]
        assert [c.include for c in clips] == [True, False, True]
        out = capsys.readouterr().out
        assert "100%" in out
        assert "Output:" in out

    def test_keep_silence_includes_everything(self, tmp_path):
        source = tmp_path / "video.mp4"
        source.touch()
        with patch("silencecut.session.process_video", return_value=_result(source, tmp_path)), \
             patch("silencecut.session.render", return_value=iter([])) as render:
            main(["export", str(source), str(tmp_path / "out.mp4"), "--keep-silence"])
        assert all(c.include for c in render.call_args[0][0])

    def test_export_error_exits(self, tmp_path, capsys):
        source = tmp_path / "video.mp4"
        source.touch()
        with patch("silencecut.session.process_video", return_value=_result(source, tmp_path)), \
             patch("silencecut.session.render", side_effect=ExportError("no clips are included")):
            with pytest.raises(SystemExit) as exc:
                main(["export", str(source), str(tmp_path / "out.mp4")])
        assert exc.value.code == 1
        assert "Error: no clips are included" in capsys.readouterr().err


class TestRunWaveform:
    def test_waveform_json(self, tmp_path, capsys):
        source = tmp_path / "video.mp4"
        source.touch()
        samples = np.full(2000, 16384, dtype=np.int16)
        json_path = tmp_path / "peaks.json"
        with patch("silencecut.audio.decode_audio", return_value=(samples, 1000, 1)):
            main(["waveform", str(source), "--bucket-ms", "100", "--json", str(json_path)])

        data = json.loads(json_path.read_text())
        assert data["bucket_ms"] == 100
        assert data["peaks"] == [0.5] * 20
        assert "Peaks: 20 x 100 ms" in capsys.readouterr().out


class TestClearCache:
    def test_clear_cache(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr("silencecut.cache.CACHE_DIR", tmp_path / "cache")
        main(["clear-cache"])
        assert "Removed 0 cached file(s)" in capsys.readouterr().out
