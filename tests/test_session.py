"""Tests for the editor session."""

import threading
from pathlib import Path
from unittest.mock import patch

import numpy as np
import pytest
import scipy.io.wavfile as wavfile

from silencecut.errors import (
    BoundaryOutOfRangeError,
    IndexOutOfBoundsError,
    NoTimelineLoadedError,
    SegmentNotFoundError,
)
from silencecut.pipeline import ProcessResult
from silencecut.session import EditorSession
from silencecut.timeline import Timeline


def _result(tmp_path: Path, ranges=((3.0, 5.0),)) -> ProcessResult:
    wav = tmp_path / "audio.wav"
    wavfile.write(str(wav), 1000, np.zeros(10000, dtype=np.int16))
    timeline = Timeline(10.0, tmp_path / "video.mp4")
    timeline.audio_path = str(wav)
    timeline.split_by_silence(list(ranges))
    return ProcessResult(timeline=timeline, wav_path=wav)


@pytest.fixture
def session(tmp_path):
    s = EditorSession()
    with patch("silencecut.session.process_video", return_value=_result(tmp_path)):
        s.process_video(tmp_path / "video.mp4")
    return s


# --- no timeline ---


@pytest.mark.parametrize("command, args", [
    ("get_timeline", ()),
    ("get_source_path", ()),
    ("delete_silence_clips", ()),
    ("toggle_segment", (0,)),
    ("remove_segment", (0,)),
    ("merge_segments", (0,)),
    ("adjust_segment_boundary", (0, 1.0)),
    ("set_cut_softness", (50,)),
    ("get_segment_at_time", (1.0,)),
    ("get_waveform_data", ()),
    ("rerun_analysis", ()),
    ("export", ("out.mp4",)),
])
def test_commands_need_timeline(command, args):
    with pytest.raises(NoTimelineLoadedError):
        getattr(EditorSession(), command)(*args)


# --- loading ---


def test_process_video_passes_current_config(tmp_path):
    s = EditorSession(work_dir=tmp_path / "work", use_cache=False)
    s.update_silence_config(-40.0, 0.5)
    with patch("silencecut.session.process_video", return_value=_result(tmp_path)) as process:
        s.process_video(tmp_path / "video.mp4")
    _, config = process.call_args[0]
    assert config.threshold_db == -40.0
    assert config.min_silence_duration == 0.5
    assert process.call_args[1] == {"work_dir": tmp_path / "work", "use_cache": False}


def test_rerun_analysis_uses_loaded_source(session, tmp_path):
    with patch("silencecut.session.process_video",
               return_value=_result(tmp_path, ranges=[(1.0, 2.0)])) as process:
        timeline = session.rerun_analysis()
    assert process.call_args[0][0] == str(tmp_path / "video.mp4")
    assert timeline.raw_silence_ranges == [(1.0, 2.0)]


# --- snapshots ---


def test_get_timeline_returns_copy(session):
    snapshot = session.get_timeline()
    snapshot.clips.clear()
    assert len(session.get_timeline().clips) == 3


def test_edit_returns_snapshot(session):
    snapshot = session.toggle_segment(1)
    assert snapshot.clips[1].include is True
    snapshot.clips[1].include = False
    assert session.get_timeline().clips[1].include is True


# --- config ---


def test_silence_config_defaults_and_update():
    s = EditorSession()
    assert s.get_silence_config().threshold_db == -35.0
    s.update_silence_config(-30.0, 0.2)
    config = s.get_silence_config()
    assert config.threshold_db == -30.0
    assert config.min_silence_duration == 0.2


def test_get_silence_config_is_a_copy():
    s = EditorSession()
    s.get_silence_config().threshold_db = 0.0
    assert s.get_silence_config().threshold_db == -35.0


# --- edits ---


def test_delete_silence_recalculates(session):
    timeline = session.delete_silence_clips()
    assert len(timeline.clips) == 2
    assert timeline.clips[1].timeline_start == 3.0
    assert timeline.clips[1].timeline_end == 8.0


def test_remove_merge_adjust(session):
    timeline = session.adjust_segment_boundary(0, 2.5)
    assert timeline.clips[0].source_end == 2.5
    timeline = session.merge_segments(0)
    assert len(timeline.clips) == 2
    timeline = session.remove_segment(1)
    assert [(c.source_start, c.source_end) for c in timeline.clips] == [(0.0, 5.0)]


def test_failed_edit_leaves_state(session):
    before = session.get_timeline().clips
    with pytest.raises(BoundaryOutOfRangeError):
        session.adjust_segment_boundary(0, 7.0)
    with pytest.raises(BoundaryOutOfRangeError):
        session.adjust_segment_boundary(0, float("nan"))
    with pytest.raises(IndexOutOfBoundsError):
        session.remove_segment(9)
    assert session.get_timeline().clips == before


def test_set_cut_softness(session):
    timeline = session.set_cut_softness(50)
    assert timeline.clips[1].source_start == pytest.approx(3.2)
    assert timeline.raw_silence_ranges == [(3.0, 5.0)]


def test_concurrent_toggles_are_serialized(session):
    def toggle_many():
        for _ in range(100):
            session.toggle_segment(0)

    threads = [threading.Thread(target=toggle_many) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    # 400 flips: back where it started
    assert session.get_timeline().clips[0].include is True


# --- queries ---


def test_get_source_path(session, tmp_path):
    assert session.get_source_path() == str(tmp_path / "video.mp4")


def test_get_segment_at_time(session):
    assert session.get_segment_at_time(4.0) == 1
    with pytest.raises(SegmentNotFoundError):
        session.get_segment_at_time(12.0)


def test_get_waveform_data(session):
    data = session.get_waveform_data()
    assert data.bucket_ms == 10
    assert len(data.peaks) == 1000
    assert data.duration == 10.0
    assert max(data.peaks) == 0.0


# --- export ---


def test_export_renders_snapshot(session, tmp_path):
    with patch("silencecut.session.render", return_value=iter([])) as render:
        list(session.export(tmp_path / "out.mp4"))
    clips, source, output = render.call_args[0]
    assert len(clips) == 3
    assert source == str(tmp_path / "video.mp4")
    assert output == tmp_path / "out.mp4"
