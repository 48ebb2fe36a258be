from __future__ import annotations

import pytest

from captions import Cue
from errors import ConfigurationError
from sequence import Bundle, Phase
from session import IDLE, PLAYING, PREPARING, PlaybackSession


@pytest.fixture
def session(video, narration, music, fake_subtitles) -> PlaybackSession:
    return PlaybackSession(video, narration, music, fake_subtitles)


FULL = Bundle(video="q.mp4", narration="q.mp3", music="bg.mp3")


def test_load_assigns_clips_then_prepares(session, calls) -> None:
    tag = session.load(FULL, Phase.QUESTION)

    assert session.state == PREPARING
    assert ("video.prepare", tag) in calls
    assert calls.index(("narration.set_clip", "q.mp3")) < calls.index(("video.prepare", tag))
    assert calls.index(("music.set_clip", "bg.mp3")) < calls.index(("video.prepare", tag))
    assert ("narration.set_time", 0.0) in calls
    assert ("video.play",) not in calls


def test_prepared_starts_all_tracks_together(session, calls, video, narration, music) -> None:
    tag = session.load(FULL, Phase.QUESTION)
    calls.clear()

    session.handle_prepared(tag)

    assert session.state == PLAYING
    assert calls == [
        ("narration.set_time", 0.0),
        ("music.set_time", 0.0),
        ("video.play",),
        ("narration.play",),
        ("music.play",),
    ]
    assert video.playing and narration.playing and music.playing


def test_missing_optional_tracks_are_skipped(session, calls, narration, music) -> None:
    tag = session.load(Bundle(video="q.mp4"), Phase.QUESTION)
    session.handle_prepared(tag)

    assert narration.path is None and music.path is None
    assert ("narration.play",) not in calls
    assert ("music.play",) not in calls
    assert ("video.play",) in calls


def test_bundle_without_video_is_rejected_before_stopping(session, calls) -> None:
    tag = session.load(FULL, Phase.QUESTION)
    session.handle_prepared(tag)
    calls.clear()

    with pytest.raises(ConfigurationError):
        session.load(Bundle(narration="x.mp3"), Phase.OUTCOME_SUCCESS)

    assert calls == []
    assert session.state == PLAYING


def test_new_load_stops_previous_session(session, calls, narration, music) -> None:
    tag = session.load(FULL, Phase.QUESTION)
    session.handle_prepared(tag)
    calls.clear()

    session.load(Bundle(video="s.mp4"), Phase.OUTCOME_SUCCESS)

    assert calls[:3] == [("video.stop",), ("narration.stop",), ("music.stop",)]
    assert not narration.playing and not music.playing


def test_stale_prepared_signal_is_ignored(session, calls) -> None:
    old = session.load(FULL, Phase.QUESTION)
    new = session.load(Bundle(video="f.mp4"), Phase.OUTCOME_FAILURE)
    assert new != old
    calls.clear()

    session.handle_prepared(old)

    assert calls == []
    assert session.state == PREPARING


def test_stale_finished_signal_is_ignored(session) -> None:
    finished = []
    session.on_finished = finished.append
    old = session.load(FULL, Phase.QUESTION)
    session.handle_prepared(old)
    new = session.load(Bundle(video="s.mp4"), Phase.OUTCOME_SUCCESS)
    session.handle_prepared(new)

    session.handle_finished(old)
    assert finished == []

    session.handle_finished(new)
    assert finished == [Phase.OUTCOME_SUCCESS]
    assert session.state == IDLE


def test_finished_before_prepared_is_ignored(session) -> None:
    finished = []
    session.on_finished = finished.append
    tag = session.load(FULL, Phase.QUESTION)

    session.handle_finished(tag)

    assert finished == []
    assert session.state == PREPARING


def test_duplicate_signals_fire_once(session) -> None:
    finished = []
    session.on_finished = finished.append
    tag = session.load(FULL, Phase.QUESTION)
    session.handle_prepared(tag)
    session.handle_prepared(tag)
    session.handle_finished(tag)
    session.handle_finished(tag)

    assert finished == [Phase.QUESTION]


def test_stop_invalidates_tag(session) -> None:
    tag = session.load(FULL, Phase.QUESTION)
    session.stop()

    session.handle_prepared(tag)

    assert session.state == IDLE
    assert session.tag is None


def test_captions_loaded_on_every_bundle(session, fake_subtitles, tmp_path) -> None:
    srt = tmp_path / "q.srt"
    srt.write_text("1\n00:00:00,000 --> 00:00:01,000\nHi\n", encoding="utf-8")

    session.load(Bundle(video="q.mp4", captions=str(srt)), Phase.QUESTION)
    session.load(Bundle(video="s.mp4"), Phase.OUTCOME_SUCCESS)

    assert fake_subtitles.loaded == [(Cue(0.0, 1.0, "Hi"),), ()]


def test_clock_prefers_playing_narration(session, video, narration) -> None:
    assert session.clock() is None

    tag = session.load(FULL, Phase.QUESTION)
    assert session.clock() is None

    session.handle_prepared(tag)
    video.time, narration.time = 5.0, 4.9
    assert session.clock() == 4.9

    narration.playing = False
    assert session.clock() == 5.0


def test_clock_uses_video_without_narration(session, video) -> None:
    tag = session.load(Bundle(video="q.mp4"), Phase.QUESTION)
    session.handle_prepared(tag)
    video.time = 1.25

    assert session.clock() == 1.25


def test_finish_and_stop_clear_captions(session, fake_subtitles) -> None:
    tag = session.load(FULL, Phase.QUESTION)
    cleared_by_load = fake_subtitles.cleared
    session.handle_prepared(tag)
    session.handle_finished(tag)

    assert fake_subtitles.cleared == cleared_by_load + 1

    session.stop()
    assert fake_subtitles.cleared == cleared_by_load + 2
