from __future__ import annotations

import json
import os

import pytest

from errors import ConfigurationError
from sequence import Bundle, Phase, QuestionSet, load_sequence, question_set_from_dict


def _write(tmp_path, data) -> str:
    fp = tmp_path / "sequence.json"
    fp.write_text(json.dumps(data), encoding="utf-8")
    return str(fp)


def test_load_sequence_resolves_paths_relative_to_file(tmp_path) -> None:
    path = _write(tmp_path, {"questions": [
        {
            "question": {"video": "q1.mp4", "narration": "audio/q1.mp3",
                         "music": "theme.mp3", "captions": "q1.srt"},
            "success": {"video": "s1.mp4"},
        },
    ]})

    [qs] = load_sequence(path)

    q = qs.bundle(Phase.QUESTION)
    assert q.video == os.path.join(str(tmp_path), "q1.mp4")
    assert q.narration == os.path.join(str(tmp_path), "audio", "q1.mp3")
    assert qs.bundle(Phase.OUTCOME_SUCCESS).narration is None
    assert qs.bundle(Phase.OUTCOME_FAILURE) == Bundle()
    assert qs.question_video == q.video


def test_empty_strings_count_as_absent(tmp_path) -> None:
    qs = question_set_from_dict({"question": {"video": "q.mp4", "music": ""}}, str(tmp_path))

    assert qs.bundle(Phase.QUESTION).music is None


def test_missing_question_video_is_allowed_at_load(tmp_path) -> None:
    path = _write(tmp_path, {"questions": [{"question": {"narration": "x.mp3"}}]})

    [qs] = load_sequence(path)

    assert qs.question_video is None


def test_empty_question_list_loads(tmp_path) -> None:
    assert load_sequence(_write(tmp_path, {"questions": []})) == []


@pytest.mark.parametrize(
    "data",
    [
        {"questions": {"question": {}}},
        {"items": []},
        [],
        {"questions": ["q1.mp4"]},
        {"questions": [{"question": "q1.mp4"}]},
        {"questions": [{"question": {"video": 3}}]},
    ],
)
def test_malformed_sequence_is_configuration_error(tmp_path, data) -> None:
    with pytest.raises(ConfigurationError):
        load_sequence(_write(tmp_path, data))


def test_unreadable_sequence_is_configuration_error(tmp_path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_sequence(str(bad))
    with pytest.raises(ConfigurationError):
        load_sequence(str(tmp_path / "missing.json"))


def test_question_set_is_immutable() -> None:
    qs = QuestionSet({Phase.QUESTION: Bundle(video="q.mp4")})

    with pytest.raises(AttributeError):
        qs.bundle(Phase.QUESTION).video = "other.mp4"  # type: ignore[misc]


def test_question_set_bundles_are_read_only() -> None:
    source = {Phase.QUESTION: Bundle(video="q.mp4")}
    qs = QuestionSet(source)

    with pytest.raises(TypeError):
        qs.bundles[Phase.OUTCOME_SUCCESS] = Bundle(video="s.mp4")  # type: ignore[index]

    source[Phase.QUESTION] = Bundle(video="other.mp4")
    assert qs.question_video == "q.mp4"
    assert qs == QuestionSet({Phase.QUESTION: Bundle(video="q.mp4")})
