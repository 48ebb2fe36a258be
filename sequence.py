"""
sequence.py

Question sets and their per-phase media bundles.

A sequence file is JSON:

    {"questions": [
        {"question": {"video": "q1.mp4", "narration": "q1.mp3",
                      "music": "theme.mp3", "captions": "q1.srt"},
         "success":  {"video": "q1_yes.mp4"},
         "failure":  {"video": "q1_no.mp4", "captions": "q1_no.srt"}},
        ...
    ]}

Every field is optional in the file; relative paths are resolved against
the file's own directory.  Only the question video is mandatory, and that
is enforced when a question is about to play, not here.
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, Optional

from errors import ConfigurationError


class Phase(str, Enum):
    QUESTION = "question"
    OUTCOME_SUCCESS = "success"
    OUTCOME_FAILURE = "failure"


class Choice(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


_TRACKS = ("video", "narration", "music", "captions")


# ── Data structures ─────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Bundle:
    """Media for one phase of one question.  Absent tracks are None."""

    video: Optional[str] = None
    narration: Optional[str] = None
    music: Optional[str] = None
    captions: Optional[str] = None


@dataclass(frozen=True)
class QuestionSet:
    bundles: Mapping[Phase, Bundle] = field(default_factory=dict)

    def __post_init__(self):
        # read-only snapshot; the caller's dict may keep changing
        object.__setattr__(self, "bundles", MappingProxyType(dict(self.bundles)))

    def bundle(self, phase: Phase) -> Bundle:
        return self.bundles.get(phase, Bundle())

    @property
    def question_video(self) -> Optional[str]:
        return self.bundle(Phase.QUESTION).video


# ── Loading ─────────────────────────────────────────────────────────────────
def _bundle_from_dict(raw: object, base_dir: str, where: str) -> Bundle:
    if raw is None:
        return Bundle()
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{where}: expected an object, got {type(raw).__name__}")

    refs = {}
    for track in _TRACKS:
        ref = raw.get(track)
        if ref in (None, ""):
            refs[track] = None
        elif isinstance(ref, str):
            refs[track] = os.path.normpath(os.path.join(base_dir, ref))
        else:
            raise ConfigurationError(f"{where}.{track}: expected a path string")
    return Bundle(**refs)


def question_set_from_dict(raw: object, base_dir: str = "", where: str = "question") -> QuestionSet:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{where}: expected an object")
    return QuestionSet({
        phase: _bundle_from_dict(raw.get(phase.value), base_dir, f"{where}.{phase.value}")
        for phase in Phase
    })


def load_sequence(path: str) -> List[QuestionSet]:
    """Read a sequence file.  Unreadable or malformed files are configuration errors."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        raise ConfigurationError(f"cannot load sequence {path}: {exc}") from exc

    questions = data.get("questions") if isinstance(data, dict) else None
    if not isinstance(questions, list):
        raise ConfigurationError(f"{path}: 'questions' must be a list")

    base_dir = os.path.dirname(os.path.abspath(path))
    return [
        question_set_from_dict(q, base_dir, f"questions[{i}]")
        for i, q in enumerate(questions)
    ]
