from __future__ import annotations

import os

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")


class FakeVideo:
    def __init__(self, calls: list):
        self.calls = calls
        self.path = ""
        self.tag = None
        self.playing = False
        self.time = 0.0

    def set_clip(self, path):
        self.calls.append(("video.set_clip", path))
        self.path = path

    def prepare(self, tag):
        self.calls.append(("video.prepare", tag))
        self.tag = tag

    def play(self):
        self.calls.append(("video.play",))
        self.playing = True

    def stop(self):
        self.calls.append(("video.stop",))
        self.playing = False

    def is_playing(self):
        return self.playing

    def current_time(self):
        return self.time

    def close(self):
        self.calls.append(("video.close",))


class FakeAudio:
    def __init__(self, name: str, calls: list):
        self.name = name
        self.calls = calls
        self.path = None
        self.playing = False
        self.time = 0.0

    def set_clip(self, path):
        self.calls.append((f"{self.name}.set_clip", path))
        self.path = path

    def play(self):
        self.calls.append((f"{self.name}.play",))
        self.playing = True

    def stop(self):
        self.calls.append((f"{self.name}.stop",))
        self.playing = False

    def set_time(self, sec):
        self.calls.append((f"{self.name}.set_time", sec))
        self.time = sec

    def current_time(self):
        return self.time

    def is_playing(self):
        return self.playing

    def close(self):
        self.calls.append((f"{self.name}.close",))


class FakeDisplay:
    def __init__(self):
        self.text = ""
        self.writes: list[str] = []

    def set_text(self, text):
        self.text = text
        self.writes.append(text)


class FakeChoices:
    def __init__(self):
        self.visible = False

    def show(self):
        self.visible = True

    def hide(self):
        self.visible = False


class FakeSubtitles:
    def __init__(self):
        self.loaded: list[tuple] = []
        self.cleared = 0

    def load(self, cues):
        self.loaded.append(tuple(cues))

    def clear(self):
        self.cleared += 1


@pytest.fixture
def calls() -> list:
    return []


@pytest.fixture
def video(calls) -> FakeVideo:
    return FakeVideo(calls)


@pytest.fixture
def narration(calls) -> FakeAudio:
    return FakeAudio("narration", calls)


@pytest.fixture
def music(calls) -> FakeAudio:
    return FakeAudio("music", calls)


@pytest.fixture
def display() -> FakeDisplay:
    return FakeDisplay()


@pytest.fixture
def choices() -> FakeChoices:
    return FakeChoices()


@pytest.fixture
def fake_subtitles() -> FakeSubtitles:
    return FakeSubtitles()
