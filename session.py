"""
session.py – plays one media bundle across video, narration and music.

Protocol
--------
load(bundle, phase)    stop whatever was playing, assign clips, ask the
                       video backend to prepare; returns the bundle tag
handle_prepared(tag)   rewind the audio tracks and start all three
handle_finished(tag)   go idle and report the finished phase

The backend posts `media_prepared` / `media_finished` actions carrying
the tag given to `prepare()`.  Only the most recent tag is honoured, so
late signals from a superseded bundle fall on the floor.
"""
from __future__ import annotations

import itertools
import logging
from typing import Callable, Optional, Protocol

from captions import load_caption_file
from errors import ConfigurationError
from sequence import Bundle, Phase

log = logging.getLogger(__name__)

IDLE, PREPARING, PLAYING = "idle", "preparing", "playing"


class VideoBackend(Protocol):
    def set_clip(self, path: str) -> None: ...
    def prepare(self, tag: int) -> None: ...
    def play(self) -> None: ...
    def stop(self) -> None: ...
    def is_playing(self) -> bool: ...
    def current_time(self) -> float: ...


class AudioBackend(Protocol):
    path: Optional[str]

    def set_clip(self, path: Optional[str]) -> None: ...
    def play(self) -> None: ...
    def stop(self) -> None: ...
    def set_time(self, sec: float) -> None: ...
    def current_time(self) -> float: ...
    def is_playing(self) -> bool: ...


class PlaybackSession:
    def __init__(self,
                 video: VideoBackend,
                 narration: AudioBackend,
                 music: AudioBackend,
                 subtitles,
                 on_finished: Optional[Callable[[Phase], None]] = None):
        self.video = video
        self.narration = narration
        self.music = music
        self.subtitles = subtitles
        self.on_finished = on_finished

        self.state = IDLE
        self.phase: Optional[Phase] = None
        self.bundle: Optional[Bundle] = None
        self.tag: Optional[int] = None
        self._tags = itertools.count(1)

    # ── public API ----------------------------------------------------------
    def load(self, bundle: Bundle, phase: Phase) -> int:
        if not bundle.video:
            raise ConfigurationError(f"{phase.value} bundle has no video clip")

        self.stop()

        self.narration.set_clip(bundle.narration)
        self.music.set_clip(bundle.music)
        for track in (self.narration, self.music):
            if track.path:
                track.set_time(0.0)

        self.tag = next(self._tags)
        self.phase = phase
        self.bundle = bundle
        self.state = PREPARING

        self.video.set_clip(bundle.video)
        self.video.prepare(self.tag)
        self.subtitles.load(load_caption_file(bundle.captions) if bundle.captions else ())

        log.info("loading %s bundle %s (tag %d)", phase.value, bundle.video, self.tag)
        return self.tag

    def handle_prepared(self, tag: int) -> None:
        if tag != self.tag or self.state != PREPARING:
            log.debug("ignoring stale prepared signal (tag %s, current %s)", tag, self.tag)
            return

        for track in (self.narration, self.music):
            if track.path:
                track.set_time(0.0)

        # same dispatch for all three so the tracks start within one frame
        self.video.play()
        if self.narration.path:
            self.narration.play()
        if self.music.path:
            self.music.play()
        self.state = PLAYING

    def handle_finished(self, tag: int) -> None:
        if tag != self.tag or self.state != PLAYING:
            log.debug("ignoring stale finished signal (tag %s, current %s)", tag, self.tag)
            return

        phase = self.phase
        self.state = IDLE
        # clock() is None from here on, so tick() no longer touches the display
        self.subtitles.clear()
        log.info("%s bundle finished", phase.value)
        if self.on_finished:
            self.on_finished(phase)

    def stop(self) -> None:
        """Stop every track and invalidate the current tag."""
        self.video.stop()
        for track in (self.narration, self.music):
            if track.is_playing():
                track.stop()
        self.state = IDLE
        self.tag = None
        self.subtitles.clear()

    def clock(self) -> Optional[float]:
        """Playback time of the running bundle, None unless playing."""
        if self.state != PLAYING:
            return None
        if self.narration.path and self.narration.is_playing():
            return self.narration.current_time()
        return self.video.current_time()

    @property
    def active(self) -> bool:
        return self.state != IDLE
