# =========  audio_player.py  =========
"""
GStreamer audio track (narration or music).

Public API
----------
set_clip(path | None)   None leaves the track silent
play() / stop()
set_time(sec)
current_time()          → seconds
is_playing()
close()

The clip is prerolled on `set_clip()` so `set_time()` can seek before the
first `play()`.
"""
from __future__ import annotations

import gi, logging
gi.require_version("Gst", "1.0")
from gi.repository import Gst

from video_player import ensure_bus_loop

log = logging.getLogger(__name__)


class AudioTrack:
    def __init__(self, name: str):
        Gst.init(None)
        self.name = name
        self.player = Gst.ElementFactory.make("playbin", name)
        self.player.set_property("video-sink",
                                 Gst.ElementFactory.make("fakesink", f"{name}-novideo"))
        self.player.set_property("audio-sink",
                                 Gst.ElementFactory.make("autoaudiosink", f"{name}-aud"))
        self.path: str | None = None
        self._playing = False

        ensure_bus_loop()
        bus = self.player.get_bus()
        bus.add_signal_watch()
        bus.connect("message", self._on_bus_msg)

    # ── public API ──────────────────────────────────────────────────────────
    def set_clip(self, fp: str | None) -> None:
        self.stop()
        self.path = fp
        if fp is None:
            return
        self.player.set_property("uri", Gst.filename_to_uri(fp))
        self.player.set_state(Gst.State.PAUSED)

    def play(self) -> None:
        if self.path is None:
            return
        self.player.set_state(Gst.State.PLAYING)
        self._playing = True

    def stop(self) -> None:
        self.player.set_state(Gst.State.NULL)
        self._playing = False

    def set_time(self, sec: float) -> None:
        if self.path is None:
            return
        self.player.seek_simple(
            Gst.Format.TIME,
            Gst.SeekFlags.FLUSH | Gst.SeekFlags.ACCURATE,
            int(max(0.0, sec) * Gst.SECOND),
        )

    def current_time(self) -> float:
        ok, pos = self.player.query_position(Gst.Format.TIME)
        return pos / Gst.SECOND if ok else 0.0

    def is_playing(self) -> bool:
        return self._playing

    def close(self) -> None:
        self.stop()
        self.player.get_bus().remove_signal_watch()

    # ── internals ───────────────────────────────────────────────────────────
    def _on_bus_msg(self, bus, msg):
        if msg.type == Gst.MessageType.EOS:
            self._playing = False
        elif msg.type == Gst.MessageType.ERROR:
            err, dbg = msg.parse_error()
            log.error("GStreamer error on %s track (%s): %s (%s)",
                      self.name, self.path, err.message, dbg)
            self.stop()
        return True
