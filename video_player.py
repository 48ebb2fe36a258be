# =========  video_player.py  =========
"""
GStreamer video backend for the narrative player.

Public API
----------
set_clip(path)
prepare(tag)            → posts {"type": "media_prepared", "tag": tag}
play() / stop()
is_playing()
current_time()          → seconds
decode_frame()          → latest frame (HxWx3 uint8) or None
close()
End of stream posts {"type": "media_finished", "tag": tag}.

Properties
----------
.path  → current file path
.sar   → sample-aspect ratio

Bus messages arrive on a GLib main-loop thread; they are only turned into
actions on the EventManager queue, never acted on here.
"""
from __future__ import annotations

import gi, logging, threading, queue, numpy as np
gi.require_version("Gst", "1.0")
from gi.repository import Gst, GLib

import config
from events import EventManager

log = logging.getLogger(__name__)

_loop: GLib.MainLoop | None = None
_loop_thread: threading.Thread | None = None


def ensure_bus_loop() -> None:
    """Run one GLib main loop in a daemon thread for every bus watch."""
    global _loop, _loop_thread
    if _loop is not None:
        return
    _loop = GLib.MainLoop()
    _loop_thread = threading.Thread(target=_loop.run, name="gst-bus", daemon=True)
    _loop_thread.start()


def stop_bus_loop() -> None:
    global _loop, _loop_thread
    if _loop:
        _loop.quit()
    if _loop_thread and threading.current_thread() is not _loop_thread:
        _loop_thread.join(timeout=0.5)
    _loop = _loop_thread = None


# ────────────────────────────────────────────────────────────────────────────
class VideoPlayer:
    def __init__(self):
        Gst.init(None)

        # build a playbin
        self.player = Gst.ElementFactory.make("playbin", "video")

        # try to build the GPU-accelerated bin first
        self._vsink = None
        video_sink  = self._build_hw_sink() or self._build_sw_sink()
        self.player.set_property("video-sink", video_sink)
        self.player.set_property("audio-sink",
                                 Gst.ElementFactory.make("autoaudiosink", "vaud"))
        # narration is a separate track; the clip's own audio stays silent
        self.player.set_property("mute", not config.VIDEO_AUDIO)

        # state
        self._q, self._last = queue.Queue(maxsize=1), None
        self._w = self._h = 0
        self.sar  = 1.0
        self.path = ""
        # bus thread and main loop both touch the tag and the pending flags
        self._guard = threading.Lock()
        self._tag: int | None = None
        self._awaiting_preroll = False
        self._playing = False

        ensure_bus_loop()
        bus = self.player.get_bus()
        bus.add_signal_watch()
        bus.connect("message", self._on_bus_msg)

    # ── sink builders ───────────────────────────────────────────────────────
    def _build_hw_sink(self):
        """
        Pi-optimised pipeline:
          H.264 → GPU decode (v4l2h264dec) → DMAbuf zero-copy → videoconvert
          → RGB (3 Bpp) → 1-buffer leaky queue → appsink (sync = True)
        Returns a Gst.Bin or None if linking fails.
        """
        desc = (
            "h264parse ! "
            "v4l2h264dec capture-io-mode=dmabuf-import ! "
            "video/x-raw(memory:DMABuf),format=NV12 ! "
            "videoconvert ! "
            "video/x-raw,format=RGB ! "
            "queue max-size-buffers=1 leaky=downstream ! "
            "appsink name=vsink emit-signals=true "
            "max-buffers=2 drop=true sync=true "
            "caps=video/x-raw,format=RGB"
        )
        try:
            bin_ = Gst.parse_bin_from_description(desc, True)
        except GLib.Error:
            # plugin missing or unable to link
            return None
        self._vsink = bin_.get_by_name("vsink")
        self._vsink.connect("new-sample", self._on_sample)
        return bin_

    def _build_sw_sink(self):
        """
        Fallback: simple RGB appsink (software conversion).
        """
        vs = Gst.ElementFactory.make("appsink", "vsink")
        vs.set_property("emit-signals", True)
        vs.set_property("max-buffers", 2)
        vs.set_property("drop", True)
        vs.set_property("sync", True)
        vs.set_property("caps", Gst.Caps.from_string("video/x-raw,format=RGB"))
        vs.connect("new-sample", self._on_sample)
        self._vsink = vs
        return vs

    # ── public API ──────────────────────────────────────────────────────────
    def set_clip(self, fp: str) -> None:
        self.stop()
        self.path = fp
        self.player.set_property("uri", Gst.filename_to_uri(fp))

    def prepare(self, tag: int) -> None:
        """Start prerolling; completion arrives as a media_prepared action."""
        with self._guard:
            self._tag = tag
            self._awaiting_preroll = True
        ret = self.player.set_state(Gst.State.PAUSED)
        if ret == Gst.StateChangeReturn.FAILURE:
            with self._guard:
                self._awaiting_preroll = False
            log.error("cannot prepare %s", self.path)

    def play(self) -> None:
        with self._guard:
            self._playing = True
        self.player.set_state(Gst.State.PLAYING)

    def stop(self) -> None:
        with self._guard:
            self._tag = None
            self._playing = False
            self._awaiting_preroll = False
        self.player.set_state(Gst.State.NULL)
        self._last = None
        while not self._q.empty():
            self._q.get_nowait()

    def is_playing(self) -> bool:
        return self._playing

    def current_time(self) -> float:
        ok, pos = self.player.query_position(Gst.Format.TIME)
        return pos / Gst.SECOND if ok else 0.0

    def decode_frame(self):
        data = None
        while True:
            try:
                data = self._q.get_nowait()
            except queue.Empty:
                break
        if data is not None:
            self._last = self._bytes_to_arr(data)
        return self._last

    def close(self) -> None:
        self.stop()
        self.player.get_bus().remove_signal_watch()
        self.path = ""

    # ── internals ───────────────────────────────────────────────────────────
    def _read_caps(self) -> None:
        caps = self._vsink.get_static_pad("sink").get_current_caps()
        if caps is None:
            return
        st = caps.get_structure(0)
        self._w, self._h = st.get_int("width")[1], st.get_int("height")[1]
        if st.has_field("pixel-aspect-ratio"):
            num, den = st.get_fraction("pixel-aspect-ratio")[-2:]
            self.sar = num / den if den else 1.0

    def _bytes_to_arr(self, data: bytes):
        """RGB888 rows (possibly padded to a 4-byte stride) → HxWx3 array."""
        stride = len(data) // self._h
        rows   = np.frombuffer(data, np.uint8).reshape((self._h, stride))
        return np.ascontiguousarray(rows[:, : self._w * 3]
                                    .reshape((self._h, self._w, 3)))

    def _on_sample(self, sink):
        samp = sink.emit("pull-sample")
        if samp:
            buf = samp.get_buffer()
            ok, mi = buf.map(Gst.MapFlags.READ)
            if ok:
                try:
                    self._q.put_nowait(bytes(mi.data))
                except queue.Full:
                    pass
                buf.unmap(mi)
        return Gst.FlowReturn.OK

    def _on_bus_msg(self, bus, msg):
        if msg.type == Gst.MessageType.ERROR:
            err, dbg = msg.parse_error()
            log.error("GStreamer error in %s: %s (%s)", self.path, err.message, dbg)
            self.stop()
            return True
        # preroll and end-of-stream count only when the pipeline itself reports them
        if msg.src is not self.player:
            return True

        act = None
        with self._guard:
            if msg.type == Gst.MessageType.ASYNC_DONE and self._awaiting_preroll:
                self._awaiting_preroll = False
                act = {"type": "media_prepared", "tag": self._tag}
            elif msg.type == Gst.MessageType.EOS and self._playing:
                self._playing = False
                act = {"type": "media_finished", "tag": self._tag}

        if act is None or act["tag"] is None:
            return True
        if act["type"] == "media_prepared":
            self._read_caps()
        EventManager.post(act)
        return True
