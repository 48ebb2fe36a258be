"""
subtitles.py – per-frame caption driver.

Owns the cue list of the bundle that is currently loaded and the index
of the cue last matched.  `tick()` is called once per frame with the
playback clock; the display is only touched when the visible text
changes.
"""
from __future__ import annotations

import logging
import math
from typing import Optional, Protocol, Sequence

from captions import Cue, last_start_at_or_before, locate

log = logging.getLogger(__name__)


class CaptionDisplay(Protocol):
    def set_text(self, text: str) -> None: ...


class SubtitleDriver:
    def __init__(self,
                 display: CaptionDisplay,
                 offset: float = 0.0,
                 clear_in_gaps: bool = True):
        self.display = display
        self.offset = offset
        self.clear_in_gaps = clear_in_gaps
        self.cues: tuple[Cue, ...] = ()
        self.current: Optional[int] = None   # cue shown, or last cue passed
        self.text = ""
        self.display.set_text("")

    # ── cue list ----------------------------------------------------------
    def load(self, cues: Sequence[Cue]) -> None:
        """Replace the cue list wholesale and clear the display."""
        self.cues = tuple(cues)
        self.current = None
        self._show("")
        log.debug("loaded %d cues", len(self.cues))

    def clear(self) -> None:
        """Blank the display until the next cue is matched; the cue list stays."""
        self.current = None
        self._show("")

    # ── per-frame update --------------------------------------------------
    def tick(self, clock: Optional[float]) -> None:
        if not self.cues:
            self._show("")
            return
        if clock is None or math.isnan(clock):
            return

        t = clock + self.offset
        cues = self.cues

        if self.current is not None and self.current < len(cues):
            cue = cues[self.current]
            if cue.contains(t):
                if not self.text:
                    self._show(cue.text)
                return
            # left the cue: clear now so stale text never shows in a gap
            if self.clear_in_gaps:
                self._show("")
            if self._in_gap_after(self.current, t):
                return

        idx = locate(cues, t)
        if idx is not None:
            self.current = idx
            self._show(cues[idx].text)
        else:
            self.current = last_start_at_or_before(cues, t)
            if self.clear_in_gaps:
                self._show("")

    # ── internals ---------------------------------------------------------
    def _in_gap_after(self, idx: int, t: float) -> bool:
        """True if t is past cue idx but before the next cue starts."""
        if t <= self.cues[idx].end:
            return False
        nxt = idx + 1
        return nxt == len(self.cues) or t < self.cues[nxt].start

    def _show(self, text: str) -> None:
        if text != self.text:
            self.text = text
            self.display.set_text(text)
