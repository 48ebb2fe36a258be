"""
captions.py

SRT-style caption parsing and cue lookup.

Public API
----------
parse_captions(text)            → tuple[Cue, ...] sorted by start
load_caption_file(path)         → same, read from disk
locate(cues, t)                 → index of the cue containing t, or None
last_start_at_or_before(cues, t) → highest index whose start <= t, or None

Both lookups are O(log n) via `bisect` and hold no state, so the
subtitle driver can call them every frame.  Cue lists are expected to be
effectively non-overlapping; for overlapping input the result of
`locate` is whichever cue has the greatest start <= t, if it still
contains t.
"""
from __future__ import annotations

import bisect
import logging
import re
from dataclasses import dataclass
from operator import attrgetter
from typing import Optional, Sequence

log = logging.getLogger(__name__)

# ── Regex helpers ───────────────────────────────────────────────────────────
_BLOCK_SPLIT_RE = re.compile(r"\n[ \t]*\n")
_INDEX_RE = re.compile(r"^\d+$")
_TIMING_RE = re.compile(
    r"^(\d{2}):(\d{2}):(\d{2}),(\d{3})"
    r"\s*-->\s*"
    r"(\d{2}):(\d{2}):(\d{2}),(\d{3})"
)

_start = attrgetter("start")


# ── Data structures ─────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Cue:
    start: float
    end: float
    text: str

    def contains(self, t: float) -> bool:
        return self.start <= t <= self.end


# ── Parsing ─────────────────────────────────────────────────────────────────
def _to_seconds(h: str, m: str, s: str, ms: str) -> float:
    return int(h) * 3600 + int(m) * 60 + int(s) + int(ms) / 1000.0


def _parse_block(block: str) -> Optional[Cue]:
    lines = block.strip("\n").split("\n")
    if len(lines) > 1 and _INDEX_RE.match(lines[0].strip()):
        lines = lines[1:]

    m = _TIMING_RE.match(lines[0].strip())
    if not m:
        return None

    start = _to_seconds(*m.group(1, 2, 3, 4))
    end = _to_seconds(*m.group(5, 6, 7, 8))
    if end < start:
        return None

    text = "\n".join(lines[1:]).strip()
    if not text:
        return None
    return Cue(start, end, text)


def parse_captions(text: str) -> tuple[Cue, ...]:
    """
    Parse a caption document.  Malformed blocks are dropped; the rest of
    the document still parses.  Never raises.
    """
    body = text.replace("\r\n", "\n").replace("\r", "\n")
    if body.startswith("\ufeff"):
        body = body[1:]

    cues = []
    for block in _BLOCK_SPLIT_RE.split(body):
        if not block.strip():
            continue
        cue = _parse_block(block)
        if cue is None:
            log.debug("dropping malformed caption block: %r", block[:60])
            continue
        cues.append(cue)

    if not cues and body.strip():
        log.warning("caption document is not empty but contains no usable cues")

    # authoring order is not trusted
    return tuple(sorted(cues, key=_start))


def load_caption_file(path: str) -> tuple[Cue, ...]:
    """Read and parse a UTF-8 caption file.  Unreadable files give no cues."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as exc:
        log.warning("cannot read captions %s: %s", path, exc)
        return ()
    return parse_captions(text)


# ── Lookup ──────────────────────────────────────────────────────────────────
def last_start_at_or_before(cues: Sequence[Cue], t: float) -> Optional[int]:
    idx = bisect.bisect_right(cues, t, key=_start) - 1
    return idx if idx >= 0 else None


def locate(cues: Sequence[Cue], t: float) -> Optional[int]:
    idx = last_start_at_or_before(cues, t)
    if idx is not None and t <= cues[idx].end:
        return idx
    return None
