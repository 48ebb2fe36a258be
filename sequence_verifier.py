#!/usr/bin/env python3
"""
sequence_verifier.py – sanity pass over a sequence file.

For every question set and phase: referenced files exist, the video
decodes and has a length, captions parse and stay inside the clip.
Prints one line per question set and returns the problem list.
"""
from __future__ import annotations

import logging
import os
import sys

import av

from captions import load_caption_file
from errors import ConfigurationError
from sequence import Phase, QuestionSet, load_sequence

log = logging.getLogger(__name__)

# caption may overrun the clip by this much before it is reported
CAPTION_SLACK_SEC = 0.5


# ---------- probe ---------------------------------------------------------
def _probe_seconds(fp: str) -> float:
    """Clip length in seconds; 0.0 when the file cannot be decoded."""
    try:
        with av.open(fp) as c:
            vs = next((s for s in c.streams if s.type == "video"), None)
            if not vs:
                return 0.0
            if vs.duration and vs.time_base:
                return float(vs.duration * vs.time_base)
            if c.duration:
                return c.duration / av.time_base
            if vs.frames and vs.average_rate:
                return vs.frames / float(vs.average_rate)
    except (av.FFmpegError, OSError) as exc:
        log.debug("probe failed for %s: %s", fp, exc)
    return 0.0


# ---------- checks --------------------------------------------------------
def check_question_set(qs: QuestionSet, number: int) -> list[str]:
    problems: list[str] = []
    for phase in Phase:
        b     = qs.bundle(phase)
        where = f"Q{number:02d} {phase.value}"

        if b.video is None:
            if phase is Phase.QUESTION:
                problems.append(f"{where}: no video clip")
            continue

        for label, fp in (("video", b.video), ("narration", b.narration),
                          ("music", b.music), ("captions", b.captions)):
            if fp and not os.path.isfile(fp):
                problems.append(f"{where}: missing {label} {fp}")

        length = _probe_seconds(b.video) if os.path.isfile(b.video) else 0.0
        if os.path.isfile(b.video) and length <= 0.0:
            problems.append(f"{where}: cannot read length of {b.video}")

        if b.captions and os.path.isfile(b.captions):
            cues = load_caption_file(b.captions)
            last_end = max((c.end for c in cues), default=0.0)
            if not cues:
                problems.append(f"{where}: no usable cues in {b.captions}")
            elif length and last_end > length + CAPTION_SLACK_SEC:
                problems.append(
                    f"{where}: captions run to {last_end:.2f}s, "
                    f"clip is {length:.2f}s"
                )
    return problems


def verify_sequence(path: str) -> list[str]:
    questions = load_sequence(path)
    if not questions:
        return ["sequence has no questions"]

    problems: list[str] = []
    for n, qs in enumerate(questions, 1):
        found = check_question_set(qs, n)
        ok = "✓" if not found else "✗"
        print(f"Q {n:>2}:  {ok}  {qs.question_video or '(no video)'}")
        problems += found
    for p in problems:
        log.warning(p)
    return problems


# -------------------------------------------------------------------------
def main(argv: list[str] | None = None) -> int:
    import argparse
    import config
    from runtime_log import configure_logging

    ap = argparse.ArgumentParser(description="Check a question sequence file")
    ap.add_argument("sequence", nargs="?", default=config.SEQUENCE_PATH,
                    help=f"sequence JSON (default: {config.SEQUENCE_PATH})")
    args = ap.parse_args(argv)

    configure_logging(config.LOG_LEVEL)
    try:
        problems = verify_sequence(args.sequence)
    except ConfigurationError as exc:
        log.error("%s: %s", exc.label(), exc.message)
        return exc.exit_code
    return 1 if problems else 0


if __name__ == "__main__":
    sys.exit(main())
