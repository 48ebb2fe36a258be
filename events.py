#!/usr/bin/env python3
"""
events.py  – central hub

• Translates raw Pygame events to high-level action dicts.
• Exposes a thread-safe queue so the media backends (GStreamer bus
  thread) and the web remote inject the same actions.

Actions
-------
{"type": "quit"}
{"type": "toggle_fullscreen"}
{"type": "toggle_overlay"}
{"type": "choice", "choice": "success" | "failure"}
{"type": "adjust_offset", "delta": seconds}
{"type": "media_prepared", "tag": n}
{"type": "media_finished", "tag": n}
"""

from __future__ import annotations
import queue
from pygame.locals import *

Action = dict      # alias for readability

_SUCCESS_KEYS = (K_RIGHT, K_y, K_1)
_FAILURE_KEYS = (K_LEFT, K_n, K_2)


class EventManager:
    _fifo: "queue.Queue[Action]" = queue.Queue()      # global, thread-safe

    # ── SDL / keyboard path ────────────────────────────────────────────
    @classmethod
    def handle(cls, event, choice_panel) -> None:
        """Translate one Pygame event → action and enqueue it."""
        act = cls._translate_pygame(event, choice_panel)
        if act:
            cls._fifo.put(act)

    # ── external / programmatic path ───────────────────────────────────
    @classmethod
    def post(cls, action: Action) -> None:
        """
        Any thread may call this to inject an already-formed action dict, e.g.:
            EventManager.post({"type": "choice", "choice": "success"})
        """
        cls._fifo.put(action)

    # ── main-loop consumer ─────────────────────────────────────────────
    @classmethod
    def poll(cls) -> Action | None:
        """Return next queued action or None (non-blocking)."""
        try:
            return cls._fifo.get_nowait()
        except queue.Empty:
            return None

    @classmethod
    def clear(cls) -> None:
        while cls.poll() is not None:
            pass

    # ── internal translator ───────────────────────────────────────────
    @staticmethod
    def _translate_pygame(event, choice_panel) -> Action | None:
        if event.type == QUIT:
            return {"type": "quit"}

        if event.type == KEYDOWN:
            if event.key in (K_ESCAPE, K_q):
                return {"type": "quit"}
            if event.key == K_i:
                return {"type": "toggle_overlay"}
            if event.key == K_f:
                return {"type": "toggle_fullscreen"}
            if choice_panel.visible:
                if event.key in _SUCCESS_KEYS:
                    return {"type": "choice", "choice": "success"}
                if event.key in _FAILURE_KEYS:
                    return {"type": "choice", "choice": "failure"}

        if event.type == MOUSEBUTTONDOWN and event.button == 1 and choice_panel.visible:
            hit = choice_panel.hit(event.pos)
            if hit:
                return {"type": "choice", "choice": hit}

        return None
