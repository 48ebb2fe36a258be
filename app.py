#!/usr/bin/env python3
"""
app.py – branching narrative player

One VideoPlayer plus two AudioTracks (narration, music) play the bundle
the FlowController selects.  Everything runs on the pygame loop: backend
signals, key presses and remote commands arrive as actions through
events.py and are applied between frames.
"""
from __future__ import annotations

import logging
from typing import Optional

import gi  # silence version warning
gi.require_version("Gst", "1.0")
from gi.repository import Gst

import pygame

import config
from audio_player  import AudioTrack
from errors        import ConfigurationError
from events        import EventManager
from flow          import FlowController
from overlays      import CaptionOverlay, ChoicePanel, draw_status
from renderer      import render_frame
from sequence      import Choice, QuestionSet, load_sequence
from session       import PlaybackSession
from subtitles     import SubtitleDriver
from video_player  import VideoPlayer, stop_bus_loop

log = logging.getLogger(__name__)


# ── main application ───────────────────────────────────────────────────────
class QuizPlayer:
    def __init__(self, questions: Optional[list[QuestionSet]] = None):
        if questions is None:
            questions = load_sequence(config.SEQUENCE_PATH)
        Gst.init(None)

        # window ----------------------------------------------------------
        pygame.init()
        self.screen = self._set_mode()
        pygame.display.set_caption("branchplay")
        self.clock = pygame.time.Clock()

        # media backends --------------------------------------------------
        self.video     = VideoPlayer()
        self.narration = AudioTrack("narration")
        self.music     = AudioTrack("music")

        # overlays --------------------------------------------------------
        self.captions = CaptionOverlay()
        self.choices  = ChoicePanel()

        # core state ------------------------------------------------------
        self.subtitles = SubtitleDriver(
            self.captions,
            offset=config.SUBTITLE_OFFSET_SEC,
            clear_in_gaps=config.CLEAR_CAPTIONS_IN_GAPS,
        )
        self.session = PlaybackSession(
            self.video, self.narration, self.music, self.subtitles)
        self.flow = FlowController(
            questions, self.session, self.choices, on_complete=self._on_complete)
        self.running = False

    def _set_mode(self) -> pygame.Surface:
        screen = pygame.display.set_mode(
            (0, 0) if config.FULLSCREEN else config.WINDOWED_SIZE,
            pygame.FULLSCREEN if config.FULLSCREEN else 0,
        )
        pygame.mouse.set_visible(not config.FULLSCREEN)
        return screen

    def _on_complete(self):
        if config.QUIT_ON_COMPLETE:
            EventManager.post({"type": "quit"})

    # ── action dispatch ---------------------------------------------------
    def dispatch(self, act: dict) -> None:
        t = act["type"]
        if t == "quit":
            self.running = False
        elif t == "media_prepared":
            self.session.handle_prepared(act["tag"])
        elif t == "media_finished":
            self.session.handle_finished(act["tag"])
        elif t == "choice":
            self.flow.choose(Choice(act["choice"]))
        elif t == "toggle_overlay":
            config.SHOW_OVERLAYS ^= True
        elif t == "toggle_fullscreen":
            config.FULLSCREEN ^= True
            self.screen = self._set_mode()
        elif t == "adjust_offset":
            self.subtitles.offset += act.get("delta", 0.0)
            log.info("subtitle offset now %+.0f ms", self.subtitles.offset * 1000.0)
        else:
            log.debug("unknown action %r", act)

    # ── main loop ---------------------------------------------------------
    def run(self) -> None:
        try:
            self.flow.start()
        except ConfigurationError:
            self.close()
            raise

        self.running = True
        while self.running:
            for e in pygame.event.get():
                EventManager.handle(e, self.choices)

            # drain queued actions (keys, backend signals, remote)
            while self.running and (act := EventManager.poll()):
                self.dispatch(act)

            self.subtitles.tick(self.session.clock())

            # draw
            render_frame(self.screen, self.video.decode_frame(), self.video.sar)
            self.captions.draw(self.screen)
            self.choices.draw(self.screen)
            draw_status(self.screen, self.flow)

            pygame.display.flip()
            self.clock.tick(config.FPS)

        self.close()

    def close(self) -> None:
        self.session.stop()
        self.video.close()
        self.narration.close()
        self.music.close()
        stop_bus_loop()
        # drop actions still queued for this player
        EventManager.clear()
        pygame.quit()


if __name__ == "__main__":
    QuizPlayer().run()
