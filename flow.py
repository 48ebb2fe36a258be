"""
flow.py – question / outcome state machine.

    QUESTION ──finished──▶ awaiting choice ──success──▶ OUTCOME_SUCCESS
                                           └─failure──▶ OUTCOME_FAILURE
    OUTCOME_SUCCESS ──finished──▶ next QUESTION, or complete
    OUTCOME_FAILURE ──finished──▶ same QUESTION again

The controller owns `index` and `phase`; nothing else mutates them.
Choices only count while awaiting one, and the choice panel is hidden
whenever a bundle is loaded.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol

from errors import ConfigurationError
from sequence import Choice, Phase, QuestionSet

log = logging.getLogger(__name__)

_OUTCOME_FOR = {
    Choice.SUCCESS: Phase.OUTCOME_SUCCESS,
    Choice.FAILURE: Phase.OUTCOME_FAILURE,
}


class ChoiceUI(Protocol):
    def show(self) -> None: ...
    def hide(self) -> None: ...


class FlowController:
    def __init__(self,
                 questions: List[QuestionSet],
                 session,
                 choices: ChoiceUI,
                 on_complete: Optional[Callable[[], None]] = None):
        self.questions = list(questions)
        self.session = session
        self.choices = choices
        self.on_complete = on_complete

        self.index = 0
        self.phase = Phase.QUESTION
        self.attempt = 0
        self.awaiting_choice = False
        self.started = False

        session.on_finished = self.bundle_finished

    # ── state -------------------------------------------------------------
    @property
    def complete(self) -> bool:
        return self.index >= len(self.questions)

    # ── transitions -------------------------------------------------------
    def start(self) -> None:
        if not self.questions:
            raise ConfigurationError("sequence has no questions")
        if not self.questions[0].question_video:
            raise ConfigurationError("question 1 has no video clip")

        self.index = 0
        self.started = True
        self._play_question()

    def choose(self, choice: Choice) -> None:
        if not self.awaiting_choice:
            log.debug("ignoring %s choice while not awaiting one", choice.value)
            return
        log.info("question %d: operator chose %s", self.index + 1, choice.value)
        self._play(_OUTCOME_FOR[choice])

    def bundle_finished(self, phase: Phase) -> None:
        if phase is Phase.QUESTION:
            self.awaiting_choice = True
            self.choices.show()

        elif phase is Phase.OUTCOME_SUCCESS:
            self.index += 1
            self.attempt = 0
            if not self.complete and self.questions[self.index].question_video:
                self._play_question()
            else:
                self._finish()

        elif phase is Phase.OUTCOME_FAILURE:
            self._play_question()

    # ── internals ---------------------------------------------------------
    def _play_question(self) -> None:
        self.attempt += 1
        self._play(Phase.QUESTION)

    def _play(self, phase: Phase) -> None:
        self.awaiting_choice = False
        self.choices.hide()
        self.phase = phase

        bundle = self.questions[self.index].bundle(phase)
        if phase is not Phase.QUESTION and not bundle.video:
            # no outcome clip: behave as if it played and ended
            log.info("question %d has no %s clip, skipping", self.index + 1, phase.value)
            self.bundle_finished(phase)
            return
        self.session.load(bundle, phase)

    def _finish(self) -> None:
        self.index = len(self.questions)
        self.awaiting_choice = False
        self.choices.hide()
        self.session.stop()
        log.info("sequence complete")
        if self.on_complete:
            self.on_complete()
