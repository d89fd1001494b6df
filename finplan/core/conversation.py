"""Linear questionnaire state machine.

One controller serves one chat session. It walks the fixed question script in
order, records one answer per question, keeps an append-only transcript and
then tracks the single outstanding plan request. No transition performs I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from finplan.models.plan import PlanFailure, PlanResult, PlanSuccess
from finplan.models.questionnaire import (
    ConversationPhase,
    ConversationState,
    QuestionScript,
    QuestionSpec,
    Speaker,
    TranscriptEntry,
)

GENERATING_TEXT = "Generating your personalized plan..."
PLAN_READY_TEXT = "**Your Personalized Financial Plan**"
PLAN_FAILED_TEMPLATE = "Failed to generate plan. {message}. Please try again later."
MISSING_ANSWER = "N/A"


class ConversationError(RuntimeError):
    """Raised when a transition is requested from the wrong phase."""


@dataclass(frozen=True)
class PlanTicket:
    generation: int
    answers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Progress:
    category: str
    position: int
    total: int

    @property
    def percent(self) -> int:
        return round(self.position / self.total * 100)


class ConversationController:
    def __init__(self, script: QuestionScript) -> None:
        self._script = script
        self._generation = 0
        self._reset()

    def _reset(self) -> None:
        self._index = 0
        self._answers: dict[str, str] = {}
        self._transcript: list[TranscriptEntry] = []
        self._phase = ConversationPhase.IN_PROGRESS
        self._plan_text: Optional[str] = None
        self._error_message: Optional[str] = None
        self._say(self._script.greeting)
        self._say(self._script.questions[0].prompt)

    def _say(self, text: str) -> None:
        self._transcript.append(TranscriptEntry(speaker=Speaker.ASSISTANT, text=text))

    @property
    def script(self) -> QuestionScript:
        return self._script

    @property
    def state(self) -> ConversationState:
        return ConversationState(current_index=self._index, phase=self._phase)

    @property
    def phase(self) -> ConversationPhase:
        return self._phase

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def answers(self) -> dict[str, str]:
        return dict(self._answers)

    @property
    def transcript(self) -> tuple[TranscriptEntry, ...]:
        return tuple(self._transcript)

    def transcript_since(self, offset: int) -> list[TranscriptEntry]:
        return list(self._transcript[max(offset, 0):])

    @property
    def plan_text(self) -> Optional[str]:
        return self._plan_text

    @property
    def error_message(self) -> Optional[str]:
        return self._error_message

    @property
    def current_question(self) -> Optional[QuestionSpec]:
        if self._phase != ConversationPhase.IN_PROGRESS:
            return None
        return self._script.questions[self._index]

    @property
    def progress(self) -> Optional[Progress]:
        question = self.current_question
        if question is None:
            return None
        return Progress(category=question.category, position=self._index + 1, total=len(self._script))

    @property
    def is_complete(self) -> bool:
        return self._phase != ConversationPhase.IN_PROGRESS

    @property
    def is_generating(self) -> bool:
        return self._phase == ConversationPhase.PLAN_REQUESTED

    def advance(self, answer: str, expected_index: Optional[int] = None) -> bool:
        """Record an answer for the current question.

        Returns False, leaving every piece of state untouched, when the
        conversation is not collecting answers, the answer is rejected, or
        ``expected_index`` names a question other than the current one.
        """
        question = self.current_question
        if question is None or not question.accepts(answer):
            return False
        if expected_index is not None and expected_index != self._index:
            return False

        self._transcript.append(TranscriptEntry(speaker=Speaker.USER, text=answer))
        self._answers[question.id] = answer
        self._index += 1

        if self._index < len(self._script):
            self._say(self._script.questions[self._index].prompt)
        else:
            self._phase = ConversationPhase.AWAITING_PLAN_REQUEST
            self._say(self._script.closing)
        return True

    def restart(self) -> None:
        # A new generation orphans any plan request still in flight.
        self._generation += 1
        self._reset()

    def begin_plan_request(self) -> PlanTicket:
        if self._phase == ConversationPhase.PLAN_REQUESTED:
            raise ConversationError("plan request already in progress")
        if self._phase not in (ConversationPhase.AWAITING_PLAN_REQUEST, ConversationPhase.PLAN_FAILED):
            raise ConversationError(f"cannot request a plan in phase {self._phase.value}")

        self._phase = ConversationPhase.PLAN_REQUESTED
        self._plan_text = None
        self._error_message = None
        self._say(GENERATING_TEXT)
        return PlanTicket(generation=self._generation, answers=dict(self._answers))

    def complete_plan_request(self, ticket: PlanTicket, result: PlanResult) -> bool:
        """Apply a plan result; stale tickets from before a restart are ignored."""
        if ticket.generation != self._generation or self._phase != ConversationPhase.PLAN_REQUESTED:
            return False

        if isinstance(result, PlanSuccess):
            self._phase = ConversationPhase.PLAN_READY
            self._plan_text = result.plan_text
            self._say(PLAN_READY_TEXT)
            self._say(result.plan_text)
        elif isinstance(result, PlanFailure):
            self._phase = ConversationPhase.PLAN_FAILED
            self._error_message = PLAN_FAILED_TEMPLATE.format(message=result.message.rstrip("."))
            self._say(self._error_message)
        else:
            raise TypeError(f"unsupported plan result: {type(result).__name__}")
        return True

    def summary(self) -> list[tuple[str, str]]:
        rows: list[tuple[str, str]] = []
        for question in self._script.questions:
            label = question.prompt.split("?", 1)[0]
            rows.append((label, self._answers.get(question.id) or MISSING_ANSWER))
        return rows
