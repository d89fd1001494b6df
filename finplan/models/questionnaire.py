"""Questionnaire contract for the finplan chat.

The question script is loaded once at startup and never mutated. Every
question is either free text (optionally hinted as numeric) or a single
select with a fixed, ordered option list; options exist only on the latter.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_QUESTION_ID_PATTERN = r"^[A-Za-z][A-Za-z0-9_]{0,63}$"


class InputKind(str, Enum):
    FREE_TEXT = "free_text"
    NUMERIC = "numeric"
    SINGLE_SELECT = "single_select"


class Speaker(str, Enum):
    ASSISTANT = "assistant"
    USER = "user"


class ConversationPhase(str, Enum):
    IN_PROGRESS = "in_progress"
    AWAITING_PLAN_REQUEST = "awaiting_plan_request"
    PLAN_REQUESTED = "plan_requested"
    PLAN_READY = "plan_ready"
    PLAN_FAILED = "plan_failed"


class FreeTextQuestion(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(pattern=_QUESTION_ID_PATTERN)
    prompt: str = Field(min_length=1, max_length=1000)
    category: str = Field(min_length=1, max_length=100)
    input_kind: Literal["free_text", "numeric"] = "free_text"

    @property
    def options(self) -> tuple[str, ...]:
        return ()

    def accepts(self, answer: str) -> bool:
        # Numeric is only a hint for the input widget; the text is not parsed.
        return bool((answer or "").strip())


class SingleSelectQuestion(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(pattern=_QUESTION_ID_PATTERN)
    prompt: str = Field(min_length=1, max_length=1000)
    category: str = Field(min_length=1, max_length=100)
    input_kind: Literal["single_select"] = "single_select"
    options: tuple[str, ...] = Field(min_length=1, max_length=20)

    @field_validator("options")
    @classmethod
    def validate_options(cls, options: tuple[str, ...]) -> tuple[str, ...]:
        for option in options:
            if not option.strip():
                raise ValueError("option must not be blank")
        if len(set(options)) != len(options):
            raise ValueError("options must be distinct")
        return options

    def accepts(self, answer: str) -> bool:
        return answer in self.options


QuestionSpec = Annotated[
    Union[FreeTextQuestion, SingleSelectQuestion],
    Field(discriminator="input_kind"),
]


class QuestionScript(BaseModel):
    """Ordered, immutable question table plus the fixed assistant lines."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    greeting: str = Field(min_length=1)
    closing: str = Field(min_length=1)
    questions: tuple[QuestionSpec, ...] = Field(min_length=1)

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "QuestionScript":
        seen: set[str] = set()
        for question in self.questions:
            if question.id in seen:
                raise ValueError(f"duplicate question id: {question.id}")
            seen.add(question.id)
        return self

    def __len__(self) -> int:
        return len(self.questions)

    def ids(self) -> list[str]:
        return [q.id for q in self.questions]


class TranscriptEntry(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    speaker: Speaker
    text: str


class ConversationState(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    current_index: int = Field(ge=0)
    phase: ConversationPhase
