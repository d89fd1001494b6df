"""Plan request results shared by the proxy, its HTTP client and the bot."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class PlanErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    UPSTREAM = "upstream"
    MALFORMED_RESPONSE = "malformed_response"


@dataclass(frozen=True)
class PlanSuccess:
    plan_text: str


@dataclass(frozen=True)
class PlanFailure:
    kind: PlanErrorKind
    message: str
    status_code: Optional[int] = None


PlanResult = Union[PlanSuccess, PlanFailure]
