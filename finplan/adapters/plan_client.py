"""Shared plan client interface."""

from __future__ import annotations

from typing import Mapping, Protocol

from finplan.models.plan import PlanResult


class PlanClient(Protocol):
    def request_plan(self, answers: Mapping[str, str]) -> PlanResult:
        """Return generated plan text or a classified failure; never raise."""
