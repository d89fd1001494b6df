"""Question script loader (config/questions.yaml)."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from finplan.models.questionnaire import QuestionScript


class QuestionnaireLoadError(RuntimeError):
    """Raised when the question script cannot be loaded."""


def load_question_script(path: Path) -> QuestionScript:
    if not path.exists():
        raise QuestionnaireLoadError(f"question script not found: {path}")

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise QuestionnaireLoadError(f"question script is not valid YAML: {path}") from exc
    if not isinstance(raw, dict):
        raise QuestionnaireLoadError("question script root must be an object")

    try:
        return QuestionScript.model_validate(raw)
    except ValidationError as exc:
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        detail = first.get("msg", str(exc))
        raise QuestionnaireLoadError(f"invalid question script at {location or '<root>'}: {detail}") from exc
