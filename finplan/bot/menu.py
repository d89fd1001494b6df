"""Inline keyboards and callback payloads for the questionnaire chat."""

from __future__ import annotations

from typing import Optional

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from finplan.models.questionnaire import QuestionSpec

ACTION_OPTION = "opt"
ACTION_PLAN = "plan"
ACTION_RESTART = "restart"
ACTIONS = (ACTION_OPTION, ACTION_PLAN, ACTION_RESTART)

GET_PLAN_LABEL = "Get My Financial Plan"
RETRY_PLAN_LABEL = "Try Again"
RESTART_LABEL = "Start Over"

# Options per keyboard row; mirrors the wrapping chip layout of the web form.
_OPTIONS_PER_ROW = 2


def cb_option(question_index: int, option_index: int) -> str:
    return f"{ACTION_OPTION}|{question_index}|{option_index}"


def cb_plan(generation: int) -> str:
    return f"{ACTION_PLAN}|{generation}"


def cb_restart() -> str:
    return ACTION_RESTART


def parse_callback_data(raw: str) -> tuple[str, list[int]]:
    """Split callback data into action and integer arguments.

    Returns ``("", [])`` for anything that is not a known action with
    well-formed arguments.
    """
    parts = (raw or "").split("|")
    action = parts[0].strip()
    if action not in ACTIONS:
        return "", []
    args: list[int] = []
    for part in parts[1:]:
        part = part.strip()
        if not part.isdigit():
            return "", []
        args.append(int(part))
    expected = {ACTION_OPTION: 2, ACTION_PLAN: 1, ACTION_RESTART: 0}[action]
    if len(args) != expected:
        return "", []
    return action, args


def options_markup(question_index: int, question: QuestionSpec) -> Optional[InlineKeyboardMarkup]:
    if not question.options:
        return None
    buttons = [
        InlineKeyboardButton(option, callback_data=cb_option(question_index, position))
        for position, option in enumerate(question.options)
    ]
    rows = [buttons[i : i + _OPTIONS_PER_ROW] for i in range(0, len(buttons), _OPTIONS_PER_ROW)]
    return InlineKeyboardMarkup(rows)


def plan_request_markup(generation: int, retry: bool = False) -> InlineKeyboardMarkup:
    label = RETRY_PLAN_LABEL if retry else GET_PLAN_LABEL
    return InlineKeyboardMarkup(
        [
            [InlineKeyboardButton(label, callback_data=cb_plan(generation))],
            [InlineKeyboardButton(RESTART_LABEL, callback_data=cb_restart())],
        ]
    )


def restart_markup() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([[InlineKeyboardButton(RESTART_LABEL, callback_data=cb_restart())]])
