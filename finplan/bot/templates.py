"""Telegram response templates."""

from __future__ import annotations

from finplan.core.conversation import Progress

TELEGRAM_MESSAGE_LIMIT = 4096
_PROGRESS_WIDTH = 10


def start_text() -> str:
    return (
        "Financial Health Check\n"
        "Your Personal AI Advisor\n"
        "Answer each question by typing or tapping an option.\n"
        "Commands: /start to begin, /restart to start over, /summary to review your answers."
    )


def progress_bar(percent: int, width: int = _PROGRESS_WIDTH) -> str:
    filled = min(width, max(0, round(percent * width / 100)))
    return "\u2593" * filled + "\u2591" * (width - filled) + f" {percent}%"


def question_text(prompt: str, progress: Progress) -> str:
    header = f"{progress.category} ({progress.position} / {progress.total})"
    return f"{header}\n{progress_bar(progress.percent)}\n{prompt}"


def summary_text(rows: list[tuple[str, str]]) -> str:
    lines = ["**Your Financial Summary**"]
    for label, answer in rows:
        lines.append(f"- {label}: {answer}")
    return "\n".join(lines)


def choose_option_text() -> str:
    return "Please choose one of the options above."


def empty_answer_text() -> str:
    return "Please type an answer to continue."


def option_unavailable_text() -> str:
    return "That option is no longer available."


def plan_delivered_text() -> str:
    return "Your plan has already been delivered. Tap Start Over or send /restart to begin again."


def already_generating_text() -> str:
    return "Your plan is already being generated. Please wait."


def finished_text() -> str:
    return "Your answers are complete. Use the buttons above or /restart to start over."


def split_message(text: str, limit: int = TELEGRAM_MESSAGE_LIMIT) -> list[str]:
    """Split long text on line boundaries into Telegram-sized chunks."""
    if len(text) <= limit:
        return [text]

    chunks: list[str] = []
    current = ""
    for line in text.splitlines(keepends=True):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        if len(current) + len(line) > limit:
            chunks.append(current)
            current = ""
        current += line
    if current:
        chunks.append(current)
    return chunks
