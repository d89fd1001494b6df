from finplan.bot.handlers import render_telegram_html
from finplan.bot.templates import progress_bar, question_text, split_message, start_text, summary_text
from finplan.core.conversation import Progress


def test_start_text_lists_commands() -> None:
    text = start_text()
    assert "/start" in text
    assert "/restart" in text


def test_question_text_shows_progress() -> None:
    text = question_text("What's your age?", Progress(category="Basic Profile", position=2, total=18))
    assert text.splitlines() == [
        "Basic Profile (2 / 18)",
        "\u2593\u2591\u2591\u2591\u2591\u2591\u2591\u2591\u2591\u2591 11%",
        "What's your age?",
    ]


def test_progress_bar_bounds() -> None:
    assert progress_bar(100) == "\u2593" * 10 + " 100%"
    assert progress_bar(33) == "\u2593" * 3 + "\u2591" * 7 + " 33%"
    assert progress_bar(0, width=4) == "\u2591" * 4 + " 0%"


def test_summary_text_lists_rows() -> None:
    text = summary_text([("What's your full name", "Asha"), ("What's your age", "N/A")])
    assert "- What's your full name: Asha" in text
    assert "- What's your age: N/A" in text


def test_render_html_escapes_and_bolds() -> None:
    assert render_telegram_html("**Budget** <50/30/20>") == "<b>Budget</b> &lt;50/30/20&gt;"
    assert render_telegram_html("line 1\nline 2") == "line 1\nline 2"


def test_split_message_respects_limit() -> None:
    text = "\n".join(f"line {i:04d}" for i in range(1000))
    chunks = split_message(text, limit=500)
    assert all(len(chunk) <= 500 for chunk in chunks)
    assert "".join(chunks) == text
    assert split_message("short") == ["short"]


def test_split_message_breaks_long_lines() -> None:
    chunks = split_message("x" * 1200, limit=500)
    assert [len(c) for c in chunks] == [500, 500, 200]
