"""finplan Telegram bot entrypoint."""

from __future__ import annotations

import argparse
import logging

from telegram import BotCommand
from telegram.ext import Application, ApplicationBuilder, CallbackQueryHandler, CommandHandler, MessageHandler, filters

from finplan.adapters.proxy_client import PlanProxyClient
from finplan.bot.handlers import ConversationHandlers
from finplan.config.logging_setup import configure_logging
from finplan.config.questions import QuestionnaireLoadError, load_question_script
from finplan.config.secrets import load_bot_secrets
from finplan.config.settings import SettingsLoadError, load_settings, resolve_config_path
from finplan.secrets.base import SecretStoreError

BOT_COMMANDS = [
    BotCommand("start", "Start the financial health check"),
    BotCommand("restart", "Start over from the first question"),
    BotCommand("summary", "Review your answers so far"),
]


async def _post_init(application: Application) -> None:
    """Register command menu shown in Telegram chat UI."""
    await application.bot.set_my_commands(commands=BOT_COMMANDS)


def main() -> int:
    parser = argparse.ArgumentParser(description="finplan Telegram bot")
    parser.add_argument("--settings", help="Path to settings.yaml (default: config/settings.yaml)")
    parser.add_argument("--questions", help="Path to questions.yaml (default: config/questions.yaml)")
    args = parser.parse_args()

    settings_path = resolve_config_path(args.settings, "FINPLAN_SETTINGS_PATH", "settings.yaml")
    questions_path = resolve_config_path(args.questions, "FINPLAN_QUESTIONS_PATH", "questions.yaml")

    try:
        settings = load_settings(settings_path)
        script = load_question_script(questions_path)
    except (SettingsLoadError, QuestionnaireLoadError) as exc:
        print(
            "Startup failed: configuration is invalid.\n"
            f"- settings: {settings_path}\n"
            f"- questions: {questions_path}\n"
            f"- detail: {exc}"
        )
        return 2

    configure_logging(settings.logging.level)
    logging.info(
        "starting bot settings=%s questions=%s question_count=%s proxy_url=%s",
        settings_path,
        questions_path,
        len(script),
        settings.bot.proxy_url,
    )

    try:
        secrets = load_bot_secrets(settings.secrets)
    except SecretStoreError as exc:
        logging.error("startup blocked by missing secret: %s", exc)
        print(
            "Startup failed: Telegram bot token is missing.\n"
            f"- secret backend: {settings.secrets.backend}\n"
            f"- detail: {exc}\n"
            "Set TELEGRAM_BOT_TOKEN (env backend) or store telegram_bot_token "
            f"under service '{settings.secrets.service_name}' (keychain backend)."
        )
        return 2

    plan_client = PlanProxyClient(
        proxy_url=settings.bot.proxy_url,
        timeout_seconds=settings.bot.request_timeout_seconds,
    )
    handlers = ConversationHandlers(script, plan_client)

    # Concurrent updates let /restart arrive while a plan request is still outstanding.
    app = (
        ApplicationBuilder()
        .token(secrets.telegram_bot_token)
        .concurrent_updates(True)
        .post_init(_post_init)
        .build()
    )

    app.add_handler(CommandHandler("start", handlers.start))
    app.add_handler(CommandHandler("restart", handlers.restart))
    app.add_handler(CommandHandler("summary", handlers.summary))
    app.add_handler(CallbackQueryHandler(handlers.inline_action, pattern=r"^(opt|plan|restart)(\||$)"))
    app.add_handler(MessageHandler(filters.TEXT & (~filters.COMMAND), handlers.answer_text))

    app.run_polling(drop_pending_updates=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
