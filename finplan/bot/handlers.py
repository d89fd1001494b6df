"""Telegram handlers driving the questionnaire conversation."""

from __future__ import annotations

import asyncio
import html
import logging
import re
import time
from typing import Any, Optional

from telegram import InlineKeyboardMarkup, Update
from telegram.constants import ParseMode
from telegram.error import BadRequest
from telegram.ext import ContextTypes

from finplan.adapters.plan_client import PlanClient
from finplan.bot.menu import (
    ACTION_OPTION,
    ACTION_PLAN,
    ACTION_RESTART,
    options_markup,
    parse_callback_data,
    plan_request_markup,
    restart_markup,
)
from finplan.bot.templates import (
    already_generating_text,
    choose_option_text,
    empty_answer_text,
    finished_text,
    option_unavailable_text,
    plan_delivered_text,
    question_text,
    split_message,
    start_text,
    summary_text,
)
from finplan.core.conversation import ConversationController, ConversationError
from finplan.models.plan import PlanFailure
from finplan.models.questionnaire import ConversationPhase, QuestionScript, Speaker

LOGGER = logging.getLogger(__name__)

CONTROLLER_KEY = "conversation"
RENDERED_KEY = "rendered_entries"


def _chat_id(update: Update) -> int:
    assert update.effective_chat is not None
    return int(update.effective_chat.id)


def render_telegram_html(text: str) -> str:
    # Escape model/user text first, then allow a minimal Markdown-style bold: **text**.
    escaped = html.escape(text or "")

    def _bold_sub(match: re.Match[str]) -> str:
        inner = match.group(1)
        if not inner.strip():
            return match.group(0)
        return f"<b>{inner}</b>"

    return re.sub(r"\*\*(.+?)\*\*", _bold_sub, escaped)


class ConversationHandlers:
    def __init__(self, script: QuestionScript, plan_client: PlanClient) -> None:
        self.script = script
        self.plan_client = plan_client

    def _controller(self, context: ContextTypes.DEFAULT_TYPE) -> tuple[ConversationController, bool]:
        controller = context.chat_data.get(CONTROLLER_KEY)
        if isinstance(controller, ConversationController):
            return controller, False
        controller = ConversationController(self.script)
        context.chat_data[CONTROLLER_KEY] = controller
        context.chat_data[RENDERED_KEY] = 0
        return controller, True

    async def _reply(
        self,
        update: Update,
        text: str,
        inline_markup: Optional[InlineKeyboardMarkup] = None,
    ) -> None:
        message: Any = update.message
        if message is None and update.callback_query is not None:
            message = update.callback_query.message
        if message is None:
            return
        chunks = split_message(text)
        for position, chunk in enumerate(chunks):
            reply_markup = inline_markup if position == len(chunks) - 1 else None
            try:
                await message.reply_text(
                    render_telegram_html(chunk),
                    parse_mode=ParseMode.HTML,
                    disable_web_page_preview=True,
                    reply_markup=reply_markup,
                )
            except BadRequest:
                await message.reply_text(chunk, reply_markup=reply_markup)

    def _decorate(self, controller: ConversationController, text: str) -> tuple[str, Optional[InlineKeyboardMarkup]]:
        phase = controller.phase
        if phase == ConversationPhase.IN_PROGRESS:
            question = controller.current_question
            progress = controller.progress
            if question is not None and progress is not None and text == question.prompt:
                return question_text(text, progress), options_markup(controller.current_index, question)
        if phase == ConversationPhase.PLAN_READY:
            return text, restart_markup()
        if phase == ConversationPhase.PLAN_FAILED:
            return text, plan_request_markup(controller.generation, retry=True)
        return text, None

    async def _render(self, update: Update, context: ContextTypes.DEFAULT_TYPE, controller: ConversationController) -> None:
        """Send assistant transcript entries not yet shown in this chat.

        User entries are skipped: typed answers are already visible and option
        choices are echoed on the question message itself.
        """
        offset = int(context.chat_data.get(RENDERED_KEY, 0))
        entries = [e for e in controller.transcript_since(offset) if e.speaker == Speaker.ASSISTANT]
        context.chat_data[RENDERED_KEY] = len(controller.transcript)

        for position, entry in enumerate(entries):
            text, markup = entry.text, None
            if position == len(entries) - 1:
                text, markup = self._decorate(controller, entry.text)
            await self._reply(update, text, inline_markup=markup)

        if entries and controller.phase == ConversationPhase.AWAITING_PLAN_REQUEST:
            await self._reply(
                update,
                summary_text(controller.summary()),
                inline_markup=plan_request_markup(controller.generation),
            )

    async def _restart(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        controller, created = self._controller(context)
        if not created:
            was_generating = controller.is_generating
            controller.restart()
            context.chat_data[RENDERED_KEY] = 0
            LOGGER.info(
                "conversation restarted chat_id=%s generation=%s orphaned_request=%s",
                _chat_id(update),
                controller.generation,
                was_generating,
            )
        await self._render(update, context, controller)

    async def _request_plan(
        self,
        update: Update,
        context: ContextTypes.DEFAULT_TYPE,
        controller: ConversationController,
    ) -> None:
        try:
            ticket = controller.begin_plan_request()
        except ConversationError:
            if controller.is_generating:
                await self._reply(update, already_generating_text())
            elif controller.phase == ConversationPhase.PLAN_READY:
                await self._reply(update, plan_delivered_text())
            else:
                await self._reply(update, option_unavailable_text())
            return

        await self._render(update, context, controller)
        LOGGER.info("plan requested chat_id=%s answers=%s", _chat_id(update), len(ticket.answers))
        started_at = time.time()
        result = await asyncio.to_thread(self.plan_client.request_plan, ticket.answers)
        elapsed_ms = int((time.time() - started_at) * 1000)

        if not controller.complete_plan_request(ticket, result):
            LOGGER.info("plan result discarded chat_id=%s elapsed_ms=%s", _chat_id(update), elapsed_ms)
            return

        if isinstance(result, PlanFailure):
            LOGGER.warning(
                "plan failed chat_id=%s kind=%s status=%s elapsed_ms=%s",
                _chat_id(update),
                result.kind.value,
                result.status_code,
                elapsed_ms,
            )
        else:
            LOGGER.info("plan delivered chat_id=%s plan_len=%s elapsed_ms=%s", _chat_id(update), len(result.plan_text), elapsed_ms)
        await self._render(update, context, controller)

    async def start(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await self._reply(update, start_text())
        await self._restart(update, context)

    async def restart(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await self._restart(update, context)

    async def summary(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        controller, created = self._controller(context)
        if created:
            await self._render(update, context, controller)
            return
        await self._reply(update, summary_text(controller.summary()))

    async def answer_text(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if update.message is None:
            return
        controller, created = self._controller(context)
        if created:
            # First contact without /start: open the conversation instead of consuming the text.
            await self._render(update, context, controller)
            return

        if controller.is_generating:
            await self._reply(update, already_generating_text())
            return
        if controller.is_complete:
            await self._reply(update, finished_text())
            return

        question = controller.current_question
        if not controller.advance(update.message.text or ""):
            hint = choose_option_text() if question is not None and question.options else empty_answer_text()
            await self._reply(update, hint)
            return

        LOGGER.info(
            "answer recorded chat_id=%s question=%s index=%s",
            _chat_id(update),
            question.id if question is not None else "",
            controller.current_index,
        )
        await self._render(update, context, controller)

    async def inline_action(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        query = update.callback_query
        if query is None:
            return

        action, args = parse_callback_data(query.data or "")
        if not action:
            await query.answer("Invalid action", show_alert=False)
            return

        controller, created = self._controller(context)
        if created:
            await query.answer()
            await self._render(update, context, controller)
            return

        if action == ACTION_RESTART:
            await query.answer()
            await self._restart(update, context)
            return

        if action == ACTION_PLAN:
            if args[0] != controller.generation:
                await query.answer(option_unavailable_text(), show_alert=False)
                return
            if controller.phase == ConversationPhase.PLAN_READY:
                await query.answer(plan_delivered_text(), show_alert=False)
                await self._clear_buttons(query)
                return
            if controller.is_generating:
                await query.answer(already_generating_text(), show_alert=False)
                return
            await query.answer()
            await self._clear_buttons(query)
            await self._request_plan(update, context, controller)
            return

        if action == ACTION_OPTION:
            question_index, option_index = args
            question = controller.current_question
            if (
                question is None
                or question_index != controller.current_index
                or option_index >= len(question.options)
            ):
                await query.answer(option_unavailable_text(), show_alert=False)
                return
            option = question.options[option_index]
            # No await between the index check and advance: a repeated tap must see the new index.
            if not controller.advance(option, expected_index=question_index):
                await query.answer(option_unavailable_text(), show_alert=False)
                return
            await query.answer()
            await self._mark_choice(query, option)
            LOGGER.info(
                "answer recorded chat_id=%s question=%s index=%s",
                _chat_id(update),
                question.id,
                controller.current_index,
            )
            await self._render(update, context, controller)

    async def _clear_buttons(self, query: Any) -> None:
        try:
            await query.edit_message_reply_markup(reply_markup=None)
        except BadRequest as exc:
            LOGGER.debug("could not clear plan buttons: %s", exc)

    async def _mark_choice(self, query: Any, option: str) -> None:
        text = getattr(query.message, "text", None)
        try:
            if text:
                await query.edit_message_text(f"{text}\n\n» {option}")
            else:
                await query.edit_message_reply_markup(reply_markup=None)
        except BadRequest as exc:
            LOGGER.debug("could not mark chosen option: %s", exc)
