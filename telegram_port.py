"""
Telegram render port — draws a chat's widget as Telegram messages.

  - suggestion panel: one message with a button per place (+ close button),
    edited in place while it stays open, deleted when hidden
  - loading indicator: typing action plus a transient "Loading…" message
  - error banner / weather card: plain messages
"""

from __future__ import annotations
import asyncio
import logging
from typing import Optional

from telegram import InlineKeyboardButton, InlineKeyboardMarkup
from telegram.constants import ChatAction
from telegram.error import TelegramError

from models import PlaceCandidate, WeatherView
from render import RenderPort

log = logging.getLogger(__name__)

PICK_PREFIX = "pick:"
DISMISS = "dismiss"
SUGGESTIONS_TEXT = "Did you mean:"
LOADING_TEXT = "Loading…"


def suggestion_keyboard(candidates: list[PlaceCandidate]) -> InlineKeyboardMarkup:
    rows = [
        [InlineKeyboardButton(c.label, callback_data=f"{PICK_PREFIX}{i}")]
        for i, c in enumerate(candidates)
    ]
    rows.append([InlineKeyboardButton("✕ Close", callback_data=DISMISS)])
    return InlineKeyboardMarkup(rows)


def format_weather_card(view: WeatherView) -> str:
    return (
        f"{view.city_label}\n"
        f"{view.date_label}\n\n"
        f"{view.temperature}°C  {view.description}\n"
        f"Feels like: {view.feels_like}\n"
        f"Humidity: {view.humidity}\n"
        f"Wind: {view.wind_speed}"
    )


class TelegramRenderPort(RenderPort):
    def __init__(self, bot, chat_id: int):
        self.bot = bot
        self.chat_id = chat_id
        self.suggestions_message_id: Optional[int] = None
        self.loading_message_id: Optional[int] = None
        # one panel per chat: show/hide must not interleave around Bot API awaits
        self._panel_lock = asyncio.Lock()

    async def show_suggestions(self, candidates):
        async with self._panel_lock:
            await self._show_panel(candidates)

    async def hide_suggestions(self):
        async with self._panel_lock:
            message_id, self.suggestions_message_id = self.suggestions_message_id, None
            await self._delete(message_id)

    async def _show_panel(self, candidates):
        markup = suggestion_keyboard(candidates)
        if self.suggestions_message_id:
            try:
                await self.bot.edit_message_text(
                    SUGGESTIONS_TEXT,
                    chat_id=self.chat_id,
                    message_id=self.suggestions_message_id,
                    reply_markup=markup,
                )
                return
            except TelegramError as e:
                # deleted by the user, too old to edit, or unchanged
                log.debug(f"Could not edit suggestions in chat {self.chat_id}: {e}")
                await self._delete(self.suggestions_message_id)
        message = await self._send(SUGGESTIONS_TEXT, reply_markup=markup)
        self.suggestions_message_id = message.message_id if message else None

    async def set_loading(self, loading):
        if loading:
            if self.loading_message_id:
                return
            try:
                await self.bot.send_chat_action(chat_id=self.chat_id, action=ChatAction.TYPING)
            except TelegramError as e:
                log.debug(f"Chat action failed in chat {self.chat_id}: {e}")
            message = await self._send(LOADING_TEXT)
            self.loading_message_id = message.message_id if message else None
        else:
            message_id, self.loading_message_id = self.loading_message_id, None
            await self._delete(message_id)

    async def show_error(self, message):
        # chat history cannot un-show a banner, so clearing is a no-op
        if message:
            await self._send(f"⚠️ {message}")

    async def show_weather(self, view):
        await self._send(format_weather_card(view))

    async def hide_weather(self):
        pass

    # ── Helpers ─────────────────────────────────────────────────

    async def _send(self, text: str, **kwargs):
        try:
            return await self.bot.send_message(chat_id=self.chat_id, text=text, **kwargs)
        except TelegramError as e:
            log.error(f"Send to chat {self.chat_id} failed: {e}")
            return None

    async def _delete(self, message_id: Optional[int]):
        if not message_id:
            return
        try:
            await self.bot.delete_message(chat_id=self.chat_id, message_id=message_id)
        except TelegramError as e:
            log.debug(f"Delete of message {message_id} in chat {self.chat_id} failed: {e}")
