"""
Telegram Bot — the user-facing interface.

Every plain text message is treated as input to the chat's autocomplete
widget; suggestions come back as buttons. /weather <city> runs an explicit
search. Also serves the status dashboard.

Usage:
  python bot.py
"""

import logging
import threading

from telegram import Update
from telegram.ext import (
    ApplicationBuilder,
    CallbackQueryHandler,
    CommandHandler,
    MessageHandler,
    filters,
    ContextTypes,
)

import config
from config import OWNER_CHAT_ID
from sessions import SessionManager
from telegram_port import DISMISS, PICK_PREFIX, TelegramRenderPort

logging.basicConfig(
    format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
    level=config.LOG_LEVEL,
)
log = logging.getLogger("bot")

sessions = SessionManager()


# ── Auth ────────────────────────────────────────────────────────

def owner_only(func):
    """Restrict to OWNER_CHAT_ID. Set to 0 in .env to allow everyone."""
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE):
        if OWNER_CHAT_ID and update.effective_chat.id != OWNER_CHAT_ID:
            if update.callback_query:
                await update.callback_query.answer("Not authorized.")
            else:
                await update.message.reply_text("Not authorized.")
            return
        return await func(update, context)
    return wrapper


# ── Command handlers ────────────────────────────────────────────

@owner_only
async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await update.message.reply_text(
        "Weather bot online.\n\n"
        "Type a city name and pick one of the suggestions,\n"
        "or search directly:\n\n"
        "/weather <city>  — current weather for a city\n"
        "/status  — active sessions\n"
        "/help  — show this message"
    )


@owner_only
async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await cmd_start(update, context)


@owner_only
async def cmd_status(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await update.message.reply_text(sessions.get_status_text())


@owner_only
async def cmd_weather(update: Update, context: ContextTypes.DEFAULT_TYPE):
    if not context.args:
        await update.message.reply_text("Usage: /weather <city>")
        return
    widget = sessions.get(update.effective_chat.id)
    await widget.submit(" ".join(context.args))


@owner_only
async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Feed plain text into the chat's autocomplete."""
    text = update.message.text
    if not text:
        return
    sessions.get(update.effective_chat.id).on_input(text)


@owner_only
async def handle_button(update: Update, context: ContextTypes.DEFAULT_TYPE):
    query = update.callback_query
    widget = sessions.get(update.effective_chat.id)
    data = query.data or ""

    if data == DISMISS:
        await query.answer()
        await widget.dismiss()
        return

    await query.answer()
    index = data[len(PICK_PREFIX):]
    if data.startswith(PICK_PREFIX) and index.isdigit():
        if not await widget.select(int(index)):
            await context.bot.send_message(
                chat_id=update.effective_chat.id,
                text="That suggestion has expired. Type the city again.",
            )


# ── Main ────────────────────────────────────────────────────────

def start_dashboard_in_thread():
    """Run the Flask dashboard in a background thread."""
    try:
        from dashboard import create_app
        app = create_app(sessions)
        # Suppress Flask request logs in the main console
        flask_log = logging.getLogger("werkzeug")
        flask_log.setLevel(logging.WARNING)
        from config import DASHBOARD_HOST, DASHBOARD_PORT
        log.info(f"Dashboard: http://{DASHBOARD_HOST}:{DASHBOARD_PORT}")
        app.run(host=DASHBOARD_HOST, port=DASHBOARD_PORT, use_reloader=False)
    except Exception as e:
        log.error(f"Dashboard failed to start: {e}")


def main():
    if not config.TELEGRAM_BOT_TOKEN:
        raise SystemExit("TELEGRAM_BOT_TOKEN is not set (see .env.example)")

    # Start dashboard in background thread
    dash_thread = threading.Thread(target=start_dashboard_in_thread, daemon=True)
    dash_thread.start()

    # Build Telegram bot
    app = ApplicationBuilder().token(config.TELEGRAM_BOT_TOKEN).build()
    sessions.set_render_factory(lambda chat_id: TelegramRenderPort(app.bot, chat_id))

    app.add_handler(CommandHandler("start", cmd_start))
    app.add_handler(CommandHandler("help", cmd_help))
    app.add_handler(CommandHandler("status", cmd_status))
    app.add_handler(CommandHandler("weather", cmd_weather))
    app.add_handler(CallbackQueryHandler(handle_button))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_message))

    log.info("Bot starting (Telegram polling)...")
    app.run_polling()


if __name__ == "__main__":
    main()
