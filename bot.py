"""
Telegram Bot — the chat interface to the weather lookup.

Send a city name (or /weather <city>) to get current conditions and
a 7-day forecast. Also serves the web dashboard.

Usage:
  python bot.py
"""

import logging
import threading

from telegram import Update
from telegram.ext import (
    ApplicationBuilder,
    CommandHandler,
    MessageHandler,
    filters,
    ContextTypes,
)

from config import TELEGRAM_BOT_TOKEN, OWNER_CHAT_ID
from models import DisplayUnit
from orchestrator import Orchestrator

logging.basicConfig(
    format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
    level=logging.INFO,
)
log = logging.getLogger("bot")

orchestrator = Orchestrator()


# ── Auth ────────────────────────────────────────────────────────

def owner_only(func):
    """Restrict to OWNER_CHAT_ID. Set to 0 in .env to allow everyone."""
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE):
        if OWNER_CHAT_ID and update.effective_chat.id != OWNER_CHAT_ID:
            await update.message.reply_text("Not authorized.")
            return
        return await func(update, context)
    return wrapper


def chat_key(update: Update) -> str:
    """Each Telegram chat gets its own session (unit, in-flight search)."""
    return f"chat:{update.effective_chat.id}"


async def reply_result(update: Update, result):
    """Send a rendered result; stale or blank searches send nothing."""
    if result is None:
        return
    await update.message.reply_text(orchestrator.render(result, chat_key(update)))


# ── Command handlers ────────────────────────────────────────────

@owner_only
async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await cmd_help(update, context)
    await reply_result(update, await orchestrator.restore(chat_key(update)))


@owner_only
async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await update.message.reply_text(
        "Weather lookup. Commands:\n\n"
        "/weather <city>  — current weather + 7-day forecast\n"
        "/units [c|f]  — switch °C/°F (re-runs the last city)\n"
        "/status  — current units and last city\n"
        "/help  — show this message\n\n"
        "Or just send a city name."
    )


@owner_only
async def cmd_weather(update: Update, context: ContextTypes.DEFAULT_TYPE):
    if not context.args:
        await update.message.reply_text("Usage: /weather <city>")
        return
    await update.message.reply_text("Searching...")
    result = await orchestrator.search(" ".join(context.args), chat_key(update))
    await reply_result(update, result)


@owner_only
async def cmd_units(update: Update, context: ContextTypes.DEFAULT_TYPE):
    key = chat_key(update)
    if context.args:
        try:
            unit = DisplayUnit.parse(context.args[0])
        except ValueError:
            await update.message.reply_text("Usage: /units [c|f]")
            return
        result = await orchestrator.set_unit(unit, key)
    else:
        result = await orchestrator.toggle_unit(key)
    await update.message.reply_text(f"Units: {orchestrator.session(key).unit.symbol}")
    await reply_result(update, result)


@owner_only
async def cmd_status(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await update.message.reply_text(orchestrator.get_status_text(chat_key(update)))


@owner_only
async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Treat plain text as a city search."""
    text = (update.message.text or "").strip()
    if not text:
        return
    await reply_result(update, await orchestrator.search(text, chat_key(update)))


# ── Main ────────────────────────────────────────────────────────

def start_dashboard_in_thread():
    """Run the Flask dashboard in a background thread."""
    try:
        from dashboard import create_app
        app = create_app(orchestrator)
        # Suppress Flask request logs in the main console
        flask_log = logging.getLogger("werkzeug")
        flask_log.setLevel(logging.WARNING)
        from config import DASHBOARD_HOST, DASHBOARD_PORT
        log.info(f"Dashboard: http://{DASHBOARD_HOST}:{DASHBOARD_PORT}")
        app.run(host=DASHBOARD_HOST, port=DASHBOARD_PORT, use_reloader=False)
    except Exception as e:
        log.error(f"Dashboard failed to start: {e}")


def main():
    if not TELEGRAM_BOT_TOKEN:
        raise SystemExit("TELEGRAM_BOT_TOKEN is not set (see .env)")

    # Start dashboard in background thread
    dash_thread = threading.Thread(target=start_dashboard_in_thread, daemon=True)
    dash_thread.start()

    # Build Telegram bot; concurrent updates so a slow lookup doesn't block the next one
    app = ApplicationBuilder().token(TELEGRAM_BOT_TOKEN).concurrent_updates(True).build()

    app.add_handler(CommandHandler("start", cmd_start))
    app.add_handler(CommandHandler("help", cmd_help))
    app.add_handler(CommandHandler("weather", cmd_weather))
    app.add_handler(CommandHandler("units", cmd_units))
    app.add_handler(CommandHandler("status", cmd_status))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_message))

    log.info("Bot starting (Telegram polling)...")
    app.run_polling()


if __name__ == "__main__":
    main()
