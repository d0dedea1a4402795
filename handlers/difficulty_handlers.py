# handlers/difficulty_handlers.py
"""
Handlers for AI difficulty selection.
"""
from telegram import Update
from telegram.ext import ContextTypes, CommandHandler, CallbackQueryHandler

from config import DIFFICULTY_LABELS, logger
from game_state import Difficulty
from handlers.game_handlers import get_difficulty, render_session


async def difficulty_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Обработчик команды /difficulty - показывает или меняет сложность ИИ."""
    if context.args:
        try:
            context.chat_data['difficulty'] = Difficulty(context.args[0].lower())
        except ValueError:
            options = ", ".join(option.value for option in Difficulty)
            await update.message.reply_text(f"Usage: /difficulty <{options}>")
            return
        await _redraw(update, context)

    current = get_difficulty(context.chat_data)
    await update.message.reply_text(f"🎚 AI difficulty: {DIFFICULTY_LABELS.get(current.value, current.value)}")


async def select_difficulty_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Обработчик выбора сложности кнопкой под полем."""
    query = update.callback_query
    value = query.data.split("difficulty_")[-1]
    difficulty = Difficulty(value)

    # Идущий ход ИИ не затрагивается: сложность берётся при следующем запросе
    context.chat_data['difficulty'] = difficulty
    logger.info(f"Difficulty in chat {update.effective_chat.id} set to {difficulty.value}")
    await query.answer(f"Difficulty: {DIFFICULTY_LABELS.get(difficulty.value, difficulty.value)}")
    await _redraw(update, context)


async def _redraw(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    session = context.chat_data.get('session')
    if session is None:
        return
    await render_session(context.bot, update.effective_chat.id, context.chat_data, session.state)


# Handler objects
difficulty_handler = CommandHandler("difficulty", difficulty_command)
select_difficulty_handler = CallbackQueryHandler(select_difficulty_callback, pattern=r"^difficulty_(easy|medium|hard)$")
