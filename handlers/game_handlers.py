# handlers/game_handlers.py
"""
Handlers for game commands and callbacks.
"""
import telegram
from telegram import Update
from telegram.ext import ContextTypes, CommandHandler, CallbackQueryHandler

from config import DEFAULT_DIFFICULTY, logger
from game_logic import get_keyboard, render_text
from game_service import HttpGameService
from game_state import Difficulty, Phase, SessionState
from orchestrator import GameOrchestrator


def get_difficulty(chat_data: dict) -> Difficulty:
    """Сложность, выбранная в чате (по умолчанию из настроек)"""
    return chat_data.get('difficulty', Difficulty(DEFAULT_DIFFICULTY))


async def render_session(bot: telegram.Bot, chat_id: int, chat_data: dict, state: SessionState) -> None:
    """Перерисовывает сообщение с игрой по снимку сессии"""
    message_id = chat_data.get('message_id')
    if message_id is None:
        return
    try:
        await bot.edit_message_text(
            render_text(state),
            chat_id=chat_id,
            message_id=message_id,
            reply_markup=get_keyboard(state, get_difficulty(chat_data)),
        )
    except telegram.error.BadRequest as e:
        # Повторная отрисовка того же снимка
        if "not modified" not in str(e).lower():
            raise


def get_session(context: ContextTypes.DEFAULT_TYPE, chat_id: int) -> GameOrchestrator:
    """Оркестратор чата; создаётся при первом обращении"""
    session = context.chat_data.get('session')
    if session is None:
        session = GameOrchestrator(HttpGameService())
        bot = context.bot
        chat_data = context.chat_data
        session.subscribe(lambda state: render_session(bot, chat_id, chat_data, state))
        context.chat_data['session'] = session
        logger.info(f"Created game session for chat {chat_id}")
    return session


async def _post_game_message(update: Update, context: ContextTypes.DEFAULT_TYPE, session: GameOrchestrator) -> None:
    message = update.effective_message
    state = session.state
    sent = await message.reply_text(
        render_text(state),
        reply_markup=get_keyboard(state, get_difficulty(context.chat_data)),
    )
    context.chat_data['message_id'] = sent.message_id


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Обработчик команды /start - показывает текущую партию с сервера"""
    chat_id = update.effective_chat.id
    session = get_session(context, chat_id)
    await _post_game_message(update, context, session)
    if session.state.phase is Phase.IDLE:
        await session.start()


async def new_game(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Обработчик команды /newgame - начинает новую партию"""
    chat_id = update.effective_chat.id
    session = get_session(context, chat_id)
    await _post_game_message(update, context, session)
    if not await session.new_game():
        logger.info(f"New game in chat {chat_id} dropped: request in flight")


def _is_current_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> bool:
    query = update.callback_query
    message_id = query.message.message_id if query.message else None
    return message_id is not None and message_id == context.chat_data.get('message_id')


async def cell_click(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Обработчик нажатия на клетку поля"""
    query = update.callback_query
    chat_id = update.effective_chat.id
    session = context.chat_data.get('session')

    # Проверка на актуальность сообщения
    if session is None or not _is_current_message(update, context):
        await query.answer("Old game message. Use /start.", show_alert=True)
        return

    try:
        await query.answer()
    except telegram.error.BadRequest as e:
        logger.warning(f"Failed to answer callback query in chat {chat_id}: {e}")

    _, row, col = query.data.split("_")
    accepted = await session.attempt_move(int(row), int(col), get_difficulty(context.chat_data))
    if not accepted:
        logger.debug(f"Click on ({row}, {col}) in chat {chat_id} ignored")


async def new_game_button(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Обработчик кнопки 'New game'"""
    query = update.callback_query
    session = context.chat_data.get('session')
    if session is None or not _is_current_message(update, context):
        await query.answer("Old game message. Use /start.", show_alert=True)
        return

    try:
        await query.answer()
    except telegram.error.BadRequest as e:
        logger.warning(f"Failed to answer callback query: {e}")
    await session.new_game()


async def noop(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Нажатие на занятую клетку или во время хода ИИ"""
    try:
        await update.callback_query.answer()
    except telegram.error.BadRequest:
        pass


# Handler objects
start_handler = CommandHandler("start", start)
new_game_handler = CommandHandler("newgame", new_game)
cell_click_handler = CallbackQueryHandler(cell_click, pattern=r"^cell_[0-2]_[0-2]$")
new_game_button_handler = CallbackQueryHandler(new_game_button, pattern=r"^new_game$")
noop_handler = CallbackQueryHandler(noop, pattern=r"^noop$")
