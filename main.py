import asyncio
import uvicorn
from fastapi import FastAPI, Request, Response
from http import HTTPStatus

from telegram import Update, BotCommand
from telegram.ext import Application, ContextTypes

from config import TOKEN, WEBHOOK_ENDPOINT_URL, WEBHOOK_PATH, PORT, GAME_SERVICE_URL, logger
import handlers.game_handlers as game_handlers
import handlers.difficulty_handlers as difficulty_handlers

fastapi_app = FastAPI()


@fastapi_app.get("/health")
async def health() -> dict:
    return {"status": "ok", "game_service": GAME_SERVICE_URL}


async def handle_telegram_update(request: Request, application: Application):
    body = await request.json()
    update = Update.de_json(body, application.bot)
    await application.process_update(update)
    return Response(status_code=HTTPStatus.OK)


def build_application(token: str) -> Application:
    # Обновления обрабатываются параллельно: клики во время хода ИИ
    # доходят до оркестратора и отбрасываются им, а не ждут в очереди
    app = Application.builder().token(token).concurrent_updates(True).build()

    # Регистрируем обработчики
    app.add_handler(game_handlers.start_handler)
    app.add_handler(game_handlers.new_game_handler)
    app.add_handler(game_handlers.cell_click_handler)
    app.add_handler(game_handlers.new_game_button_handler)
    app.add_handler(game_handlers.noop_handler)
    app.add_handler(difficulty_handlers.difficulty_handler)
    app.add_handler(difficulty_handlers.select_difficulty_handler)

    # Глобальный обработчик ошибок для логирования и уведомления пользователя
    async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
        logger.exception("Error while handling update", exc_info=context.error)
        if isinstance(update, Update) and update.effective_message:
            try:
                await update.effective_message.reply_text("❗️ Something went wrong. Please try again later.")
            except Exception as e:
                logger.warning(f"Could not notify user about the error: {e}")
    app.add_error_handler(error_handler)
    return app


async def close_sessions(app: Application) -> None:
    """Закрывает HTTP-клиенты игровых сессий всех чатов"""
    for chat_id, chat_data in app.chat_data.items():
        session = chat_data.get('session')
        if session is not None:
            await session.service.aclose()
            logger.debug(f"Closed game session for chat {chat_id}")


async def main() -> None:
    if not TOKEN:
        logger.critical("TOKEN is not set")
        return
    app = build_application(TOKEN)

    # Регистрируем команды
    commands = [
        BotCommand("start", "🐱 Show the current game"),
        BotCommand("newgame", "🎲 Start a new game"),
        BotCommand("difficulty", "🎚 Show or change AI difficulty"),
    ]
    await app.initialize()
    await app.bot.set_my_commands(commands)

    # Вебхук, иначе long polling
    if WEBHOOK_ENDPOINT_URL:
        await app.bot.set_webhook(url=WEBHOOK_ENDPOINT_URL, allowed_updates=Update.ALL_TYPES)
        async def webhook(request: Request):
            return await handle_telegram_update(request, app)
        fastapi_app.add_api_route(WEBHOOK_PATH, webhook, methods=["POST"])
    else:
        await app.bot.delete_webhook()
        await app.updater.start_polling(allowed_updates=Update.ALL_TYPES)
        logger.info("Webhook URL not set, using long polling")

    logger.info(f"Game service: {GAME_SERVICE_URL}")

    # Запуск сервера
    config = uvicorn.Config(app=fastapi_app, host="0.0.0.0", port=PORT)
    server = uvicorn.Server(config)
    await app.start()
    try:
        await server.serve()
    finally:
        if app.updater.running:
            await app.updater.stop()
        await app.stop()
        await close_sessions(app)
        await app.shutdown()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Stopped manually")
