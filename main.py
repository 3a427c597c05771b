import asyncio
import httpx
from aiogram import Bot, Dispatcher
from aiogram.types import BotCommand, BotCommandScopeDefault

from core.config import settings
from core.logger import setup_logging, logger
from db.session import AsyncSessionLocal, engine, init_db
from handlers import quiz
from services.presenter_registry import presenter_registry
from utils.middleware import QuizDependenciesMiddleware, UpdateLoggingMiddleware

async def main():
    # Setup structured logging
    setup_logging()

    await init_db()
    logger.info("Database ready")

    http_client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)

    # Initialize bot and dispatcher
    bot = Bot(token=settings.BOT_TOKEN)
    dp = Dispatcher()

    # Register Middlewares
    dp.update.outer_middleware(UpdateLoggingMiddleware())
    dp.update.outer_middleware(QuizDependenciesMiddleware(http_client, AsyncSessionLocal))

    # Include routers
    dp.include_router(quiz.router)

    try:
        await bot.set_my_commands([
            BotCommand(command="start", description="Начать игру / Start the game"),
            BotCommand(command="play", description="Новый раунд / New round"),
            BotCommand(command="stats", description="Статистика / Statistics"),
        ], scope=BotCommandScopeDefault())
    except Exception as e:
        logger.error("Failed to set bot commands", error=str(e))

    logger.info("Starting Bot Polling Mode...", env=settings.ENV)
    try:
        await dp.start_polling(bot)
    finally:
        await presenter_registry.close_all()
        await http_client.aclose()
        await bot.session.close()
        await engine.dispose()

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        logger.info("Application stopped.")
