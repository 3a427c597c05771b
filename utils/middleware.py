from typing import Any, Awaitable, Callable, Dict
import httpx
from aiogram import BaseMiddleware
from aiogram.types import TelegramObject
from sqlalchemy.ext.asyncio import async_sessionmaker
from db.session import AsyncSessionLocal
from services.movies_loader import MoviesLoader, PosterLoader
from core.logger import logger

class QuizDependenciesMiddleware(BaseMiddleware):
    """Injects the loaders and the database session factory into handlers."""

    def __init__(self, http_client: httpx.AsyncClient, session_factory: async_sessionmaker = AsyncSessionLocal):
        self.http_client = http_client
        self.session_factory = session_factory

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        data["movies_loader"] = MoviesLoader(self.http_client)
        data["poster_loader"] = PosterLoader(self.http_client)
        data["session_factory"] = self.session_factory
        return await handler(event, data)

class UpdateLoggingMiddleware(BaseMiddleware):
    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        # In aiogram, event can be Update or the actual Telegram object
        if hasattr(event, "event"):
            logger.debug("UPDATE RECEIVED", type=type(event.event).__name__)
        else:
            logger.debug("UPDATE RECEIVED", type=type(event).__name__)
        return await handler(event, data)
