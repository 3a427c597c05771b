from typing import Dict, Optional
from core.logger import logger
from services.quiz_presenter import MovieQuizPresenter

class PresenterRegistry:
    _instance = None
    _presenters: Dict[int, MovieQuizPresenter] = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(PresenterRegistry, cls).__new__(cls)
        return cls._instance

    async def register(self, chat_id: int, presenter: MovieQuizPresenter):
        """Register the game of a chat, closing any game it replaces."""
        await self.drop(chat_id)
        self._presenters[chat_id] = presenter
        logger.debug(f"Registered new game for chat {chat_id}")

    def get(self, chat_id: int) -> Optional[MovieQuizPresenter]:
        return self._presenters.get(chat_id)

    async def drop(self, chat_id: int):
        """Close and forget the game of a chat if there is one."""
        presenter = self._presenters.pop(chat_id, None)
        if presenter is not None:
            presenter.close()
            # Leave no answer buttons or chat action behind
            await presenter.view.set_buttons_enabled(False)
            await presenter.view.hide_loading_indicator()
            logger.debug(f"Closed game for chat {chat_id}")

    async def close_all(self):
        for chat_id in list(self._presenters):
            await self.drop(chat_id)

presenter_registry = PresenterRegistry()
