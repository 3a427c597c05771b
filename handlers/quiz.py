from contextlib import AsyncExitStack
from typing import Optional

from aiogram import Router, types, F, Bot
from aiogram.exceptions import TelegramAPIError
from aiogram.filters import CommandStart, Command
from aiogram.types import BufferedInputFile
from aiogram.utils.chat_action import ChatActionSender
from sqlalchemy.ext.asyncio import async_sessionmaker

from constants.messages import Messages
from core.config import settings
from core.logger import logger
from handlers.common import (
    ANSWER_NO,
    ANSWER_YES,
    QUIZ_ACK,
    get_ack_keyboard,
    get_answer_keyboard,
    get_main_keyboard,
)
from models.quiz import QuizResultsViewModel, QuizStepViewModel
from services.movies_loader import MoviesLoader, PosterLoader
from services.presenter_registry import presenter_registry
from services.question_factory import QuestionFactory
from services.quiz_presenter import MovieQuizPresenter
from services.stats_service import StatisticService

router = Router()
# Only handle private chats: one game per player
router.message.filter(F.chat.type == "private")


class TelegramQuizView:
    """Renders a game into a private chat."""

    def __init__(self, bot: Bot, chat_id: int, lang: str = settings.LANGUAGE):
        self.bot = bot
        self.chat_id = chat_id
        self.lang = lang
        self.step_message_id: Optional[int] = None
        self.ack_message_id: Optional[int] = None
        self._chat_action: Optional[AsyncExitStack] = None

    async def show_step(self, step: QuizStepViewModel):
        try:
            message = await self.bot.send_photo(
                chat_id=self.chat_id,
                photo=BufferedInputFile(step.image, filename="poster.jpg"),
                caption=f"{step.question_number}\n\n{step.question}",
            )
            self.step_message_id = message.message_id
        except TelegramAPIError as e:
            logger.warning("Failed to send question", chat_id=self.chat_id, error=str(e))

    async def set_buttons_enabled(self, enabled: bool):
        if self.step_message_id is None:
            return
        try:
            await self.bot.edit_message_reply_markup(
                chat_id=self.chat_id,
                message_id=self.step_message_id,
                reply_markup=get_answer_keyboard(self.lang) if enabled else None,
            )
        except TelegramAPIError as e:
            logger.warning("Failed to toggle answer buttons", chat_id=self.chat_id, error=str(e))

    async def highlight_image_border(self, is_correct_answer: bool):
        key = "ANSWER_CORRECT" if is_correct_answer else "ANSWER_WRONG"
        await self._send(Messages.get(key, self.lang))

    async def show_loading_indicator(self):
        if self._chat_action is not None:
            return
        # Repeats "sending photo" every few seconds until hidden
        self._chat_action = AsyncExitStack()
        await self._chat_action.enter_async_context(ChatActionSender.upload_photo(chat_id=self.chat_id, bot=self.bot))

    async def hide_loading_indicator(self):
        chat_action, self._chat_action = self._chat_action, None
        if chat_action is not None:
            await chat_action.aclose()

    async def show_result(self, result: QuizResultsViewModel):
        self.step_message_id = None
        message = await self._send(f"{result.title}\n\n{result.text}", reply_markup=get_ack_keyboard(result.button_text))
        self.ack_message_id = message.message_id if message else None

    async def show_network_error(self, message: str):
        await self._show_error(message)

    async def show_image_load_error(self, message: str):
        await self._show_error(message)

    async def _show_error(self, message: str):
        sent = await self._send(
            f"{Messages.get('ERROR_TITLE', self.lang)}\n\n{message}",
            reply_markup=get_ack_keyboard(Messages.get("RETRY_BTN", self.lang)),
        )
        self.ack_message_id = sent.message_id if sent else None

    async def _send(self, text: str, reply_markup=None) -> Optional[types.Message]:
        try:
            return await self.bot.send_message(self.chat_id, text, reply_markup=reply_markup)
        except TelegramAPIError as e:
            logger.warning("Failed to send message", chat_id=self.chat_id, error=str(e))
            return None


def build_presenter(
    bot: Bot,
    chat_id: int,
    user_id: int,
    movies_loader: MoviesLoader,
    poster_loader: PosterLoader,
    session_factory: async_sessionmaker,
    lang: str = settings.LANGUAGE,
) -> MovieQuizPresenter:
    return MovieQuizPresenter(
        view=TelegramQuizView(bot, chat_id, lang),
        question_factory=QuestionFactory(movies_loader, poster_loader, lang=lang),
        statistic_service=StatisticService(session_factory, user_id),
        lang=lang,
    )


async def start_game(message: types.Message, bot: Bot, movies_loader: MoviesLoader, poster_loader: PosterLoader,
                     session_factory: async_sessionmaker):
    presenter = build_presenter(
        bot,
        message.chat.id,
        message.from_user.id,
        movies_loader,
        poster_loader,
        session_factory,
    )
    await presenter_registry.register(message.chat.id, presenter)
    logger.info("Game started", user_id=message.from_user.id)
    await presenter.start()


@router.message(CommandStart())
async def cmd_start(message: types.Message, bot: Bot, movies_loader: MoviesLoader, poster_loader: PosterLoader,
                    session_factory: async_sessionmaker):
    lang = settings.LANGUAGE
    await message.answer(
        Messages.get("WELCOME", lang).format(amount=settings.QUESTIONS_AMOUNT),
        reply_markup=get_main_keyboard(lang)
    )
    await start_game(message, bot, movies_loader, poster_loader, session_factory)


@router.message(Command("play"))
@router.message(F.text.in_([Messages.get("PLAY_BTN", "RU"), Messages.get("PLAY_BTN", "EN")]))
async def cmd_play(message: types.Message, bot: Bot, movies_loader: MoviesLoader, poster_loader: PosterLoader,
                   session_factory: async_sessionmaker):
    await start_game(message, bot, movies_loader, poster_loader, session_factory)


@router.message(Command("stats"))
@router.message(F.text.in_([Messages.get("STATS_BTN", "RU"), Messages.get("STATS_BTN", "EN")]))
async def cmd_stats(message: types.Message, session_factory: async_sessionmaker):
    lang = settings.LANGUAGE
    stats = await StatisticService(session_factory, message.from_user.id).get_statistics()
    if stats.games_count == 0:
        await message.answer(Messages.get("NO_STATS", lang))
        return

    best_game = stats.best_game
    await message.answer(
        Messages.get("STATS_TEXT", lang).format(
            games_count=stats.games_count,
            best_correct=best_game.correct,
            best_total=best_game.total,
            best_date=best_game.date_string or Messages.get("NO_DATE", lang),
            accuracy=f"{stats.total_accuracy:.2f}",
        )
    )


def _get_presenter(callback: types.CallbackQuery) -> Optional[MovieQuizPresenter]:
    if not callback.message:
        return None
    return presenter_registry.get(callback.message.chat.id)


async def _remove_keyboard(callback: types.CallbackQuery, bot: Bot):
    try:
        await bot.edit_message_reply_markup(
            chat_id=callback.message.chat.id,
            message_id=callback.message.message_id,
            reply_markup=None,
        )
    except TelegramAPIError as e:
        logger.debug("Failed to remove inline keyboard", error=str(e))


@router.callback_query(F.data.in_({ANSWER_YES, ANSWER_NO}))
async def handle_answer(callback: types.CallbackQuery, bot: Bot):
    presenter = _get_presenter(callback)
    if presenter is None:
        await callback.answer(Messages.get("NO_ACTIVE_GAME", settings.LANGUAGE), show_alert=True)
        return

    await callback.answer()
    # Only the message of the question on screen can be answered
    if callback.message.message_id != presenter.view.step_message_id:
        logger.info("Answer to an outdated question ignored", chat_id=callback.message.chat.id)
        await _remove_keyboard(callback, bot)
        return

    if callback.data == ANSWER_YES:
        await presenter.yes_button_clicked()
    else:
        await presenter.no_button_clicked()


@router.callback_query(F.data == QUIZ_ACK)
async def handle_acknowledge(callback: types.CallbackQuery, bot: Bot):
    presenter = _get_presenter(callback)
    if presenter is None:
        await callback.answer(Messages.get("NO_ACTIVE_GAME", settings.LANGUAGE), show_alert=True)
        return

    await callback.answer()
    await _remove_keyboard(callback, bot)
    if callback.message.message_id != presenter.view.ack_message_id:
        logger.info("Outdated acknowledge ignored", chat_id=callback.message.chat.id)
        return
    await presenter.acknowledge()
