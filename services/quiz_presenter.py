import asyncio
from enum import Enum
from typing import Coroutine, Optional, Protocol, Set, Tuple

from sqlalchemy.exc import SQLAlchemyError

from constants.messages import Messages
from core.config import settings
from core.logger import logger
from models.game import AggregateStatistics
from models.quiz import QuizQuestion, QuizResultsViewModel, QuizStepViewModel
from services.question_factory import FactoryEventKind, QuestionFactory, QuestionFactoryEvent
from services.stats_service import StatisticService


class GameState(str, Enum):
    LOADING = "loading"
    AWAITING_ANSWER = "awaiting_answer"
    SCORING = "scoring"
    ROUND_COMPLETE = "round_complete"
    LOAD_FAILED = "load_failed"
    IMAGE_LOAD_FAILED = "image_load_failed"


class MovieQuizView(Protocol):
    async def show_step(self, step: QuizStepViewModel) -> None: ...

    async def show_result(self, result: QuizResultsViewModel) -> None: ...

    async def highlight_image_border(self, is_correct_answer: bool) -> None: ...

    async def show_loading_indicator(self) -> None: ...

    async def hide_loading_indicator(self) -> None: ...

    async def show_network_error(self, message: str) -> None: ...

    async def show_image_load_error(self, message: str) -> None: ...

    async def set_buttons_enabled(self, enabled: bool) -> None: ...


class MovieQuizPresenter:
    """
    Drives one player's game: asks the factory for questions, scores answers and
    records the round in the statistics store.

    Every transition runs under ``self._lock`` so factory events, button presses
    and the delayed advance are handled one at a time. Requests to the factory are
    stamped with ``(epoch, index)``; ``epoch`` grows on each restart and events
    carrying another ticket are ignored.
    """

    def __init__(
        self,
        view: MovieQuizView,
        question_factory: QuestionFactory,
        statistic_service: StatisticService,
        questions_amount: int = settings.QUESTIONS_AMOUNT,
        feedback_delay: float = settings.FEEDBACK_DELAY_SECONDS,
        lang: str = settings.LANGUAGE,
    ):
        self.view = view
        self.question_factory = question_factory
        self.statistic_service = statistic_service
        self.questions_amount = questions_amount
        self.feedback_delay = feedback_delay
        self.lang = lang

        self.state = GameState.LOADING
        self.current_question_index = 0
        self.correct_answers = 0
        self.current_question: Optional[QuizQuestion] = None

        self._epoch = 0
        self._lock = asyncio.Lock()
        self._tasks: Set[asyncio.Task] = set()

        self.question_factory.subscribe(self.handle_event)

    @property
    def ticket(self) -> Tuple[int, int]:
        return self._epoch, self.current_question_index

    # Lifecycle

    async def start(self):
        async with self._lock:
            await self.view.show_loading_indicator()
            self._spawn(self.question_factory.load_data(ticket=self.ticket))

    async def join(self):
        """Wait until every background request and delayed advance has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self):
        for task in list(self._tasks):
            if not task.done():
                task.cancel()
        self._tasks.clear()

    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task):
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Quiz background task failed", error=repr(error), state=self.state.value)

    def _request_question(self):
        self._spawn(self.question_factory.request_next_question(ticket=self.ticket))

    # Factory events

    async def handle_event(self, event: QuestionFactoryEvent):
        async with self._lock:
            if event.ticket != self.ticket or self.state != GameState.LOADING:
                logger.debug(
                    "Stale question factory event ignored",
                    kind=event.kind.value,
                    ticket=event.ticket,
                    expected=self.ticket,
                    state=self.state.value,
                )
                return

            if event.kind == FactoryEventKind.DATA_LOADED:
                await self.view.hide_loading_indicator()
                self._request_question()
            elif event.kind == FactoryEventKind.DATA_FAILED:
                self.state = GameState.LOAD_FAILED
                logger.warning("Movie list unavailable", error=str(event.error))
                await self.view.hide_loading_indicator()
                await self.view.show_network_error(str(event.error))
            elif event.kind == FactoryEventKind.IMAGE_FAILED:
                # Poster failures keep the index at every position, the first question included
                self.state = GameState.IMAGE_LOAD_FAILED
                await self.view.hide_loading_indicator()
                await self.view.show_image_load_error(str(event.error))
            elif event.kind == FactoryEventKind.QUESTION_READY and event.question is not None:
                self.current_question = event.question
                self.state = GameState.AWAITING_ANSWER
                await self.view.hide_loading_indicator()
                await self.view.show_step(self.convert(event.question))
                await self.view.set_buttons_enabled(True)

    # Player input

    async def yes_button_clicked(self):
        await self.did_answer(is_yes=True)

    async def no_button_clicked(self):
        await self.did_answer(is_yes=False)

    async def did_answer(self, is_yes: bool):
        async with self._lock:
            if self.state != GameState.AWAITING_ANSWER or self.current_question is None:
                return
            self.state = GameState.SCORING
            await self.view.set_buttons_enabled(False)

            is_correct = is_yes == self.current_question.correct_answer
            if is_correct:
                self.correct_answers += 1
            await self.view.highlight_image_border(is_correct)
            self._spawn(self._proceed_after_delay(self._epoch))

    async def acknowledge(self):
        """The player dismissed the result or error message."""
        async with self._lock:
            if self.state == GameState.ROUND_COMPLETE:
                await self._restart()
            elif self.state == GameState.LOAD_FAILED:
                await self._restart(reload_data=True)
            elif self.state == GameState.IMAGE_LOAD_FAILED:
                # No question was shown, so the index stays where it is
                self.state = GameState.LOADING
                await self.view.show_loading_indicator()
                self._request_question()

    async def restart_game(self):
        async with self._lock:
            await self._restart()

    async def _restart(self, reload_data: bool = False):
        self._epoch += 1
        self.current_question_index = 0
        self.correct_answers = 0
        self.current_question = None
        self.state = GameState.LOADING
        await self.view.show_loading_indicator()

        if reload_data or not self.question_factory.has_data:
            self._spawn(self.question_factory.load_data(ticket=self.ticket))
        else:
            self._request_question()

    # Round flow

    def is_last_question(self) -> bool:
        return self.current_question_index == self.questions_amount - 1

    async def _proceed_after_delay(self, epoch: int):
        await asyncio.sleep(self.feedback_delay)
        async with self._lock:
            if epoch != self._epoch or self.state != GameState.SCORING:
                return
            await self._proceed_to_next_question_or_results()

    async def _proceed_to_next_question_or_results(self):
        if self.is_last_question():
            self.state = GameState.ROUND_COMPLETE
            try:
                stats = await self.statistic_service.store(self.correct_answers, self.questions_amount)
            except SQLAlchemyError as e:
                logger.exception("Failed to record game", error=str(e))
                stats = None
            await self.view.hide_loading_indicator()
            await self.view.show_result(self.make_results_view_model(stats))
        else:
            self.current_question_index += 1
            self.current_question = None
            self.state = GameState.LOADING
            await self.view.show_loading_indicator()
            self._request_question()

    # View models

    def convert(self, model: QuizQuestion) -> QuizStepViewModel:
        return QuizStepViewModel(
            image=model.image,
            question=model.text,
            question_number=f"{self.current_question_index + 1}/{self.questions_amount}",
        )

    def make_results_view_model(self, stats: Optional[AggregateStatistics]) -> QuizResultsViewModel:
        if stats is None:
            text = Messages.get("RESULT_SCORE_ONLY", self.lang).format(
                correct=self.correct_answers, total=self.questions_amount
            )
        else:
            best_game = stats.best_game
            text = Messages.get("RESULT_TEXT", self.lang).format(
                correct=self.correct_answers,
                total=self.questions_amount,
                games_count=stats.games_count,
                best_correct=best_game.correct,
                best_total=best_game.total,
                best_date=best_game.date_string or Messages.get("NO_DATE", self.lang),
                accuracy=f"{stats.total_accuracy:.2f}",
            )
        return QuizResultsViewModel(
            title=Messages.get("ROUND_OVER_TITLE", self.lang),
            text=text,
            button_text=Messages.get("PLAY_AGAIN_BTN", self.lang),
        )
