import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional

from constants.messages import Messages
from core.config import settings
from core.exceptions import CatalogLoadError, EmptyCatalogError, ImageLoadError
from core.logger import logger
from models.movie import MostPopularMovie
from models.quiz import QuizQuestion
from services.movies_loader import MoviesLoader, PosterLoader


class FactoryEventKind(str, Enum):
    DATA_LOADED = "data_loaded"
    DATA_FAILED = "data_failed"
    QUESTION_READY = "question_ready"
    IMAGE_FAILED = "image_failed"


@dataclass(frozen=True)
class QuestionFactoryEvent:
    kind: FactoryEventKind
    ticket: Any = None
    question: Optional[QuizQuestion] = None
    error: Optional[Exception] = None


EventListener = Callable[[QuestionFactoryEvent], Awaitable[None]]


class QuestionFactory:
    """
    Builds rating questions from the loaded movie list.

    Results are reported to a single listener as ``QuestionFactoryEvent``s. The
    ``ticket`` passed to a request comes back unchanged on the event it produces,
    so the listener can drop answers to requests it no longer waits for.
    """

    def __init__(
        self,
        movies_loader: MoviesLoader,
        poster_loader: PosterLoader,
        listener: Optional[EventListener] = None,
        rng: Optional[random.Random] = None,
        lang: str = settings.LANGUAGE,
    ):
        self.movies_loader = movies_loader
        self.poster_loader = poster_loader
        self.listener = listener
        self.rng = rng or random.Random()
        self.lang = lang
        self._movies: List[MostPopularMovie] = []

    def subscribe(self, listener: EventListener):
        self.listener = listener

    @property
    def movies(self) -> List[MostPopularMovie]:
        return list(self._movies)

    @property
    def has_data(self) -> bool:
        return bool(self._movies)

    async def _notify(self, event: QuestionFactoryEvent):
        if self.listener is None:
            logger.debug("Question factory event dropped: no listener", kind=event.kind.value)
            return
        await self.listener(event)

    async def load_data(self, ticket: Any = None):
        try:
            most_popular = await self.movies_loader.load_movies()
        except CatalogLoadError as e:
            await self._notify(QuestionFactoryEvent(FactoryEventKind.DATA_FAILED, ticket, error=e))
            return
        if not most_popular.items:
            error = EmptyCatalogError(most_popular.error_message or Messages.get("EMPTY_CATALOG_ERROR", self.lang))
            await self._notify(QuestionFactoryEvent(FactoryEventKind.DATA_FAILED, ticket, error=error))
            return
        self._movies = list(most_popular.items)
        await self._notify(QuestionFactoryEvent(FactoryEventKind.DATA_LOADED, ticket))

    async def request_next_question(self, ticket: Any = None) -> Optional[QuizQuestion]:
        if not self._movies:
            logger.debug("Question requested before movies were loaded")
            return None

        index = self.rng.randrange(len(self._movies))
        if not 0 <= index < len(self._movies):
            return None
        movie = self._movies[index]

        try:
            image = await self.poster_loader.load_image(movie.resized_image_url)
        except ImageLoadError as e:
            await self._notify(QuestionFactoryEvent(FactoryEventKind.IMAGE_FAILED, ticket, error=e))
            return None

        threshold = self.rng.randint(settings.MIN_RATING_THRESHOLD, settings.MAX_RATING_THRESHOLD)
        question = self.make_question(movie, image, threshold)
        await self._notify(QuestionFactoryEvent(FactoryEventKind.QUESTION_READY, ticket, question=question))
        return question

    def make_question(self, movie: MostPopularMovie, image: bytes, threshold: int) -> QuizQuestion:
        # Even thresholds ask "greater than", odd ones "less than"; a tie is always "no"
        if threshold % 2 == 0:
            text = Messages.get("QUESTION_GREATER", self.lang).format(threshold=threshold)
            correct_answer = movie.rating > threshold
        else:
            text = Messages.get("QUESTION_LESS", self.lang).format(threshold=threshold)
            correct_answer = movie.rating < threshold
        return QuizQuestion(image=image, text=text, correct_answer=correct_answer)
