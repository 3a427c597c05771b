from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from sqlalchemy.exc import OperationalError

from core.exceptions import CatalogLoadError, ImageLoadError
from models.movie import MostPopularMovies
from models.quiz import QuizQuestion
from services.movies_loader import PosterLoader
from services.presenter_registry import PresenterRegistry
from services.question_factory import FactoryEventKind, QuestionFactory, QuestionFactoryEvent
from services.quiz_presenter import GameState, MovieQuizPresenter
from services.stats_service import StatisticService

RATING = 5.0


def expected_answer(threshold):
    return RATING > threshold if threshold % 2 == 0 else RATING < threshold


@pytest.fixture
def make_presenter(view, movies_loader, poster_loader, rng, session_factory):
    def factory(questions_amount=10, statistic_service=None):
        question_factory = QuestionFactory(movies_loader, poster_loader, rng=rng, lang="EN")
        return MovieQuizPresenter(
            view=view,
            question_factory=question_factory,
            statistic_service=statistic_service or StatisticService(session_factory, user_id=42),
            questions_amount=questions_amount,
            feedback_delay=0,
            lang="EN",
        )
    return factory


async def play(presenter, answers):
    for answer in answers:
        await presenter.did_answer(answer)
        await presenter.join()


async def test_start_shows_first_question(make_presenter, view):
    presenter = make_presenter()

    await presenter.start()
    await presenter.join()

    assert presenter.state == GameState.AWAITING_ANSWER
    assert presenter.current_question_index == 0
    assert len(view.steps) == 1
    assert view.steps[0].question_number == "1/10"
    assert view.steps[0].question == "Is the rating of this movie greater than 4?"
    assert view.steps[0].image == b"poster-bytes"
    assert view.buttons == [True]


async def test_full_round_counts_matching_answers(make_presenter, view, rng, session_factory):
    thresholds = [4, 5, 6, 7, 3, 8, 9, 4, 5, 6]
    answers = [True, False] * 5
    rng.randint.side_effect = thresholds
    presenter = make_presenter()

    await presenter.start()
    await presenter.join()
    await play(presenter, answers)

    expected = sum(a == expected_answer(t) for a, t in zip(answers, thresholds))
    assert presenter.state == GameState.ROUND_COMPLETE
    assert presenter.correct_answers == expected
    assert view.highlights == [a == expected_answer(t) for a, t in zip(answers, thresholds)]
    assert [s.question_number for s in view.steps] == [f"{i}/10" for i in range(1, 11)]

    result = view.results[-1]
    assert result.title == "This round is over!"
    assert result.button_text == "Play again"
    assert f"Your result: {expected}/10" in result.text
    assert "Quizzes played: 1" in result.text
    assert f"Average accuracy: {expected * 10:.2f}%" in result.text

    stats = await StatisticService(session_factory, user_id=42).get_statistics()
    assert stats.games_count == 1
    assert stats.total_correct == expected


async def test_score_never_exceeds_question_count(make_presenter, view):
    presenter = make_presenter()
    await presenter.start()
    await presenter.join()

    await play(presenter, [True] * 10)
    # Round is over, further presses are ignored
    await play(presenter, [True] * 3)

    assert presenter.correct_answers == 10
    assert len(view.highlights) == 10
    assert "Record: 10/10" in view.results[-1].text


async def test_answer_without_question_is_ignored(make_presenter, view):
    presenter = make_presenter()

    await presenter.yes_button_clicked()
    await presenter.join()

    assert presenter.correct_answers == 0
    assert view.highlights == []
    assert presenter.state == GameState.LOADING


async def test_double_submission_is_ignored(make_presenter, view):
    presenter = make_presenter()
    await presenter.start()
    await presenter.join()

    await presenter.yes_button_clicked()
    await presenter.yes_button_clicked()
    await presenter.join()

    assert presenter.correct_answers == 1
    assert view.highlights == [True]
    assert view.buttons == [True, False, True]
    assert presenter.current_question_index == 1


async def test_no_button_scores_false_answers(make_presenter, view, rng):
    rng.randint.return_value = 5  # "less than 5?" for a 5.0 movie is a "no"
    presenter = make_presenter()
    await presenter.start()
    await presenter.join()

    await presenter.no_button_clicked()
    await presenter.join()

    assert presenter.correct_answers == 1
    assert view.highlights == [True]


async def test_round_restart_after_results(make_presenter, view):
    presenter = make_presenter(questions_amount=2)
    await presenter.start()
    await presenter.join()
    await play(presenter, [True, True])
    assert presenter.state == GameState.ROUND_COMPLETE

    await presenter.acknowledge()
    await presenter.join()

    assert presenter.state == GameState.AWAITING_ANSWER
    assert presenter.current_question_index == 0
    assert presenter.correct_answers == 0
    assert view.steps[-1].question_number == "1/2"


async def test_second_round_reports_best_and_games(make_presenter, view):
    presenter = make_presenter(questions_amount=2)
    await presenter.start()
    await presenter.join()
    await play(presenter, [True, True])
    await presenter.acknowledge()
    await presenter.join()
    await play(presenter, [False, True])

    text = view.results[-1].text
    assert "Your result: 1/2" in text
    assert "Quizzes played: 2" in text
    assert "Record: 2/2" in text
    assert "Average accuracy: 75.00%" in text


async def test_catalog_failure_then_retry_reloads(make_presenter, view, movies_loader, movie):
    movies_loader.load_movies = AsyncMock(side_effect=[
        CatalogLoadError("offline"),
        MostPopularMovies(items=[movie]),
    ])
    presenter = make_presenter()

    await presenter.start()
    await presenter.join()

    assert presenter.state == GameState.LOAD_FAILED
    assert view.network_errors == ["offline"]
    assert view.steps == []

    await presenter.acknowledge()
    await presenter.join()

    assert presenter.state == GameState.AWAITING_ANSWER
    assert movies_loader.load_movies.await_count == 2
    assert len(view.steps) == 1


async def test_empty_catalog_is_shown_as_load_error(make_presenter, view, movies_loader):
    movies_loader.load_movies = AsyncMock(return_value=MostPopularMovies(items=[], errorMessage="Invalid API Key"))
    presenter = make_presenter()

    await presenter.start()
    await presenter.join()

    assert presenter.state == GameState.LOAD_FAILED
    assert view.network_errors == ["Invalid API Key"]
    assert presenter.current_question is None


async def test_image_failure_keeps_round_index(make_presenter, view, poster_loader):
    poster_loader.load_image = AsyncMock(side_effect=[
        b"poster-bytes",
        ImageLoadError("Image load error"),
        b"poster-bytes",
    ])
    presenter = make_presenter()
    await presenter.start()
    await presenter.join()

    await presenter.yes_button_clicked()
    await presenter.join()

    assert presenter.state == GameState.IMAGE_LOAD_FAILED
    assert presenter.current_question_index == 1
    assert presenter.correct_answers == 1
    assert view.image_errors == ["Image load error"]
    assert len(view.steps) == 1

    await presenter.acknowledge()
    await presenter.join()

    assert presenter.state == GameState.AWAITING_ANSWER
    assert presenter.current_question_index == 1
    assert presenter.correct_answers == 1
    assert view.steps[-1].question_number == "2/10"


async def test_stale_question_after_restart_is_ignored(make_presenter, view):
    presenter = make_presenter()
    await presenter.start()
    await presenter.join()
    old_ticket = presenter.ticket

    await presenter.restart_game()
    stale = QuizQuestion(image=b"old", text="stale", correct_answer=False)
    await presenter.handle_event(QuestionFactoryEvent(FactoryEventKind.QUESTION_READY, old_ticket, question=stale))

    assert presenter.current_question is None
    assert presenter.state == GameState.LOADING

    await presenter.join()

    assert presenter.state == GameState.AWAITING_ANSWER
    assert presenter.current_question.text != "stale"
    assert len(view.steps) == 2


async def test_delayed_advance_from_previous_round_is_dropped(make_presenter, view):
    presenter = make_presenter()
    presenter.feedback_delay = 0.05
    await presenter.start()
    await presenter.join()

    await presenter.yes_button_clicked()
    await presenter.restart_game()
    await presenter.join()

    assert presenter.current_question_index == 0
    assert presenter.correct_answers == 0
    assert presenter.state == GameState.AWAITING_ANSWER


async def test_statistics_failure_still_shows_score(make_presenter, view):
    statistic_service = MagicMock()
    statistic_service.store = AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("disk I/O error")))
    presenter = make_presenter(questions_amount=1, statistic_service=statistic_service)
    await presenter.start()
    await presenter.join()

    await play(presenter, [True])

    assert presenter.state == GameState.ROUND_COMPLETE
    assert view.results[-1].text == "Your result: 1/1"


async def test_close_cancels_pending_work(make_presenter, view):
    presenter = make_presenter()
    presenter.feedback_delay = 10
    await presenter.start()
    await presenter.join()
    await presenter.yes_button_clicked()

    presenter.close()
    await presenter.join()

    assert presenter.current_question_index == 0
    assert presenter.state == GameState.SCORING


async def test_first_poster_failure_retries_first_question(make_presenter, view, poster_loader):
    poster_loader.load_image = AsyncMock(side_effect=[ImageLoadError("Image load error"), b"poster-bytes"])
    presenter = make_presenter()
    await presenter.start()
    await presenter.join()

    assert presenter.state == GameState.IMAGE_LOAD_FAILED
    assert view.network_errors == []

    await presenter.acknowledge()
    await presenter.join()

    assert presenter.state == GameState.AWAITING_ANSWER
    assert [s.question_number for s in view.steps] == ["1/10"]


async def test_malformed_poster_url_reports_image_error(view, movies_loader, movie_factory, rng):
    movie = movie_factory()
    broken = movie.model_copy(update={"image_url": "https://img\x00.test/poster._V1_.jpg"})
    movies_loader.load_movies.return_value = MostPopularMovies(items=[broken])
    async with httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200))) as client:
        presenter = MovieQuizPresenter(
            view=view,
            question_factory=QuestionFactory(movies_loader, PosterLoader(client, lang="EN"), rng=rng, lang="EN"),
            statistic_service=MagicMock(),
            feedback_delay=0,
            lang="EN",
        )
        await presenter.start()
        await presenter.join()

    assert presenter.state == GameState.IMAGE_LOAD_FAILED
    assert presenter.current_question_index == 0
    assert view.image_errors == ["Image load error"]
    assert view.steps == []


def make_registered_game():
    presenter = MagicMock()
    presenter.view.set_buttons_enabled = AsyncMock()
    presenter.view.hide_loading_indicator = AsyncMock()
    return presenter


async def test_registry_closes_replaced_game():
    registry = PresenterRegistry()
    first, second = make_registered_game(), make_registered_game()

    await registry.register(100, first)
    await registry.register(100, second)

    first.close.assert_called_once()
    first.view.set_buttons_enabled.assert_awaited_once_with(False)
    first.view.hide_loading_indicator.assert_awaited_once()
    second.close.assert_not_called()
    assert registry.get(100) is second
    assert PresenterRegistry() is registry

    await registry.drop(100)
    second.close.assert_called_once()
    assert registry.get(100) is None
