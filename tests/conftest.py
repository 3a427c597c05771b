"""
Pytest configuration and fixtures for MovieQuiz tests.
"""
import sys
import os
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Settings are read at import time
os.environ.setdefault("BOT_TOKEN", "123456:TEST-TOKEN")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from models.base import Base
from models.movie import MostPopularMovie, MostPopularMovies
import models.stats  # noqa: F401


class FakeQuizView:
    """Records everything the presenter asks the view to do."""

    def __init__(self):
        self.steps = []
        self.results = []
        self.highlights = []
        self.buttons = []
        self.network_errors = []
        self.image_errors = []
        self.loading_shown = 0
        self.loading_hidden = 0

    async def show_step(self, step):
        self.steps.append(step)

    async def show_result(self, result):
        self.results.append(result)

    async def highlight_image_border(self, is_correct_answer):
        self.highlights.append(is_correct_answer)

    async def show_loading_indicator(self):
        self.loading_shown += 1

    async def hide_loading_indicator(self):
        self.loading_hidden += 1

    async def show_network_error(self, message):
        self.network_errors.append(message)

    async def show_image_load_error(self, message):
        self.image_errors.append(message)

    async def set_buttons_enabled(self, enabled):
        self.buttons.append(enabled)


def make_movie(rating="5.0", title="The Godfather (1972)"):
    return MostPopularMovie.model_validate({
        "fullTitle": title,
        "imDbRating": rating,
        "image": "https://m.media-amazon.com/images/M/poster._V1_Ratio0.6716_AL_.jpg",
    })


@pytest.fixture
def view():
    return FakeQuizView()


@pytest.fixture
def movie_factory():
    return make_movie


@pytest.fixture
def movie():
    return make_movie()


@pytest.fixture
def movies_loader(movie):
    loader = MagicMock()
    loader.load_movies = AsyncMock(return_value=MostPopularMovies(items=[movie]))
    return loader


@pytest.fixture
def poster_loader():
    loader = MagicMock()
    loader.load_image = AsyncMock(return_value=b"poster-bytes")
    return loader


@pytest.fixture
def rng():
    """Always picks the first movie and threshold 4 ("greater than 4")."""
    rng = MagicMock()
    rng.randrange.return_value = 0
    rng.randint.return_value = 4
    return rng


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'stats.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()
