from typing import Optional

import httpx
from pydantic import ValidationError

from constants.messages import Messages
from core.config import settings
from core.exceptions import CatalogLoadError, EmptyCatalogError, ImageLoadError
from core.logger import logger
from models.movie import MostPopularMovies


class MoviesLoader:
    """Fetches the list of popular movies from the movies API."""

    def __init__(self, client: httpx.AsyncClient, url: Optional[str] = None, lang: str = settings.LANGUAGE):
        self.client = client
        self.url = url or settings.movies_url
        self.lang = lang

    async def load_movies(self) -> MostPopularMovies:
        try:
            response = await self.client.get(self.url, timeout=settings.HTTP_TIMEOUT_SECONDS)
            response.raise_for_status()
            movies = MostPopularMovies.model_validate(response.json())
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, ValidationError) as e:
            # ValueError covers a body that is not JSON
            logger.error("Failed to load movies", url=self.url, error=str(e))
            raise CatalogLoadError(Messages.get("CATALOG_LOAD_ERROR", self.lang)) from e

        if not movies.items:
            logger.warning("Movies API returned no items", error_message=movies.error_message)
            raise EmptyCatalogError(movies.error_message or Messages.get("EMPTY_CATALOG_ERROR", self.lang))

        logger.info("Movies loaded", count=movies.count)
        return movies


class PosterLoader:
    """Downloads raw poster bytes."""

    def __init__(self, client: httpx.AsyncClient, lang: str = settings.LANGUAGE):
        self.client = client
        self.lang = lang

    async def load_image(self, url: str) -> bytes:
        try:
            response = await self.client.get(url, timeout=settings.HTTP_TIMEOUT_SECONDS, follow_redirects=True)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Failed to load poster", url=url, error=str(e))
            raise ImageLoadError(Messages.get("IMAGE_LOAD_ERROR", self.lang), url=url) from e
        return response.content
