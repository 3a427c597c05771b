from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    BOT_TOKEN: str

    # Database
    DATABASE_URL: str = Field(
        "sqlite+aiosqlite:///movie_quiz.db",
        description="Async connection string (sqlite+aiosqlite://... or postgresql+asyncpg://...)"
    )

    # Movies API
    MOVIES_API_URL: str = Field("https://tv-api.com/en/API/MostPopularMovies", description="Movie list endpoint without the key")
    MOVIES_API_KEY: str = Field("", description="API key appended to MOVIES_API_URL")
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # Quiz Settings
    QUESTIONS_AMOUNT: int = 10
    FEEDBACK_DELAY_SECONDS: float = 1.0
    MIN_RATING_THRESHOLD: int = 3
    MAX_RATING_THRESHOLD: int = 9
    LANGUAGE: str = Field("RU", description="RU or EN")

    # Environment
    ENV: str = "production"  # development, staging, production
    DEBUG: bool = False

    @property
    def movies_url(self) -> str:
        if not self.MOVIES_API_KEY:
            return self.MOVIES_API_URL
        return f"{self.MOVIES_API_URL.rstrip('/')}/{self.MOVIES_API_KEY}"

settings = Settings()
