from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

DATE_FORMAT = "%d.%m.%y %H:%M"


class GameRecord(BaseModel):
    """
    Result of one finished round.

    Records are ordered by ``correct`` only: two games with the same number of
    correct answers are equally good regardless of total or date.
    """
    model_config = ConfigDict(frozen=True)

    correct: int = Field(0, ge=0)
    total: int = Field(0, ge=0)
    date: Optional[datetime] = None

    def __lt__(self, other: "GameRecord") -> bool:
        if not isinstance(other, GameRecord):
            return NotImplemented
        return self.correct < other.correct

    def __gt__(self, other: "GameRecord") -> bool:
        if not isinstance(other, GameRecord):
            return NotImplemented
        return self.correct > other.correct

    @property
    def date_string(self) -> Optional[str]:
        if self.date is None:
            return None
        return self.date.strftime(DATE_FORMAT)


class AggregateStatistics(BaseModel):
    model_config = ConfigDict(frozen=True)

    games_count: int = 0
    total_correct: int = 0
    total_amount: int = 0
    best_game: GameRecord = Field(default_factory=GameRecord)

    @property
    def total_accuracy(self) -> float:
        if self.total_amount == 0:
            return 0.0
        return 100 * self.total_correct / self.total_amount

    def record(self, game: GameRecord) -> "AggregateStatistics":
        """Return the aggregate with ``game`` merged in. Ties keep the existing best game."""
        best_game = game if game > self.best_game else self.best_game
        return AggregateStatistics(
            games_count=self.games_count + 1,
            total_correct=self.total_correct + game.correct,
            total_amount=self.total_amount + game.total,
            best_game=best_game,
        )
