from datetime import datetime
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from models.game import AggregateStatistics, GameRecord
from models.stats import GameStat
from core.logger import logger

class StatisticService:
    """
    Persistent quiz statistics of one player.

    Every call opens its own database session, so a service instance can live as
    long as the game that owns it.
    """

    def __init__(self, session_factory: async_sessionmaker, user_id: int):
        self.session_factory = session_factory
        self.user_id = user_id

    async def store(self, correct: int, total: int, date: Optional[datetime] = None) -> AggregateStatistics:
        game = GameRecord(correct=correct, total=total, date=date or datetime.now())

        async with self.session_factory() as db:
            result = await db.execute(
                select(GameStat).filter(GameStat.user_id == self.user_id).with_for_update()
            )
            row = result.scalar_one_or_none()
            if not row:
                row = GameStat(user_id=self.user_id)
                db.add(row)

            stats = self._to_statistics(row).record(game)
            row.games_count = stats.games_count
            row.total_correct = stats.total_correct
            row.total_amount = stats.total_amount
            row.best_correct = stats.best_game.correct
            row.best_total = stats.best_game.total
            row.best_date = stats.best_game.date
            await db.commit()

        logger.info(
            "Game recorded",
            user_id=self.user_id,
            correct=correct,
            total=total,
            games_count=stats.games_count,
            best_correct=stats.best_game.correct,
        )
        return stats

    async def get_statistics(self) -> AggregateStatistics:
        async with self.session_factory() as db:
            row = await self._get_row(db)
        if not row:
            return AggregateStatistics()
        return self._to_statistics(row)

    async def best_game(self) -> GameRecord:
        return (await self.get_statistics()).best_game

    async def games_count(self) -> int:
        return (await self.get_statistics()).games_count

    async def total_accuracy(self) -> float:
        return (await self.get_statistics()).total_accuracy

    async def _get_row(self, db: AsyncSession) -> Optional[GameStat]:
        result = await db.execute(select(GameStat).filter(GameStat.user_id == self.user_id))
        return result.scalar_one_or_none()

    @staticmethod
    def _to_statistics(row: GameStat) -> AggregateStatistics:
        return AggregateStatistics(
            games_count=row.games_count or 0,
            total_correct=row.total_correct or 0,
            total_amount=row.total_amount or 0,
            best_game=GameRecord(
                correct=row.best_correct or 0,
                total=row.best_total or 0,
                date=row.best_date,
            ),
        )
