from sqlalchemy import Column, Integer, BigInteger, DateTime
from models.base import Base, TimestampMixin

class GameStat(Base, TimestampMixin):
    """Aggregate quiz results of one player, a single row per user."""
    __tablename__ = "game_stats"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(BigInteger, unique=True, index=True, nullable=False)
    games_count = Column(Integer, default=0, nullable=False)
    total_correct = Column(Integer, default=0, nullable=False)
    total_amount = Column(Integer, default=0, nullable=False)

    # Best game, compared by best_correct only
    best_correct = Column(Integer, default=0, nullable=False)
    best_total = Column(Integer, default=0, nullable=False)
    best_date = Column(DateTime, nullable=True)
