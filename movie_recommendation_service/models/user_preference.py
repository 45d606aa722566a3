"""Per-user genre preference scores."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Float, Index, Integer, String

from movie_recommendation_service.models.base import Base


class UserPreference(Base):
    """One row per (user, genre). Score is kept within [-1.0, 1.0]."""

    __tablename__ = "user_preferences"

    user_id = Column(String(64), primary_key=True)
    genre_id = Column(Integer, primary_key=True)
    preference_score = Column(Float, nullable=False, default=0.0)

    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (Index("idx_user_preferences_user", "user_id"),)

    def __repr__(self):
        return (
            f"<UserPreference(user_id='{self.user_id}', genre_id={self.genre_id}, "
            f"score={self.preference_score:.2f})>"
        )
