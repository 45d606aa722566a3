"""Cached recommendation rows, replaced wholesale on every generation."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Float, Index, Integer, String

from movie_recommendation_service.models.base import Base


class UserRecommendation(Base):
    """Snapshot of one candidate from the last generation run for a user."""

    __tablename__ = "user_recommendations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False)
    movie_id = Column(Integer, nullable=False)

    recommendation_score = Column(Float, nullable=False)
    recommendation_type = Column(String(32), nullable=False)
    reason = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (Index("idx_user_recommendations_user", "user_id"),)

    def __repr__(self):
        return (
            f"<UserRecommendation(user_id='{self.user_id}', movie_id={self.movie_id}, "
            f"score={self.recommendation_score:.3f}, type='{self.recommendation_type}')>"
        )
