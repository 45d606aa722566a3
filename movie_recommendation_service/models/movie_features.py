"""Denormalized per-movie feature snapshot."""
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Float, Integer
from sqlalchemy.dialects.mysql import JSON

from movie_recommendation_service.models.base import Base


class MovieFeatures(Base):
    """Feature snapshot captured the first time a movie is favorited.

    Rows are written once and never refreshed.
    """
    __tablename__ = 'movie_features'

    movie_id = Column(Integer, primary_key=True, autoincrement=False)
    genres = Column(JSON, nullable=False, default=list)
    cast_ids = Column(JSON, nullable=False, default=list)
    director_id = Column(Integer, nullable=True)
    popularity_score = Column(Float, nullable=False, default=0.0)
    vote_average = Column(Float, nullable=False, default=0.0)
    release_year = Column(Integer, nullable=True)
    runtime = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    def __repr__(self):
        return f"<MovieFeatures(movie_id={self.movie_id}, genres={self.genres})>"
