"""Favorite and watchlist records with a denormalized movie snapshot."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Float, Integer, String, UniqueConstraint

from movie_recommendation_service.models.base import Base


class _InteractionMixin:
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    movie_id = Column(Integer, nullable=False, index=True)

    # Snapshot of the movie at the time it was added
    movie_title = Column(String(255), nullable=False)
    movie_poster_path = Column(String(255), nullable=True)
    movie_release_date = Column(String(10), nullable=True)
    movie_vote_average = Column(Float, nullable=True)

    added_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Favorite(_InteractionMixin, Base):
    """A movie the user marked as a favorite."""

    __tablename__ = "favorites"
    __table_args__ = (UniqueConstraint("user_id", "movie_id", name="uq_favorites_user_movie"),)

    def __repr__(self):
        return f"<Favorite(user_id='{self.user_id}', movie_id={self.movie_id})>"


class WatchlistItem(_InteractionMixin, Base):
    """A movie the user intends to watch."""

    __tablename__ = "watchlist"
    __table_args__ = (UniqueConstraint("user_id", "movie_id", name="uq_watchlist_user_movie"),)

    def __repr__(self):
        return f"<WatchlistItem(user_id='{self.user_id}', movie_id={self.movie_id})>"
