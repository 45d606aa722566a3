"""Repositories for favorite and watchlist records."""

import logging
from datetime import UTC, datetime

from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from movie_recommendation_service.models import Favorite, WatchlistItem

logger = logging.getLogger(__name__)


class _InteractionRepository:
    """Shared operations for per-user movie lists.

    At most one record exists per (user, movie) pair.
    """

    model: type[Favorite] | type[WatchlistItem]

    def __init__(self, db: Session):
        self.db = db

    # noinspection PyTypeChecker
    def get_items(self, user_id: str) -> list:
        """Get a user's records, most recently added first."""
        return (
            self.db.query(self.model)
            .filter(self.model.user_id == user_id)
            .order_by(desc(self.model.added_at), desc(self.model.id))
            .all()
        )

    def get_item(self, user_id: str, movie_id: int):
        """Get the record for one (user, movie) pair."""
        return (
            self.db.query(self.model)
            .filter(self.model.user_id == user_id, self.model.movie_id == movie_id)
            .first()
        )

    def contains(self, user_id: str, movie_id: int) -> bool:
        """Check whether the movie is in the user's list."""
        return self.get_item(user_id, movie_id) is not None

    def add_item(self, user_id: str, movie: dict) -> tuple[object, bool]:
        """
        Add a movie to the user's list.

        Args:
            user_id: User identifier
            movie: Catalog movie dict (id, title, poster_path, release_date, vote_average)

        Returns:
            (record, created) - created is False when the movie was already present
        """
        movie_id = movie["id"]
        existing = self.get_item(user_id, movie_id)
        if existing:
            return existing, False

        record = self.model(
            user_id=user_id,
            movie_id=movie_id,
            movie_title=movie.get("title") or "",
            movie_poster_path=movie.get("poster_path"),
            movie_release_date=movie.get("release_date") or None,
            movie_vote_average=movie.get("vote_average"),
            added_at=datetime.now(UTC),
        )
        self.db.add(record)

        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent insert for the same pair
            self.db.rollback()
            return self.get_item(user_id, movie_id), False

        self.db.refresh(record)
        return record, True

    def remove_item(self, user_id: str, movie_id: int) -> bool:
        """
        Remove a movie from the user's list.

        Returns:
            True if deleted, False if not found
        """
        count = (
            self.db.query(self.model)
            .filter(self.model.user_id == user_id, self.model.movie_id == movie_id)
            .delete()
        )
        self.db.commit()

        return count > 0


class FavoriteRepository(_InteractionRepository):
    """
    Repository for favorite records.
    """

    model = Favorite

    # noinspection PyTypeChecker
    def get_favorites_of_movies(self, movie_ids: list[int], exclude_user_id: str) -> list[tuple[str, int]]:
        """
        Find other users' favorites among a set of movies.

        Args:
            movie_ids: Movies to look for
            exclude_user_id: User whose own favorites are skipped

        Returns:
            List of (user_id, movie_id) rows
        """
        if not movie_ids:
            return []

        rows = (
            self.db.query(Favorite.user_id, Favorite.movie_id)
            .filter(Favorite.movie_id.in_(movie_ids), Favorite.user_id != exclude_user_id)
            .all()
        )
        return [(row[0], row[1]) for row in rows]

    # noinspection PyTypeChecker
    def get_favorites_for_users(
            self,
            user_ids: list[str],
            exclude_movie_ids: list[int] | None = None
    ) -> list[tuple[int, str]]:
        """
        Get all favorites belonging to a set of users.

        Args:
            user_ids: Users to read
            exclude_movie_ids: Movies to leave out

        Returns:
            List of (movie_id, movie_title) rows, one per favorite record
        """
        if not user_ids:
            return []

        query = self.db.query(Favorite.movie_id, Favorite.movie_title).filter(
            Favorite.user_id.in_(user_ids)
        )
        if exclude_movie_ids:
            query = query.filter(Favorite.movie_id.notin_(exclude_movie_ids))

        return [(row[0], row[1]) for row in query.all()]


class WatchlistRepository(_InteractionRepository):
    """
    Repository for watchlist records.
    """

    model = WatchlistItem
