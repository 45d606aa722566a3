"""Repository for per-user genre preference scores."""

import logging
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from movie_recommendation_service.constants import MAX_PREFERENCE_SCORE, MIN_PREFERENCE_SCORE
from movie_recommendation_service.models import UserPreference

logger = logging.getLogger(__name__)


def clamp_score(score: float) -> float:
    """Clamp a preference score into [-1.0, 1.0]."""
    return max(MIN_PREFERENCE_SCORE, min(MAX_PREFERENCE_SCORE, score))


class PreferenceRepository:
    """
    Repository for per-user genre preference scores.
    """

    def __init__(self, db: Session):
        self.db = db

    # noinspection PyTypeChecker
    def get_preferences(self, user_id: str) -> list[UserPreference]:
        """Get all genre preferences for a user."""
        return self.db.query(UserPreference).filter(UserPreference.user_id == user_id).all()

    def get_preference(self, user_id: str, genre_id: int) -> UserPreference | None:
        """Get the preference row for one (user, genre) pair."""
        return (
            self.db.query(UserPreference)
            .filter(UserPreference.user_id == user_id, UserPreference.genre_id == genre_id)
            .first()
        )

    def upsert_preference(self, user_id: str, genre_id: int, delta: float) -> UserPreference:
        """
        Apply a delta to a user's genre score, creating the row if absent.

        The read-then-write is not serialized across concurrent updates
        for the same (user, genre) pair.

        Args:
            user_id: User identifier
            genre_id: Genre identifier
            delta: Amount to add to the current score

        Returns:
            UserPreference with the clamped score
        """
        existing = self.get_preference(user_id, genre_id)

        if existing:
            existing.preference_score = clamp_score(existing.preference_score + delta)  # type: ignore[assignment]
            existing.updated_at = datetime.now(UTC)  # type: ignore[assignment]
            preference = existing
        else:
            preference = UserPreference(
                user_id=user_id,
                genre_id=genre_id,
                preference_score=clamp_score(delta),
                updated_at=datetime.now(UTC),
            )
            self.db.add(preference)

        self.db.commit()
        self.db.refresh(preference)

        logger.debug(
            f"Preference for user {user_id} genre {genre_id} -> {preference.preference_score:.2f}"
        )
        return preference

    def count_preferences(self, user_id: str | None = None) -> int:
        """Count preference rows, optionally for one user."""
        query = self.db.query(UserPreference)

        if user_id is not None:
            query = query.filter(UserPreference.user_id == user_id)

        return query.count()
