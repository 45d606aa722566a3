"""Repository for cached recommendation rows."""

import logging
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from movie_recommendation_service.models import UserRecommendation

logger = logging.getLogger(__name__)


class RecommendationCacheRepository:
    """
    Repository for cached recommendation rows.
    """

    def __init__(self, db: Session):
        self.db = db

    def replace_recommendations(self, user_id: str, recommendations: list[dict]) -> int:
        """
        Replace a user's cached recommendations.

        Deletes every existing row for the user and inserts the new ones in
        a single transaction.

        Args:
            user_id: User identifier
            recommendations: List of dicts with keys:
                - movie_id: int
                - score: float
                - type: str
                - reason: str

        Returns:
            Number of rows stored
        """
        try:
            self.db.query(UserRecommendation).filter(
                UserRecommendation.user_id == user_id
            ).delete()

            now = datetime.now(UTC)
            records = [
                UserRecommendation(
                    user_id=user_id,
                    movie_id=item["movie_id"],
                    recommendation_score=item["score"],
                    recommendation_type=item["type"],
                    reason=item.get("reason"),
                    created_at=now,
                )
                for item in recommendations
            ]
            self.db.add_all(records)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"✓ Cached {len(records)} recommendations for user {user_id}")
        return len(records)

    # noinspection PyTypeChecker
    def get_recommendations(self, user_id: str) -> list[UserRecommendation]:
        """Get a user's cached recommendations in the order they were stored."""
        return (
            self.db.query(UserRecommendation)
            .filter(UserRecommendation.user_id == user_id)
            .order_by(UserRecommendation.id)
            .all()
        )

    def delete_recommendations(self, user_id: str) -> int:
        """
        Delete all cached recommendations for a user.

        Returns:
            Number of deleted rows
        """
        count = (
            self.db.query(UserRecommendation)
            .filter(UserRecommendation.user_id == user_id)
            .delete()
        )
        self.db.commit()

        logger.info(f"Deleted {count} cached recommendations for user {user_id}")
        return count
