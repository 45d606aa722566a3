"""Repository for per-movie feature snapshots."""

import logging
from datetime import UTC, datetime

from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from movie_recommendation_service.models import MovieFeatures

logger = logging.getLogger(__name__)


class MovieFeaturesRepository:
    """
    Repository for per-movie feature snapshots.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_features(self, movie_id: int) -> MovieFeatures | None:
        """Get the feature snapshot for a movie."""
        return self.db.query(MovieFeatures).filter(MovieFeatures.movie_id == movie_id).first()

    def exists(self, movie_id: int) -> bool:
        """Check whether a snapshot exists for a movie."""
        return (
            self.db.query(MovieFeatures.movie_id)
            .filter(MovieFeatures.movie_id == movie_id)
            .first()
            is not None
        )

    def insert_if_absent(self, features: dict) -> bool:
        """
        Store a feature snapshot unless one already exists.

        Existing rows are never overwritten.

        Args:
            features: Dict with movie_id, genres, cast_ids, director_id,
                popularity_score, vote_average, release_year, runtime

        Returns:
            True if a row was inserted, False if the movie already had one
        """
        movie_id = features["movie_id"]
        if self.exists(movie_id):
            return False

        record = MovieFeatures(
            movie_id=movie_id,
            genres=list(features.get("genres") or []),
            cast_ids=list(features.get("cast_ids") or [])[:10],
            director_id=features.get("director_id"),
            popularity_score=features.get("popularity_score") or 0.0,
            vote_average=features.get("vote_average") or 0.0,
            release_year=features.get("release_year"),
            runtime=features.get("runtime"),
            created_at=datetime.now(UTC),
        )
        self.db.add(record)

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return False

        logger.info(f"✓ Stored features for movie {movie_id}")
        return True

    # noinspection PyTypeChecker
    def get_top_movies_for_genre(
            self,
            genre_id: int,
            min_vote_average: float = 5.0,
            limit: int = 15
    ) -> list[MovieFeatures]:
        """
        Get the most popular movies tagged with a genre.

        Genre membership is checked in Python since the genres column is a
        JSON list and containment operators differ between backends.

        Args:
            genre_id: Genre to match
            min_vote_average: Minimum average rating
            limit: Maximum number of movies

        Returns:
            List of MovieFeatures ordered by popularity descending
        """
        rows = (
            self.db.query(MovieFeatures)
            .filter(MovieFeatures.vote_average >= min_vote_average)
            .order_by(desc(MovieFeatures.popularity_score), MovieFeatures.movie_id)
        )

        results = []
        for row in rows:
            if genre_id in (row.genres or []):
                results.append(row)
                if len(results) >= limit:
                    break

        return results

    def count_movies(self) -> int:
        """Count stored snapshots."""
        return self.db.query(MovieFeatures).count()
