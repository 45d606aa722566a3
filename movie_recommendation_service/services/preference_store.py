"""Accessor over the user preference, interaction, feature and cache tables."""
import functools
import logging
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from movie_recommendation_service.exceptions import TransientIOError
from movie_recommendation_service.repos import (
    FavoriteRepository,
    MovieFeaturesRepository,
    PreferenceRepository,
    RecommendationCacheRepository,
    WatchlistRepository,
)

logger = logging.getLogger(__name__)


def _store_call(method):
    """Roll back and re-raise database failures as TransientIOError."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise TransientIOError(f"Store operation {method.__name__} failed: {e}") from e

    return wrapper


class PreferenceStore:
    """
    Accessor the recommendation engine uses for all persisted user state.

    Wraps one SQLAlchemy session. Return values are plain dicts and lists so
    callers never hold ORM objects across a commit.
    """

    def __init__(self, db: Session):
        self.db = db
        self.preferences = PreferenceRepository(db)
        self.favorites = FavoriteRepository(db)
        self.watchlist = WatchlistRepository(db)
        self.movie_features = MovieFeaturesRepository(db)
        self.cache = RecommendationCacheRepository(db)

    # ===== PREFERENCES =====

    @_store_call
    def get_preferences(self, user_id: str) -> Dict[int, float]:
        """Get a user's genre -> score mapping (empty if none)"""
        return {
            row.genre_id: row.preference_score
            for row in self.preferences.get_preferences(user_id)
        }

    @_store_call
    def upsert_preference(self, user_id: str, genre_id: int, delta: float) -> float:
        """Apply a clamped delta to one genre score and return the new score"""
        return self.preferences.upsert_preference(user_id, genre_id, delta).preference_score

    # ===== INTERACTIONS =====

    @_store_call
    def get_favorites(self, user_id: str) -> List[Dict]:
        """Get a user's favorites as {movie_id, movie_title} dicts"""
        return [
            {'movie_id': row.movie_id, 'movie_title': row.movie_title}
            for row in self.favorites.get_items(user_id)
        ]

    @_store_call
    def get_watchlist(self, user_id: str) -> List[Dict]:
        """Get a user's watchlist as {movie_id, movie_title} dicts"""
        return [
            {'movie_id': row.movie_id, 'movie_title': row.movie_title}
            for row in self.watchlist.get_items(user_id)
        ]

    @_store_call
    def add_favorite(self, user_id: str, movie: Dict) -> bool:
        """Add a favorite; False if it already existed"""
        _, created = self.favorites.add_item(user_id, movie)
        return created

    @_store_call
    def remove_favorite(self, user_id: str, movie_id: int) -> bool:
        return self.favorites.remove_item(user_id, movie_id)

    @_store_call
    def is_favorite(self, user_id: str, movie_id: int) -> bool:
        return self.favorites.contains(user_id, movie_id)

    @_store_call
    def add_to_watchlist(self, user_id: str, movie: Dict) -> bool:
        """Add a watchlist entry; False if it already existed"""
        _, created = self.watchlist.add_item(user_id, movie)
        return created

    @_store_call
    def remove_from_watchlist(self, user_id: str, movie_id: int) -> bool:
        return self.watchlist.remove_item(user_id, movie_id)

    @_store_call
    def is_in_watchlist(self, user_id: str, movie_id: int) -> bool:
        return self.watchlist.contains(user_id, movie_id)

    @_store_call
    def find_neighbor_favorites(self, user_id: str, movie_ids: List[int]) -> List[Dict]:
        """Other users' favorites among the given movies, as {user_id, movie_id}"""
        return [
            {'user_id': uid, 'movie_id': mid}
            for uid, mid in self.favorites.get_favorites_of_movies(movie_ids, user_id)
        ]

    @_store_call
    def get_favorites_for_users(
            self,
            user_ids: List[str],
            exclude_movie_ids: Optional[List[int]] = None
    ) -> List[Dict]:
        """All favorites of the given users, as {movie_id, movie_title}"""
        return [
            {'movie_id': mid, 'movie_title': title}
            for mid, title in self.favorites.get_favorites_for_users(user_ids, exclude_movie_ids)
        ]

    # ===== MOVIE FEATURES =====

    @_store_call
    def upsert_movie_features(self, features: Dict) -> bool:
        """Insert a feature snapshot if absent; never overwrites"""
        return self.movie_features.insert_if_absent(features)

    @_store_call
    def has_movie_features(self, movie_id: int) -> bool:
        return self.movie_features.exists(movie_id)

    @_store_call
    def top_movies_for_genre(
            self,
            genre_id: int,
            min_vote_average: float = 5.0,
            limit: int = 15
    ) -> List[Dict]:
        """Most popular feature rows for a genre above a rating floor"""
        return [
            {
                'movie_id': row.movie_id,
                'genres': list(row.genres or []),
                'popularity_score': row.popularity_score,
                'vote_average': row.vote_average,
            }
            for row in self.movie_features.get_top_movies_for_genre(
                genre_id, min_vote_average=min_vote_average, limit=limit
            )
        ]

    # ===== RECOMMENDATION CACHE =====

    @_store_call
    def replace_cache(self, user_id: str, candidates: List) -> int:
        """
        Replace the user's cached recommendations with the given candidates.

        Args:
            user_id: User identifier
            candidates: Candidate objects (movie_id, score, type, reason)

        Returns:
            Number of rows stored
        """
        rows = [
            {
                'movie_id': c.movie_id,
                'score': c.score,
                'type': c.type,
                'reason': c.reason,
            }
            for c in candidates
        ]
        return self.cache.replace_recommendations(user_id, rows)

    @_store_call
    def get_cached_recommendations(self, user_id: str) -> List[Dict]:
        """Cached rows as {movie_id, score, type, reason} dicts"""
        return [
            {
                'movie_id': row.movie_id,
                'score': row.recommendation_score,
                'type': row.recommendation_type,
                'reason': row.reason,
            }
            for row in self.cache.get_recommendations(user_id)
        ]

    @_store_call
    def clear_cache(self, user_id: str) -> int:
        return self.cache.delete_recommendations(user_id)
