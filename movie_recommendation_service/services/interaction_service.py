"""Favorite and watchlist mutations that keep genre preferences in step."""
from typing import Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


class InteractionService:
    """
    Adds and removes favorites/watchlist entries for a user.

    Each successful add (and a favorite removal with the movie payload)
    updates the user's genre preferences before returning.
    """

    def __init__(self, store, engine):
        self.store = store
        self.engine = engine

    # ===== FAVORITES =====

    def add_to_favorites(self, user_id: str, movie: Dict) -> bool:
        """
        Add a movie to the user's favorites.

        Args:
            user_id: User identifier
            movie: Catalog movie dict

        Returns:
            True if added, False if it was already a favorite
        """
        created = self.store.add_favorite(user_id, movie)
        if not created:
            logger.info(f"Movie {movie['id']} already in favorites for user {user_id}")
            return False

        self.engine.update_user_preferences(user_id, movie, 'favorite')
        return True

    def remove_from_favorites(self, user_id: str, movie_id: int, movie: Optional[Dict] = None) -> bool:
        """
        Remove a movie from the user's favorites.

        Genre scores are lowered only when the movie payload is supplied.

        Returns:
            True if removed, False if it was not a favorite
        """
        removed = self.store.remove_favorite(user_id, movie_id)
        if removed and movie is not None:
            self.engine.update_user_preferences(user_id, movie, 'unfavorite')
        return removed

    def is_in_favorites(self, user_id: str, movie_id: int) -> bool:
        return self.store.is_favorite(user_id, movie_id)

    def get_favorites(self, user_id: str) -> List[Dict]:
        return self.store.get_favorites(user_id)

    # ===== WATCHLIST =====

    def add_to_watchlist(self, user_id: str, movie: Dict) -> bool:
        """
        Add a movie to the user's watchlist.

        Returns:
            True if added, False if it was already on the watchlist
        """
        created = self.store.add_to_watchlist(user_id, movie)
        if not created:
            logger.info(f"Movie {movie['id']} already in watchlist for user {user_id}")
            return False

        self.engine.update_user_preferences(user_id, movie, 'watchlist')
        return True

    def remove_from_watchlist(self, user_id: str, movie_id: int) -> bool:
        """Remove a movie from the watchlist; preferences are left as they are"""
        return self.store.remove_from_watchlist(user_id, movie_id)

    def is_in_watchlist(self, user_id: str, movie_id: int) -> bool:
        return self.store.is_in_watchlist(user_id, movie_id)

    def get_watchlist(self, user_id: str) -> List[Dict]:
        return self.store.get_watchlist(user_id)
