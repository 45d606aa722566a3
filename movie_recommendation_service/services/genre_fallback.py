"""Genre-driven catalog search used to supplement thin recommendation sets."""
import math
from typing import Dict, List, Optional, Set
import logging

import numpy as np

from movie_recommendation_service.constants import SORT_OPTIONS, get_genre_name
from movie_recommendation_service.exceptions import RecommendationServiceError
from movie_recommendation_service.services.randomness import choose, fisher_yates_shuffle, make_rng

logger = logging.getLogger(__name__)


def _warn(warnings: Optional[List[str]], message: str) -> None:
    logger.warning(message)
    if warnings is not None:
        warnings.append(message)


class GenreFallback:
    """
    Genre-targeted discovery against the catalog.

    Sort keys and the final order are randomized through the injected
    generator so repeated calls surface different movies.
    """

    def __init__(
            self,
            catalog,
            rng: Optional[np.random.Generator] = None,
            min_rating: float = 6.0
    ):
        self.catalog = catalog
        self.rng = rng if rng is not None else make_rng()
        self.min_rating = min_rating

    def search(
            self,
            preferences: Dict[int, float],
            excluded_ids: Set[int],
            limit: int,
            min_score: float = 0.1,
            max_genres: int = 5,
            warnings: Optional[List[str]] = None
    ) -> List[Dict]:
        """
        Find movies in the user's favored genres.

        Args:
            preferences: Genre -> preference score
            excluded_ids: Movie ids that must not be returned
            limit: Maximum number of movies
            min_score: Genres must score above this to be searched
            max_genres: Maximum number of genres to search
            warnings: Optional sink for non-fatal failures

        Returns:
            Up to limit full movie detail dicts in random order. Falls back to
            trending movies when the genre search finds nothing.
        """
        if limit <= 0:
            return []

        top_genres = sorted(
            ((genre_id, score) for genre_id, score in preferences.items() if score > min_score),
            key=lambda item: item[1],
            reverse=True,
        )[:max_genres]

        # Keyed by movie id so the limit counts distinct movies
        movies: Dict[int, Dict] = {}
        per_genre = math.ceil(limit / max(len(top_genres), 1)) + 2

        for genre_id, _ in top_genres:
            sort_by = choose(SORT_OPTIONS, self.rng)
            logger.info(f"Searching for {get_genre_name(genre_id)} movies (sort: {sort_by})")

            try:
                page = self.catalog.discover(genre_id, self.min_rating, sort_by, page=1)
            except RecommendationServiceError as e:
                _warn(warnings, f"Failed to search genre {genre_id}: {e}")
                continue

            summaries = [
                m for m in page.get('results', [])
                if m.get('id') is not None and m['id'] not in excluded_ids
            ][:per_genre]

            for summary in summaries:
                if summary['id'] in movies:
                    continue
                try:
                    movies[summary['id']] = self.catalog.get_movie_details(summary['id'])
                except RecommendationServiceError as e:
                    _warn(warnings, f"Failed to get details for movie {summary['id']}: {e}")
                    continue

                if len(movies) >= limit:
                    break

            if len(movies) >= limit:
                break

        if movies:
            return fisher_yates_shuffle(list(movies.values()), self.rng)[:limit]

        logger.info("Genre search found nothing, falling back to trending movies")
        return self.simple_trending(excluded_ids, limit, warnings=warnings)

    def simple_trending(
            self,
            excluded_ids: Set[int],
            limit: int,
            warnings: Optional[List[str]] = None
    ) -> List[Dict]:
        """
        Trending movies minus the excluded ids, shuffled and truncated.

        Returns an empty list if the trending request itself fails.
        """
        if limit <= 0:
            return []

        try:
            trending = self.catalog.get_trending()
            available = [
                m for m in trending.get('results', [])
                if m.get('id') is not None and m['id'] not in excluded_ids
            ]
        except Exception as e:
            logger.error(f"Trending fallback failed: {e}", exc_info=True)
            if warnings is not None:
                warnings.append(f"Trending fallback failed: {e}")
            return []

        return fisher_yates_shuffle(available, self.rng)[:limit]
