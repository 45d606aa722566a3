"""Personalized movie recommendation engine."""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set
import logging

import numpy as np

from movie_recommendation_service.config import get_default_recommendation_limit
from movie_recommendation_service.constants import ACTION_WEIGHTS
from movie_recommendation_service.exceptions import RecommendationServiceError
from movie_recommendation_service.models.database import get_session_factory
from movie_recommendation_service.services.catalog_gateway import TMDBCatalogGateway
from movie_recommendation_service.services.fusion import combine_candidates
from movie_recommendation_service.services.genre_fallback import GenreFallback
from movie_recommendation_service.services.preference_store import PreferenceStore
from movie_recommendation_service.services.randomness import fisher_yates_shuffle, make_rng
from movie_recommendation_service.services.signals import (
    Candidate,
    CandidateType,
    SignalContext,
    SignalRegistry,
    default_registry,
)

logger = logging.getLogger(__name__)

SUPPLEMENT_SCORE = 0.5
SUPPLEMENT_REASON = "Based on your genre preferences"
TOP_UP_SCORE = 0.4
TOP_UP_REASON = "Additional genre-based recommendation"


class GenerationPath:
    """Which branch of the pipeline produced a result."""
    COMBINED = 'combined'
    SUPPLEMENTED = 'supplemented'
    GENRE_FALLBACK = 'genre_fallback'
    TRENDING_FALLBACK = 'trending_fallback'


@dataclass
class RecommendationResult:
    """
    Movies for the caller plus the non-fatal problems met along the way.

    candidates holds the filtered list before the presentation shuffle;
    it is empty for the fallback paths, which return movies directly.
    """
    movies: List[Dict]
    warnings: List[str] = field(default_factory=list)
    candidates: List[Candidate] = field(default_factory=list)
    path: str = GenerationPath.COMBINED


def owned_movie_ids(favorites: List[Dict], watchlist: List[Dict]) -> Set[int]:
    """Movie ids already in the user's favorites or watchlist."""
    return {f['movie_id'] for f in favorites} | {w['movie_id'] for w in watchlist}


def filter_owned(candidates: List[Candidate], owned: Set[int], limit: int) -> List[Candidate]:
    """Drop owned movies and truncate, keeping the input order."""
    return [c for c in candidates if c.movie_id not in owned][:limit]


def _release_year(release_date: Optional[str]) -> int:
    try:
        return int((release_date or '')[:4])
    except ValueError:
        return 2000


def build_movie_features(movie: Dict, details: Optional[Dict] = None) -> Dict:
    """
    Build a feature snapshot from a movie summary and optional full details.

    Args:
        movie: Movie summary (id, genre_ids, popularity, vote_average, release_date)
        details: Full details with genres, credits and runtime

    Returns:
        Dict accepted by PreferenceStore.upsert_movie_features
    """
    details = details or {}
    credits = details.get('credits') or {}

    genres = [g['id'] for g in details.get('genres') or []] or list(movie.get('genre_ids') or [])
    cast_ids = [c['id'] for c in (credits.get('cast') or [])[:10]]
    director_id = next(
        (c['id'] for c in credits.get('crew') or [] if c.get('job') == 'Director'),
        None
    )

    return {
        'movie_id': movie['id'],
        'genres': genres,
        'cast_ids': cast_ids,
        'director_id': director_id,
        'popularity_score': movie.get('popularity') or details.get('popularity') or 0,
        'vote_average': movie.get('vote_average') or details.get('vote_average') or 0,
        'release_year': _release_year(movie.get('release_date') or details.get('release_date')),
        'runtime': details.get('runtime') or 0,
    }


# noinspection PyMethodMayBeStatic
class RecommendationEngine:
    """
    Produces personalized movie recommendations for a user.

    Combines content-based, collaborative and trending signals, tops up thin
    results with genre-driven catalog search, filters out movies the user
    already has, caches the result and resolves full movie details.
    Generation never raises; the worst case is an empty list.
    """

    def __init__(
            self,
            catalog,
            store,
            registry: Optional[SignalRegistry] = None,
            rng: Optional[np.random.Generator] = None,
            seed: Optional[int] = None
    ):
        """
        Initialize the engine.

        Args:
            catalog: Catalog gateway (get_movie_details, discover, get_trending)
            store: Preference store accessor
            registry: Signal generators (default: content, cast, director,
                collaborative, trending)
            rng: Random generator for sort keys and shuffles
            seed: Seed for a new generator when rng is not given
        """
        self.catalog = catalog
        self.store = store
        self.registry = registry if registry is not None else default_registry(catalog, store)
        self.rng = rng if rng is not None else make_rng(seed)
        self.fallback = GenreFallback(catalog, rng=self.rng)

    @classmethod
    def from_session(cls, db, seed: Optional[int] = None) -> 'RecommendationEngine':
        """Build an engine on the configured TMDB catalog and a database session."""
        return cls(TMDBCatalogGateway(), PreferenceStore(db), seed=seed)

    # ===== GENERATION =====

    def generate_recommendations(self, user_id: str, limit: Optional[int] = None) -> List[Dict]:
        """Generate recommendations and return only the movie details"""
        return self.generate(user_id, limit).movies

    def generate(self, user_id: str, limit: Optional[int] = None) -> RecommendationResult:
        """
        Generate personalized recommendations for a user.

        Args:
            user_id: User identifier
            limit: Maximum number of movies (default from config)

        Returns:
            RecommendationResult with at most limit movies, none of them owned
        """
        if limit is None:
            limit = get_default_recommendation_limit()
        warnings: List[str] = []

        if limit <= 0:
            return RecommendationResult(movies=[], warnings=warnings)

        try:
            preferences = self.store.get_preferences(user_id)
            favorites = self.store.get_favorites(user_id)
            watchlist = self.store.get_watchlist(user_id)
        except Exception as e:
            logger.error(f"Failed to load context for user {user_id}: {e}", exc_info=True)
            warnings.append(f"Failed to load user context: {e}")
            movies = self.fallback.simple_trending(set(), limit, warnings=warnings)
            return RecommendationResult(movies=movies, warnings=warnings, path=GenerationPath.TRENDING_FALLBACK)

        owned = owned_movie_ids(favorites, watchlist)

        try:
            return self._generate_from_context(
                user_id, preferences, favorites, watchlist, owned, limit, warnings
            )
        except Exception as e:
            logger.error(f"Error generating recommendations for user {user_id}: {e}", exc_info=True)
            warnings.append(f"Generation failed: {e}")
            movies = self.fallback.simple_trending(owned, limit, warnings=warnings)
            return RecommendationResult(movies=movies, warnings=warnings, path=GenerationPath.TRENDING_FALLBACK)

    def _run_signals(self, context: SignalContext) -> Dict[str, List[Candidate]]:
        """Run every registered generator, isolating failures per signal."""
        results: Dict[str, List[Candidate]] = {}

        for generator in self.registry.generators():
            if generator.requires_favorites and not context.favorites:
                results[generator.name] = []
                continue
            try:
                results[generator.name] = generator.generate(context)
            except Exception as e:
                context.warn(f"Signal '{generator.name}' failed: {e}")
                results[generator.name] = []

            logger.info(f"Signal '{generator.name}': {len(results[generator.name])} candidates")

        return results

    def _generate_from_context(
            self,
            user_id: str,
            preferences: Dict[int, float],
            favorites: List[Dict],
            watchlist: List[Dict],
            owned: Set[int],
            limit: int,
            warnings: List[str]
    ) -> RecommendationResult:
        context = SignalContext(
            user_id=user_id,
            preferences=preferences,
            favorites=favorites,
            watchlist=watchlist,
            warnings=warnings
        )
        signals = self._run_signals(context)

        personalized: List[Candidate] = []
        general: List[Candidate] = []
        for generator in self.registry.generators():
            target = personalized if generator.personalized else general
            target.extend(signals.get(generator.name, []))

        # Some personalized signal but not enough: supplement with genre search, drop trending
        if personalized and len(personalized) < limit and preferences:
            excluded = owned | {c.movie_id for c in personalized}
            supplements = self.fallback.search(
                preferences, excluded, limit - len(personalized), warnings=warnings
            )
            genre_candidates = [
                Candidate(
                    movie_id=movie['id'],
                    score=SUPPLEMENT_SCORE,
                    reason=SUPPLEMENT_REASON,
                    type=CandidateType.CONTENT
                )
                for movie in supplements
            ]
            fused = combine_candidates(personalized + genre_candidates)
            logger.info(f"Supplemented {len(personalized)} personalized candidates with {len(genre_candidates)} genre picks")
            return self.finalize(user_id, fused, preferences, owned, limit, warnings,
                                 path=GenerationPath.SUPPLEMENTED)

        # No personalized signal at all but known tastes: genre search is the whole list
        if not personalized and preferences:
            logger.info("No personalized recommendations found, using genre-based fallback")
            movies = self.fallback.search(
                preferences, owned, limit, min_score=0.0, max_genres=3, warnings=warnings
            )
            return RecommendationResult(movies=movies, warnings=warnings, path=GenerationPath.GENRE_FALLBACK)

        fused = combine_candidates(personalized + general)

        if not fused:
            logger.info("No recommendations found, falling back to simple trending")
            movies = self.fallback.simple_trending(owned, limit, warnings=warnings)
            return RecommendationResult(movies=movies, warnings=warnings, path=GenerationPath.TRENDING_FALLBACK)

        return self.finalize(user_id, fused, preferences, owned, limit, warnings)

    def finalize(
            self,
            user_id: str,
            fused: List[Candidate],
            preferences: Dict[int, float],
            owned: Set[int],
            limit: int,
            warnings: Optional[List[str]] = None,
            path: str = GenerationPath.COMBINED
    ) -> RecommendationResult:
        """
        Filter, top up, cache, shuffle and resolve a fused candidate list.

        Args:
            user_id: User identifier
            fused: Ranked candidates from fusion
            preferences: User's genre preferences (top-up needs at least one)
            owned: Favorite and watchlist movie ids
            limit: Maximum number of movies
            warnings: Sink for non-fatal failures
            path: Generation path recorded on the result

        Returns:
            RecommendationResult
        """
        warnings = warnings if warnings is not None else []

        filtered = filter_owned(fused, owned, limit)
        logger.info(f"Filtered: {len(fused)} -> {len(filtered)} (user has {len(owned)} movies)")

        if len(filtered) < limit and preferences:
            needed = limit - len(filtered)
            excluded = owned | {c.movie_id for c in filtered}
            additional = self.fallback.search(preferences, excluded, needed, warnings=warnings)
            filtered.extend(
                Candidate(
                    movie_id=movie['id'],
                    score=TOP_UP_SCORE,
                    reason=TOP_UP_REASON,
                    type=CandidateType.CONTENT
                )
                for movie in additional
            )
            logger.info(f"Topped up with {len(additional)} genre-based movies, now {len(filtered)}")

        try:
            self.store.replace_cache(user_id, filtered)
        except RecommendationServiceError as e:
            message = f"Failed to cache recommendations for user {user_id}: {e}"
            logger.warning(message)
            warnings.append(message)

        shuffled = fisher_yates_shuffle(filtered, self.rng)[:limit]
        movies = self._resolve_movies([c.movie_id for c in shuffled], warnings)

        logger.info(f"✓ Returning {len(movies)} recommendations for user {user_id}")
        return RecommendationResult(movies=movies, warnings=warnings, candidates=filtered, path=path)

    def _resolve_movies(self, movie_ids: List[int], warnings: List[str]) -> List[Dict]:
        """Fetch full details one id at a time, skipping failures."""
        movies: List[Dict] = []
        for movie_id in movie_ids:
            try:
                movies.append(self.catalog.get_movie_details(movie_id))
            except RecommendationServiceError as e:
                message = f"Error fetching movie {movie_id}: {e}"
                logger.warning(message)
                warnings.append(message)
        return movies

    # ===== PREFERENCE UPDATES =====

    def update_user_preferences(self, user_id: str, movie: Dict, action: str) -> List[str]:
        """
        Nudge the user's genre scores after a favorite/watchlist change.

        Must be called synchronously with the mutation it reflects.

        Args:
            user_id: User identifier
            movie: Catalog movie dict (genre_ids used when present)
            action: 'favorite' (+0.3), 'watchlist' (+0.1) or 'unfavorite' (-0.2)

        Returns:
            Warnings for steps that failed without aborting the update

        Raises:
            ValueError: If action is not recognized
        """
        if action not in ACTION_WEIGHTS:
            raise ValueError(f"Unknown preference action: {action}")

        weight = ACTION_WEIGHTS[action]
        warnings: List[str] = []

        genre_ids = list(movie.get('genre_ids') or [])
        details: Optional[Dict] = None

        if not genre_ids:
            try:
                details = self.catalog.get_movie_details(movie['id'])
            except RecommendationServiceError as e:
                message = f"Failed to fetch genres for {movie.get('title', movie['id'])}: {e}"
                logger.error(message)
                warnings.append(message)
                return warnings
            genre_ids = [g['id'] for g in details.get('genres') or []]

        if not genre_ids:
            return warnings

        if action == 'favorite':
            self._populate_movie_features(movie, details, warnings)

        for genre_id in genre_ids:
            try:
                self.store.upsert_preference(user_id, genre_id, weight)
            except RecommendationServiceError as e:
                message = f"Error updating preference for genre {genre_id}: {e}"
                logger.error(message)
                warnings.append(message)

        return warnings

    def _populate_movie_features(self, movie: Dict, details: Optional[Dict], warnings: List[str]) -> None:
        """Capture the movie's feature snapshot once; failures are only logged."""
        try:
            if self.store.has_movie_features(movie['id']):
                return

            if details is None:
                details = self.catalog.get_movie_details(movie['id'])

            if self.store.upsert_movie_features(build_movie_features(movie, details)):
                logger.info(f"Populated movie features for {movie.get('title', movie['id'])}")
        except RecommendationServiceError as e:
            message = f"Error populating movie features for {movie.get('title', movie['id'])}: {e}"
            logger.warning(message)
            warnings.append(message)

    # ===== CACHE =====

    def get_cached_recommendations(self, user_id: str) -> List[Dict]:
        """Last cached candidate rows for a user; empty if the store fails"""
        try:
            return self.store.get_cached_recommendations(user_id)
        except RecommendationServiceError as e:
            logger.warning(f"Failed to read cached recommendations for user {user_id}: {e}")
            return []

    def clear_cached_recommendations(self, user_id: str) -> int:
        """Drop a user's cached rows before a forced refresh"""
        try:
            return self.store.clear_cache(user_id)
        except RecommendationServiceError as e:
            logger.warning(f"Failed to clear cached recommendations for user {user_id}: {e}")
            return 0


def generate_recommendations(user_id: str, limit: Optional[int] = None) -> List[Dict]:
    """
    Generate recommendations using the configured database and catalog.

    Args:
        user_id: User identifier
        limit: Maximum number of movies

    Returns:
        List of movie detail dicts
    """
    db = get_session_factory()()
    try:
        return RecommendationEngine.from_session(db).generate_recommendations(user_id, limit)
    finally:
        db.close()
