"""Signal generators that produce raw recommendation candidates."""
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional
import logging

from movie_recommendation_service.constants import get_genre_name
from movie_recommendation_service.exceptions import RecommendationServiceError

logger = logging.getLogger(__name__)


class CandidateType:
    """Source tags carried by candidates and cached rows."""
    CONTENT = 'content'
    COLLABORATIVE = 'collaborative'
    TRENDING = 'trending'
    SIMILAR_CAST = 'similar_cast'
    SIMILAR_DIRECTOR = 'similar_director'


@dataclass
class Candidate:
    """One scored suggestion, valid for a single generation pass."""
    movie_id: int
    score: float
    reason: str
    type: str


@dataclass
class SignalContext:
    """User state shared by every generator in one generation pass."""
    user_id: str
    preferences: Dict[int, float]
    favorites: List[Dict]
    watchlist: List[Dict] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)


class SignalGenerator:
    """Base class for candidate producers."""

    name: str = ''
    # Personalized signals decide whether genre supplements are needed
    personalized: bool = True
    # Only consulted when the user has at least one favorite
    requires_favorites: bool = False

    def generate(self, context: SignalContext) -> List[Candidate]:
        raise NotImplementedError


class ContentBasedSignal(SignalGenerator):
    """
    Genre-affinity candidates drawn from the movie feature table.

    Score = preference * (vote_average / 10) * (popularity / 100), so obscure
    or poorly rated movies stay near zero even in a favored genre.
    """

    name = CandidateType.CONTENT

    def __init__(
            self,
            store,
            min_preference: float = 0.1,
            max_genres: int = 5,
            min_vote_average: float = 5.0,
            movies_per_genre: int = 15
    ):
        self.store = store
        self.min_preference = min_preference
        self.max_genres = max_genres
        self.min_vote_average = min_vote_average
        self.movies_per_genre = movies_per_genre

    def top_genres(self, preferences: Dict[int, float]) -> List[tuple]:
        """Genres above the inclusion bar, highest score first"""
        ranked = sorted(
            ((genre_id, score) for genre_id, score in preferences.items() if score > self.min_preference),
            key=lambda item: item[1],
            reverse=True,
        )
        return ranked[:self.max_genres]

    def generate(self, context: SignalContext) -> List[Candidate]:
        candidates: List[Candidate] = []

        for genre_id, preference in self.top_genres(context.preferences):
            try:
                movies = self.store.top_movies_for_genre(
                    genre_id,
                    min_vote_average=self.min_vote_average,
                    limit=self.movies_per_genre
                )
            except RecommendationServiceError as e:
                context.warn(f"Content signal skipped genre {genre_id}: {e}")
                continue

            for movie in movies:
                score = preference * (movie['vote_average'] / 10) * (movie['popularity_score'] / 100)
                candidates.append(Candidate(
                    movie_id=movie['movie_id'],
                    score=score,
                    reason=f"Because you like {get_genre_name(genre_id)} movies",
                    type=CandidateType.CONTENT
                ))

        return candidates


class SimilarCastSignal(SignalGenerator):
    """
    Movies sharing cast members with the user's favorites.

    Intentionally unimplemented: contributes no candidates. The feature
    table already stores cast_ids for a future implementation.
    """

    name = CandidateType.SIMILAR_CAST
    requires_favorites = True

    def generate(self, context: SignalContext) -> List[Candidate]:
        return []


class SimilarDirectorSignal(SignalGenerator):
    """
    Movies by the directors of the user's favorites.

    Intentionally unimplemented: contributes no candidates.
    """

    name = CandidateType.SIMILAR_DIRECTOR
    requires_favorites = True

    def generate(self, context: SignalContext) -> List[Candidate]:
        return []


class CollaborativeSignal(SignalGenerator):
    """
    "Users who liked X also liked Y" by co-occurrence over a small neighborhood.

    Neighbors are the users sharing the most favorites with this user.
    Score = number of neighbors who favorited the movie / max_neighbors.
    """

    name = CandidateType.COLLABORATIVE

    def __init__(self, store, max_neighbors: int = 5):
        self.store = store
        self.max_neighbors = max_neighbors

    def generate(self, context: SignalContext) -> List[Candidate]:
        if not context.favorites:
            return []

        favorite_ids = [f['movie_id'] for f in context.favorites]

        try:
            shared = self.store.find_neighbor_favorites(context.user_id, favorite_ids)
            if not shared:
                return []

            overlap = Counter(row['user_id'] for row in shared)
            top_neighbors = [uid for uid, _ in overlap.most_common(self.max_neighbors)]

            neighbor_favorites = self.store.get_favorites_for_users(
                top_neighbors, exclude_movie_ids=favorite_ids
            )
        except RecommendationServiceError as e:
            context.warn(f"Collaborative signal failed for user {context.user_id}: {e}")
            return []

        counts = Counter(row['movie_id'] for row in neighbor_favorites)

        return [
            Candidate(
                movie_id=movie_id,
                score=count / self.max_neighbors,
                reason="Users with similar taste also liked this",
                type=CandidateType.COLLABORATIVE
            )
            for movie_id, count in counts.items()
        ]


class TrendingSignal(SignalGenerator):
    """
    Trending movies scored by genre match, popularity and rating.

    Score = 0.4 * genre_match + 0.3 * (popularity / 1000) + 0.3 * (vote_average / 10)
    """

    name = CandidateType.TRENDING
    personalized = False

    def __init__(self, catalog, no_preference_match: float = 0.5):
        self.catalog = catalog
        self.no_preference_match = no_preference_match

    def genre_match(self, movie_genres: List[int], preferences: Dict[int, float]) -> float:
        """Fraction of the movie's genres the user is positive about"""
        if not preferences:
            return self.no_preference_match

        liked = {genre_id for genre_id, score in preferences.items() if score > 0}
        matching = [g for g in movie_genres if g in liked]
        return len(matching) / max(len(movie_genres), 1)

    def generate(self, context: SignalContext) -> List[Candidate]:
        try:
            trending = self.catalog.get_trending()
        except RecommendationServiceError as e:
            context.warn(f"Trending signal failed: {e}")
            return []

        candidates: List[Candidate] = []
        for movie in trending.get('results', []):
            genre_score = self.genre_match(movie.get('genre_ids') or [], context.preferences)
            popularity_score = (movie.get('popularity') or 0) / 1000
            rating_score = (movie.get('vote_average') or 0) / 10

            candidates.append(Candidate(
                movie_id=movie['id'],
                score=genre_score * 0.4 + popularity_score * 0.3 + rating_score * 0.3,
                reason="Trending now",
                type=CandidateType.TRENDING
            ))

        return candidates


class SignalRegistry:
    """Ordered registry of signal generators keyed by name."""

    def __init__(self) -> None:
        self._generators: Dict[str, SignalGenerator] = {}

    def register(self, generator: SignalGenerator) -> None:
        """
        Register a generator.

        Raises:
            ValueError: If a generator with the same name is registered
        """
        if generator.name in self._generators:
            raise ValueError(f"Signal '{generator.name}' is already registered")
        self._generators[generator.name] = generator

    def get(self, name: str) -> Optional[SignalGenerator]:
        return self._generators.get(name)

    def names(self) -> List[str]:
        return list(self._generators)

    def generators(self) -> List[SignalGenerator]:
        return list(self._generators.values())

    def __contains__(self, name: str) -> bool:
        return name in self._generators

    def __len__(self) -> int:
        return len(self._generators)


def default_registry(catalog, store) -> SignalRegistry:
    """Registry with the content, cast, director, collaborative and trending signals."""
    registry = SignalRegistry()
    registry.register(ContentBasedSignal(store))
    registry.register(SimilarCastSignal())
    registry.register(SimilarDirectorSignal())
    registry.register(CollaborativeSignal(store))
    registry.register(TrendingSignal(catalog))
    return registry
