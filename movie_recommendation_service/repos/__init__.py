"""Repository classes"""

from movie_recommendation_service.repos.interaction_repository import (
    FavoriteRepository,
    WatchlistRepository,
)
from movie_recommendation_service.repos.movie_features_repository import MovieFeaturesRepository
from movie_recommendation_service.repos.preference_repository import PreferenceRepository
from movie_recommendation_service.repos.recommendation_cache_repository import (
    RecommendationCacheRepository,
)

__all__ = [
    "FavoriteRepository",
    "MovieFeaturesRepository",
    "PreferenceRepository",
    "RecommendationCacheRepository",
    "WatchlistRepository",
]
