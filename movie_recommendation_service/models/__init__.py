"""SQLAlchemy models"""

from movie_recommendation_service.models.base import Base
from movie_recommendation_service.models.interaction import Favorite, WatchlistItem
from movie_recommendation_service.models.movie_features import MovieFeatures
from movie_recommendation_service.models.user_preference import UserPreference
from movie_recommendation_service.models.user_recommendation import UserRecommendation

__all__ = [
    "Base",
    "Favorite",
    "MovieFeatures",
    "UserPreference",
    "UserRecommendation",
    "WatchlistItem",
]
