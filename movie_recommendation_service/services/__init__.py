"""Service classes"""

from .catalog_gateway import TMDBCatalogGateway
from .fusion import combine_candidates
from .genre_fallback import GenreFallback
from .interaction_service import InteractionService
from .preference_store import PreferenceStore
from .recommendation_engine import RecommendationEngine, RecommendationResult
from .signals import Candidate, CandidateType, SignalRegistry

__all__ = [
    "Candidate",
    "CandidateType",
    "GenreFallback",
    "InteractionService",
    "PreferenceStore",
    "RecommendationEngine",
    "RecommendationResult",
    "SignalRegistry",
    "TMDBCatalogGateway",
    "combine_candidates",
]
