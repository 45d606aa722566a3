"""Shared test fixtures and configuration for pytest."""
import json
from typing import Dict, List
from unittest.mock import Mock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from movie_recommendation_service.exceptions import NotFoundError
from movie_recommendation_service.models.base import Base
from movie_recommendation_service.models.interaction import Favorite
from movie_recommendation_service.models.movie_features import MovieFeatures
from movie_recommendation_service.models.user_preference import UserPreference


# ===== Database Fixtures =====

@pytest.fixture(scope="function")
def test_db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def test_db_session(test_db_engine):
    """Create a database session for testing."""
    SessionLocal = sessionmaker(bind=test_db_engine)
    session = SessionLocal()
    yield session
    session.close()


# ===== Sample Data Fixtures =====

def make_movie(movie_id: int, genre_ids: List[int] | None = None, **overrides) -> Dict:
    """Build a catalog movie summary."""
    movie = {
        'id': movie_id,
        'title': f'Movie {movie_id}',
        'genre_ids': genre_ids if genre_ids is not None else [28],
        'popularity': 100.0,
        'vote_average': 7.0,
        'release_date': '2020-05-01',
        'poster_path': f'/poster{movie_id}.jpg',
    }
    movie.update(overrides)
    return movie


def make_details(movie_id: int, genre_ids: List[int] | None = None, **overrides) -> Dict:
    """Build a catalog movie detail record."""
    genre_ids = genre_ids if genre_ids is not None else [28]
    details = make_movie(movie_id, genre_ids)
    details.update({
        'genres': [{'id': g, 'name': f'Genre {g}'} for g in genre_ids],
        'runtime': 120,
        'credits': {
            'cast': [{'id': 1000 + i, 'name': f'Actor {i}'} for i in range(12)],
            'crew': [
                {'id': 500, 'name': 'Writer', 'job': 'Screenplay'},
                {'id': 501, 'name': 'Director', 'job': 'Director'},
            ],
        },
    })
    details.update(overrides)
    return details


@pytest.fixture
def sample_movie() -> Dict:
    """Sample catalog movie summary."""
    return make_movie(603, genre_ids=[28, 878], title='The Matrix', popularity=85.5, vote_average=8.2,
                      release_date='1999-03-30')


@pytest.fixture
def sample_movie_details() -> Dict:
    """Sample catalog movie details."""
    return make_details(603, genre_ids=[28, 878], title='The Matrix', popularity=85.5,
                        vote_average=8.2, release_date='1999-03-30', runtime=136)


# ===== Mock Fixtures =====

@pytest.fixture
def mock_catalog():
    """
    Mock catalog gateway.

    Details resolve for any id; trending and discover return empty pages
    unless a test overrides them.
    """
    mock = Mock()
    mock.get_movie_details.side_effect = lambda movie_id: make_details(movie_id)
    mock.get_trending.return_value = {'results': []}
    mock.discover.return_value = {'results': []}
    return mock


@pytest.fixture
def missing_details_catalog(mock_catalog):
    """Mock catalog whose detail lookups fail for ids above 900."""
    def details(movie_id):
        if movie_id > 900:
            raise NotFoundError(f"Movie {movie_id} not found")
        return make_details(movie_id)

    mock_catalog.get_movie_details.side_effect = details
    return mock_catalog


@pytest.fixture
def mock_database_session():
    """Mock database session."""
    mock_session = Mock()
    mock_session.query.return_value = mock_session
    mock_session.filter.return_value = mock_session
    mock_session.first.return_value = None
    mock_session.all.return_value = []
    mock_session.count.return_value = 0
    mock_session.delete.return_value = None
    mock_session.commit.return_value = None
    mock_session.close.return_value = None
    mock_session.refresh.return_value = None
    return mock_session


# ===== Configuration Fixtures =====

@pytest.fixture
def mock_config(monkeypatch):
    """Mock configuration values."""
    monkeypatch.setenv('DATABASE_URL', 'sqlite:///:memory:')
    monkeypatch.setenv('TMDB_API_KEY', 'test-api-key')
    monkeypatch.setenv('TMDB_BASE_URL', 'http://tmdb.test/3')
    monkeypatch.setenv('TMDB_REQUEST_TIMEOUT', '5')


@pytest.fixture
def mock_local_settings(tmp_path):
    """Write a local.settings.json file into a temporary project root."""
    settings = {
        "Values": {
            "TMDB_API_KEY": "from-settings",
            "TMDB_BASE_URL": "http://settings.test/3",
        }
    }

    settings_file = tmp_path / "local.settings.json"
    with open(settings_file, 'w') as f:
        json.dump(settings, f)

    yield settings_file


# ===== Repository Fixtures =====

@pytest.fixture
def preference_repository(test_db_session):
    """Create PreferenceRepository with test database session."""
    from movie_recommendation_service.repos import PreferenceRepository
    return PreferenceRepository(test_db_session)


@pytest.fixture
def favorite_repository(test_db_session):
    """Create FavoriteRepository with test database session."""
    from movie_recommendation_service.repos import FavoriteRepository
    return FavoriteRepository(test_db_session)


@pytest.fixture
def watchlist_repository(test_db_session):
    """Create WatchlistRepository with test database session."""
    from movie_recommendation_service.repos import WatchlistRepository
    return WatchlistRepository(test_db_session)


@pytest.fixture
def movie_features_repository(test_db_session):
    """Create MovieFeaturesRepository with test database session."""
    from movie_recommendation_service.repos import MovieFeaturesRepository
    return MovieFeaturesRepository(test_db_session)


@pytest.fixture
def recommendation_cache_repository(test_db_session):
    """Create RecommendationCacheRepository with test database session."""
    from movie_recommendation_service.repos import RecommendationCacheRepository
    return RecommendationCacheRepository(test_db_session)


# ===== Service Fixtures =====

@pytest.fixture
def preference_store(test_db_session):
    """Create PreferenceStore over the test database session."""
    from movie_recommendation_service.services.preference_store import PreferenceStore
    return PreferenceStore(test_db_session)


@pytest.fixture
def engine(mock_catalog, preference_store):
    """Recommendation engine with a seeded random generator."""
    from movie_recommendation_service.services.recommendation_engine import RecommendationEngine
    return RecommendationEngine(mock_catalog, preference_store, seed=42)


# ===== Seeded Records =====

@pytest.fixture
def sample_feature_records(test_db_session) -> List[MovieFeatures]:
    """Feature rows: three action movies, one drama, one poorly rated action movie."""
    records = [
        MovieFeatures(movie_id=101, genres=[28], popularity_score=90.0, vote_average=8.0),
        MovieFeatures(movie_id=102, genres=[28, 12], popularity_score=70.0, vote_average=7.0),
        MovieFeatures(movie_id=103, genres=[28], popularity_score=50.0, vote_average=6.0),
        MovieFeatures(movie_id=104, genres=[18], popularity_score=95.0, vote_average=8.5),
        MovieFeatures(movie_id=105, genres=[28], popularity_score=99.0, vote_average=4.0),
    ]
    test_db_session.add_all(records)
    test_db_session.commit()
    return records


@pytest.fixture
def movie_factory():
    """Factory for catalog movie summaries."""
    return make_movie


@pytest.fixture
def seed_favorites(test_db_session):
    """Insert favorite rows directly: seed_favorites(user_id, [movie_ids])."""
    def _seed(user_id: str, movie_ids: List[int]) -> None:
        for movie_id in movie_ids:
            test_db_session.add(Favorite(user_id=user_id, movie_id=movie_id, movie_title=f'Movie {movie_id}'))
        test_db_session.commit()
    return _seed


@pytest.fixture
def seed_preferences(test_db_session):
    """Insert preference rows directly: seed_preferences(user_id, {genre_id: score})."""
    def _seed(user_id: str, scores: Dict[int, float]) -> None:
        for genre_id, score in scores.items():
            test_db_session.add(UserPreference(user_id=user_id, genre_id=genre_id, preference_score=score))
        test_db_session.commit()
    return _seed
