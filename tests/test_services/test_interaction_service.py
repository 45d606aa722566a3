"""Unit tests for InteractionService."""
import pytest

from movie_recommendation_service.services.interaction_service import InteractionService


@pytest.fixture
def interactions(preference_store, engine):
    """InteractionService over the test store and engine."""
    return InteractionService(preference_store, engine)


class TestFavorites:
    """Tests for favorite mutations."""

    def test_add_updates_preferences(self, interactions, preference_store, sample_movie):
        """Test adding a favorite nudges each genre by 0.3."""
        # Act
        result = interactions.add_to_favorites("u1", sample_movie)

        # Assert
        assert result is True
        assert interactions.is_in_favorites("u1", 603) is True
        assert preference_store.get_preferences("u1") == {28: pytest.approx(0.3), 878: pytest.approx(0.3)}

    def test_duplicate_add_is_noop(self, interactions, preference_store, sample_movie):
        """Test a repeated favorite changes nothing."""
        # Arrange
        interactions.add_to_favorites("u1", sample_movie)

        # Act
        result = interactions.add_to_favorites("u1", sample_movie)

        # Assert
        assert result is False
        assert len(interactions.get_favorites("u1")) == 1
        assert preference_store.get_preferences("u1")[28] == pytest.approx(0.3)

    def test_remove_with_movie_lowers_preferences(self, interactions, preference_store, sample_movie):
        # Arrange
        interactions.add_to_favorites("u1", sample_movie)

        # Act
        result = interactions.remove_from_favorites("u1", 603, sample_movie)

        # Assert
        assert result is True
        assert interactions.is_in_favorites("u1", 603) is False
        assert preference_store.get_preferences("u1")[28] == pytest.approx(0.1)

    def test_remove_without_movie_keeps_preferences(self, interactions, preference_store, sample_movie):
        # Arrange
        interactions.add_to_favorites("u1", sample_movie)

        # Act
        interactions.remove_from_favorites("u1", 603)

        # Assert
        assert preference_store.get_preferences("u1")[28] == pytest.approx(0.3)

    def test_remove_missing(self, interactions, preference_store, sample_movie):
        """Test removing a non-favorite leaves preferences alone."""
        # Act
        result = interactions.remove_from_favorites("u1", 603, sample_movie)

        # Assert
        assert result is False
        assert preference_store.get_preferences("u1") == {}


class TestWatchlist:
    """Tests for watchlist mutations."""

    def test_add_updates_preferences(self, interactions, preference_store, sample_movie):
        # Act
        result = interactions.add_to_watchlist("u1", sample_movie)

        # Assert
        assert result is True
        assert interactions.is_in_watchlist("u1", 603) is True
        assert preference_store.get_preferences("u1") == {28: pytest.approx(0.1), 878: pytest.approx(0.1)}

    def test_duplicate_add_is_noop(self, interactions, preference_store, sample_movie):
        # Arrange
        interactions.add_to_watchlist("u1", sample_movie)

        # Act
        result = interactions.add_to_watchlist("u1", sample_movie)

        # Assert
        assert result is False
        assert preference_store.get_preferences("u1")[28] == pytest.approx(0.1)

    def test_remove_keeps_preferences(self, interactions, preference_store, sample_movie):
        # Arrange
        interactions.add_to_watchlist("u1", sample_movie)

        # Act
        result = interactions.remove_from_watchlist("u1", 603)

        # Assert
        assert result is True
        assert interactions.get_watchlist("u1") == []
        assert preference_store.get_preferences("u1")[28] == pytest.approx(0.1)

    def test_lists_are_independent(self, interactions, sample_movie):
        """Test one movie can be both a favorite and on the watchlist."""
        # Act
        interactions.add_to_favorites("u1", sample_movie)
        interactions.add_to_watchlist("u1", sample_movie)

        # Assert
        assert interactions.is_in_favorites("u1", 603) is True
        assert interactions.is_in_watchlist("u1", 603) is True
