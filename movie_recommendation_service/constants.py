"""Static catalog lookups and recommendation tuning constants."""

# Standard TMDB movie genre ids
GENRE_NAMES: dict[int, str] = {
    28: "Action",
    12: "Adventure",
    16: "Animation",
    35: "Comedy",
    80: "Crime",
    99: "Documentary",
    18: "Drama",
    10751: "Family",
    14: "Fantasy",
    36: "History",
    27: "Horror",
    10402: "Music",
    9648: "Mystery",
    10749: "Romance",
    878: "Science Fiction",
    10770: "TV Movie",
    53: "Thriller",
    10752: "War",
    37: "Western",
}

UNKNOWN_GENRE = "Unknown"

# Discovery sort keys, one is picked at random per genre query
SORT_OPTIONS = ("vote_average.desc", "popularity.desc", "vote_count.desc")

# Preference deltas per user action
ACTION_WEIGHTS: dict[str, float] = {
    "favorite": 0.3,
    "watchlist": 0.1,
    "unfavorite": -0.2,
}

MIN_PREFERENCE_SCORE = -1.0
MAX_PREFERENCE_SCORE = 1.0


def get_genre_name(genre_id: int) -> str:
    """Get the display name for a genre id."""
    return GENRE_NAMES.get(genre_id, UNKNOWN_GENRE)
