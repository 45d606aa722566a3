"""Gateway to the TMDB movie catalog."""
from typing import Dict, List, Optional
import logging
import requests

from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from movie_recommendation_service.config import (
    get_request_timeout,
    get_tmdb_api_key,
    get_tmdb_base_url,
)
from movie_recommendation_service.constants import get_genre_name
from movie_recommendation_service.exceptions import (
    NotFoundError,
    TransientIOError,
    UnconfiguredError,
)

logger = logging.getLogger(__name__)


class TMDBCatalogGateway:
    """
    Gateway to the TMDB movie catalog.

    Every call is a single bounded request. Failures are raised as
    NotFoundError / TransientIOError for the caller to isolate; nothing is
    retried unless max_retries is raised above zero.
    """

    def __init__(
            self,
            api_key: Optional[str] = None,
            base_url: Optional[str] = None,
            timeout: Optional[float] = None,
            max_retries: int = 0
    ):
        self.api_key = api_key or get_tmdb_api_key()
        self.base_url = (base_url or get_tmdb_base_url()).rstrip('/')
        self.timeout = timeout if timeout is not None else get_request_timeout()

        # Read access tokens are JWTs and go in the Authorization header
        self.use_bearer = bool(self.api_key and self.api_key.startswith("eyJ"))

        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if self.use_bearer:
            self.session.headers.update({"Authorization": f"Bearer {self.api_key}"})

        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            raise_on_status=False
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        # noinspection HttpUrlsUsage
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def _get(self, endpoint: str, params: Optional[Dict] = None) -> Dict:
        """Issue a GET against the catalog and decode the JSON body."""
        if not self.api_key:
            raise UnconfiguredError(
                "TMDB API key is not configured. Set the TMDB_API_KEY environment variable."
            )

        params = dict(params or {})
        if not self.use_bearer:
            params['api_key'] = self.api_key

        url = f"{self.base_url}{endpoint}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransientIOError(f"Catalog request to {endpoint} failed: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(f"Catalog resource not found: {endpoint}")

        try:
            response.raise_for_status()
            return response.json()
        except (requests.HTTPError, ValueError) as e:
            raise TransientIOError(f"Catalog request to {endpoint} failed: {e}") from e

    # ===== MOVIE ENDPOINTS =====

    def get_movie_details(self, movie_id: int) -> Dict:
        """Fetch full movie details including credits"""
        return self._get(
            f"/movie/{movie_id}",
            {'append_to_response': 'credits,videos,reviews,similar'}
        )

    def discover(
            self,
            genre_id: int,
            min_rating: float,
            sort_by: str,
            page: int = 1
    ) -> Dict:
        """
        Discover movies in a genre.

        Args:
            genre_id: Genre to filter on
            min_rating: Minimum vote average
            sort_by: vote_average.desc, popularity.desc or vote_count.desc
            page: Result page

        Returns:
            Page dict with a 'results' list of movie summaries
        """
        params = {
            'with_genres': str(genre_id),
            'vote_average.gte': str(min_rating),
            'sort_by': sort_by,
            'page': str(page),
        }
        return self._get('/discover/movie', params)

    def get_trending(self, time_window: str = 'week') -> Dict:
        """Fetch the current trending movies page"""
        return self._get(f"/trending/movie/{time_window}")

    # ===== GENRES =====

    def get_genres(self) -> List[Dict]:
        """Fetch the catalog's genre list"""
        return self._get('/genre/movie/list').get('genres', [])

    def get_genre_name(self, genre_id: int) -> str:
        """Static lookup of a genre's display name"""
        return get_genre_name(genre_id)
