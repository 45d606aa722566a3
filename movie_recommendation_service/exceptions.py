"""Error kinds raised at the catalog and store boundaries."""


class RecommendationServiceError(Exception):
    code: str = "recommendation_service_error"

    def __init__(self, message: str = "", *, code: str | None = None):
        super().__init__(message or self.__class__.__name__)
        if code:
            self.code = code


class TransientIOError(RecommendationServiceError):
    """Network or store unavailable."""
    code = "transient_io"


class NotFoundError(RecommendationServiceError):
    """Catalog has no movie with the requested id."""
    code = "not_found"


class UnconfiguredError(RecommendationServiceError):
    """Required configuration is missing."""
    code = "unconfigured"
