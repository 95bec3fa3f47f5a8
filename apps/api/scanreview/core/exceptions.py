"""Domain exceptions raised by the services and translated by the API layer.

Services raise these; route handlers let them propagate and the handlers
registered in ``scanreview.main`` turn them into JSON responses:

- ``ValidationFailedError``   -> 400
- ``NotFoundError``           -> 404
- ``ShortCodeCollisionError`` -> 409 (only after the retry budget is spent)
"""


class ScanReviewError(Exception):
    """Base exception for all ScanReview domain errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationFailedError(ScanReviewError):
    """Input was rejected before anything was written."""

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class NotFoundError(ScanReviewError):
    """The referenced code, submission or tenant does not exist (or is not visible)."""


class ShortCodeCollisionError(ScanReviewError):
    """Short code generation kept colliding with the registry."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Could not allocate unique short codes after {attempts} attempts")
        self.attempts = attempts
