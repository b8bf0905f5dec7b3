"""
Error types for casual-coach.

Read paths report missing sessions or chunks as empty results, so there is
no not-found exception here. Write-path errors always propagate.
"""


class CoachError(Exception):
    """Base class for all casual-coach errors."""


class TransientProviderError(CoachError):
    """A completion or embedding backend was unreachable, rate limited or returned nothing usable."""

    def __init__(self, message: str, provider: str = "unknown"):
        super().__init__(message)
        self.provider = provider


class DataIntegrityError(CoachError):
    """A store write failed; the data it carried was not persisted."""

    def __init__(self, message: str, operation: str = "write"):
        super().__init__(message)
        self.operation = operation


class InputValidationError(CoachError, ValueError):
    """Malformed input rejected before any I/O took place."""
