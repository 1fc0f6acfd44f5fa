"""
Custom exceptions for the FolioAI backend.

Recoverable denials (AccessDenied, RateLimited, PromptRejected, ValidationFailure)
are produced by the services as result objects and only raised at the API boundary
through their raise_for_* helpers. ParseError and IntegrityFailure are raised directly.
"""

from typing import List, Optional


class FolioAIError(Exception):
    """Base class for all FolioAI errors."""

    pass


class ParseError(FolioAIError):
    """Raised when structured profile input is not valid serialized data."""

    pass


class ValidationFailure(FolioAIError):
    """Raised when a canonical profile violates one or more validation rules."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Profile validation failed")


class AccessDenied(FolioAIError):
    """Raised when the entitlement gate denies an action."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class RateLimited(FolioAIError):
    """Raised when a user has exhausted their hourly request window."""

    def __init__(self, reset_time: Optional[float], message: str = ""):
        self.reset_time = reset_time
        super().__init__(message or "Rate limit exceeded")


class PromptRejected(FolioAIError):
    """Raised when a generation request is refused by the security mediator.

    The message is always user-facing and generic; the detailed reason only
    goes to the security log.
    """

    pass


class IntegrityFailure(FolioAIError):
    """Raised when a protected prompt fails its lock/hash check."""

    pass


class PromptNotFoundError(FolioAIError, LookupError):
    """Raised when a protected prompt id is not in the registry."""

    pass


class ProfileNotFoundError(FolioAIError, LookupError):
    """Raised by a profile store when no record exists for a user id."""

    pass


class ProfileStoreError(FolioAIError):
    """Raised when the external profile store cannot be read or written."""

    pass


class GenerationError(FolioAIError):
    """Raised when the text-generation backend call fails."""

    pass
