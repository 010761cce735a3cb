"""
Domain exceptions for the wedding guest services.

Every service failure the user can act on is one of these. Each carries a
user-facing message and the HTTP status the API layer answers with.
"""

from typing import Optional


class WeddingGuestsError(Exception):
    """Base exception for service-layer failures."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(WeddingGuestsError):
    """Raised when a wedding, guest or RSVP token does not exist."""

    status_code = 404


class PermissionDeniedError(WeddingGuestsError):
    """Raised when a planner touches a wedding they do not own."""

    status_code = 403


class InvalidInputError(WeddingGuestsError):
    """Raised when input passes schema validation but breaks a service-level constraint."""

    status_code = 422


class BusinessRuleError(WeddingGuestsError):
    """Base exception for business rule violations."""

    status_code = 409


class PlanLimitExceededError(BusinessRuleError):
    """Raised when creating a wedding would exceed the planner's subscription plan."""

    status_code = 403

    def __init__(self, plan: str, limit: int, message: Optional[str] = None):
        self.plan = plan
        self.limit = limit
        noun = "wedding" if limit == 1 else "weddings"
        super().__init__(
            message
            or f"The {plan.title()} plan allows up to {limit} {noun}. "
               f"Upgrade your subscription to manage more events."
        )


class CheckInNotAllowedError(BusinessRuleError):
    """Raised when checking in a guest who has not confirmed."""
    pass


class CapacityExceededError(BusinessRuleError):
    """Raised when a confirmation or check-in would go over the wedding's guest capacity."""
    pass


class RSVPDeadlinePassedError(BusinessRuleError):
    """Raised when an RSVP arrives after the wedding's RSVP deadline."""
    pass


class RSVPAlreadySubmittedError(BusinessRuleError):
    """Raised when a guest tries to change an RSVP that is already on record."""
    pass


class DuplicateGuestError(BusinessRuleError):
    """Raised when a guest email is already on the wedding's list."""
    pass
