"""Domain errors raised by the reservation use cases.

Routers translate these into HTTP responses; nothing below the router layer
knows about HTTP.
"""


class DomainError(Exception):
    """Base class for every failure the core reports."""


class ValidationError(DomainError, ValueError):
    """A raw identifier, slot, name or date range is malformed."""


class PastDateError(DomainError):
    pass


class NotWeekdayError(DomainError):
    pass


class RoomNotFoundError(DomainError):
    pass


class SlotTakenError(DomainError):
    """The (room, date, slot) triple is already reserved or disabled."""


class WeeklyQuotaExceededError(DomainError):
    """The user already holds a reservation in the Monday-Friday window."""


class NotFoundError(DomainError):
    pass


class NotAReservationError(DomainError):
    """The slot record is a disabled marker, not a reservation."""


class ForbiddenError(DomainError):
    pass


class TooCloseToDateError(DomainError):
    pass


class IntegrityViolationError(DomainError):
    """Stored data breaks a uniqueness invariant; indicates a bug or a race."""


class StorageError(DomainError):
    """Wraps an unexpected fault from the database."""


class IdentityLookupError(DomainError):
    """The identity provider failed or did not resolve every requested user."""
