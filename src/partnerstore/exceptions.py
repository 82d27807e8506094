"""Custom exception hierarchy for the partner store."""


class PartnerError(Exception):
    """Base exception for all partner store errors."""


class PartnerNotFoundError(PartnerError):
    """Raised when an update targets a partner pair that does not exist."""


class ConstraintViolationError(PartnerError):
    """Raised when a write breaks a storage constraint.

    Covers a duplicate ``(shared_by_id, shared_with_id)`` pair, a reference
    to a user id that does not exist, and self-sharing when disallowed.
    """


class IntegrityFaultError(PartnerError):
    """Raised when a write succeeded but its edge cannot be fully hydrated.

    This signals a defect in storage or in the caller's setup and is never
    downgraded to a partially hydrated result.
    """


class StorageError(PartnerError):
    """Raised on storage backend failures (engine not open, etc.)."""
