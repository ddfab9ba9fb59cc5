"""Typed errors raised by the compliance engine."""


class ComplianceError(Exception):
    """Base exception for compliance engine errors."""
    pass


class ConfigurationError(ComplianceError):
    """Malformed task definition (unknown frequency, weekly task without a day, ...)."""
    pass


class ValidationError(ComplianceError):
    """Caller-supplied input violates a business rule."""
    pass


class NotFoundError(ComplianceError):
    """Referenced entity does not exist."""
    pass


class AlreadySeededError(ComplianceError):
    """Venue already has an active task catalog."""

    def __init__(self, venue_id: str, active_count: int):
        self.venue_id = venue_id
        self.active_count = active_count
        super().__init__(
            f"Venue {venue_id} already has {active_count} active task definitions"
        )


class SignalUnavailableError(ComplianceError):
    """External activity-signal source could not be reached."""

    def __init__(self, source_key: str, reason: str = ""):
        self.source_key = source_key
        self.reason = reason
        message = f"Activity signal '{source_key}' unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DatabaseError(ComplianceError):
    """Datastore operation failed."""
    pass


class DatabaseConnectionError(DatabaseError):
    """No database engine could be built (missing URL or failed initialization)."""
    pass
