"""
Typed failures raised by the RoundRobin core.

Each error carries the HTTP status the API layer reports it with, so the
router can render any of them as ``{"error": message}`` without a lookup
table.
"""


class RoundRobinError(Exception):
    """Base class for every failure the service reports to a caller."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(RoundRobinError):
    """A required field is missing or malformed. Raised before any storage call."""

    status_code = 400


class StorageError(RoundRobinError):
    """The store is unreachable or rejected the statement."""

    status_code = 500


class NotFoundError(RoundRobinError):
    """A record does not exist.

    Deleting a missing player is a no-op, so nothing in the request path
    raises this today.
    """

    status_code = 404


class ConfigError(RoundRobinError):
    """The configuration file could not be parsed."""
