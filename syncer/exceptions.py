"""
Exceptions raised by the sync engine.
"""


class SyncError(Exception):
    """Base exception for sync operations."""


class ConfigurationError(SyncError):
    """Raised for bad locations, flags or config values before any work starts."""


class BackendError(SyncError):
    """Raised when a list, put or delete against a backend fails.

    Args:
        operation: Name of the failed operation (``list``, ``put``, ``delete``)
        key: Relative object key involved, or ``None`` for whole-location listings
        location: Human readable location description
        cause: Underlying exception
    """

    def __init__(self, operation, key, location, cause=None):
        self.operation = operation
        self.key = key
        self.location = location
        self.cause = cause
        target = f"'{key}' on {location}" if key is not None else str(location)
        message = f"{operation} failed for {target}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class UnhandledEventError(SyncError):
    """Raised when the watcher receives an event it does not model."""

    def __init__(self, op, path):
        self.op = op
        self.path = path
        super().__init__(f"unhandled '{op}' event for {path}")


class ReconcileError(SyncError):
    """Raised after a reconciliation pass that collected per-key failures.

    Args:
        failures: List of :class:`BackendError` instances, in the order hit
    """

    def __init__(self, failures):
        self.failures = list(failures)
        keys = ", ".join(str(f.key) for f in self.failures[:5])
        more = "" if len(self.failures) <= 5 else f" (+{len(self.failures) - 5} more)"
        super().__init__(
            f"reconciliation finished with {len(self.failures)} failed key(s): {keys}{more}"
        )
