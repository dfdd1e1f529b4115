"""Exceptions raised by reflecta."""


class ReflectaError(Exception):
    """Base class for reflecta errors."""


class BackendUnavailableError(ReflectaError):
    """A required model backend is not configured or failed to load."""

    def __init__(self, capability: str, reason: str = ""):
        self.capability = capability
        message = f"{capability} backend unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class SnapshotConflictError(ReflectaError):
    """The stored theme snapshot changed since it was read."""

    def __init__(self, expected: int, found: int):
        self.expected = expected
        self.found = found
        super().__init__(
            f"Theme snapshot version changed (expected {expected}, found {found}); reload and retry."
        )
