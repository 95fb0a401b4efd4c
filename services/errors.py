# services/errors.py


class RouterError(Exception):
    """Base class for errors raised by the hazard router."""


class MalformedRecord(RouterError, ValueError):
    """A bridge/zone row that cannot be used. Caught at index-build time."""


class EmptyInputError(RouterError, ValueError):
    """Route selection was asked to choose from zero candidates."""


class DatasetMissing(RouterError, FileNotFoundError):
    """A required dataset file (bridges) is not on disk."""


class UpstreamFailure(RouterError):
    """Directions provider error, timeout or empty result."""

    def __init__(self, message: str, status: int = 0, detail=None):
        super().__init__(message)
        self.status = status
        self.detail = detail
