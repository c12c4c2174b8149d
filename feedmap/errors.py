"""Error types raised by the feed mapping core."""


class FeedMapError(Exception):
    """Base class for all feedmap errors."""


class ParseError(FeedMapError):
    """Raised when a feed cannot be read or is not well-formed XML.

    ``str(error)`` is safe to show to a user. The underlying parser
    diagnostic is kept in ``detail`` for logs.
    """

    def __init__(self, message: str = "Could not parse uploaded file", detail: str = ""):
        super().__init__(message)
        self.detail = detail


class MappingError(FeedMapError, ValueError):
    """Raised when a mapping is constructed with invalid attributes."""


class EngineComputeFailure(FeedMapError):
    """Raised on an unexpected fault while applying mappings.

    Signals a programming error, not a recoverable user condition.
    """


class StoreError(FeedMapError):
    """Raised when the shop store cannot be saved without losing data."""
