"""Exceptions raised by parsevideo.

Every failure bubbles to the caller as a ``ParseVideoError`` subclass with a
readable message; catching the base class is enough for most callers.
"""


class ParseVideoError(Exception):
    """Base class for all parsevideo errors."""


class InputValidationError(ParseVideoError, ValueError):
    """Empty source, empty id, empty url or no url in a share message."""


class UnsupportedSourceError(ParseVideoError):
    """The source is unknown or lacks the requested extractor."""


class TransportError(ParseVideoError):
    """Network failure, non-success HTTP status or unreadable body."""


class ParseSchemaError(ParseVideoError, ValueError):
    """Expected JSON path, regex capture or field type is missing."""


class UpstreamError(ParseVideoError):
    """Upstream answered, but reported a business failure."""


class EmptyResultError(ParseVideoError, ValueError):
    """Neither a video url nor any image could be extracted."""
