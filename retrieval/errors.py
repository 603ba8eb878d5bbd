from __future__ import annotations


class RetrievalError(RuntimeError):
    """Base for every failure raised by the windowed retrieval pipeline."""


class ParseError(RetrievalError, ValueError):
    pass


class EncodingError(RetrievalError, ValueError):
    """Timestamp cannot be represented in the snowflake ID space."""


class RemoteCallError(RetrievalError):
    """A history fetch against the remote store failed in transport."""


class IndexIOError(RetrievalError):
    pass
