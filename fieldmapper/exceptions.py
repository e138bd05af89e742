"""Custom exceptions for field mapping."""

from typing import Optional


class FieldMappingError(Exception):
    """Base exception for field mapping errors."""
    pass


class OracleError(FieldMappingError):
    """The suggestion call failed, timed out, was cancelled, or returned an unusable document.

    ``reason`` is one of ``transport``, ``timeout``, ``cancelled`` or ``malformed``.
    These failures are recoverable by retrying the request.
    """

    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    MALFORMED = "malformed"

    def __init__(self, message: str, reason: str = TRANSPORT, raw_response: Optional[str] = None):
        super().__init__(message)
        self.reason = reason
        self.raw_response = raw_response


class SchemaError(FieldMappingError):
    """Invalid field list supplied by the caller."""
    pass


class SourceError(FieldMappingError):
    """A field source could not be loaded."""
    pass
