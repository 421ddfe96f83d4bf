"""Error taxonomy shared by the backend clients, the model client and the orchestrator.

Callers never show these messages to the chat user; they are logged and mapped to a short status.
"""

from __future__ import annotations


class ServiceError(RuntimeError):
    """Base class for failures of an external collaborator."""


class TransportError(ServiceError):
    """Raised on network errors, timeouts and non-2xx responses."""


class ParseError(ServiceError, ValueError):
    """Raised when a response body (model output or backend JSON) is malformed."""


class NotFoundError(ServiceError):
    """Raised when a lookup produced no usable entries."""


class GenerationError(ServiceError):
    """Raised when a stream or subtitle backend reports failure."""
