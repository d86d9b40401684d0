"""Error taxonomy shared by the persistence, firmware and HTTP layers.

- ValidationError: malformed input (version string, file extension, empty
  serial message). User-correctable, mapped to 400.
- StorageError: failure against the relational store or the object store.
  Logged with detail, mapped to a generic 500.
- NotFoundError: no matching record, mapped to 404.
- ConflictError: duplicate username, mapped to 400 with a specific message.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base class for every error raised by the gateway core."""


class ValidationError(GatewayError):
    pass


class StorageError(GatewayError):
    def __init__(self, operation: str, cause: BaseException | None = None):
        self.operation = operation
        self.cause = cause
        detail = f"{operation} failed"
        if cause is not None:
            detail = f"{detail}: {type(cause).__name__}"
        super().__init__(detail)


class NotFoundError(GatewayError):
    pass


class ConflictError(GatewayError):
    pass
