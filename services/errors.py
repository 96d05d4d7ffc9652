"""Error kinds raised by the library services.

Each error carries a ``kind`` string and an HTTP ``status_code`` so the web
layer can map it without parsing messages, plus a ``context`` dict naming the
codes and rule involved.
"""
from __future__ import annotations

from typing import Any, Dict


class LibraryServiceError(RuntimeError):
    """Base class for catalog and borrow/return failures."""

    kind = 'error'
    status_code = 500

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context

    def to_dict(self) -> Dict[str, Any]:
        payload = {'error': self.message, 'kind': self.kind}
        payload.update(self.context)
        return payload


class ValidationError(LibraryServiceError):
    kind = 'invalid'
    status_code = 400


class NotFoundError(LibraryServiceError):
    kind = 'not_found'
    status_code = 404


class ForbiddenError(LibraryServiceError):
    kind = 'forbidden'
    status_code = 403


class ConflictError(LibraryServiceError):
    kind = 'conflict'
    status_code = 409
