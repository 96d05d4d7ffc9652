"""Service layer package for encapsulating business logic."""

from .errors import (  # noqa: F401
    ConflictError,
    ForbiddenError,
    LibraryServiceError,
    NotFoundError,
    ValidationError,
)
from .borrowing import BorrowResult, BorrowService, ReturnResult  # noqa: F401
from .catalog import CatalogService  # noqa: F401
