"""Helpers shared by the catalog and borrowing services."""
from __future__ import annotations

from contextlib import contextmanager

from flask import current_app
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from services.errors import ConflictError, LibraryServiceError, ValidationError


def _is_lock_contention(exc: OperationalError) -> bool:
    text = str(exc.orig).lower()
    return 'locked' in text or 'busy' in text or 'could not serialize' in text


@contextmanager
def storage_transaction(session, action: str):
    """Commit the enclosed work, or roll all of it back and translate the error."""
    try:
        yield
        session.commit()
    except LibraryServiceError:
        session.rollback()
        raise
    except IntegrityError as exc:
        session.rollback()
        current_app.logger.warning('%s rejected by a constraint: %s', action, exc.orig)
        raise ConflictError(f'{action} conflicts with an existing record.') from exc
    except OperationalError as exc:
        session.rollback()
        if not _is_lock_contention(exc):
            current_app.logger.exception('%s transaction failed: %s', action, exc)
            raise LibraryServiceError(f'{action} failed, please try again later.') from exc
        current_app.logger.warning('%s lost a race for a locked record: %s', action, exc.orig)
        raise ConflictError('Record is being modified by another request.') from exc
    except SQLAlchemyError as exc:
        current_app.logger.exception('%s transaction failed: %s', action, exc)
        session.rollback()
        raise LibraryServiceError(f'{action} failed, please try again later.') from exc
    except Exception:
        session.rollback()
        raise


def require_code(value, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f'{field} is required.', field=field)
    return value.strip()
