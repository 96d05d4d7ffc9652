import pytest

from models import Book, db
from services import ConflictError, ValidationError
from services.common import require_code, storage_transaction


def test_unexpected_error_rolls_back_session(app):
    with pytest.raises(RuntimeError):
        with storage_transaction(db.session, 'Add book'):
            db.session.add(Book(code='B1', title='T', author='A', stock=1))
            db.session.flush()
            raise RuntimeError('boom')

    assert not db.session.in_transaction()
    assert db.session.execute(db.select(Book)).scalars().all() == []


def test_integrity_error_becomes_conflict(app):
    db.session.add(Book(code='B1', title='T', author='A', stock=1))
    db.session.commit()

    with pytest.raises(ConflictError):
        with storage_transaction(db.session, 'Add book'):
            db.session.add(Book(code='B1', title='Other', author='A', stock=1))

    assert len(db.session.execute(db.select(Book)).scalars().all()) == 1


def test_require_code_strips_and_rejects_blank():
    assert require_code('  M1 ', 'memberCode') == 'M1'
    with pytest.raises(ValidationError):
        require_code('   ', 'memberCode')
    with pytest.raises(ValidationError):
        require_code(7, 'memberCode')
