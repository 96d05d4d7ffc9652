import pytest

from services import ConflictError, NotFoundError, ValidationError


def test_add_and_list_books(catalog_service):
    catalog_service.add_book({'code': 'JK-45', 'title': 'Harry Potter', 'author': 'J.K Rowling', 'stock': 1})
    catalog_service.add_book({'code': 'SHR-1', 'title': 'A Study in Scarlet', 'author': 'Arthur Conan Doyle', 'stock': 0})

    books = catalog_service.list_books()
    assert [b.code for b in books] == ['JK-45', 'SHR-1']
    assert catalog_service.get_book('SHR-1').stock == 0


@pytest.mark.parametrize('payload', [
    {'title': 'T', 'author': 'A', 'stock': 1},
    {'code': ' ', 'title': 'T', 'author': 'A', 'stock': 1},
    {'code': 'B1', 'title': 'T', 'author': 'A', 'stock': -1},
    {'code': 'B1', 'title': 'T', 'author': 'A', 'stock': '3'},
    {'code': 'B1', 'title': 'T', 'author': 'A', 'stock': True},
    {'code': 'B1', 'title': 'T', 'author': 'A', 'stock': 2 ** 70},
    {'code': 'B1', 'author': 'A', 'stock': 1},
])
def test_add_book_rejects_invalid_payload(catalog_service, payload):
    with pytest.raises(ValidationError):
        catalog_service.add_book(payload)
    assert catalog_service.list_books() == []


def test_duplicate_book_code_is_conflict(catalog_service):
    payload = {'code': 'B1', 'title': 'T', 'author': 'A', 'stock': 1}
    catalog_service.add_book(payload)
    with pytest.raises(ConflictError):
        catalog_service.add_book(payload)
    assert len(catalog_service.list_books()) == 1


def test_get_missing_book(catalog_service):
    with pytest.raises(NotFoundError):
        catalog_service.get_book('nope')


def test_add_member_defaults(catalog_service):
    member = catalog_service.add_member({'code': 'M1', 'name': 'Angga'})
    assert member.borrowed_books_count == 0
    assert member.is_penalized is False
    assert member.penalty_end_date is None


def test_add_member_generates_codes(catalog_service):
    catalog_service.add_member({'code': 'M002', 'name': 'Ferry'})
    first = catalog_service.add_member({'name': 'Putri'})
    second = catalog_service.add_member({'name': 'Angga'})
    assert first.code == 'M003'
    assert second.code == 'M004'


def test_add_member_requires_name(catalog_service):
    with pytest.raises(ValidationError):
        catalog_service.add_member({'code': 'M1'})


def test_duplicate_member_code_is_conflict(catalog_service):
    catalog_service.add_member({'code': 'M1', 'name': 'Angga'})
    with pytest.raises(ConflictError):
        catalog_service.add_member({'code': 'M1', 'name': 'Someone else'})
    assert [m.name for m in catalog_service.list_members()] == ['Angga']
