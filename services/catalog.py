"""Administrative operations for books and members."""
from __future__ import annotations

from typing import Any, List, Mapping, Optional

from flask import current_app

from models import Book, Member
from repositories import BookRepository, MemberRepository
from services.common import require_code, storage_transaction
from services.errors import ConflictError, NotFoundError, ValidationError

# INTEGER column range
MAX_COUNT = 2 ** 31 - 1


def _require_text(payload: Mapping[str, Any], field: str) -> str:
    value = payload.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f'{field} is required.', field=field)
    return value.strip()


def _require_count(payload: Mapping[str, Any], field: str) -> int:
    value = payload.get(field)
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f'{field} must be an integer.', field=field)
    if value < 0:
        raise ValidationError(f'{field} must not be negative.', field=field)
    if value > MAX_COUNT:
        raise ValidationError(f'{field} must not exceed {MAX_COUNT}.', field=field)
    return value


class CatalogService:
    def __init__(self, session, books: BookRepository, members: MemberRepository):
        self.session = session
        self.books = books
        self.members = members

    def add_book(self, payload: Mapping[str, Any]) -> Book:
        code = _require_text(payload, 'code')
        title = _require_text(payload, 'title')
        author = _require_text(payload, 'author')
        stock = _require_count(payload, 'stock')
        with storage_transaction(self.session, 'Add book'):
            if self.books.find_by_code(code) is not None:
                raise ConflictError('Book code already exists.', bookCode=code)
            book = self.books.save(Book(code=code, title=title, author=author, stock=stock))
        current_app.logger.info('Added book %s (stock %d)', code, stock)
        return book

    def list_books(self) -> List[Book]:
        return self.books.list_all()

    def get_book(self, code: str) -> Book:
        code = require_code(code, 'code')
        book = self.books.find_by_code(code)
        if book is None:
            raise NotFoundError('Book not found.', bookCode=code)
        return book

    def add_member(self, payload: Mapping[str, Any]) -> Member:
        name = _require_text(payload, 'name')
        code: Optional[str] = None
        if payload.get('code') is not None:
            code = _require_text(payload, 'code')
        with storage_transaction(self.session, 'Add member'):
            if code is None:
                code = self._next_member_code()
            elif self.members.find_by_code(code) is not None:
                raise ConflictError('Member code already exists.', memberCode=code)
            member = self.members.save(Member(code=code, name=name))
        current_app.logger.info('Added member %s', code)
        return member

    def list_members(self) -> List[Member]:
        return self.members.list_all()

    def get_member(self, code: str) -> Member:
        code = require_code(code, 'code')
        member = self.members.find_by_code(code)
        if member is None:
            raise NotFoundError('Member not found.', memberCode=code)
        return member

    def _next_member_code(self) -> str:
        number = self.members.count() + 1
        code = f'M{number:03}'
        # skip codes taken by explicitly numbered members
        while self.members.find_by_code(code) is not None:
            number += 1
            code = f'M{number:03}'
        return code
