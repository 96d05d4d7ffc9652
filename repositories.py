"""Record stores for books, members and loans.

Each repository wraps a SQLAlchemy session (usually ``db.session``) and
exposes lookup-by-code and persist operations. Counter changes go through
conditional ``UPDATE`` statements so concurrent requests cannot push a
counter past its bounds: the statement reports how many rows it touched and
the caller treats zero as a lost race.
"""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import joinedload

from models import Book, Loan, Member


class _Repository:
    model = None

    def __init__(self, session):
        self.session = session

    def save(self, entity):
        self.session.add(entity)
        self.session.flush()
        return entity

    def list_all(self) -> List:
        stmt = select(self.model).order_by(self.model.id)
        return list(self.session.execute(stmt).scalars())

    def count(self) -> int:
        return self.session.execute(select(func.count(self.model.id))).scalar_one()

    def _apply(self, stmt) -> bool:
        result = self.session.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount == 1


class _CodedRepository(_Repository):
    def find_by_code(self, code: str):
        stmt = select(self.model).where(self.model.code == code)
        return self.session.execute(stmt).scalar_one_or_none()


class BookRepository(_CodedRepository):
    model = Book

    def take_copy(self, code: str) -> bool:
        """Decrement stock by one unless it is already exhausted."""
        stmt = (
            update(Book)
            .where(Book.code == code, Book.stock >= 1)
            .values(stock=Book.stock - 1)
        )
        return self._apply(stmt)

    def put_back_copy(self, code: str) -> bool:
        stmt = update(Book).where(Book.code == code).values(stock=Book.stock + 1)
        return self._apply(stmt)


class MemberRepository(_CodedRepository):
    model = Member

    def claim_slot(self, code: str, limit: int) -> bool:
        """Increment the borrowed counter if the member may still borrow."""
        stmt = (
            update(Member)
            .where(
                Member.code == code,
                Member.borrowed_books_count < limit,
                Member.is_penalized.is_(False),
            )
            .values(borrowed_books_count=Member.borrowed_books_count + 1)
        )
        return self._apply(stmt)

    def release_slot(self, code: str) -> bool:
        stmt = (
            update(Member)
            .where(Member.code == code, Member.borrowed_books_count > 0)
            .values(borrowed_books_count=Member.borrowed_books_count - 1)
        )
        return self._apply(stmt)


class LoanRepository(_Repository):
    model = Loan

    def find_active(self, member_code: str, book_code: str) -> Optional[Loan]:
        stmt = (
            select(Loan)
            .where(
                Loan.member_code == member_code,
                Loan.book_code == book_code,
                Loan.returned_on.is_(None),
            )
            .order_by(Loan.borrowed_on, Loan.id)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def close(self, loan_id: int, returned_on) -> bool:
        stmt = (
            update(Loan)
            .where(Loan.id == loan_id, Loan.returned_on.is_(None))
            .values(returned_on=returned_on)
        )
        return self._apply(stmt)

    def list_all(self, active_only: bool = False) -> List[Loan]:
        stmt = (
            select(Loan)
            .options(joinedload(Loan.member), joinedload(Loan.book))
            .order_by(Loan.id)
        )
        if active_only:
            stmt = stmt.where(Loan.returned_on.is_(None))
        return list(self.session.execute(stmt).scalars())
