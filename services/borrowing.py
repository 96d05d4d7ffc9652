"""Borrowing domain service logic."""
from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Callable, List

from flask import current_app

from models import Book, Loan, Member
from repositories import BookRepository, LoanRepository, MemberRepository
from services.common import require_code, storage_transaction
from services.errors import ConflictError, ForbiddenError, NotFoundError

DEFAULT_BORROW_LIMIT = 2
DEFAULT_LOAN_PERIOD_DAYS = 7
DEFAULT_PENALTY_DAYS = 3


@dataclass(frozen=True)
class BorrowResult:
    loan: Loan
    member: Member
    book: Book


@dataclass(frozen=True)
class ReturnResult:
    loan: Loan
    member: Member
    book: Book
    penalized: bool


class BorrowService:
    """Applies borrow and return transitions across the member and book stores.

    Every check happens inside one transaction. The counters themselves are
    moved by conditional updates in the repositories, so two requests racing
    for the last copy (or the last borrowing slot) cannot both win: the loser
    sees zero affected rows and the whole transaction is rolled back.
    """

    def __init__(
        self,
        session,
        books: BookRepository,
        members: MemberRepository,
        loans: LoanRepository,
        *,
        borrow_limit: int = DEFAULT_BORROW_LIMIT,
        loan_period_days: int = DEFAULT_LOAN_PERIOD_DAYS,
        penalty_days: int = DEFAULT_PENALTY_DAYS,
        today: Callable[[], datetime.date] = datetime.date.today,
    ):
        self.session = session
        self.books = books
        self.members = members
        self.loans = loans
        self.borrow_limit = borrow_limit
        self.loan_period = datetime.timedelta(days=loan_period_days)
        self.penalty_period = datetime.timedelta(days=penalty_days)
        self.today = today

    def borrow(self, member_code: str, book_code: str) -> BorrowResult:
        member_code = require_code(member_code, 'memberCode')
        book_code = require_code(book_code, 'bookCode')
        with storage_transaction(self.session, 'Borrow'):
            today = self.today()
            member = self.members.find_by_code(member_code)
            if member is None:
                raise NotFoundError('Member not found.', memberCode=member_code)
            if member.is_penalized:
                if member.penalty_end_date is not None and member.penalty_end_date <= today:
                    self._lift_penalty(member)
                else:
                    raise ForbiddenError(
                        'Member is penalized.',
                        rule='penalty',
                        memberCode=member_code,
                        penaltyEndDate=member.penalty_end_date.isoformat() if member.penalty_end_date else None,
                    )
            if member.borrowed_books_count >= self.borrow_limit:
                raise ForbiddenError(
                    'Borrow limit reached.',
                    rule='borrow_limit',
                    memberCode=member_code,
                    limit=self.borrow_limit,
                )

            book = self.books.find_by_code(book_code)
            if book is None:
                raise NotFoundError('Book not found.', bookCode=book_code)
            if book.stock < 1:
                raise ConflictError('Book is not available.', rule='stock', bookCode=book_code)

            if not self.members.claim_slot(member_code, self.borrow_limit):
                raise ConflictError(
                    'Member was modified by a concurrent request.',
                    rule='borrow_limit',
                    memberCode=member_code,
                )
            if not self.books.take_copy(book_code):
                raise ConflictError('Book is not available.', rule='stock', bookCode=book_code)

            loan = self.loans.save(
                Loan(
                    member_code=member_code,
                    book_code=book_code,
                    borrowed_on=today,
                    due_on=today + self.loan_period,
                )
            )
            loan_id = loan.id
        current_app.logger.info('Member %s borrowed %s (loan %s)', member_code, book_code, loan_id)
        return BorrowResult(loan=loan, member=member, book=book)

    def return_book(self, member_code: str, book_code: str) -> ReturnResult:
        member_code = require_code(member_code, 'memberCode')
        book_code = require_code(book_code, 'bookCode')
        with storage_transaction(self.session, 'Return'):
            today = self.today()
            member = self.members.find_by_code(member_code)
            if member is None:
                raise NotFoundError('Member not found.', memberCode=member_code)
            if member.borrowed_books_count < 1:
                raise ConflictError('Member has no borrowed books.', memberCode=member_code)
            book = self.books.find_by_code(book_code)
            if book is None:
                raise NotFoundError('Book not found.', bookCode=book_code)
            loan = self.loans.find_active(member_code, book_code)
            if loan is None:
                raise ConflictError(
                    'Book is not borrowed by this member.',
                    memberCode=member_code,
                    bookCode=book_code,
                )

            if not self.loans.close(loan.id, today) or not self.members.release_slot(member_code):
                raise ConflictError(
                    'Loan was returned by a concurrent request.',
                    memberCode=member_code,
                    bookCode=book_code,
                )
            self.books.put_back_copy(book_code)

            penalized = today > loan.due_on
            if penalized:
                self._impose_penalty(member, today)
            loan_id = loan.id
        current_app.logger.info('Member %s returned %s (loan %s)', member_code, book_code, loan_id)
        return ReturnResult(loan=loan, member=member, book=book, penalized=penalized)

    def list_loans(self, active_only: bool = False) -> List[Loan]:
        return self.loans.list_all(active_only=active_only)

    def _impose_penalty(self, member: Member, today: datetime.date) -> None:
        end = today + self.penalty_period
        if member.is_penalized and member.penalty_end_date and member.penalty_end_date > end:
            end = member.penalty_end_date
        member.is_penalized = True
        member.penalty_end_date = end
        self.members.save(member)
        current_app.logger.warning('Member %s returned late, penalized until %s', member.code, end.isoformat())

    def _lift_penalty(self, member: Member) -> None:
        member.is_penalized = False
        member.penalty_end_date = None
        self.members.save(member)
        current_app.logger.info('Penalty for member %s has expired', member.code)
