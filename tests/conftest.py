import datetime

import pytest

from app import create_app
from models import Book, Member, db
from repositories import BookRepository, LoanRepository, MemberRepository
from services import BorrowService, CatalogService


class Clock:
    """Callable stand-in for ``datetime.date.today``."""

    def __init__(self, day: datetime.date):
        self.day = day

    def __call__(self) -> datetime.date:
        return self.day

    def advance(self, days: int) -> None:
        self.day += datetime.timedelta(days=days)


@pytest.fixture
def app():
    app = create_app('testing', {'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:'})
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app, clock):
    app.extensions['library']['borrowing'].today = clock
    return app.test_client()


@pytest.fixture
def clock():
    return Clock(datetime.date(2024, 3, 1))


@pytest.fixture
def borrow_service(app, clock):
    return BorrowService(
        db.session,
        BookRepository(db.session),
        MemberRepository(db.session),
        LoanRepository(db.session),
        borrow_limit=2,
        loan_period_days=7,
        penalty_days=3,
        today=clock,
    )


@pytest.fixture
def catalog_service(app):
    return CatalogService(db.session, BookRepository(db.session), MemberRepository(db.session))


@pytest.fixture
def add_book(app):
    def _add(code='B1', stock=1, title='Harry Potter', author='J.K Rowling'):
        db.session.add(Book(code=code, title=title, author=author, stock=stock))
        db.session.commit()
    return _add


@pytest.fixture
def add_member(app):
    def _add(code='M1', name='Alice', borrowed=0, penalized=False, penalty_end=None):
        db.session.add(Member(
            code=code,
            name=name,
            borrowed_books_count=borrowed,
            is_penalized=penalized,
            penalty_end_date=penalty_end,
        ))
        db.session.commit()
    return _add


@pytest.fixture
def member_by_code(app):
    def _get(code):
        return db.session.execute(db.select(Member).filter_by(code=code)).scalar_one()
    return _get


@pytest.fixture
def book_by_code(app):
    def _get(code):
        return db.session.execute(db.select(Book).filter_by(code=code)).scalar_one()
    return _get
