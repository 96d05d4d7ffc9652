from flask_sqlalchemy import SQLAlchemy

# SQLAlchemy instance (initialized by app)
db = SQLAlchemy()


def _iso(value):
    return value.isoformat() if value else None


class Book(db.Model):
    __tablename__ = 'books'
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(32), unique=True, nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    author = db.Column(db.String(120), nullable=False)
    stock = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self):
        return {
            'code': self.code,
            'title': self.title,
            'author': self.author,
            'stock': self.stock,
        }


class Member(db.Model):
    __tablename__ = 'members'
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(32), unique=True, nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    borrowed_books_count = db.Column(db.Integer, nullable=False, default=0)
    is_penalized = db.Column(db.Boolean, nullable=False, default=False)
    # only set while penalized
    penalty_end_date = db.Column(db.Date, nullable=True)

    def to_dict(self):
        return {
            'code': self.code,
            'name': self.name,
            'borrowedBooksCount': self.borrowed_books_count,
            'isPenalized': self.is_penalized,
            'penaltyEndDate': _iso(self.penalty_end_date),
        }


class Loan(db.Model):
    __tablename__ = 'loans'
    id = db.Column(db.Integer, primary_key=True)
    member_code = db.Column(db.String(32), db.ForeignKey('members.code'), nullable=False, index=True)
    book_code = db.Column(db.String(32), db.ForeignKey('books.code'), nullable=False, index=True)
    borrowed_on = db.Column(db.Date, nullable=False)
    due_on = db.Column(db.Date, nullable=False)
    returned_on = db.Column(db.Date, nullable=True)

    member = db.relationship('Member')
    book = db.relationship('Book')

    @property
    def is_active(self):
        return self.returned_on is None

    def to_dict(self):
        return {
            'id': self.id,
            'memberCode': self.member_code,
            'bookCode': self.book_code,
            'borrowedOn': _iso(self.borrowed_on),
            'dueOn': _iso(self.due_on),
            'returnedOn': _iso(self.returned_on),
            'memberName': self.member.name if self.member else None,
            'bookTitle': self.book.title if self.book else None,
            'active': self.is_active,
        }
