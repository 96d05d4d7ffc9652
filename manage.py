#!/usr/bin/env python3
"""
Administrative commands for the library backend.
Usage:
  python manage.py init-db [--reset]
  python manage.py add-book --code B1 --title "Dune" --author "Frank Herbert" --stock 3
  python manage.py add-member --name Alice [--code M1]

Run from the project root. Uses the app's SQLAlchemy configuration unless
--db-uri is given.
"""
import argparse
import sys

from app import create_app
from models import db
from services import LibraryServiceError


def _build_parser():
    parser = argparse.ArgumentParser(description='Library backend administration')
    parser.add_argument('--db-uri', help='optional DB URI to override app config')
    sub = parser.add_subparsers(dest='command', required=True)

    init = sub.add_parser('init-db', help='create the database tables')
    init.add_argument('--reset', action='store_true', help='drop existing tables first')

    book = sub.add_parser('add-book', help='add a book to the catalog')
    book.add_argument('--code', required=True)
    book.add_argument('--title', required=True)
    book.add_argument('--author', required=True)
    book.add_argument('--stock', type=int, default=1)

    member = sub.add_parser('add-member', help='register a member')
    member.add_argument('--name', required=True)
    member.add_argument('--code', help='member code, generated when omitted')
    return parser


def main(argv=None):
    args = _build_parser().parse_args(argv)

    config = {}
    if args.db_uri:
        config['SQLALCHEMY_DATABASE_URI'] = args.db_uri

    app = create_app(config)
    catalog = app.extensions['library']['catalog']
    with app.app_context():
        if args.command == 'init-db':
            if args.reset:
                db.drop_all()
                print('Dropped existing tables')
            db.create_all()
            print('Initialized database')
            return 0

        db.create_all()
        try:
            if args.command == 'add-book':
                book = catalog.add_book({
                    'code': args.code,
                    'title': args.title,
                    'author': args.author,
                    'stock': args.stock,
                })
                print(f"Added book {book.code}: {book.title} (stock {book.stock})")
            else:
                member = catalog.add_member({'name': args.name, 'code': args.code})
                print(f"Added member {member.code}: {member.name}")
        except LibraryServiceError as exc:
            print('Error:', exc)
            return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
