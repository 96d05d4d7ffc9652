from __future__ import annotations

import logging
import os

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from config import BaseConfig, config_by_name
from models import db
from repositories import BookRepository, LoanRepository, MemberRepository
from services import BorrowService, CatalogService, LibraryServiceError, ValidationError


def _load_config(app: Flask, config_name: str | None, test_config: dict | None) -> None:
    resolved_name = config_name or os.environ.get('FLASK_CONFIG', 'development')
    config_cls = config_by_name.get(resolved_name, BaseConfig)
    app.config.from_object(config_cls)
    if test_config:
        app.config.update(test_config)


def _configure_logging(app: Flask) -> None:
    level = logging.getLevelName(str(app.config.get('LOG_LEVEL', 'INFO')).upper())
    if not isinstance(level, int):
        level = logging.INFO
    app.logger.setLevel(level)


def build_services(app: Flask) -> tuple[CatalogService, BorrowService]:
    books = BookRepository(db.session)
    members = MemberRepository(db.session)
    loans = LoanRepository(db.session)
    catalog = CatalogService(db.session, books, members)
    borrowing = BorrowService(
        db.session,
        books,
        members,
        loans,
        borrow_limit=app.config['BORROW_LIMIT'],
        loan_period_days=app.config['LOAN_PERIOD_DAYS'],
        penalty_days=app.config['PENALTY_DAYS'],
    )
    return catalog, borrowing


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object.')
    return data


def create_app(config_name: str | None = None, test_config: dict | None = None):
    if isinstance(config_name, dict) and test_config is None:
        test_config = config_name
        config_name = None
    app = Flask(__name__)
    _load_config(app, config_name, test_config)
    _configure_logging(app)
    db.init_app(app)
    catalog_service, borrow_service = build_services(app)
    app.extensions['library'] = {'catalog': catalog_service, 'borrowing': borrow_service}

    @app.errorhandler(LibraryServiceError)
    def handle_service_error(exc: LibraryServiceError):
        if exc.status_code >= 500:
            app.logger.error('Request %s %s failed: %s', request.method, request.path, exc)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify({'error': exc.description, 'kind': exc.name.lower().replace(' ', '_')}), exc.code

    @app.after_request
    def set_security_headers(response):
        response.headers.setdefault('X-Frame-Options', 'DENY')
        response.headers.setdefault('X-Content-Type-Options', 'nosniff')
        response.headers.setdefault('Referrer-Policy', 'no-referrer')
        response.headers.setdefault('Cache-Control', 'no-store')
        return response

    # Books

    @app.route('/books', methods=['GET'])
    def list_books():
        return jsonify([b.to_dict() for b in catalog_service.list_books()])

    @app.route('/books', methods=['POST'])
    def create_book():
        book = catalog_service.add_book(_json_body())
        return jsonify(book.to_dict()), 201

    @app.route('/books/<code>', methods=['GET'])
    def get_book(code: str):
        return jsonify(catalog_service.get_book(code).to_dict())

    # Members

    @app.route('/members', methods=['GET'])
    def list_members():
        return jsonify([m.to_dict() for m in catalog_service.list_members()])

    @app.route('/members', methods=['POST'])
    def create_member():
        member = catalog_service.add_member(_json_body())
        return jsonify(member.to_dict()), 201

    @app.route('/members/<code>', methods=['GET'])
    def get_member(code: str):
        return jsonify(catalog_service.get_member(code).to_dict())

    # Borrowing

    @app.route('/borrow', methods=['POST'])
    def borrow():
        data = _json_body()
        result = borrow_service.borrow(data.get('memberCode'), data.get('bookCode'))
        return jsonify({
            'loan': result.loan.to_dict(),
            'member': result.member.to_dict(),
            'book': result.book.to_dict(),
        })

    @app.route('/return', methods=['POST'])
    def do_return():
        data = _json_body()
        result = borrow_service.return_book(data.get('memberCode'), data.get('bookCode'))
        return jsonify({
            'loan': result.loan.to_dict(),
            'member': result.member.to_dict(),
            'book': result.book.to_dict(),
            'penalized': result.penalized,
        })

    @app.route('/loans', methods=['GET'])
    def list_loans():
        active_only = request.args.get('active', '').lower() in ('1', 'true', 'yes')
        return jsonify([loan.to_dict() for loan in borrow_service.list_loans(active_only=active_only)])

    return app


if __name__ == '__main__':
    application = create_app()
    with application.app_context():
        db.create_all()
    application.run(debug=application.config.get('DEBUG', False))
