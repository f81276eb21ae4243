import pytest

from library_rental import create_app
from library_rental.config import TestConfig
from library_rental.extensions import db
from library_rental.models.book import Book
from library_rental.models.rental import Rental
from library_rental.services.auth_service import AuthService
from library_rental.utils.auth import Principal

PASSWORD = "Secret1!"


@pytest.fixture
def app(tmp_path):
    # one SQLite file per test; threads in the race tests share it
    db_file = tmp_path / "library_test.db"

    class _Config(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{db_file}"

    app = create_app(_Config)
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def session(app):
    with app.app_context():
        yield db.session
        db.session.rollback()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_customer(session):
    counter = {"n": 0}

    def _make(name="Reader", role="user", phone=None):
        counter["n"] += 1
        phone = phone or f"55500000{counter['n']:02d}"
        return AuthService.register(
            session, {"name": name, "phone": phone, "password": PASSWORD}, role=role
        )
    return _make


@pytest.fixture
def make_book(session):
    counter = {"n": 0}

    def _make(copies=2, title=None, rented=0, available=None, **fields):
        counter["n"] += 1
        book = Book(
            title=title or f"Book Number {counter['n']}",
            author=fields.get("author", "Some Author"),
            genre=fields.get("genre", "Fiction"),
            price=fields.get("price", 10),
            copies=copies,
            rented_copies=rented,
            available_copies=max(copies - rented, 0) if available is None else available,
        )
        session.add(book)
        session.commit()
        return book
    return _make


@pytest.fixture
def admin(make_customer):
    customer = make_customer(name="Admin User", role="admin", phone="5559990000")
    return Principal(id=customer.id, role="admin")


def open_rentals(session, book_id):
    return session.query(Rental).filter_by(book_id=book_id, returned=False).count()


def assert_inventory_consistent(session):
    session.expire_all()
    for book in session.query(Book).all():
        assert book.available_copies >= 0
        assert book.rented_copies >= 0
        assert book.rented_copies == open_rentals(session, book.id)
        assert book.counters_consistent(), book.to_dict()


def auth_headers(client, phone, password=PASSWORD):
    resp = client.post("/auth/login", json={"phone": phone, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return {"Authorization": f"Bearer {resp.get_json()['access_token']}"}
