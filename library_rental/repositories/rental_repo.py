from datetime import datetime

from sqlalchemy import func, update

from library_rental.models.book import Book
from library_rental.models.customer import Customer
from library_rental.models.rental import Rental


class RentalRepo:
    @staticmethod
    def find_open(session, rental_id: int, customer_id: int):
        return (
            session.query(Rental)
            .filter(
                Rental.id == rental_id,
                Rental.customer_id == customer_id,
                Rental.returned.is_(False),
            )
            .first()
        )

    @staticmethod
    def add(session, rental: Rental):
        session.add(rental)
        session.flush()
        return rental

    @staticmethod
    def close(session, rental_id: int, customer_id: int, now: datetime) -> bool:
        """Guarded close: only an open rental owned by customer_id is touched."""
        result = session.execute(
            update(Rental)
            .where(
                Rental.id == rental_id,
                Rental.customer_id == customer_id,
                Rental.returned.is_(False),
            )
            .values(returned=True, return_date=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    def list_by_customer(session, customer_id: int):
        return (
            session.query(Rental, Book.title)
            .join(Book, Rental.book_id == Book.id)
            .filter(Rental.customer_id == customer_id)
            .order_by(Rental.rent_date.desc(), Rental.id.desc())
            .all()
        )

    @staticmethod
    def list_by_book(session, book_id: int):
        return (
            session.query(Rental, Customer.name)
            .join(Customer, Rental.customer_id == Customer.id)
            .filter(Rental.book_id == book_id)
            .order_by(Rental.rent_date.desc(), Rental.id.desc())
            .all()
        )

    @staticmethod
    def list_all(session):
        return (
            session.query(Rental, Customer.name, Book.title)
            .join(Customer, Rental.customer_id == Customer.id)
            .join(Book, Rental.book_id == Book.id)
            .order_by(Rental.rent_date.desc(), Rental.id.desc())
            .all()
        )

    @staticmethod
    def count_open_for_book(session, book_id: int) -> int:
        return (
            session.query(func.count(Rental.id))
            .filter(Rental.book_id == book_id, Rental.returned.is_(False))
            .scalar()
        ) or 0

    @staticmethod
    def count_open_for_customer(session, customer_id: int) -> int:
        return (
            session.query(func.count(Rental.id))
            .filter(Rental.customer_id == customer_id, Rental.returned.is_(False))
            .scalar()
        ) or 0

    @staticmethod
    def open_counts_by_book(session) -> dict:
        rows = (
            session.query(Rental.book_id, func.count(Rental.id))
            .filter(Rental.returned.is_(False))
            .group_by(Rental.book_id)
            .all()
        )
        return {book_id: count for book_id, count in rows}
