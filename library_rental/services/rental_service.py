from datetime import datetime

from flask import current_app

from library_rental.errors import BookNotFound, Conflict, OutOfStock, RentalNotFoundOrClosed
from library_rental.models.rental import Rental
from library_rental.repositories.book_repo import BookRepo
from library_rental.repositories.rental_repo import RentalRepo
from library_rental.utils.transaction import atomic


class RentalService:
    """
    Rent/return protocol over the books and rentals tables.

    Every call takes the session it works on. Rent and return lock the book
    row and use guarded UPDATEs, so two callers racing on the same book are
    serialized by the database: the loser sees the winner's counters, never
    a stale read.
    """

    @staticmethod
    def rent(session, customer_id: int, book_id: int) -> Rental:
        with atomic(session, "rental"):
            book = BookRepo.get_for_update(session, book_id)
            if book is None:
                raise BookNotFound()

            if book.available_copies <= 0:
                current_app.logger.info(
                    f"[rental] out of stock: customer={customer_id} book={book_id}"
                )
                raise OutOfStock()

            # the row lock already excludes other writers on PostgreSQL;
            # the WHERE guard covers stores without SELECT ... FOR UPDATE
            if not BookRepo.take_copy(session, book_id):
                current_app.logger.info(
                    f"[rental] lost race for last copy: customer={customer_id} book={book_id}"
                )
                raise OutOfStock()

            rental = RentalRepo.add(
                session,
                Rental(
                    customer_id=customer_id,
                    book_id=book_id,
                    rent_date=datetime.utcnow(),
                    returned=False,
                ),
            )

        current_app.logger.info(
            f"[rental] rented: rental={rental.id} customer={customer_id} book={book_id}"
        )
        return rental

    @staticmethod
    def return_rental(session, customer_id: int, rental_id: int) -> Rental:
        with atomic(session, "rental"):
            rental = RentalRepo.find_open(session, rental_id, customer_id)
            if rental is None:
                raise RentalNotFoundOrClosed()

            book_id = rental.book_id
            # lock the book before touching either row, same order as rent()
            BookRepo.get_for_update(session, book_id)

            # guarded close: a concurrent return of the same rental matches 0 rows
            if not RentalRepo.close(session, rental_id, customer_id, datetime.utcnow()):
                raise RentalNotFoundOrClosed()

            if not BookRepo.release_copy(session, book_id):
                # an open rental with rented_copies == 0 means the counters drifted
                current_app.logger.error(
                    f"[rental] counter drift on return: rental={rental_id} book={book_id}"
                )
                raise Conflict("Inventory counters out of sync; contact an administrator")

        session.refresh(rental)
        current_app.logger.info(
            f"[rental] returned: rental={rental_id} customer={customer_id} book={book_id}"
        )
        return rental

    @staticmethod
    def list_available(session):
        return BookRepo.list_available(session)

    @staticmethod
    def list_customer_rentals(session, customer_id: int):
        return [
            dict(rental.to_dict(), book_title=title)
            for rental, title in RentalRepo.list_by_customer(session, customer_id)
        ]

    @staticmethod
    def list_book_rentals(session, book_id: int):
        if BookRepo.get(session, book_id) is None:
            raise BookNotFound()
        return [
            dict(rental.to_dict(), customer_name=name)
            for rental, name in RentalRepo.list_by_book(session, book_id)
        ]

    @staticmethod
    def list_all_rentals(session):
        return [
            dict(rental.to_dict(), customer_name=name, book_title=title)
            for rental, name, title in RentalRepo.list_all(session)
        ]
