from flask import current_app

from library_rental.errors import BookNotFound, ValidationError
from library_rental.repositories.book_repo import BookRepo
from library_rental.repositories.rental_repo import RentalRepo
from library_rental.utils.auth import Principal, require_admin
from library_rental.utils.transaction import atomic


class InventoryService:
    @staticmethod
    def set_capacity(session, principal: Principal, book_id: int, copies: int):
        """
        Change a book's total copies.

        available_copies becomes max(copies - rented_copies, 0); outstanding
        loans are never recalled, a shrink below them just zeroes availability
        until enough returns come in.
        """
        require_admin(principal)
        if isinstance(copies, bool) or not isinstance(copies, int) or copies < 0:
            raise ValidationError("copies must be a non-negative integer")

        with atomic(session, "inventory"):
            book = BookRepo.get_for_update(session, book_id)
            if book is None:
                raise BookNotFound()
            old = book.copies
            BookRepo.set_copies(session, book_id, copies)

        session.refresh(book)
        current_app.logger.info(
            f"[inventory] capacity book={book_id} copies {old}->{book.copies} "
            f"available={book.available_copies} rented={book.rented_copies} by={principal.id}"
        )
        return book

    @staticmethod
    def audit(session):
        """
        Books whose counters disagree with their open rentals.

        Returns a list of dicts; empty when everything is consistent.
        """
        open_counts = RentalRepo.open_counts_by_book(session)
        drifted = []
        for book in BookRepo.list_all(session):
            open_rentals = open_counts.get(book.id, 0)
            expected_available = max(book.copies - open_rentals, 0)
            if book.rented_copies != open_rentals or book.available_copies != expected_available:
                drifted.append({
                    "book_id": book.id,
                    "title": book.title,
                    "copies": book.copies,
                    "available_copies": book.available_copies,
                    "rented_copies": book.rented_copies,
                    "open_rentals": open_rentals,
                    "expected_available_copies": expected_available,
                })
        return drifted

    @staticmethod
    def reconcile(session, principal: Principal, book_id: int):
        """Recount rented_copies from open rentals and recompute availability."""
        require_admin(principal)

        with atomic(session, "inventory"):
            book = BookRepo.get_for_update(session, book_id)
            if book is None:
                raise BookNotFound()
            before = (book.available_copies, book.rented_copies)
            open_rentals = RentalRepo.count_open_for_book(session, book_id)
            BookRepo.set_counters(session, book_id, open_rentals)

        session.refresh(book)
        after = (book.available_copies, book.rented_copies)
        if before != after:
            current_app.logger.warning(
                f"[inventory] reconciled book={book_id} (available, rented) {before}->{after}"
            )
        return book
