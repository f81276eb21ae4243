from flask import current_app

from library_rental.errors import BookNotFound, Conflict
from library_rental.models.book import Book
from library_rental.repositories.book_repo import BookRepo
from library_rental.repositories.rental_repo import RentalRepo
from library_rental.utils.auth import Principal, require_admin
from library_rental.utils.transaction import atomic
from library_rental.utils.validators import require_int, require_price, require_text


class BookService:
    @staticmethod
    def list_books(session):
        return BookRepo.list_all(session)

    @staticmethod
    def get_book(session, book_id: int):
        book = BookRepo.get(session, book_id)
        if not book:
            raise BookNotFound()
        return book

    @staticmethod
    def create_book(session, principal: Principal, data: dict):
        require_admin(principal)
        title = require_text(data, "title")
        author = require_text(data, "author")
        genre = require_text(data, "genre")
        price = require_price(data)
        copies = require_int(data, "copies", minimum=1)

        with atomic(session, "books"):
            if BookRepo.get_by_title(session, title):
                raise Conflict("A book with this title already exists")
            book = BookRepo.add(session, Book(
                title=title,
                author=author,
                genre=genre,
                price=price,
                copies=copies,
                available_copies=copies,
                rented_copies=0,
            ))

        current_app.logger.info(f"[books] created book={book.id} copies={copies} by={principal.id}")
        return book

    @staticmethod
    def update_book(session, principal: Principal, book_id: int, data: dict):
        require_admin(principal)
        changes = {}
        for field in ("title", "author", "genre"):
            if field in data:
                changes[field] = require_text(data, field)
        if "price" in data:
            changes["price"] = require_price(data)
        copies = require_int(data, "copies", minimum=0) if "copies" in data else None

        with atomic(session, "books"):
            book = BookRepo.get_for_update(session, book_id)
            if book is None:
                raise BookNotFound()
            if "title" in changes:
                same_title = BookRepo.get_by_title(session, changes["title"])
                if same_title is not None and same_title.id != book.id:
                    raise Conflict("A book with this title already exists")
            for k, v in changes.items():
                setattr(book, k, v)
            session.flush()
            if copies is not None:
                # same counter-preserving statement as a plain capacity edit
                BookRepo.set_copies(session, book_id, copies)

        session.refresh(book)
        current_app.logger.info(
            f"[books] updated book={book_id} fields={sorted(changes)} copies={book.copies} "
            f"available={book.available_copies} by={principal.id}"
        )
        return book

    @staticmethod
    def delete_book(session, principal: Principal, book_id: int):
        require_admin(principal)
        with atomic(session, "books"):
            book = BookRepo.get_for_update(session, book_id)
            if book is None:
                raise BookNotFound()
            if RentalRepo.count_open_for_book(session, book_id) > 0:
                raise Conflict("Book has open rentals; they must be returned first")
            BookRepo.delete(session, book)
        current_app.logger.info(f"[books] deleted book={book_id} by={principal.id}")
