from flask import Blueprint, jsonify

from library_rental.errors import LibraryError
from library_rental.extensions import db
from library_rental.services.book_service import BookService
from library_rental.services.rental_service import RentalService
from library_rental.utils.auth import login_required
from library_rental.utils.responses import json_error

book_bp = Blueprint("books", __name__)


@book_bp.get("/")
@login_required
def list_available_books():
    books = RentalService.list_available(db.session)
    return jsonify({"success": True, "data": [
        {
            "id": b.id,
            "title": b.title,
            "author": b.author,
            "genre": b.genre,
            "price": b.to_dict()["price"],
            "available_copies": b.available_copies,
        }
        for b in books
    ]})


@book_bp.get("/<int:book_id>")
@login_required
def get_book(book_id: int):
    try:
        book = BookService.get_book(db.session, book_id)
        return jsonify({"success": True, "data": book.to_dict()})
    except LibraryError as e:
        return json_error(e)
