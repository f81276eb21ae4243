from flask import Blueprint, jsonify

from library_rental.errors import LibraryError
from library_rental.extensions import db
from library_rental.services.rental_service import RentalService
from library_rental.utils.auth import current_principal, login_required
from library_rental.utils.responses import json_error
from library_rental.utils.validators import json_body, parse_id

rental_bp = Blueprint("rentals", __name__)


@rental_bp.post("/")
@login_required
def rent_book():
    try:
        data = json_body()
        book_id = parse_id(data.get("book_id"), "book_id")
        rental = RentalService.rent(db.session, current_principal().id, book_id)
        return jsonify({"success": True, "data": rental.to_dict()}), 201
    except LibraryError as e:
        return json_error(e)


@rental_bp.post("/<int:rental_id>/return")
@login_required
def return_book(rental_id: int):
    try:
        rental = RentalService.return_rental(db.session, current_principal().id, rental_id)
        return jsonify({
            "success": True,
            "message": "Book returned successfully",
            "data": rental.to_dict(),
        })
    except LibraryError as e:
        return json_error(e)


@rental_bp.get("/my")
@login_required
def my_rentals():
    rows = RentalService.list_customer_rentals(db.session, current_principal().id)
    return jsonify({"success": True, "data": rows})
