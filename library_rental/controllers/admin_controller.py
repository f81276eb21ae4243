# library_rental/controllers/admin_controller.py

from flask import Blueprint, request, jsonify

from library_rental.errors import LibraryError
from library_rental.extensions import db
from library_rental.services.book_service import BookService
from library_rental.services.customer_service import CustomerService
from library_rental.services.inventory_service import InventoryService
from library_rental.services.rental_service import RentalService
from library_rental.utils.auth import admin_required, current_principal
from library_rental.utils.responses import json_error
from library_rental.utils.validators import json_body, require_int

admin_bp = Blueprint("admin", __name__)


# -----------------------------
# Books
# -----------------------------
@admin_bp.get("/books")
@admin_required
def books_list():
    books = BookService.list_books(db.session)
    return jsonify({"success": True, "data": [b.to_dict() for b in books]})


@admin_bp.post("/books")
@admin_required
def books_create():
    try:
        data = json_body()
        book = BookService.create_book(db.session, current_principal(), data)
        return jsonify({"success": True, "data": book.to_dict()}), 201
    except LibraryError as e:
        return json_error(e)


@admin_bp.put("/books/<int:book_id>")
@admin_required
def books_update(book_id: int):
    try:
        data = json_body()
        book = BookService.update_book(db.session, current_principal(), book_id, data)
        return jsonify({"success": True, "message": "Book updated successfully", "data": book.to_dict()})
    except LibraryError as e:
        return json_error(e)


@admin_bp.put("/books/<int:book_id>/copies")
@admin_required
def books_set_copies(book_id: int):
    try:
        data = json_body()
        copies = require_int(data, "copies", minimum=0)
        book = InventoryService.set_capacity(db.session, current_principal(), book_id, copies)
        return jsonify({"success": True, "message": "Book copies updated successfully", "data": book.to_dict()})
    except LibraryError as e:
        return json_error(e)


@admin_bp.delete("/books/<int:book_id>")
@admin_required
def books_delete(book_id: int):
    try:
        BookService.delete_book(db.session, current_principal(), book_id)
        return jsonify({"success": True, "message": "Book deleted successfully"})
    except LibraryError as e:
        return json_error(e)


@admin_bp.get("/books/<int:book_id>/rentals")
@admin_required
def books_rental_history(book_id: int):
    try:
        rows = RentalService.list_book_rentals(db.session, book_id)
        return jsonify({"success": True, "data": rows})
    except LibraryError as e:
        return json_error(e)


# -----------------------------
# Rentals / inventory
# -----------------------------
@admin_bp.get("/rentals")
@admin_required
def rentals_list():
    return jsonify({"success": True, "data": RentalService.list_all_rentals(db.session)})


@admin_bp.get("/inventory/audit")
@admin_required
def inventory_audit():
    drifted = InventoryService.audit(db.session)
    return jsonify({"success": True, "consistent": not drifted, "data": drifted})


@admin_bp.post("/inventory/reconcile/<int:book_id>")
@admin_required
def inventory_reconcile(book_id: int):
    try:
        book = InventoryService.reconcile(db.session, current_principal(), book_id)
        return jsonify({"success": True, "data": book.to_dict()})
    except LibraryError as e:
        return json_error(e)


# -----------------------------
# Customers
# -----------------------------
@admin_bp.get("/customers")
@admin_required
def customers_list():
    customers = CustomerService.list_customers(db.session, current_principal())
    return jsonify({"success": True, "data": [c.to_dict() for c in customers]})


@admin_bp.get("/customers/search")
@admin_required
def customers_search():
    try:
        customers = CustomerService.search_customers(
            db.session, current_principal(), request.args.get("q") or request.args.get("searchTerm")
        )
        return jsonify({"success": True, "data": [c.to_dict() for c in customers]})
    except LibraryError as e:
        return json_error(e)


@admin_bp.get("/customers/<int:customer_id>")
@admin_required
def customers_get(customer_id: int):
    try:
        customer = CustomerService.get_customer(db.session, current_principal(), customer_id)
        return jsonify({"success": True, "data": customer.to_dict()})
    except LibraryError as e:
        return json_error(e)


@admin_bp.put("/customers/<int:customer_id>")
@admin_required
def customers_update(customer_id: int):
    try:
        data = json_body()
        customer = CustomerService.admin_update(db.session, current_principal(), customer_id, data)
        return jsonify({"success": True, "message": "User details updated successfully", "data": customer.to_dict()})
    except LibraryError as e:
        return json_error(e)


@admin_bp.put("/customers/<int:customer_id>/role")
@admin_required
def customers_set_role(customer_id: int):
    try:
        data = json_body()
        customer = CustomerService.set_role(db.session, current_principal(), customer_id, data.get("role"))
        return jsonify({"success": True, "message": "User role updated successfully", "data": customer.to_dict()})
    except LibraryError as e:
        return json_error(e)


@admin_bp.delete("/customers/<int:customer_id>")
@admin_required
def customers_delete(customer_id: int):
    try:
        CustomerService.delete_customer(db.session, current_principal(), customer_id)
        return jsonify({"success": True, "message": "User deleted successfully"})
    except LibraryError as e:
        return json_error(e)
