from flask import Blueprint, jsonify

from library_rental.errors import LibraryError
from library_rental.extensions import db
from library_rental.services.customer_service import CustomerService
from library_rental.utils.auth import current_principal, login_required
from library_rental.utils.responses import json_error
from library_rental.utils.validators import json_body

customer_bp = Blueprint("customers", __name__)


@customer_bp.get("/<int:customer_id>")
@login_required
def get_customer(customer_id: int):
    try:
        customer = CustomerService.get_customer(db.session, current_principal(), customer_id)
        return jsonify({"success": True, "data": customer.to_dict()})
    except LibraryError as e:
        return json_error(e)


@customer_bp.put("/<int:customer_id>")
@login_required
def update_customer(customer_id: int):
    try:
        data = json_body()
        customer = CustomerService.update_self(db.session, current_principal(), customer_id, data)
        return jsonify({
            "success": True,
            "message": "User updated successfully",
            "data": customer.to_dict(),
        })
    except LibraryError as e:
        return json_error(e)


@customer_bp.delete("/<int:customer_id>")
@login_required
def delete_customer(customer_id: int):
    try:
        CustomerService.delete_customer(db.session, current_principal(), customer_id)
        return jsonify({"success": True, "message": "User deleted successfully"})
    except LibraryError as e:
        return json_error(e)
