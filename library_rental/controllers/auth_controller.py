from flask import Blueprint, jsonify

from library_rental.errors import LibraryError
from library_rental.extensions import db
from library_rental.repositories.customer_repo import CustomerRepo
from library_rental.services.auth_service import AuthService
from library_rental.utils.auth import current_principal, login_required
from library_rental.utils.responses import json_error
from library_rental.utils.validators import json_body

auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/register")
def register():
    try:
        data = json_body()
        # role is never taken from the body; admins come from the CLI
        customer = AuthService.register(db.session, data, role="user")
        return jsonify({"success": True, "data": customer.to_dict()}), 201
    except LibraryError as e:
        return json_error(e)


@auth_bp.post("/login")
def login():
    try:
        data = json_body()
        token, customer = AuthService.login(
            db.session,
            data.get("phone") or "",
            data.get("password") or "",
            role=data.get("role"),
        )
        return jsonify({
            "success": True,
            "access_token": token,
            "user": {
                "id": customer.id,
                "name": customer.name,
                "phone": customer.phone,
                "role": customer.role,
            },
        })
    except LibraryError as e:
        return json_error(e)


@auth_bp.get("/me")
@login_required
def me():
    customer = CustomerRepo.get_by_id(db.session, current_principal().id)
    return jsonify({"success": True, "user": customer.to_dict()})
