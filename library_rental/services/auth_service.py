from flask import current_app
from flask_jwt_extended import create_access_token
from werkzeug.security import check_password_hash, generate_password_hash

from library_rental.errors import Conflict, Forbidden, Unauthenticated
from library_rental.models.customer import Customer
from library_rental.repositories.customer_repo import CustomerRepo
from library_rental.utils.transaction import atomic
from library_rental.utils.validators import (
    require_text,
    validate_password,
    validate_phone,
    validate_role,
)


class AuthService:
    @staticmethod
    def register(session, data: dict, role: str = "user"):
        name = require_text(data, "name")
        phone = validate_phone(data.get("phone"))
        password = validate_password(data.get("password"))
        role = validate_role(role)

        with atomic(session, "auth"):
            if CustomerRepo.get_by_phone(session, phone):
                raise Conflict("User already exists")
            customer = CustomerRepo.add(session, Customer(
                name=name,
                phone=phone,
                password_hash=generate_password_hash(password),
                role=role,
            ))

        current_app.logger.info(f"[auth] registered customer={customer.id} role={role}")
        return customer

    @staticmethod
    def login(session, phone: str, password: str, role: str | None = None):
        # JSON may carry numbers here; a 10-digit phone as an int is still not a login
        if not isinstance(phone, str) or not isinstance(password, str):
            raise Unauthenticated("Invalid credentials")

        customer = CustomerRepo.get_by_phone(session, phone.strip())
        if not customer or not check_password_hash(customer.password_hash, password):
            raise Unauthenticated("Invalid credentials")

        if role and customer.role != role:
            raise Forbidden("Access denied for this role")

        token = create_access_token(
            identity=str(customer.id),
            additional_claims={"role": customer.role, "name": customer.name},
        )
        return token, customer
