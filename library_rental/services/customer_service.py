from flask import current_app
from werkzeug.security import generate_password_hash

from library_rental.errors import Conflict, CustomerNotFound, ValidationError
from library_rental.repositories.customer_repo import CustomerRepo
from library_rental.repositories.rental_repo import RentalRepo
from library_rental.utils.auth import Principal, require_admin, require_self_or_admin
from library_rental.utils.transaction import atomic
from library_rental.utils.validators import (
    require_text,
    validate_password,
    validate_phone,
    validate_role,
)


class CustomerService:
    @staticmethod
    def get_customer(session, principal: Principal, customer_id: int):
        require_self_or_admin(principal, customer_id)
        customer = CustomerRepo.get_by_id(session, customer_id)
        if not customer:
            raise CustomerNotFound()
        return customer

    @staticmethod
    def _apply_profile(session, customer, data: dict):
        if "name" in data:
            customer.name = require_text(data, "name")
        if "phone" in data:
            phone = validate_phone(data["phone"])
            other = CustomerRepo.get_by_phone(session, phone)
            if other is not None and other.id != customer.id:
                raise Conflict("Phone number already in use")
            customer.phone = phone

    @staticmethod
    def _guard_last_admin(session, customer, new_role: str | None = None):
        """Refuse to leave the store without an admin (demotion or deletion)."""
        if customer.role != "admin" or new_role == "admin":
            return
        if CustomerRepo.count_admins(session) <= 1:
            raise Conflict("Cannot remove the last administrator")

    @staticmethod
    def update_self(session, principal: Principal, customer_id: int, data: dict):
        require_self_or_admin(principal, customer_id)
        if "role" in data:
            raise ValidationError("role cannot be changed here")
        with atomic(session, "customers"):
            customer = CustomerRepo.get_by_id(session, customer_id)
            if not customer:
                raise CustomerNotFound()
            CustomerService._apply_profile(session, customer, data)
            if "password" in data:
                customer.password_hash = generate_password_hash(validate_password(data["password"]))
        return customer

    @staticmethod
    def admin_update(session, principal: Principal, customer_id: int, data: dict):
        require_admin(principal)
        with atomic(session, "customers"):
            customer = CustomerRepo.get_by_id(session, customer_id)
            if not customer:
                raise CustomerNotFound()
            CustomerService._apply_profile(session, customer, data)
            if "role" in data:
                role = validate_role(data["role"])
                CustomerService._guard_last_admin(session, customer, role)
                customer.role = role
        current_app.logger.info(f"[customers] admin edit customer={customer_id} by={principal.id}")
        return customer

    @staticmethod
    def set_role(session, principal: Principal, customer_id: int, role):
        require_admin(principal)
        role = validate_role(role)
        with atomic(session, "customers"):
            customer = CustomerRepo.get_by_id(session, customer_id)
            if not customer:
                raise CustomerNotFound()
            CustomerService._guard_last_admin(session, customer, role)
            customer.role = role
        current_app.logger.info(f"[customers] role customer={customer_id} -> {role} by={principal.id}")
        return customer

    @staticmethod
    def delete_customer(session, principal: Principal, customer_id: int):
        require_self_or_admin(principal, customer_id)
        with atomic(session, "customers"):
            customer = CustomerRepo.get_by_id(session, customer_id)
            if not customer:
                raise CustomerNotFound()
            # deleting a borrower would orphan rented_copies on the books
            if RentalRepo.count_open_for_customer(session, customer_id) > 0:
                raise Conflict("User has open rentals; they must be returned first")
            CustomerService._guard_last_admin(session, customer)
            CustomerRepo.delete(session, customer)
        current_app.logger.info(f"[customers] deleted customer={customer_id} by={principal.id}")

    @staticmethod
    def list_customers(session, principal: Principal):
        require_admin(principal)
        return CustomerRepo.list_all(session)

    @staticmethod
    def search_customers(session, principal: Principal, term):
        require_admin(principal)
        term = (term or "").strip()
        if not term:
            raise ValidationError("searchTerm is required")
        return CustomerRepo.search(session, term)
