"""
Access control: the only place that turns a request credential into an
identity and decides what that identity may do.

Handlers never read ids or roles from the request body; they use the
Principal resolved here, whose role is reloaded from the customers table on
every request (a demoted admin loses access immediately, even with an old
token).
"""
from dataclasses import dataclass
from functools import wraps

from flask import current_app, g
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from library_rental.errors import Forbidden, LibraryError, Unauthenticated
from library_rental.extensions import db
from library_rental.repositories.customer_repo import CustomerRepo
from library_rental.utils.responses import json_error


@dataclass(frozen=True)
class Principal:
    id: int
    role: str


def is_admin(principal: Principal) -> bool:
    return principal is not None and principal.role == "admin"


def require_admin(principal: Principal) -> Principal:
    if not is_admin(principal):
        raise Forbidden()
    return principal


def require_self_or_admin(principal: Principal, customer_id: int) -> Principal:
    if principal.id != customer_id and not is_admin(principal):
        raise Forbidden("You can only access your own account")
    return principal


def resolve_principal(session) -> Principal:
    """Bearer token in the current request -> Principal, or Unauthenticated."""
    try:
        verify_jwt_in_request()
        identity = get_jwt_identity()
    except (JWTExtendedException, PyJWTError) as e:
        raise Unauthenticated(f"Invalid token: {e}") from e

    try:
        customer_id = int(identity)
    except (TypeError, ValueError):
        raise Unauthenticated("Invalid token subject")

    customer = CustomerRepo.get_by_id(session, customer_id)
    if customer is None:
        raise Unauthenticated("User not found")
    return Principal(id=customer.id, role=customer.role)


def current_principal() -> Principal:
    return g.principal


def login_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        try:
            g.principal = resolve_principal(db.session)
        except LibraryError as e:
            current_app.logger.info(f"[auth] rejected: {e.message}")
            return json_error(e)
        return view(*args, **kwargs)
    return wrapped


def admin_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        try:
            g.principal = require_admin(resolve_principal(db.session))
        except LibraryError as e:
            current_app.logger.info(f"[auth] rejected admin access: {e.message}")
            return json_error(e)
        return view(*args, **kwargs)
    return wrapped
