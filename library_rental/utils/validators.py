import re
from decimal import Decimal, InvalidOperation

from flask import request

from library_rental.errors import ValidationError
from library_rental.models.customer import ROLES

# ids and counters live in 32-bit INTEGER columns
MAX_INT = 2**31 - 1

PHONE_RE = re.compile(r"^[0-9]{10}$")
# lower, upper, digit, one special; only these characters
PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{6,}$")


def require_text(data: dict, field: str, min_len: int = 3, max_len: int = 255) -> str:
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    value = value.strip()
    if len(value) < min_len or len(value) > max_len:
        raise ValidationError(f"{field} length must be between {min_len} and {max_len}")
    return value


def require_int(data: dict, field: str, minimum: int | None = None, maximum: int = MAX_INT) -> int:
    value = data.get(field)
    # bool is an int subclass; "true" copies is never meant
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        # OverflowError: JSON Infinity parses to float("inf")
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, float) and value != number:
        raise ValidationError(f"{field} must be an integer")
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field} must be >= {minimum}")
    if number > maximum:
        raise ValidationError(f"{field} must be <= {maximum}")
    return number


def require_price(data: dict, field: str = "price", minimum: int = 1) -> Decimal:
    value = data.get(field)
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number")
    try:
        price = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"{field} must be a number")
    if not price.is_finite() or price < minimum:
        raise ValidationError(f"{field} must be >= {minimum}")
    return price.quantize(Decimal("0.01"))


def validate_phone(phone) -> str:
    if not isinstance(phone, str) or not PHONE_RE.match(phone.strip()):
        raise ValidationError("phone must be exactly 10 digits")
    return phone.strip()


def validate_password(password) -> str:
    if not isinstance(password, str) or not PASSWORD_RE.match(password):
        raise ValidationError(
            "password must be at least 6 characters and contain upper and lower case "
            "letters, a digit and one of @$!%*?&"
        )
    return password


def validate_role(role) -> str:
    if role not in ROLES:
        raise ValidationError("Invalid role")
    return role


def parse_id(value, field: str = "id", maximum: int = MAX_INT) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field} format")
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"Invalid {field} format")
    if number < 1 or number > maximum:
        raise ValidationError(f"Invalid {field} format")
    return number


def json_body() -> dict:
    """Request JSON as a dict; a missing or unparsable body is empty."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("JSON object expected")
    return data
