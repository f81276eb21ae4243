"""
Error taxonomy shared by services and controllers.

Every error carries a ``kind`` (stable, machine readable), a human readable
message and the HTTP status the controllers answer with. They subclass
ValueError so older call sites that catch ValueError keep working.
"""


class LibraryError(ValueError):
    kind = "LibraryError"
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"success": False, "error": self.kind, "message": self.message}


class ValidationError(LibraryError):
    kind = "ValidationError"
    status_code = 400
    default_message = "Invalid input"


class Unauthenticated(LibraryError):
    kind = "Unauthenticated"
    status_code = 401
    default_message = "Authentication required"


class Forbidden(LibraryError):
    kind = "Forbidden"
    status_code = 403
    default_message = "Access forbidden: Insufficient permission"


class NotFound(LibraryError):
    kind = "NotFound"
    status_code = 404
    default_message = "Not found"


class BookNotFound(NotFound):
    kind = "BookNotFound"
    default_message = "Book not found"


class CustomerNotFound(NotFound):
    kind = "CustomerNotFound"
    default_message = "User not found"


class RentalNotFoundOrClosed(NotFound):
    # nonexistent, owned by someone else and already returned all land here
    kind = "RentalNotFoundOrClosed"
    default_message = "Rental not found or already returned"


class OutOfStock(LibraryError):
    kind = "OutOfStock"
    status_code = 409
    default_message = "No copies available for rent"


class Conflict(LibraryError):
    kind = "Conflict"
    status_code = 409
    default_message = "Conflicting update, please retry"


class StoreError(LibraryError):
    kind = "StoreError"
    status_code = 500
    default_message = "Internal server error"
