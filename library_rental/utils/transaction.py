from contextlib import contextmanager

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from library_rental.errors import Conflict, StoreError


@contextmanager
def atomic(session, label: str = "tx"):
    """
    Single commit point for a unit of work.

    Commits when the block finishes, rolls back on any exception. Store
    failures are re-raised as Conflict (integrity) or StoreError (anything
    else) so callers only ever see the LibraryError taxonomy.
    """
    try:
        yield session
        session.commit()
    except IntegrityError as e:
        session.rollback()
        current_app.logger.warning(f"[{label}] integrity error, rolled back: {e.orig}")
        raise Conflict("Conflicting data (duplicate value or referenced record)") from e
    except SQLAlchemyError as e:
        session.rollback()
        current_app.logger.exception(f"[{label}] store error, rolled back: {e}")
        raise StoreError() from e
    except Exception:
        session.rollback()
        raise
