# library_rental/tasks/inventory_audit.py
from flask import current_app

from library_rental.extensions import db
from library_rental.services.inventory_service import InventoryService


def run_inventory_audit_job(app):
    """
    Compares every book's counters with its open rentals and logs drift.

    Read-only: fixing a drifted book is an admin decision
    (POST /admin/inventory/reconcile/<book_id>).
    """
    with app.app_context():
        try:
            drifted = InventoryService.audit(db.session)
            for row in drifted:
                current_app.logger.warning(
                    f"[audit] drift book={row['book_id']} rented={row['rented_copies']} "
                    f"open_rentals={row['open_rentals']} available={row['available_copies']} "
                    f"expected_available={row['expected_available_copies']}"
                )
            current_app.logger.info(f"[audit] checked, drifted_books={len(drifted)}")
            return drifted
        except Exception as e:
            current_app.logger.exception(f"[audit] job error: {e}")
            return None
        finally:
            db.session.remove()
