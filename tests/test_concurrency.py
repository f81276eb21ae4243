import threading

from conftest import assert_inventory_consistent, open_rentals
from library_rental.errors import OutOfStock
from library_rental.extensions import db
from library_rental.services.rental_service import RentalService


def _race(app, calls):
    """Run each callable in its own thread and app context, all released at once."""
    barrier = threading.Barrier(len(calls))
    results = [None] * len(calls)

    def worker(i, fn):
        with app.app_context():
            barrier.wait()
            try:
                results[i] = ("ok", fn(db.session))
            except Exception as e:
                results[i] = ("error", e)
            finally:
                db.session.remove()

    threads = [threading.Thread(target=worker, args=(i, fn)) for i, fn in enumerate(calls)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    return results


def test_two_customers_race_for_last_copy(app, session, make_customer, make_book):
    alice = make_customer(name="Alice")
    bob = make_customer(name="Bob")
    book = make_book(copies=1)
    book_id, alice_id, bob_id = book.id, alice.id, bob.id

    results = _race(app, [
        lambda s: RentalService.rent(s, alice_id, book_id).id,
        lambda s: RentalService.rent(s, bob_id, book_id).id,
    ])

    outcomes = sorted(kind for kind, _ in results)
    assert outcomes == ["error", "ok"], results
    errors = [value for kind, value in results if kind == "error"]
    assert isinstance(errors[0], OutOfStock)

    session.expire_all()
    assert book.available_copies == 0
    assert book.rented_copies == 1
    assert open_rentals(session, book_id) == 1
    assert_inventory_consistent(session)


def test_many_renters_never_oversell(app, session, make_customer, make_book):
    customers = [make_customer(name=f"Reader {i}") for i in range(6)]
    book = make_book(copies=3)
    book_id = book.id
    ids = [c.id for c in customers]

    results = _race(app, [
        (lambda cid: (lambda s: RentalService.rent(s, cid, book_id).id))(cid) for cid in ids
    ])

    ok = [value for kind, value in results if kind == "ok"]
    failed = [value for kind, value in results if kind == "error"]
    assert len(ok) == 3
    assert len(failed) == 3
    assert all(isinstance(e, OutOfStock) for e in failed)

    session.expire_all()
    assert (book.available_copies, book.rented_copies) == (0, 3)
    assert_inventory_consistent(session)


def test_double_return_race_restores_one_copy(app, session, make_customer, make_book):
    customer = make_customer()
    book = make_book(copies=1)
    rental_id = RentalService.rent(session, customer.id, book.id).id
    book_id, customer_id = book.id, customer.id
    session.commit()

    results = _race(app, [
        lambda s: RentalService.return_rental(s, customer_id, rental_id).id,
        lambda s: RentalService.return_rental(s, customer_id, rental_id).id,
    ])

    assert sorted(kind for kind, _ in results) == ["error", "ok"], results

    session.expire_all()
    assert (book.available_copies, book.rented_copies) == (1, 0)
    assert open_rentals(session, book_id) == 0
    assert_inventory_consistent(session)
