from sqlalchemy import case, func, update

from library_rental.models.book import Book


def _available_for(copies, rented):
    # max(copies - rented, 0), portable across SQLite and PostgreSQL
    return case((copies - rented > 0, copies - rented), else_=0)


class BookRepo:
    @staticmethod
    def list_all(session):
        return session.query(Book).order_by(Book.id.desc()).all()

    @staticmethod
    def list_available(session):
        return (
            session.query(Book)
            .filter(Book.available_copies > 0)
            .order_by(Book.title.asc())
            .all()
        )

    @staticmethod
    def get(session, book_id: int):
        return session.get(Book, book_id)

    @staticmethod
    def get_for_update(session, book_id: int):
        # SELECT ... FOR UPDATE; a no-op on SQLite, which serializes writers anyway
        return (
            session.query(Book)
            .filter(Book.id == book_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    @staticmethod
    def get_by_title(session, title: str):
        return session.query(Book).filter(func.lower(Book.title) == title.lower()).first()

    @staticmethod
    def add(session, book: Book):
        session.add(book)
        session.flush()
        return book

    @staticmethod
    def delete(session, book: Book):
        session.delete(book)
        session.flush()

    @staticmethod
    def take_copy(session, book_id: int) -> bool:
        """Guarded decrement: only succeeds while a copy is available."""
        result = session.execute(
            update(Book)
            .where(Book.id == book_id, Book.available_copies > 0)
            .values(
                available_copies=Book.available_copies - 1,
                rented_copies=Book.rented_copies + 1,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    def release_copy(session, book_id: int) -> bool:
        rented_after = Book.rented_copies - 1
        result = session.execute(
            update(Book)
            .where(Book.id == book_id, Book.rented_copies > 0)
            .values(
                available_copies=_available_for(Book.copies, rented_after),
                rented_copies=rented_after,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    def set_copies(session, book_id: int, copies: int) -> bool:
        result = session.execute(
            update(Book)
            .where(Book.id == book_id)
            .values(
                copies=copies,
                available_copies=_available_for(copies, Book.rented_copies),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    def set_counters(session, book_id: int, rented: int) -> bool:
        result = session.execute(
            update(Book)
            .where(Book.id == book_id)
            .values(
                rented_copies=rented,
                available_copies=_available_for(Book.copies, rented),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
