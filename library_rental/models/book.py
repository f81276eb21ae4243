from decimal import Decimal

from library_rental.extensions import db


class Book(db.Model):
    __tablename__ = "books"
    __table_args__ = (
        db.CheckConstraint("copies >= 0", name="ck_books_copies"),
        db.CheckConstraint("available_copies >= 0", name="ck_books_available"),
        db.CheckConstraint("rented_copies >= 0", name="ck_books_rented"),
    )

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), unique=True, nullable=False, index=True)
    author = db.Column(db.String(255), nullable=False, index=True)
    genre = db.Column(db.String(255), nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False)

    copies = db.Column(db.Integer, nullable=False)
    available_copies = db.Column(db.Integer, nullable=False, default=0)
    rented_copies = db.Column(db.Integer, nullable=False, default=0)

    rentals = db.relationship(
        "Rental",
        back_populates="book",
        cascade="all, delete",
    )

    def counters_consistent(self) -> bool:
        """
        available == max(copies - rented, 0) and both counters non-negative.
        When copies >= rented this is exactly available + rented == copies.
        """
        if self.available_copies < 0 or self.rented_copies < 0:
            return False
        return self.available_copies == max(self.copies - self.rented_copies, 0)

    def to_dict(self):
        price = self.price if isinstance(self.price, Decimal) else Decimal(str(self.price))
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "genre": self.genre,
            "price": float(price),
            "copies": self.copies,
            "available_copies": self.available_copies,
            "rented_copies": self.rented_copies,
        }
