from datetime import datetime
from library_rental.extensions import db


class Rental(db.Model):
    __tablename__ = "rentals"

    id = db.Column(db.Integer, primary_key=True)

    customer_id = db.Column(
        db.Integer, db.ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    book_id = db.Column(
        db.Integer, db.ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True
    )

    rent_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    return_date = db.Column(db.DateTime, nullable=True)
    returned = db.Column(db.Boolean, nullable=False, default=False, index=True)

    customer = db.relationship("Customer", back_populates="rentals")
    book = db.relationship("Book", back_populates="rentals")

    def to_dict(self):
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "book_id": self.book_id,
            "rent_date": self.rent_date.isoformat() if self.rent_date else None,
            "return_date": self.return_date.isoformat() if self.return_date else None,
            "returned": bool(self.returned),
        }
