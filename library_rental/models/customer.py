from datetime import datetime
from library_rental.extensions import db

ROLES = ("user", "admin")


class Customer(db.Model):
    __tablename__ = "customers"
    __table_args__ = (
        db.CheckConstraint("role IN ('user', 'admin')", name="ck_customers_role"),
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    phone = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default="user")

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    rentals = db.relationship(
        "Rental",
        back_populates="customer",
        cascade="all, delete",
    )

    def to_dict(self):
        # password_hash never leaves the service
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "role": self.role,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
