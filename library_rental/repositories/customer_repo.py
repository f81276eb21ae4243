from sqlalchemy import func, or_

from library_rental.models.customer import Customer


class CustomerRepo:
    @staticmethod
    def get_by_id(session, customer_id: int):
        return session.get(Customer, customer_id)

    @staticmethod
    def get_by_phone(session, phone: str):
        return session.query(Customer).filter_by(phone=phone).first()

    @staticmethod
    def list_all(session):
        return session.query(Customer).order_by(Customer.id.asc()).all()

    @staticmethod
    def search(session, term: str):
        pattern = f"%{term}%"
        return (
            session.query(Customer)
            .filter(or_(Customer.name.ilike(pattern), Customer.phone.ilike(pattern)))
            .order_by(Customer.name.asc())
            .all()
        )

    @staticmethod
    def add(session, customer: Customer):
        session.add(customer)
        session.flush()
        return customer

    @staticmethod
    def delete(session, customer: Customer):
        session.delete(customer)
        session.flush()

    @staticmethod
    def count_admins(session) -> int:
        return session.query(func.count(Customer.id)).filter(Customer.role == "admin").scalar() or 0
