from typing import Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session
from app.domain.models import Customer
from .schemas import CustomerCreate

class CustomerService:
    def __init__(self, db: Session):
        self.db = db

    def list(self, search: Optional[str] = None, limit: int = 50):
        query = self.db.query(Customer)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Customer.name.ilike(pattern),
                Customer.email.ilike(pattern),
                Customer.company.ilike(pattern),
            ))
        return query.order_by(Customer.created_at.desc(), Customer.id.desc()).limit(limit).all()

    def get(self, customer_id: int):
        return self.db.query(Customer).filter(Customer.id == customer_id).first()

    def find_by_email(self, email: str):
        return self.db.query(Customer).filter(Customer.email == email).first()

    def create(self, data: CustomerCreate):
        obj = Customer(**data.model_dump())
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def upsert(self, data: CustomerCreate) -> Customer:
        """
        Insert the customer or overwrite the one with the same email.

        Only flushes; the caller owns the transaction.
        """
        customer = self.find_by_email(data.email)
        if customer is None:
            customer = Customer(**data.model_dump())
            self.db.add(customer)
        else:
            for key, value in data.model_dump(exclude={"email"}).items():
                setattr(customer, key, value)
        self.db.flush()
        return customer
