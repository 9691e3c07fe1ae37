import math
from typing import Optional
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload
from app.domain.models import Customer, Order, OrderItem, OrderStatus
from .customer_service import CustomerService
from .schemas import OrderCreate, OrderStats, OrderUpdate, Pagination, ParsedOrder

class OrderService:
    def __init__(self, db: Session):
        self.db = db

    def _with_details(self):
        return self.db.query(Order).options(
            selectinload(Order.customer),
            selectinload(Order.items),
            selectinload(Order.shipments),
        )

    def list(self, status: Optional[str] = None, search: Optional[str] = None,
             page: int = 1, limit: int = 25):
        """Newest orders first, filtered by status and by order number / customer name."""
        query = self.db.query(Order).join(Order.customer)
        if status and status != "all":
            query = query.filter(Order.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Order.order_number.ilike(pattern), Customer.name.ilike(pattern)))

        total = query.count()
        ids = [row.id for row in query.with_entities(Order.id)
               .order_by(Order.created_at.desc(), Order.id.desc())
               .offset((page - 1) * limit).limit(limit)]
        orders = self._with_details().filter(Order.id.in_(ids)).all() if ids else []
        orders.sort(key=lambda order: ids.index(order.id))

        pagination = Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit))
        return orders, pagination

    def stats(self) -> OrderStats:
        counts = dict(self.db.query(Order.status, func.count(Order.id)).group_by(Order.status).all())
        return OrderStats(total=sum(counts.values()),
                          **{status.value: counts.get(status.value, 0) for status in OrderStatus})

    def get(self, order_id: int):
        return self._with_details().filter(Order.id == order_id).first()

    def insert(self, data: ParsedOrder, customer_id: int) -> Order:
        """
        Add the order and its items for an already resolved customer.

        Only flushes; the caller commits or rolls back.
        """
        values = data.order.model_dump()
        values["status"] = data.order.status.value
        if data.items:
            values["total_items"] = sum(item.quantity for item in data.items)
        order = Order(customer_id=customer_id, **values)
        self.db.add(order)
        self.db.flush()  # assign id

        if data.items:
            self.db.add_all([OrderItem(order_id=order.id, **item.model_dump()) for item in data.items])
            self.db.flush()
        return order

    def create(self, data: OrderCreate) -> Order:
        customer = CustomerService(self.db).upsert(data.customer)
        order = self.insert(data, customer.id)
        self.db.commit()
        return self.get(order.id)

    def update(self, order_id: int, data: OrderUpdate):
        order = self.get(order_id)
        if not order:
            return None

        # Update only provided fields
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is None:
                continue
            if key == "status":
                value = value.value
            setattr(order, key, value)

        self.db.commit()
        self.db.refresh(order)
        return order

    def delete(self, order_id: int) -> bool:
        order = self.db.query(Order).filter(Order.id == order_id).first()
        if not order:
            return False
        self.db.delete(order)
        self.db.commit()
        return True
