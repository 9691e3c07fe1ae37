from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from app.core_settings import get_settings
from app.domain.errors import PurchaseRejected, ShipmentNotFound
from app.domain.models import Order, OrderStatus, Shipment, ShipmentStatus
from .rates import generate_tracking_number
from .schemas import ShipmentCreate

class ShipmentService:
    def __init__(self, db: Session, label_base_url: Optional[str] = None):
        self.db = db
        self.label_base_url = (label_base_url or get_settings().LABEL_BASE_URL).rstrip("/")

    def list(self, order_id: Optional[int] = None, status: Optional[str] = None):
        query = self.db.query(Shipment)
        if order_id is not None:
            query = query.filter(Shipment.order_id == order_id)
        if status:
            query = query.filter(Shipment.status == status)
        return query.order_by(Shipment.created_at.desc(), Shipment.id.desc()).all()

    def get(self, shipment_id: int):
        return self.db.query(Shipment).filter(Shipment.id == shipment_id).first()

    def create(self, data: ShipmentCreate):
        payload = data.model_dump()
        payload["carrier"] = data.carrier.value
        payload["status"] = data.status.value
        obj = Shipment(**payload)
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def add_candidates(self, records: List[dict]) -> List[Shipment]:
        """Stage generated rate quotes; the caller commits."""
        shipments = [Shipment(**record) for record in records]
        self.db.add_all(shipments)
        self.db.flush()
        return shipments

    def purchase(self, shipment_id: int) -> Shipment:
        """
        Buy the label for a pending shipment and mark its order shipped.

        Raises:
            ShipmentNotFound: no shipment with this id
            PurchaseRejected: the shipment is not pending, or another
                shipment of the same order was already purchased
        """
        shipment = self.get(shipment_id)
        if not shipment:
            raise ShipmentNotFound(f"Shipment {shipment_id} not found")

        if shipment.status == ShipmentStatus.PURCHASED.value:
            raise PurchaseRejected("Shipment already purchased")
        if shipment.status != ShipmentStatus.PENDING.value:
            raise PurchaseRejected(f"Shipment cannot be purchased while {shipment.status}")

        already_bought = self.db.query(Shipment).filter(
            Shipment.order_id == shipment.order_id,
            Shipment.status == ShipmentStatus.PURCHASED.value,
        ).first()
        if already_bought:
            raise PurchaseRejected(f"Order already has a purchased shipment ({already_bought.id})")

        tracking_number = generate_tracking_number(shipment.carrier)
        shipment.tracking_number = tracking_number
        shipment.label_url = f"{self.label_base_url}/{tracking_number}.pdf"
        shipment.status = ShipmentStatus.PURCHASED.value
        shipment.shipped_date = datetime.utcnow()

        order = self.db.query(Order).filter(Order.id == shipment.order_id).first()
        if order:
            order.status = OrderStatus.SHIPPED.value

        self.db.commit()
        self.db.refresh(shipment)
        return shipment
