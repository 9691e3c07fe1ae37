from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Optional
from shared.core.logging_config import get_logger
from app.infrastructure.db import get_db
from app.application.shipment_service import ShipmentService
from app.application.schemas import PurchaseResponse, ShipmentCreate, ShipmentRead
from app.domain.errors import PurchaseRejected, ShipmentNotFound
from app.domain.models import ShipmentStatus

logger = get_logger(__name__)

router = APIRouter(prefix="/shipments", tags=["shipments"])

@router.get("/", response_model=list[ShipmentRead])
def list_shipments(
    db: Session = Depends(get_db),
    order_id: Optional[int] = Query(None),
    status: Optional[ShipmentStatus] = Query(None),
):
    return ShipmentService(db).list(order_id=order_id, status=status.value if status else None)

@router.post("/", response_model=ShipmentRead, status_code=201)
def create_shipment(payload: ShipmentCreate, db: Session = Depends(get_db)):
    try:
        return ShipmentService(db).create(payload)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=404, detail="Order not found")

@router.post("/{shipment_id}/purchase", response_model=PurchaseResponse)
def purchase_label(shipment_id: int, db: Session = Depends(get_db)):
    """Buy the shipping label for one of an order's rate quotes."""
    try:
        shipment = ShipmentService(db).purchase(shipment_id)
    except ShipmentNotFound:
        raise HTTPException(status_code=404, detail="Shipment not found")
    except PurchaseRejected as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(
        f"Purchased label {shipment.tracking_number} for order {shipment.order_id}",
        extra={'extra_fields': {'shipment_id': shipment.id, 'carrier': shipment.carrier}}
    )
    return {"success": True, "message": "Shipping label purchased successfully", "data": shipment}
