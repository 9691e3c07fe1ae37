from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Optional
from shared.core.logging_config import get_logger
from app.core_settings import get_settings
from app.infrastructure.db import get_db
from app.application.csv_ingest import generate_csv_template
from app.application.importer import BulkOrderImporter
from app.application.order_service import OrderService
from app.application.schemas import OrderCreate, OrderPage, OrderRead, OrderStats, OrderUpdate
from app.domain.errors import CsvImportError, FormatError
from app.domain.models import OrderStatus

logger = get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])

def _upload_rejected(error: str, details: Optional[list[str]] = None) -> JSONResponse:
    content = {"success": False, "error": error}
    if details:
        content["details"] = details
    return JSONResponse(status_code=400, content=content)

@router.get("/", response_model=OrderPage)
def list_orders(
    db: Session = Depends(get_db),
    status: Optional[str] = Query(None, description="Order status, or 'all'"),
    search: Optional[str] = Query(None, max_length=100, description="Order number or customer name"),
    page: int = Query(1, ge=1),
    limit: int = Query(25, ge=1, le=200),
):
    """List orders newest first with customer, items and shipments."""
    if status and status != "all" and status not in {s.value for s in OrderStatus}:
        raise HTTPException(status_code=400, detail=f"Unknown status: {status}")
    orders, pagination = OrderService(db).list(status=status, search=search, page=page, limit=limit)
    return {"data": orders, "pagination": pagination}

@router.get("/stats", response_model=OrderStats)
def order_stats(db: Session = Depends(get_db)):
    return OrderService(db).stats()

@router.get("/csv-template")
def download_csv_template():
    """Header row plus one sample line, ready to fill in."""
    return Response(
        content=generate_csv_template(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="orders_template.csv"'},
    )

@router.post("/upload-csv")
def upload_csv(file: Optional[UploadFile] = File(None), db: Session = Depends(get_db)):
    """
    Bulk-create orders from a CSV file.

    Orders that fail are listed in ``results.errors`` while the rest are
    saved, so a partially failed batch still answers 200. Problems with the
    file itself answer 400 and nothing is written.
    """
    if file is None or not file.filename:
        return _upload_rejected("No file provided")

    content = file.file.read()
    max_bytes = get_settings().MAX_UPLOAD_BYTES
    if len(content) > max_bytes:
        return _upload_rejected(f"File too large. Maximum size is {max_bytes} bytes")

    try:
        report = BulkOrderImporter(db).import_file(content, file.filename)
    except CsvImportError as e:
        logger.warning(f"Rejected upload {file.filename!r}: {e.message}")
        if isinstance(e, FormatError):
            return _upload_rejected(e.message)
        return _upload_rejected("Failed to parse CSV", e.details)

    return report.to_response()

@router.get("/{order_id}", response_model=OrderRead)
def get_order(order_id: int, db: Session = Depends(get_db)):
    order = OrderService(db).get(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order

@router.post("/", response_model=OrderRead, status_code=201)
def create_order(payload: OrderCreate, db: Session = Depends(get_db)):
    try:
        return OrderService(db).create(payload)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"Order {payload.order.order_number} already exists")

@router.put("/{order_id}", response_model=OrderRead)
def update_order(order_id: int, payload: OrderUpdate, db: Session = Depends(get_db)):
    try:
        order = OrderService(db).update(order_id, payload)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Order number already in use")
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order

@router.delete("/{order_id}", status_code=204)
def delete_order(order_id: int, db: Session = Depends(get_db)):
    if not OrderService(db).delete(order_id):
        raise HTTPException(status_code=404, detail="Order not found")
    return None
