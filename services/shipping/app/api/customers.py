from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Optional
from app.infrastructure.db import get_db
from app.application.customer_service import CustomerService
from app.application.schemas import CustomerCreate, CustomerRead

router = APIRouter(prefix="/customers", tags=["customers"])

@router.get("/", response_model=list[CustomerRead])
def list_customers(
    db: Session = Depends(get_db),
    search: Optional[str] = Query(None, max_length=100, description="Match on name, email or company"),
    limit: int = Query(50, ge=1, le=1000, description="Maximum number of records to return"),
):
    """Most recently created customers first"""
    return CustomerService(db).list(search=search, limit=limit)

@router.get("/{customer_id}", response_model=CustomerRead)
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    customer = CustomerService(db).get(customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer

@router.post("/", response_model=CustomerRead, status_code=201)
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db)):
    try:
        return CustomerService(db).create(payload)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"Customer with email {payload.email} already exists")
