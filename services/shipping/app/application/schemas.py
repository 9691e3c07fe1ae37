from pydantic import BaseModel, Field, computed_field
from datetime import date, datetime
from typing import Optional
from app.domain.models import Carrier, OrderStatus, ShipmentStatus
from app.application.rates import delivery_estimate

class CustomerCreate(BaseModel):
    name: str
    company: Optional[str] = None
    email: str
    phone: str
    # Shipping address
    street_line_1: str
    street_line_2: Optional[str] = None
    city: str
    state: str
    zip: str
    country: str = "US"

class CustomerRead(CustomerCreate):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class OrderItemCreate(BaseModel):
    title: str
    sku: str
    quantity: int = Field(1, ge=1, le=2 ** 31 - 1)
    weight_lb: float = Field(0, ge=0)
    price: float = Field(0, ge=0)

class OrderItemRead(OrderItemCreate):
    id: int
    order_id: int

    class Config:
        from_attributes = True

class OrderDraft(BaseModel):
    order_number: str
    order_date: date
    status: OrderStatus = OrderStatus.PENDING
    total_weight_lb: float = Field(gt=0)
    # Recomputed from the items when items are supplied
    total_items: int = Field(0, ge=0)
    order_currency: str = "USD"
    order_amount: float = Field(gt=0)

class ParsedOrder(BaseModel):
    """One order as produced by the CSV mapper or posted by the dashboard."""
    order: OrderDraft
    customer: CustomerCreate
    items: list[OrderItemCreate] = []

class OrderCreate(ParsedOrder):
    pass

class OrderUpdate(BaseModel):
    order_number: Optional[str] = None
    order_date: Optional[date] = None
    status: Optional[OrderStatus] = None
    total_weight_lb: Optional[float] = Field(None, gt=0)
    total_items: Optional[int] = Field(None, ge=0)
    order_currency: Optional[str] = None
    order_amount: Optional[float] = Field(None, gt=0)

class ShipmentCreate(BaseModel):
    order_id: int
    carrier: Carrier
    service_level: str
    package_type: str
    weight_lb: float = Field(ge=0)
    length_in: float = Field(ge=0)
    width_in: float = Field(ge=0)
    height_in: float = Field(ge=0)
    rate_amount: float = Field(ge=0)
    rate_currency: str = "USD"
    status: ShipmentStatus = ShipmentStatus.PENDING

class ShipmentRead(ShipmentCreate):
    id: int
    tracking_number: Optional[str] = None
    label_url: Optional[str] = None
    shipped_date: Optional[datetime] = None
    delivered_date: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @computed_field
    @property
    def delivery_estimate(self) -> str:
        return delivery_estimate(self.carrier, self.service_level)

    class Config:
        from_attributes = True

class OrderRead(BaseModel):
    id: int
    order_number: str
    order_date: date
    customer_id: int
    status: OrderStatus
    total_weight_lb: float
    total_items: int
    order_currency: str
    order_amount: float
    created_at: Optional[datetime] = None
    customer: Optional[CustomerRead] = None
    items: list[OrderItemRead] = []
    shipments: list[ShipmentRead] = []

    class Config:
        from_attributes = True

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

class OrderPage(BaseModel):
    data: list[OrderRead]
    pagination: Pagination

class OrderStats(BaseModel):
    total: int = 0
    pending: int = 0
    processing: int = 0
    shipped: int = 0
    delivered: int = 0
    cancelled: int = 0

class PurchaseResponse(BaseModel):
    success: bool = True
    message: str
    data: ShipmentRead

class CsvOrderRow(BaseModel):
    """One CSV line after header normalization; every value is trimmed text."""
    row_number: int
    order_number: str
    order_date: str = ""
    customer_name: str = ""
    company: Optional[str] = None
    email: str = ""
    phone: str = ""
    street_line_1: str = ""
    street_line_2: Optional[str] = None
    city: str = ""
    state: str = ""
    zip: str = ""
    country: str = ""
    item_title: str = ""
    sku: str = ""
    quantity: str = ""
    item_weight: str = ""
    item_price: str = ""
    order_weight: str = ""
    order_amount: str = ""

    class Config:
        str_strip_whitespace = True
