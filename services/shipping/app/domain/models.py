from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy import String, ForeignKey, Numeric, DateTime, Date
from datetime import datetime, date
from enum import Enum
from typing import Optional

class Base(DeclarativeBase):
    pass

class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

class ShipmentStatus(str, Enum):
    PENDING = "pending"
    PURCHASED = "purchased"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"

class Carrier(str, Enum):
    UPS = "ups"
    USPS = "usps"
    FEDEX = "fedex"
    DHL = "dhl"
    ARAMEX = "aramex"

# Weights, dimensions and money come back as floats rather than Decimal
Amount = Numeric(10, 2, asdecimal=False)
# Item weights can be fractions of an ounce
Weight = Numeric(10, 3, asdecimal=False)

class Customer(Base):
    __tablename__ = "customers"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200))
    company: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    # Upsert key for CSV imports and order creation
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    phone: Mapped[str] = mapped_column(String(50))
    street_line_1: Mapped[str] = mapped_column(String(500))
    street_line_2: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    city: Mapped[str] = mapped_column(String(100))
    state: Mapped[str] = mapped_column(String(100))
    zip: Mapped[str] = mapped_column(String(20))
    country: Mapped[str] = mapped_column(String(100), default="US")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    orders: Mapped[list["Order"]] = relationship("Order", back_populates="customer")

class Order(Base):
    __tablename__ = "orders"
    id: Mapped[int] = mapped_column(primary_key=True)
    order_number: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    order_date: Mapped[date] = mapped_column(Date)
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id"))
    status: Mapped[str] = mapped_column(String(30), default=OrderStatus.PENDING.value)
    total_weight_lb: Mapped[float] = mapped_column(Weight)
    total_items: Mapped[int]
    order_currency: Mapped[str] = mapped_column(String(3), default="USD")
    order_amount: Mapped[float] = mapped_column(Amount)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    customer: Mapped[Customer] = relationship("Customer", back_populates="orders")
    items: Mapped[list["OrderItem"]] = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
    shipments: Mapped[list["Shipment"]] = relationship("Shipment", back_populates="order", cascade="all, delete-orphan")

class OrderItem(Base):
    __tablename__ = "order_items"
    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), index=True)
    title: Mapped[str] = mapped_column(String(255))
    sku: Mapped[str] = mapped_column(String(100))
    quantity: Mapped[int]
    weight_lb: Mapped[float] = mapped_column(Weight)
    price: Mapped[float] = mapped_column(Amount)
    order: Mapped[Order] = relationship("Order", back_populates="items")

class Shipment(Base):
    __tablename__ = "shipments"
    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), index=True)
    carrier: Mapped[str] = mapped_column(String(20))
    service_level: Mapped[str] = mapped_column(String(100))
    package_type: Mapped[str] = mapped_column(String(50))
    weight_lb: Mapped[float] = mapped_column(Weight)
    length_in: Mapped[float] = mapped_column(Amount)
    width_in: Mapped[float] = mapped_column(Amount)
    height_in: Mapped[float] = mapped_column(Amount)
    rate_amount: Mapped[float] = mapped_column(Amount)
    rate_currency: Mapped[str] = mapped_column(String(3), default="USD")
    status: Mapped[str] = mapped_column(String(30), default=ShipmentStatus.PENDING.value)
    # Assigned when the label is purchased
    tracking_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    label_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    shipped_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    delivered_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    order: Mapped[Order] = relationship("Order", back_populates="shipments")
