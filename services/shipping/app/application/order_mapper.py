"""
Map one group of CSV rows onto an order, its customer and its items.

The first row of a group supplies the order and customer columns; later
rows are only read for their item columns and are not compared with the
first row.
"""
import math
from typing import Optional

from dateutil import parser as date_parser

from app.application.schemas import (
    CsvOrderRow,
    CustomerCreate,
    OrderDraft,
    OrderItemCreate,
    ParsedOrder,
)
from app.domain.errors import ValidationError
from app.domain.models import OrderStatus

REQUIRED_ORDER_FIELDS = (
    "order_date",
    "customer_name",
    "email",
    "phone",
    "street_line_1",
    "city",
    "state",
    "zip",
    "country",
)

# largest value an INTEGER quantity column holds
MAX_QUANTITY = 2 ** 31 - 1

def _to_float(value: str) -> Optional[float]:
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None

def _to_int(value: str) -> Optional[int]:
    number = _to_float(value)
    if number is None or not number.is_integer():
        return None
    return int(number)

def normalize_order_date(value: str) -> str:
    """Parse a loosely formatted date and return it as YYYY-MM-DD."""
    try:
        parsed = date_parser.parse(value)
    except (ValueError, OverflowError) as e:
        raise ValidationError("invalid order date") from e
    return parsed.date().isoformat()

def _positive_order_amount(row: CsvOrderRow, field: str) -> float:
    number = _to_float(getattr(row, field))
    if number is None or number <= 0:
        raise ValidationError(f"invalid {field}")
    return number

def _map_item(row: CsvOrderRow) -> OrderItemCreate:
    if not row.item_title:
        raise ValidationError(f'missing field "item_title" (row {row.row_number})')
    if not row.sku:
        raise ValidationError(f'missing field "sku" for item "{row.item_title}"')

    # blank cells fall back to quantity 1 and zero weight/price
    quantity = _to_int(row.quantity) if row.quantity else 1
    if quantity is None or not 1 <= quantity <= MAX_QUANTITY:
        raise ValidationError(f'invalid quantity for item "{row.item_title}"')

    measures = {}
    for field in ("item_weight", "item_price"):
        raw = getattr(row, field)
        number = _to_float(raw) if raw else 0.0
        if number is None or number < 0:
            raise ValidationError(f'invalid {field} for item "{row.item_title}"')
        measures[field] = number

    return OrderItemCreate(
        title=row.item_title,
        sku=row.sku,
        quantity=quantity,
        weight_lb=measures["item_weight"],
        price=measures["item_price"],
    )

def map_order_group(order_number: str, rows: list[CsvOrderRow]) -> ParsedOrder:
    """
    Validate one order group and build its order, customer and items.

    Raises:
        ValidationError: a field of this order is missing or out of range
    """
    if not rows:
        raise ValidationError("order has no rows")
    first = rows[0]

    for field in REQUIRED_ORDER_FIELDS:
        if not getattr(first, field):
            raise ValidationError(f'missing field "{field}"')

    order_date = normalize_order_date(first.order_date)
    total_weight = _positive_order_amount(first, "order_weight")
    order_amount = _positive_order_amount(first, "order_amount")

    customer = CustomerCreate(
        name=first.customer_name,
        company=first.company or None,
        email=first.email,
        phone=first.phone,
        street_line_1=first.street_line_1,
        street_line_2=first.street_line_2 or None,
        city=first.city,
        state=first.state,
        zip=first.zip,
        country=first.country.upper(),
    )

    items = [_map_item(row) for row in rows]

    order = OrderDraft(
        order_number=order_number,
        order_date=order_date,
        status=OrderStatus.PENDING,
        total_weight_lb=total_weight,
        total_items=sum(item.quantity for item in items),
        order_currency="USD",
        order_amount=order_amount,
    )
    return ParsedOrder(order=order, customer=customer, items=items)
