from datetime import date

import pytest

from app.application.order_mapper import map_order_group, normalize_order_date
from app.application.schemas import CsvOrderRow
from app.domain.errors import ValidationError
from app.domain.models import OrderStatus

def _row(row_number=1, **overrides):
    fields = dict(
        order_number="ORD-1",
        order_date="2024-03-02",
        customer_name="Jane Roe",
        company="",
        email="jane@example.com",
        phone="555-0100",
        street_line_1="1 Market St",
        street_line_2="",
        city="San Francisco",
        state="CA",
        zip="94105",
        country="us",
        item_title="Mug",
        sku="MUG-1",
        quantity="2",
        item_weight="0.5",
        item_price="12.50",
        order_weight="1.5",
        order_amount="25.00",
    )
    fields.update(overrides)
    return CsvOrderRow(row_number=row_number, **fields)

def test_maps_order_customer_and_items():
    rows = [_row(), _row(2, item_title="Plate", sku="PL-1", quantity="3", item_price="4")]
    parsed = map_order_group("ORD-1", rows)

    assert parsed.order.order_number == "ORD-1"
    assert parsed.order.order_date == date(2024, 3, 2)
    assert parsed.order.status == OrderStatus.PENDING
    assert parsed.order.total_items == 5
    assert parsed.order.total_weight_lb == 1.5
    assert parsed.order.order_currency == "USD"

    assert parsed.customer.email == "jane@example.com"
    assert parsed.customer.country == "US"
    assert parsed.customer.company is None
    assert parsed.customer.street_line_2 is None

    assert [(i.sku, i.quantity, i.price) for i in parsed.items] == [("MUG-1", 2, 12.5), ("PL-1", 3, 4.0)]

def test_first_row_supplies_order_and_customer():
    rows = [_row(), _row(2, email="other@example.com", order_amount="999", sku="MUG-2")]
    parsed = map_order_group("ORD-1", rows)
    assert parsed.customer.email == "jane@example.com"
    assert parsed.order.order_amount == 25.0
    assert len(parsed.items) == 2

@pytest.mark.parametrize("raw, expected", [
    ("2024-03-02", "2024-03-02"),
    ("03/02/2024", "2024-03-02"),
    ("March 2, 2024", "2024-03-02"),
    ("2024-03-02T23:30:00-05:00", "2024-03-02"),
])
def test_order_date_is_normalized(raw, expected):
    assert normalize_order_date(raw) == expected

def test_unparseable_date_is_rejected():
    with pytest.raises(ValidationError) as exc:
        map_order_group("ORD-1", [_row(order_date="someday")])
    assert exc.value.message == "invalid order date"

@pytest.mark.parametrize("field", ["customer_name", "email", "city", "country"])
def test_missing_order_field_is_named(field):
    with pytest.raises(ValidationError) as exc:
        map_order_group("ORD-1", [_row(**{field: ""})])
    assert exc.value.message == f'missing field "{field}"'

def test_missing_sku_names_the_item():
    with pytest.raises(ValidationError) as exc:
        map_order_group("ORD-1", [_row(), _row(2, item_title="Plate", sku="")])
    assert exc.value.message == 'missing field "sku" for item "Plate"'

@pytest.mark.parametrize("field, value", [
    ("order_weight", "0"),
    ("order_weight", "heavy"),
    ("order_amount", "-1"),
    ("order_amount", "nan"),
])
def test_order_totals_must_be_positive(field, value):
    with pytest.raises(ValidationError) as exc:
        map_order_group("ORD-1", [_row(**{field: value})])
    assert exc.value.message == f"invalid {field}"

@pytest.mark.parametrize("quantity", ["0", "-2", "1.5", "two"])
def test_invalid_quantity(quantity):
    with pytest.raises(ValidationError) as exc:
        map_order_group("ORD-1", [_row(quantity=quantity)])
    assert exc.value.message == 'invalid quantity for item "Mug"'

def test_negative_price_is_rejected():
    with pytest.raises(ValidationError) as exc:
        map_order_group("ORD-1", [_row(item_price="-5")])
    assert exc.value.message == 'invalid item_price for item "Mug"'

def test_blank_item_numbers_use_defaults():
    parsed = map_order_group("ORD-1", [_row(quantity="", item_weight="", item_price="")])
    item = parsed.items[0]
    assert (item.quantity, item.weight_lb, item.price) == (1, 0.0, 0.0)
    assert parsed.order.total_items == 1

def test_integral_float_quantity_is_accepted():
    parsed = map_order_group("ORD-1", [_row(quantity="3.0")])
    assert parsed.items[0].quantity == 3

@pytest.mark.parametrize("quantity", ["1e20", str(2 ** 31)])
def test_quantity_above_column_range_is_rejected(quantity):
    with pytest.raises(ValidationError) as exc:
        map_order_group("ORD-1", [_row(quantity=quantity)])
    assert exc.value.message == 'invalid quantity for item "Mug"'

def test_largest_quantity_is_accepted():
    parsed = map_order_group("ORD-1", [_row(quantity=str(2 ** 31 - 1))])
    assert parsed.items[0].quantity == 2 ** 31 - 1
