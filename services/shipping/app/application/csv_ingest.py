"""
Bulk order CSV reading and grouping

A bulk order file has one line per order item; every line repeats the
order and customer columns, and lines sharing an order number belong to
the same order. This module turns the raw upload into row-maps keyed by
normalized header and groups them per order number.
"""
import csv
import io
import os
import re
from collections import OrderedDict
from typing import Union

from app.application.schemas import CsvOrderRow
from app.domain.errors import FormatError, ParseError, SchemaError

DELIMITERS = {
    ".csv": ",",
    ".tsv": "\t",
}

REQUIRED_COLUMNS = (
    "order_number",
    "order_date",
    "customer_name",
    "email",
    "phone",
    "street_line_1",
    "city",
    "state",
    "zip",
    "country",
    "item_title",
    "sku",
    "quantity",
    "item_weight",
    "item_price",
    "order_weight",
    "order_amount",
)

OPTIONAL_COLUMNS = ("company", "street_line_2")

# Workaround: some exports truncate the longer header names. Known
# truncations are mapped back here; this list is not meant to grow.
HEADER_CORRECTIONS = {
    "order_numbe": "order_number",
    "customer_na": "customer_name",
    "street_line": "street_line_1",
    "order_amoun": "order_amount",
}

TEMPLATE_HEADERS = (
    "Order Number", "Order Date", "Customer Name", "Company", "Email", "Phone",
    "Street Line 1", "Street Line 2", "City", "State", "Zip", "Country",
    "Item Title", "SKU", "Quantity", "Item Weight", "Item Price",
    "Order Weight", "Order Amount",
)

TEMPLATE_SAMPLE_ROW = (
    "ORD-1000", "2024-01-15", "John Doe", "Acme Corp", "john@acme.com", "555-0123",
    "123 Main St", "Suite 100", "New York", "NY", "10001", "US",
    "Sample Product", "SP-001", "2", "0.5", "25.99", "1.0", "51.98",
)

_WHITESPACE = re.compile(r"\s+")
_NON_IDENTIFIER = re.compile(r"[^a-z0-9_]")

def normalize_header(header: str) -> str:
    normalized = _WHITESPACE.sub("_", header.strip().lower())
    normalized = _NON_IDENTIFIER.sub("", normalized)
    return HEADER_CORRECTIONS.get(normalized, normalized)

def delimiter_for(filename: str) -> str:
    _, extension = os.path.splitext(filename or "")
    delimiter = DELIMITERS.get(extension.lower())
    if delimiter is None:
        raise FormatError("File must be a CSV")
    return delimiter

def _decode(content: Union[str, bytes]) -> str:
    if isinstance(content, str):
        return content.lstrip("\ufeff")
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        line = content[:e.start].count(b"\n") + 1
        # line 1 is the header row
        raise ParseError("File is not valid UTF-8 text", rows=[max(line - 1, 1)]) from e

def read_order_rows(content: Union[str, bytes], filename: str) -> list[dict]:
    """
    Parse an uploaded bulk order file into row-maps keyed by normalized header.

    Raises:
        FormatError: the filename does not carry a tabular extension
        ParseError: malformed quoting, ragged rows or undecodable bytes
        SchemaError: no data rows, or required columns are missing
    """
    delimiter = delimiter_for(filename)
    text = _decode(content)

    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter, strict=True)
    header = None
    rows = []
    bad_rows = []
    try:
        for record in reader:
            if not any(field.strip() for field in record):
                continue
            if header is None:
                header = [normalize_header(name) for name in record]
                continue
            row_number = len(rows) + len(bad_rows) + 1
            if len(record) != len(header):
                bad_rows.append(row_number)
                continue
            rows.append(dict(zip(header, record)))
    except csv.Error as e:
        raise ParseError(f"CSV parsing error: {e}", rows=[len(rows) + len(bad_rows) + 1]) from e

    if bad_rows:
        raise ParseError("Field count does not match the header row", rows=bad_rows)
    if not rows:
        raise SchemaError("No data found in CSV file")

    missing = [column for column in REQUIRED_COLUMNS if column not in header]
    if missing:
        raise SchemaError(f"Missing required columns: {', '.join(missing)}", missing_columns=missing)

    return rows

def group_rows(rows: list[dict]) -> tuple["OrderedDict[str, list[CsvOrderRow]]", list[str]]:
    """
    Group row-maps by order number, keeping file order.

    Rows without an order number are left out and reported as
    ``"Row <n>: Missing order number"``; the rest of the file still imports.
    """
    groups: "OrderedDict[str, list[CsvOrderRow]]" = OrderedDict()
    errors = []
    for index, row in enumerate(rows, start=1):
        order_number = (row.get("order_number") or "").strip()
        if not order_number:
            errors.append(f"Row {index}: Missing order number")
            continue
        fields = {column: row.get(column) for column in REQUIRED_COLUMNS + OPTIONAL_COLUMNS}
        fields = {key: value for key, value in fields.items() if value is not None}
        groups.setdefault(order_number, []).append(CsvOrderRow(row_number=index, **fields))
    return groups, errors

def generate_csv_template() -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(TEMPLATE_HEADERS)
    writer.writerow(TEMPLATE_SAMPLE_ROW)
    return buffer.getvalue()
