"""Errors raised by the CSV import pipeline and the shipment actions.

FormatError, ParseError and SchemaError reject a whole upload before any
order is touched. ValidationError is scoped to a single order group and is
collected into the import report instead of stopping the batch.
"""
from typing import Iterable, Optional


class CsvImportError(Exception):
    """Base class for upload problems reported back to the caller."""

    def __init__(self, message: str, details: Optional[list[str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or []


class FormatError(CsvImportError):
    """The uploaded file is not a recognized tabular file."""


class ParseError(CsvImportError):
    """The file is not well-formed delimited text."""

    def __init__(self, message: str, rows: Iterable[int] = ()):
        self.rows = sorted(set(rows))
        details = [f"Row {row}: {message}" for row in self.rows]
        super().__init__(message, details)


class SchemaError(CsvImportError):
    """The file has no data rows or lacks required columns."""

    def __init__(self, message: str, missing_columns: Iterable[str] = ()):
        self.missing_columns = list(missing_columns)
        super().__init__(message, [message])


class ValidationError(CsvImportError):
    """A field of one order group failed validation."""


class ShipmentNotFound(Exception):
    pass


class PurchaseRejected(Exception):
    """The shipment cannot move to purchased from its current state."""
