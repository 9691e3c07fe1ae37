"""
Bulk order import

Reads an uploaded order file, validates each order group and applies the
orders one at a time. A bad order is reported and skipped; the rest of the
batch carries on. Only problems with the file as a whole (wrong type,
broken syntax, missing columns) stop the upload, and they do so before any
record is written.
"""
import time
import uuid
from typing import Optional, Union

from sqlalchemy.orm import Session

from shared.core.logging_config import get_logger, set_request_context
from app.application.csv_ingest import group_rows, read_order_rows
from app.application.customer_service import CustomerService
from app.application.import_report import ImportReport
from app.application.order_mapper import map_order_group
from app.application.order_service import OrderService
from app.application.rates import DummyRateProvider
from app.application.schemas import ParsedOrder
from app.application.shipment_service import ShipmentService
from app.domain.errors import ValidationError

logger = get_logger(__name__)


class ImportEvents:
    """Structured log checkpoints emitted while a batch is processed."""

    def __init__(self, batch_id: str, filename: Optional[str] = None):
        self.batch_id = batch_id
        self.filename = filename
        self.started_at = time.time()

    def _fields(self, **fields) -> dict:
        return {'extra_fields': {'batch_id': self.batch_id, **fields}}

    def batch_started(self, groups: int, rows: int) -> None:
        logger.info(
            f"Import {self.batch_id} started: {groups} orders from {rows} rows",
            extra=self._fields(filename=self.filename, orders=groups, rows=rows)
        )

    def order_imported(self, order_number: str, order_id: int, items: int) -> None:
        logger.info(
            f"Imported order {order_number}",
            extra=self._fields(order_number=order_number, order_id=order_id, items=items)
        )

    def order_failed(self, order_number: str, message: str) -> None:
        logger.warning(
            f"Order {order_number} not imported: {message}",
            extra=self._fields(order_number=order_number, error=message)
        )

    def shipments_skipped(self, order_number: str, message: str) -> None:
        logger.warning(
            f"Shipments error for order {order_number}: {message}",
            extra=self._fields(order_number=order_number, error=message)
        )

    def batch_finished(self, report: ImportReport) -> None:
        logger.info(
            report.message,
            extra=self._fields(
                total=report.total,
                successful=report.successful,
                failed=report.failed,
                duration_ms=(time.time() - self.started_at) * 1000
            )
        )


class BulkOrderImporter:
    def __init__(self, db: Session, rate_provider=None, events: Optional[ImportEvents] = None):
        self.db = db
        self.rate_provider = rate_provider or DummyRateProvider()
        self.events = events
        self._injected_events = events
        self.customers = CustomerService(db)
        self.orders = OrderService(db)
        self.shipments = ShipmentService(db)

    def import_file(self, content: Union[str, bytes], filename: str) -> ImportReport:
        """
        Import every order found in an uploaded file.

        Raises:
            FormatError, ParseError, SchemaError: the file itself was rejected
        """
        # one batch id per uploaded file
        self.events = self._injected_events or ImportEvents(str(uuid.uuid4()), filename)
        set_request_context(batch_id=self.events.batch_id)

        rows = read_order_rows(content, filename)
        groups, row_errors = group_rows(rows)
        self.events.batch_started(len(groups), len(rows))

        report = ImportReport(errors=list(row_errors))
        parsed_orders = []
        for order_number, group in groups.items():
            try:
                parsed_orders.append(map_order_group(order_number, group))
            except ValidationError as e:
                report.record_failure(order_number, e.message)
                self.events.order_failed(order_number, e.message)

        self.apply(parsed_orders, report)
        self.events.batch_finished(report)
        return report

    def apply(self, parsed_orders: list[ParsedOrder], report: Optional[ImportReport] = None) -> ImportReport:
        """Write orders in sequence; each order commits or rolls back on its own."""
        report = report if report is not None else ImportReport()
        if self.events is None:
            self.events = ImportEvents(str(uuid.uuid4()))

        for parsed in parsed_orders:
            order_number = parsed.order.order_number
            try:
                order_id = self._apply_order(parsed)
            except Exception as e:
                # driver errors (overflow, bad bytes) are not always SQLAlchemyError
                self.db.rollback()
                message = str(getattr(e, "orig", None) or e)
                report.record_failure(order_number, message)
                self.events.order_failed(order_number, message)
                continue

            report.record_success()
            self.events.order_imported(order_number, order_id, len(parsed.items))
            self._attach_candidate_shipments(order_number, order_id, parsed.order.total_weight_lb)

        return report

    def _apply_order(self, parsed: ParsedOrder) -> int:
        # customer, order and items are committed together
        customer = self.customers.upsert(parsed.customer)
        order = self.orders.insert(parsed, customer.id)
        order_id = order.id
        self.db.commit()
        return order_id

    def _attach_candidate_shipments(self, order_number: str, order_id: int, total_weight: float) -> None:
        """Rate quotes are optional; failures are logged and the order still counts."""
        try:
            records = self.rate_provider.generate_candidate_shipments(order_id, total_weight)
            if records:
                self.shipments.add_candidates(records)
                self.db.commit()
        except Exception as e:
            self.db.rollback()
            self.events.shipments_skipped(order_number, str(e))
