from pydantic import BaseModel

class ImportResults(BaseModel):
    total: int = 0
    successful: int = 0
    failed: int = 0
    errors: list[str] = []

class ImportReport(ImportResults):
    """Outcome of one bulk upload."""

    @property
    def success(self) -> bool:
        return self.failed == 0 and not self.errors

    @property
    def message(self) -> str:
        return f"Processed {self.total} orders: {self.successful} successful, {self.failed} failed"

    def record_success(self) -> None:
        self.total += 1
        self.successful += 1

    def record_failure(self, order_number: str, message: str) -> None:
        self.total += 1
        self.failed += 1
        self.errors.append(f"Order {order_number}: {message}")

    def to_response(self) -> dict:
        return {
            "success": self.success,
            "message": self.message,
            "results": ImportResults(**self.model_dump()).model_dump(),
        }
