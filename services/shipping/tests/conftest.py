import csv
import io
import os
import random

# Point the app at SQLite before anything imports its settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RUN_MIGRATIONS", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.application.rates import DummyRateProvider
from app.domain.models import Base
from app.infrastructure.db import create_db_engine, get_db
from app.main import app

BASE_ROW = {
    "Order Number": "ORD-1001",
    "Order Date": "2024-01-15",
    "Customer Name": "Jane Roe",
    "Company": "",
    "Email": "jane@example.com",
    "Phone": "555-0100",
    "Street Line 1": "1 Market St",
    "Street Line 2": "",
    "City": "San Francisco",
    "State": "CA",
    "Zip": "94105",
    "Country": "us",
    "Item Title": "Mug",
    "SKU": "MUG-1",
    "Quantity": "2",
    "Item Weight": "0.5",
    "Item Price": "12.50",
    "Order Weight": "1.5",
    "Order Amount": "25.00",
}


@pytest.fixture
def make_csv():
    """Build CSV text from BASE_ROW plus per-row overrides."""
    def _make(*overrides, columns=None, delimiter=","):
        columns = list(columns or BASE_ROW)
        buffer = io.StringIO()
        writer = csv.writer(buffer, delimiter=delimiter, lineterminator="\n")
        writer.writerow(columns)
        for override in overrides or ({},):
            row = {**BASE_ROW, **override}
            writer.writerow([row.get(column, "") for column in columns])
        return buffer.getvalue()
    return _make


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def rate_provider():
    return DummyRateProvider(random.Random(1234))


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
