"""
Test suite for logging helpers and HTTP middleware.
"""

import logging
from datetime import date
from decimal import Decimal

from fastapi import FastAPI
from fastapi.testclient import TestClient

from cenov_admin.observability.correlation import (
    CorrelationIdFilter,
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from cenov_admin.observability.log_utils import describe_csv, describe_value
from cenov_admin.observability.middleware import BodySizeLimitMiddleware


class TestDescribeValue:
    """Test suite for describe_value()."""

    def test_scalars(self) -> None:
        assert describe_value(None) == "None"
        assert describe_value(Decimal("12.50")) == "12.50"
        assert describe_value(date(2024, 3, 1)) == "2024-03-01"

    def test_sized_values_are_not_logged(self) -> None:
        assert describe_value(b"\x00\x01") == "<2 bytes>"
        assert describe_value([1, 2, 3]) == "<list of 3>"
        assert describe_value({"a": 1}) == "<dict of 1 keys>"

    def test_long_text_is_cut(self) -> None:
        assert describe_value("x" * 20, max_length=5) == "xxxxx... (20 chars)"


def test_describe_csv() -> None:
    assert describe_csv(None) == "csv(missing)"
    assert describe_csv("a;b\n1;2\n") == "csv(2 lines, 8 chars)"
    assert describe_csv("a;b\n1;2") == "csv(2 lines, 7 chars)"


class TestCorrelation:
    """Test suite for correlation id propagation."""

    def test_set_generates_when_missing(self) -> None:
        generated = set_correlation_id(None)

        assert len(generated) == 32
        assert get_correlation_id() == generated
        clear_correlation_id()
        assert get_correlation_id() == ""

    def test_filter_marks_records_outside_requests(self) -> None:
        clear_correlation_id()
        record = logging.LogRecord("t", logging.INFO, __file__, 1, "msg", None, None)

        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "-"

    def test_header_is_echoed(self, client) -> None:
        response = client.get("/api/v1/health", headers={"X-Correlation-ID": "req-42"})

        assert response.headers["x-correlation-id"] == "req-42"


def test_body_size_limit() -> None:
    app = FastAPI()
    app.add_middleware(BodySizeLimitMiddleware, max_body_size=10)

    @app.post("/upload")
    async def upload() -> dict:
        return {"ok": True}

    client = TestClient(app)

    assert client.post("/upload", content=b"12345").status_code == 200
    response = client.post("/upload", content=b"x" * 11)
    assert response.status_code == 413
    assert "10 octets" in response.json()["detail"]
