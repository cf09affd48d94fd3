"""Unit tests for the Excel order ledger and its Celery task."""

from unittest.mock import patch

import pytest
from filelock import Timeout

from tableside import tasks
from tableside.services import excel_manager
from tableside.services.excel_manager import ExcelManager


@pytest.fixture
def ledger_dir(tmp_path, monkeypatch):
    """Point the ledger at a temporary directory."""
    data_dir = tmp_path / "data"
    monkeypatch.setattr(ExcelManager, "DATA_DIR", data_dir)
    return data_dir


@pytest.fixture
def order_data() -> dict:
    """Order as serialized by the order route."""
    return {
        "order_id": 11,
        "table_number": "12",
        "order_date": "2024-01-15T19:30:00",
        "items": '[{"name": "Pizza", "quantity": 2, "unit_price": 10.0}, '
                 '{"name": "Coke", "quantity": 1, "unit_price": 2.5}]',
        "total_amount": 22.5,
        "total_price": 22.5,
        "payment_method": "cash",
        "status": "waiting",
    }


@pytest.mark.unit
class TestExcelManager:
    """Test suite for ExcelManager."""

    def test_export_appends_rows(self, ledger_dir, order_data) -> None:
        """Test each export adds one row and creates the data directory."""
        first = ExcelManager.export_order(order_data)
        second = ExcelManager.export_order({**order_data, "order_id": 12})

        assert first["success"] is True
        assert second["success"] is True
        assert first["exported_at"] is not None
        assert (ledger_dir / "orders.xlsx").exists()

        rows = ExcelManager.get_all_orders()
        assert [row["order_id"] for row in rows] == [11, 12]
        assert rows[0]["table_number"] == 12 or rows[0]["table_number"] == "12"
        assert rows[0]["item_count"] == 3
        assert rows[0]["order_status"] == "waiting"
        assert rows[0]["total_price"] == 22.5

    def test_list_items_are_serialized(self, ledger_dir, order_data) -> None:
        """Test a decoded item list is stored as JSON text."""
        order_data["items"] = [{"name": "Soup", "quantity": 4, "unit_price": 5}]

        ExcelManager.export_order(order_data)

        [row] = ExcelManager.get_all_orders()
        assert row["items"] == '[{"name": "Soup", "quantity": 4, "unit_price": 5}]'
        assert row["item_count"] == 4

    def test_lock_timeout_is_reported(self, ledger_dir, order_data) -> None:
        """Test a held lock yields a failed result instead of raising."""

        class HeldLock:
            def __init__(self, path, timeout):
                self.path = path

            def __enter__(self):
                raise Timeout(self.path)

            def __exit__(self, *exc):
                return False

        with patch.object(excel_manager, "FileLock", HeldLock):
            result = ExcelManager.export_order(order_data)

        assert result["success"] is False
        assert result["message"].startswith("Lock timeout")
        assert ExcelManager.get_all_orders() == []

    def test_get_all_orders_without_file(self, ledger_dir) -> None:
        """Test an empty ledger reads as no rows."""
        assert ExcelManager.get_all_orders() == []

    def test_clear_all(self, ledger_dir, order_data) -> None:
        """Test clearing removes the workbook."""
        ExcelManager.export_order(order_data)

        assert ExcelManager.clear_all() is True
        assert not ExcelManager.orders_file().exists()


@pytest.mark.unit
class TestExportOrderTask:
    """Test suite for the Celery ledger task."""

    def test_task_delegates_to_manager(self, order_data) -> None:
        """Test the task runs the export and annotates the result."""
        with patch.object(
            tasks.ExcelManager,
            "export_order",
            return_value={"success": True, "message": "ok", "order_id": 11, "exported_at": "now"},
        ) as export:
            result = tasks.export_order_to_ledger(order_data)

        export.assert_called_once_with(order_data)
        assert result["success"] is True
        assert "processing_time_seconds" in result
        assert "task_id" in result
