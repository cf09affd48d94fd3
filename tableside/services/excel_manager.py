"""
Excel Order Ledger with Concurrency Control

Appends one row per placed order to a shared workbook. Several Celery
workers may export at once, so every read-modify-write of the workbook
happens under a file lock.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd
from filelock import FileLock, Timeout

from tableside.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


class ExcelManager:
    """Lock-protected Excel ledger of dine-in orders."""

    DATA_DIR = Path(settings.data_directory)
    ORDERS_FILENAME = settings.excel_filename
    LOCK_TIMEOUT = settings.excel_lock_timeout

    ORDER_COLUMNS = [
        "order_id",
        "table_number",
        "order_date",
        "items",
        "item_count",
        "total_amount",
        "total_price",
        "payment_method",
        "order_status",
        "exported_at",
    ]

    @classmethod
    def orders_file(cls) -> Path:
        return cls.DATA_DIR / cls.ORDERS_FILENAME

    @classmethod
    def orders_lock(cls) -> Path:
        return cls.DATA_DIR / f"{cls.ORDERS_FILENAME}.lock"

    @classmethod
    def _ensure_data_dir(cls) -> None:
        """Create data directory if needed."""
        if not cls.DATA_DIR.exists():
            cls.DATA_DIR.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created data directory: {cls.DATA_DIR}")

    @classmethod
    def _load_or_create_df(cls, file_path: Path, columns: list) -> pd.DataFrame:
        """Load existing file or create new DataFrame."""
        if file_path.exists():
            try:
                return pd.read_excel(file_path, engine="openpyxl")
            except (ValueError, OSError) as e:
                logger.warning(f"Error reading {file_path}: {e}")
                return pd.DataFrame(columns=columns)
        return pd.DataFrame(columns=columns)

    @staticmethod
    def _count_items(items: Any) -> int:
        """Total quantity across the order lines."""
        if isinstance(items, str):
            try:
                items = json.loads(items)
            except ValueError:
                return 0
        if not isinstance(items, list):
            return 0
        return sum(int(line.get("quantity", 0)) for line in items if isinstance(line, dict))

    @classmethod
    def export_order(cls, order_data: dict[str, Any]) -> dict[str, Any]:
        """
        Append an order to the ledger.

        Args:
            order_data: Order fields as produced by the order route

        Returns:
            dict: success flag, message, order_id and export timestamp.
            Lock timeouts and write failures are reported here, not raised.
        """
        cls._ensure_data_dir()

        order_id = order_data.get("order_id", 0)
        result = {
            "success": False,
            "message": "",
            "order_id": order_id,
            "exported_at": None,
        }

        try:
            lock = FileLock(str(cls.orders_lock()), timeout=cls.LOCK_TIMEOUT)

            with lock:
                logger.debug(f"Lock acquired for Order #{order_id}")

                df = cls._load_or_create_df(cls.orders_file(), cls.ORDER_COLUMNS)

                export_time = datetime.now().isoformat()
                items = order_data.get("items")
                new_row = {
                    "order_id": order_id,
                    "table_number": order_data.get("table_number"),
                    "order_date": order_data.get("order_date", export_time),
                    "items": items if isinstance(items, str) else json.dumps(items),
                    "item_count": cls._count_items(items),
                    "total_amount": order_data.get("total_amount"),
                    "total_price": order_data.get("total_price", order_data.get("total_amount")),
                    "payment_method": order_data.get("payment_method"),
                    "order_status": order_data.get("status"),
                    "exported_at": export_time,
                }

                df = pd.concat([df, pd.DataFrame([new_row])], ignore_index=True)
                df.to_excel(str(cls.orders_file()), index=False, engine="openpyxl")

                logger.info(f"Order #{order_id} exported to Excel")

                result["success"] = True
                result["message"] = f"Order #{order_id} exported"
                result["exported_at"] = export_time

            logger.debug(f"Lock released for Order #{order_id}")

        except Timeout:
            result["message"] = f"Lock timeout ({cls.LOCK_TIMEOUT}s)"
            logger.error(f"Lock timeout for Order #{order_id}")

        except Exception as e:
            result["message"] = str(e)
            logger.exception(f"Error exporting Order #{order_id}")

        return result

    @classmethod
    def get_all_orders(cls) -> list[dict[str, Any]]:
        """Get all ledger rows."""
        cls._ensure_data_dir()

        if not cls.orders_file().exists():
            return []

        try:
            df = pd.read_excel(cls.orders_file(), engine="openpyxl")
            return df.to_dict("records")
        except (ValueError, OSError) as e:
            logger.error(f"Error reading orders: {e}")
            return []

    @classmethod
    def clear_all(cls) -> bool:
        """Delete the ledger and its lock file."""
        try:
            for f in [cls.orders_file(), cls.orders_lock()]:
                if f.exists():
                    f.unlink()
            logger.info("Order ledger cleared")
            return True
        except OSError as e:
            logger.error(f"Error clearing files: {e}")
            return False
