"""
Ledger Verification Script

Checks the Excel order ledger written by the Celery export task.
Run from project root: python scripts/verify.py [path/to/orders.xlsx]
"""

import os
import sys
from datetime import datetime

import pandas as pd

LEDGER_FILE = os.path.join(
    os.getenv("DATA_DIRECTORY", "data"),
    os.getenv("EXCEL_FILENAME", "orders.xlsx"),
)
REQUIRED_COLUMNS = ["order_id", "table_number", "items", "total_amount", "total_price", "order_status"]


def verify_ledger(path: str = LEDGER_FILE) -> bool:
    """Verify ledger integrity after a simulation run."""

    print("=" * 60)
    print("LEDGER VERIFICATION REPORT")
    print("=" * 60)
    print(f"Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"File: {path}")
    print("=" * 60)

    if not os.path.exists(path):
        print("\nLedger file not found!")
        print("   Start a worker and run the simulation first: python scripts/simulate.py")
        return False

    try:
        df = pd.read_excel(path, engine="openpyxl")
    except (ValueError, OSError) as e:
        print(f"\nCould not read ledger: {e}")
        return False

    print(f"\nTotal Orders: {len(df)}")
    print(f"Tables served: {df['table_number'].nunique() if 'table_number' in df.columns else 'n/a'}")

    ok = True
    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        print(f"\nMissing Columns: {missing}")
        ok = False
    else:
        print("All required columns present")

    if "order_id" in df.columns:
        duplicates = df["order_id"].duplicated().sum()
        if duplicates > 0:
            print(f"\n{duplicates} duplicate order IDs found!")
            ok = False
        else:
            print("No duplicate order IDs")

    # total_price is recorded equal to total_amount when the order is placed
    if {"total_amount", "total_price"} <= set(df.columns):
        mismatched = (df["total_amount"].round(2) != df["total_price"].round(2)).sum()
        if mismatched:
            print(f"{mismatched} rows where total_price differs from total_amount")
            ok = False

    if "total_amount" in df.columns and len(df) > 0:
        print("\nREVENUE:")
        print(f"   Total: ${df['total_amount'].sum():.2f}")
        print(f"   Average: ${df['total_amount'].mean():.2f}")

    print("\nRECENT ORDERS:")
    print("-" * 60)
    if len(df) > 0:
        cols = ["order_id", "table_number", "total_amount", "order_status"]
        cols = [c for c in cols if c in df.columns]
        print(df[cols].tail(5).to_string(index=False))

    print("\n" + "=" * 60)
    print("VERIFICATION PASSED" if ok else "VERIFICATION FOUND PROBLEMS")
    print("=" * 60)

    return ok


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else LEDGER_FILE
    sys.exit(0 if verify_ledger(target) else 1)
