"""
Dinner Rush Simulation Script

Fires concurrent orders, status updates and service requests at a running
API to check it holds up when every table orders at once.
Run from project root: python scripts/simulate.py --orders 50
"""

import argparse
import asyncio
import random
import sys
import time
from datetime import datetime
from typing import Any

import httpx

API_BASE_URL = "http://localhost:5000"
TOTAL_ORDERS = 50

TABLE_NUMBERS = [str(n) for n in range(1, 21)]
MENU_ITEMS = [
    {"name": "Pizza Margherita", "unit_price": 14.99},
    {"name": "Pepperoni Pizza", "unit_price": 16.99},
    {"name": "Caesar Salad", "unit_price": 8.99},
    {"name": "Garlic Bread", "unit_price": 5.99},
    {"name": "Pasta Carbonara", "unit_price": 13.99},
    {"name": "Tiramisu", "unit_price": 7.99},
    {"name": "Coke", "unit_price": 2.99},
    {"name": "Sparkling Water", "unit_price": 3.49},
]
KITCHEN_STATUSES = ["preparing", "ready", "served"]
REQUEST_NOTES = ["need napkins", "more water please", "can we get the bill", "high chair"]


def generate_random_items() -> list[dict]:
    """Generate random order lines."""
    items = []
    for _ in range(random.randint(1, 4)):
        item = random.choice(MENU_ITEMS).copy()
        item["quantity"] = random.randint(1, 3)
        items.append(item)
    return items


def generate_order_payload() -> dict[str, Any]:
    """Generate payload for /api/orders."""
    items = generate_random_items()
    total = round(sum(i["quantity"] * i["unit_price"] for i in items), 2)
    return {
        "tableNumber": random.choice(TABLE_NUMBERS),
        "orderItems": items,
        "totalAmount": total,
        "paymentMethod": random.choice(["cash", "card"]),
    }


async def send_order(client: httpx.AsyncClient, order_num: int) -> dict[str, Any]:
    """Place one order and walk it through the kitchen statuses."""
    payload = generate_order_payload()
    start_time = time.time()

    try:
        response = await client.post(f"{API_BASE_URL}/api/orders", json=payload, timeout=30.0)
        if response.status_code != 201:
            return {
                "order_num": order_num,
                "success": False,
                "error": response.text[:100],
                "time": round(time.time() - start_time, 3),
            }

        order_id = response.json().get("orderId")
        for status in KITCHEN_STATUSES:
            update = await client.put(
                f"{API_BASE_URL}/api/orders/{order_id}/status",
                json={"status": status},
                timeout=30.0,
            )
            if update.status_code != 200:
                return {
                    "order_num": order_num,
                    "success": False,
                    "error": f"status {status}: {update.text[:80]}",
                    "time": round(time.time() - start_time, 3),
                }

        return {
            "order_num": order_num,
            "success": True,
            "order_id": order_id,
            "total": payload["totalAmount"],
            "time": round(time.time() - start_time, 3),
        }
    except httpx.HTTPError as e:
        return {
            "order_num": order_num,
            "success": False,
            "error": str(e)[:100],
            "time": round(time.time() - start_time, 3),
        }


async def send_service_request(client: httpx.AsyncClient) -> bool:
    """Call staff from a random table."""
    try:
        response = await client.post(
            f"{API_BASE_URL}/api/requests",
            json={"tableNumber": random.choice(TABLE_NUMBERS), "notes": random.choice(REQUEST_NOTES)},
            timeout=30.0,
        )
        return response.status_code == 201
    except httpx.HTTPError:
        return False


async def run_simulation(num_orders: int = TOTAL_ORDERS) -> dict[str, Any]:
    """
    Run the dinner rush.

    Args:
        num_orders: Number of orders to place concurrently
    """
    print("=" * 70)
    print("DINNER RUSH SIMULATION")
    print("=" * 70)
    print(f"Total Orders: {num_orders}")
    print(f"Target: {API_BASE_URL}")
    print(f"Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()

    async with httpx.AsyncClient() as client:
        order_tasks = [send_order(client, i + 1) for i in range(num_orders)]
        request_tasks = [send_service_request(client) for _ in range(max(1, num_orders // 5))]
        results = await asyncio.gather(*order_tasks)
        requests_ok = await asyncio.gather(*request_tasks)

    total_time = round(time.time() - start_time, 2)

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]

    print(f"\nSuccessful Orders: {len(successful)}/{num_orders}")
    print(f"Failed Orders: {len(failed)}/{num_orders}")
    print(f"Service Requests: {sum(requests_ok)}/{len(requests_ok)} saved")
    print(f"Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        total_revenue = sum(r.get("total", 0) for r in successful)
        print(f"\nAverage order round trip: {avg_time}s")
        print(f"Fastest: {min(r['time'] for r in successful)}s")
        print(f"Slowest: {max(r['time'] for r in successful)}s")
        print(f"Total Revenue: ${total_revenue:.2f}")

    if failed:
        print("\nFailed Order Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")

    print("\nNext: python scripts/verify.py to check the Excel ledger")
    print("=" * 70)

    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


async def preflight() -> bool:
    """Check the API is up and the menu is reachable before the rush."""
    async with httpx.AsyncClient() as client:
        try:
            health = await client.get(f"{API_BASE_URL}/health", timeout=10.0)
            menu = await client.get(f"{API_BASE_URL}/api/food-items", timeout=10.0)
        except httpx.HTTPError as e:
            print(f"API unreachable: {e}")
            return False

    if health.status_code != 200:
        print(f"Health check failed: {health.text}")
        return False
    data = health.json()
    print(f"Status: {data.get('status')} | Database: {data.get('database')} | Redis: {data.get('redis')}")
    print(f"Menu items published: {len(menu.json()) if menu.status_code == 200 else 'unavailable'}")
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Dinner rush simulation")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--url", default=API_BASE_URL, help="API base URL")
    parser.add_argument("--skip-preflight", action="store_true", help="Skip the health check")
    args = parser.parse_args()

    API_BASE_URL = args.url.rstrip("/")

    if not args.skip_preflight and not asyncio.run(preflight()):
        print("\nPre-flight failed. Fix issues before running simulation.")
        sys.exit(1)

    asyncio.run(run_simulation(args.orders))
