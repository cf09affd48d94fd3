"""HTTP tests for the order endpoints."""

import json

import pytest
from fastapi.testclient import TestClient
from kombu.exceptions import OperationalError as BrokerError

from tableside.models import Order


@pytest.mark.api
class TestCreateOrderEndpoint:
    """Test suite for POST /api/orders."""

    def test_creates_waiting_order(self, client: TestClient, tables, order_payload, fetch_all) -> None:
        """Test a valid order is stored as waiting and its id echoed."""
        response = client.post("/api/orders", json=order_payload)

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Order created successfully"
        assert isinstance(data["orderId"], int) and data["orderId"] > 0

        [stored] = fetch_all(Order)
        assert stored.id == data["orderId"]
        assert stored.status == "waiting"
        assert stored.table_number == "12"
        assert stored.total_amount == 20
        assert stored.total_price == stored.total_amount
        assert stored.payment_method == "cash"
        assert stored.order_date is not None
        assert json.loads(stored.items) == [{"name": "Pizza", "quantity": 2, "unit_price": 10.0}]

    def test_numeric_table_number_accepted(self, client: TestClient, tables, order_payload) -> None:
        """Test a JSON number for tableNumber is coerced."""
        order_payload["tableNumber"] = 12

        assert client.post("/api/orders", json=order_payload).status_code == 201

    @pytest.mark.parametrize(
        "changes",
        [
            {"tableNumber": None, "orderItems": []},
            {"tableNumber": None},
            {"tableNumber": "   "},
            {"orderItems": []},
            {"orderItems": "Pizza x2"},
            {"orderItems": [{"name": "Pizza"}]},
            {"totalAmount": -5},
        ],
    )
    def test_invalid_order_rejected_without_write(
        self, client: TestClient, tables, order_payload, fetch_all, ledger_task, changes
    ) -> None:
        """Test malformed input gives 400 and writes nothing."""
        order_payload.update(changes)
        payload = {k: v for k, v in order_payload.items() if v is not None}

        response = client.post("/api/orders", json=payload)

        assert response.status_code == 400
        assert response.text == "Invalid order data"
        assert fetch_all(Order) == []
        ledger_task.delay.assert_not_called()

    def test_unknown_table_is_conflict(self, client: TestClient, tables, order_payload, fetch_all) -> None:
        """Test the store's foreign key rejection surfaces as 409."""
        order_payload["tableNumber"] = "404"

        response = client.post("/api/orders", json=order_payload)

        assert response.status_code == 409
        assert fetch_all(Order) == []

    def test_queues_ledger_export(self, client: TestClient, tables, order_payload, ledger_task) -> None:
        """Test each created order is handed to the ledger task once."""
        order_id = client.post("/api/orders", json=order_payload).json()["orderId"]

        ledger_task.delay.assert_called_once()
        exported = ledger_task.delay.call_args.args[0]
        assert exported["order_id"] == order_id
        assert exported["table_number"] == "12"
        assert exported["status"] == "waiting"
        assert exported["total_price"] == 20

    def test_broker_outage_does_not_fail_order(
        self, client: TestClient, tables, order_payload, ledger_task, fetch_all
    ) -> None:
        """Test an unreachable broker still returns 201."""
        ledger_task.delay.side_effect = BrokerError("connection refused")

        response = client.post("/api/orders", json=order_payload)

        assert response.status_code == 201
        assert len(fetch_all(Order)) == 1


@pytest.mark.api
class TestUpdateOrderStatusEndpoint:
    """Test suite for PUT /api/orders/{id}/status."""

    def test_updates_only_status(self, client: TestClient, tables, order_payload, fetch_all) -> None:
        """Test the status changes and every other column is untouched."""
        order_id = client.post("/api/orders", json=order_payload).json()["orderId"]
        [before] = fetch_all(Order)

        response = client.put(f"/api/orders/{order_id}/status", json={"status": "served"})

        assert response.status_code == 200
        assert response.text == "Order status updated successfully"
        [after] = fetch_all(Order)
        assert after.status == "served"
        for column in ("table_number", "items", "total_amount", "total_price", "payment_method", "order_date"):
            assert getattr(after, column) == getattr(before, column)

    def test_any_status_from_any_status(self, client: TestClient, tables, order_payload, fetch_all) -> None:
        """Test there is no fixed vocabulary or terminal state."""
        order_id = client.post("/api/orders", json=order_payload).json()["orderId"]

        for status in ("served", "waiting", "sent back to kitchen"):
            assert client.put(f"/api/orders/{order_id}/status", json={"status": status}).status_code == 200

        assert fetch_all(Order)[0].status == "sent back to kitchen"

    def test_unknown_order_not_found(self, client: TestClient) -> None:
        """Test an unknown id gives 404."""
        response = client.put("/api/orders/9999999/status", json={"status": "served"})

        assert response.status_code == 404
        assert response.text == "Order not found"

    def test_non_numeric_id_not_found(self, client: TestClient, tables, order_payload, fetch_all) -> None:
        """Test an id that is not a number matches no order."""
        client.post("/api/orders", json=order_payload)

        response = client.put("/api/orders/abc/status", json={"status": "served"})

        assert response.status_code == 404
        assert response.text == "Order not found"
        assert fetch_all(Order)[0].status == "waiting"

    @pytest.mark.parametrize("body", [{}, {"status": ""}])
    def test_missing_status_is_bad_request(self, client: TestClient, body) -> None:
        """Test the status must be supplied."""
        response = client.put("/api/orders/1/status", json=body)

        assert response.status_code == 400


@pytest.mark.api
class TestReadOrderEndpoints:
    """Test suite for GET /api/orders and GET /api/orders/{id}."""

    def test_get_order(self, client: TestClient, tables, order_payload) -> None:
        """Test an order reads back with decoded items."""
        order_id = client.post("/api/orders", json=order_payload).json()["orderId"]

        response = client.get(f"/api/orders/{order_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == order_id
        assert data["status"] == "waiting"
        assert data["items"] == [{"name": "Pizza", "quantity": 2, "unit_price": 10.0}]

    def test_get_missing_order(self, client: TestClient) -> None:
        """Test an unknown order is a 404."""
        assert client.get("/api/orders/12345").status_code == 404

    def test_list_orders_filters(self, client: TestClient, tables, order_payload) -> None:
        """Test listing by table and by status."""
        first = client.post("/api/orders", json=order_payload).json()["orderId"]
        order_payload["tableNumber"] = "5"
        client.post("/api/orders", json=order_payload)
        client.put(f"/api/orders/{first}/status", json={"status": "served"})

        everything = client.get("/api/orders").json()
        by_table = client.get("/api/orders", params={"tableNumber": "5"}).json()
        served = client.get("/api/orders", params={"status": "served"}).json()

        assert everything["total"] == 2
        assert by_table["total"] == 1
        assert by_table["orders"][0]["table_number"] == "5"
        assert [o["id"] for o in served["orders"]] == [first]
