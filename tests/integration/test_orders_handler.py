"""
Integration tests for the orders Lambda handler.
"""

import pytest

from cloudmart.handlers import orders_handler


@pytest.fixture
def place_order(api_event, invoke, customer, make_product, token_for):
    """Place an order for the ``customer`` fixture through the API."""

    def _place(quantity: int = 1, product=None):
        product = product or make_product(stock=10)
        body = {
            "items": [{"product_id": product.id, "quantity": quantity}],
            "shipping_address": "1 Main St",
            "payment_method": "CREDIT_CARD",
        }
        status, response = invoke(orders_handler, api_event("POST", "/api/orders", body, token=token_for(customer)))
        assert status == 201
        return response["data"]

    return _place


def test_create_order(aws, place_order):
    order = place_order(quantity=2)

    assert order["status"] == "PENDING"
    assert order["order_number"].startswith("ORD-")
    assert order["total"] == pytest.approx(119.80)
    assert order["items"][0]["quantity"] == 2
    assert [m["orderId"] for m in aws.order_messages()] == [order["id"]]


def test_create_order_without_items(aws, api_event, invoke, customer, token_for):
    status, body = invoke(orders_handler, api_event(
        "POST", "/api/orders", {"items": [], "shipping_address": "1 Main St"}, token=token_for(customer)
    ))

    assert status == 400
    assert body["message"] == "Order must contain at least one item"


def test_create_order_without_address(aws, api_event, invoke, customer, make_product, token_for):
    body = {"items": [{"product_id": make_product().id, "quantity": 1}]}
    status, response = invoke(orders_handler, api_event("POST", "/api/orders", body, token=token_for(customer)))

    assert status == 400
    assert any(detail.startswith("shipping_address") for detail in response["details"])


def test_my_orders(aws, api_event, invoke, customer, token_for, place_order):
    first = place_order()
    second = place_order()

    status, body = invoke(orders_handler, api_event("GET", "/api/orders/my-orders", token=token_for(customer)))

    assert status == 200
    assert [o["id"] for o in body["data"]["content"]] == [second["id"], first["id"]]


def test_get_order_and_by_number(aws, api_event, invoke, customer, token_for, place_order):
    order = place_order()
    token = token_for(customer)

    status, body = invoke(orders_handler, api_event("GET", f"/api/orders/{order['id']}", token=token))
    assert status == 200
    assert body["data"]["order_number"] == order["order_number"]

    status, body = invoke(orders_handler, api_event("GET", f"/api/orders/number/{order['order_number']}", token=token))
    assert status == 200
    assert body["data"]["id"] == order["id"]


def test_other_customer_cannot_view_order(aws, api_event, invoke, make_user, token_for, place_order):
    order = place_order()

    status, body = invoke(orders_handler, api_event("GET", f"/api/orders/{order['id']}", token=token_for(make_user())))

    assert status == 403
    assert body["message"] == "You are not authorized to view this order"


def test_admin_lists_and_filters_orders(aws, api_event, invoke, admin, customer, token_for, place_order):
    place_order()
    place_order()
    token = token_for(admin)

    status, body = invoke(orders_handler, api_event("GET", "/api/orders", token=token))
    assert status == 200
    assert body["data"]["total_elements"] == 2

    status, body = invoke(orders_handler, api_event("GET", "/api/orders/status/pending", token=token))
    assert status == 200
    assert body["data"]["total_elements"] == 2

    status, body = invoke(orders_handler, api_event("GET", "/api/orders", token=token_for(customer)))
    assert status == 403


def test_orders_by_unknown_status(aws, api_event, invoke, admin, token_for):
    status, body = invoke(orders_handler, api_event("GET", "/api/orders/status/LOST", token=token_for(admin)))

    assert status == 400
    assert body["message"].startswith("Invalid order status: LOST")


def test_admin_updates_status(aws, api_event, invoke, admin, token_for, place_order):
    order = place_order()

    status, body = invoke(orders_handler, api_event(
        "PATCH", f"/api/orders/{order['id']}/status", token=token_for(admin), query={"status": "SHIPPED"}
    ))

    assert status == 200
    assert body["data"]["status"] == "SHIPPED"
    assert [n["Subject"] for n in aws.notifications()] == [f"Order Status Update - {order['order_number']}"]


def test_status_update_requires_status(aws, api_event, invoke, admin, token_for, place_order):
    order = place_order()

    status, body = invoke(orders_handler, api_event("PATCH", f"/api/orders/{order['id']}/status", token=token_for(admin)))

    assert status == 400
    assert body["message"] == "Missing required query parameter 'status'"


def test_cancel_order(aws, api_event, invoke, customer, make_product, token_for, place_order):
    product = make_product(stock=3)
    order = place_order(quantity=3, product=product)

    status, body = invoke(orders_handler, api_event("POST", f"/api/orders/{order['id']}/cancel", token=token_for(customer)))

    assert status == 200
    assert body["message"] == "Order cancelled successfully"
    assert body["data"]["status"] == "CANCELLED"

    status, body = invoke(orders_handler, api_event("POST", f"/api/orders/{order['id']}/cancel", token=token_for(customer)))
    assert status == 400
    assert body["message"] == "Order cannot be cancelled in current status: CANCELLED"


def test_unknown_order(aws, api_event, invoke, customer, token_for):
    status, body = invoke(orders_handler, api_event("GET", "/api/orders/missing", token=token_for(customer)))

    assert status == 404
    assert body["message"] == "Order not found with id: missing"
