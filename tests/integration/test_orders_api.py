"""
Integration tests for the order endpoints.
"""

import uuid

import pytest

ADDRESS = {"address": "1 Main St", "city": "Springfield", "postalCode": "12345", "country": "US"}


@pytest.fixture
def place_order(client, auth_headers):
    def _place(user, *lines):
        body = {
            "orderItems": [{"productId": str(p.id), "quantity": qty} for p, qty in lines],
            "shippingAddress": ADDRESS,
            "paymentMethod": "PayPal",
        }
        return client.post("/api/v1/orders", json=body, headers=auth_headers(user))

    return _place


class TestCreateOrder:

    def test_prices_computed_from_catalog(self, place_order, customer, make_product):
        lamp = make_product(name="Lamp", price=40.0)

        response = place_order(customer, (lamp, 2))

        assert response.status_code == 201
        data = response.json()
        assert data["userId"] == str(customer.id)
        assert data["itemsPrice"] == pytest.approx(80.0)
        assert data["shippingPrice"] == pytest.approx(10.0)
        assert data["taxPrice"] == pytest.approx(12.0)
        assert data["totalPrice"] == pytest.approx(102.0)
        assert data["isPaid"] is False
        assert data["isDelivered"] is False
        assert data["shippingAddress"] == ADDRESS
        assert data["orderItems"] == [
            {"productId": str(lamp.id), "name": "Lamp", "quantity": 2, "price": 40.0, "image": lamp.image}
        ]

    def test_free_shipping_above_threshold(self, place_order, customer, make_product):
        chair = make_product(price=60.0)
        desk = make_product(price=5.0)

        data = place_order(customer, (chair, 2), (desk, 1)).json()

        assert data["itemsPrice"] == pytest.approx(125.0)
        assert data["shippingPrice"] == 0
        assert data["taxPrice"] == pytest.approx(18.75)
        assert data["totalPrice"] == pytest.approx(143.75)
        assert len(data["orderItems"]) == 2

    def test_lines_keep_checkout_price(self, client, db, place_order, customer, auth_headers, make_product):
        lamp = make_product(name="Lamp", price=40.0)
        order_id = place_order(customer, (lamp, 1)).json()["id"]

        lamp.price = 55.0
        lamp.name = "Lamp v2"
        db.commit()

        data = client.get(f"/api/v1/orders/{order_id}", headers=auth_headers(customer)).json()
        assert data["orderItems"][0]["price"] == pytest.approx(40.0)
        assert data["orderItems"][0]["name"] == "Lamp"

    def test_empty_cart_rejected(self, place_order, customer):
        response = place_order(customer)

        assert response.status_code == 400
        assert response.json()["error"]["type"] == "ValidationFailed"

    def test_unknown_product(self, client, customer, auth_headers):
        body = {
            "orderItems": [{"productId": str(uuid.uuid4()), "quantity": 1}],
            "shippingAddress": ADDRESS,
            "paymentMethod": "PayPal",
        }
        response = client.post("/api/v1/orders", json=body, headers=auth_headers(customer))
        assert response.status_code == 404

    def test_requires_authentication(self, client):
        response = client.post("/api/v1/orders", json={})
        assert response.status_code == 401


class TestReadOrders:

    def test_my_orders_only_lists_own(self, client, place_order, make_user, customer, auth_headers, make_product):
        product = make_product()
        other = make_user(name="Other Person")
        place_order(customer, (product, 1))
        place_order(customer, (product, 3))
        place_order(other, (product, 1))

        response = client.get("/api/v1/orders/my-orders", headers=auth_headers(customer))

        assert response.status_code == 200
        orders = response.json()
        assert len(orders) == 2
        assert {o["userId"] for o in orders} == {str(customer.id)}

    def test_admin_lists_all(self, client, place_order, admin_user, customer, auth_headers, make_product):
        product = make_product()
        place_order(customer, (product, 1))
        place_order(admin_user, (product, 1))

        response = client.get("/api/v1/orders", headers=auth_headers(admin_user))

        assert response.status_code == 200
        assert len(response.json()) == 2

    def test_customer_cannot_list_all(self, client, customer, auth_headers):
        response = client.get("/api/v1/orders", headers=auth_headers(customer))

        assert response.status_code == 401
        assert response.json()["error"]["type"] == "NotAdmin"

    def test_owner_and_admin_can_view(self, client, place_order, admin_user, customer, auth_headers, make_product):
        order_id = place_order(customer, (make_product(), 1)).json()["id"]

        assert client.get(f"/api/v1/orders/{order_id}", headers=auth_headers(customer)).status_code == 200
        assert client.get(f"/api/v1/orders/{order_id}", headers=auth_headers(admin_user)).status_code == 200

    def test_other_customer_sees_not_found(self, client, place_order, make_user, customer, auth_headers, make_product):
        order_id = place_order(customer, (make_product(), 1)).json()["id"]
        stranger = make_user(name="Stranger")

        response = client.get(f"/api/v1/orders/{order_id}", headers=auth_headers(stranger))

        assert response.status_code == 404

    def test_malformed_id(self, client, customer, auth_headers):
        response = client.get("/api/v1/orders/42", headers=auth_headers(customer))
        assert response.status_code == 400


class TestOrderStatus:

    def test_owner_pays(self, client, place_order, customer, auth_headers, make_product):
        order_id = place_order(customer, (make_product(), 1)).json()["id"]
        payment = {"id": "PAY-1", "status": "COMPLETED", "updateTime": "2024-01-01T00:00:00Z",
                   "emailAddress": "jane@example.com"}

        response = client.put(
            f"/api/v1/orders/{order_id}/pay", json=payment, headers=auth_headers(customer)
        )

        assert response.status_code == 200
        data = response.json()
        assert data["isPaid"] is True
        assert data["paidAt"] is not None
        assert data["paymentResult"] == payment

    def test_stranger_cannot_pay(self, client, place_order, make_user, customer, auth_headers, make_product):
        order_id = place_order(customer, (make_product(), 1)).json()["id"]
        stranger = make_user(name="Stranger")

        response = client.put(f"/api/v1/orders/{order_id}/pay", headers=auth_headers(stranger))

        assert response.status_code == 404

    def test_admin_delivers(self, client, place_order, admin_user, customer, auth_headers, make_product):
        order_id = place_order(customer, (make_product(), 1)).json()["id"]

        denied = client.put(f"/api/v1/orders/{order_id}/deliver", headers=auth_headers(customer))
        assert denied.status_code == 401

        response = client.put(f"/api/v1/orders/{order_id}/deliver", headers=auth_headers(admin_user))
        assert response.status_code == 200
        assert response.json()["isDelivered"] is True
        assert response.json()["deliveredAt"] is not None

    def test_admin_deletes(self, client, place_order, admin_user, customer, auth_headers, make_product):
        order_id = place_order(customer, (make_product(), 1)).json()["id"]

        response = client.delete(f"/api/v1/orders/{order_id}", headers=auth_headers(admin_user))

        assert response.status_code == 200
        assert response.json() == {"message": "Order deleted successfully"}
        assert client.get(f"/api/v1/orders/{order_id}", headers=auth_headers(admin_user)).status_code == 404

    def test_delete_unknown_order(self, client, admin_user, auth_headers):
        response = client.delete(f"/api/v1/orders/{uuid.uuid4()}", headers=auth_headers(admin_user))
        assert response.status_code == 404
