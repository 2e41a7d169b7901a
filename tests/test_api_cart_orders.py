"""End-to-end tests for the cart and order endpoints."""

import pytest

from models.product import Product

ADDRESS = {"address": "12 Market Street", "city": "Pune", "postalCode": "411001", "country": "India"}


@pytest.fixture
def shopper(user, auth_headers):
    return user, auth_headers(user)


def _add(client, headers, product_id, quantity=1):
    return client.post("/api/cart/items", json={"productId": product_id, "quantity": quantity}, headers=headers)


def _checkout(client, headers, **extra):
    return client.post("/api/orders", json={"shippingAddress": ADDRESS, **extra}, headers=headers)


class TestCartEndpoints:
    def test_empty_cart_is_created_on_read(self, client, shopper):
        _, headers = shopper

        body = client.get("/api/cart", headers=headers).json()

        assert body["success"] is True
        assert body["data"]["items"] == []
        assert body["data"]["itemsCount"] == 0
        assert body["data"]["subtotal"] == 0

    def test_add_update_remove_flow(self, client, shopper, make_product):
        _, headers = shopper
        tomatoes = make_product(title="Tomatoes", price=40.0, stock=6)
        onions = make_product(title="Onions", price=30.0, stock=6)

        _add(client, headers, tomatoes.id, 2)
        response = client.post("/api/cart/items", json={"product": onions.id, "qty": 1}, headers=headers)
        assert response.json()["data"]["itemsCount"] == 3
        assert response.json()["data"]["subtotal"] == 110.0

        response = client.put(f"/api/cart/items/{tomatoes.id}", json={"quantity": 50}, headers=headers)
        line = [i for i in response.json()["data"]["items"] if i["productId"] == tomatoes.id][0]
        assert line["quantity"] == 6
        assert line["product"]["title"] == "Tomatoes"

        response = client.delete(f"/api/cart/items/{onions.id}", headers=headers)
        assert [i["productId"] for i in response.json()["data"]["items"]] == [tomatoes.id]

        response = client.delete("/api/cart/clear", headers=headers)
        assert response.json()["data"]["items"] == []

    def test_out_of_stock_product(self, client, shopper, make_product):
        _, headers = shopper
        product = make_product(title="Mangoes", stock=0)

        response = _add(client, headers, product.id)

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Mangoes is out of stock."}

    def test_unknown_product(self, client, shopper):
        _, headers = shopper

        assert _add(client, headers, 9999).status_code == 404

    def test_update_item_not_in_cart(self, client, shopper, make_product):
        _, headers = shopper
        product = make_product()

        response = client.put(f"/api/cart/items/{product.id}", json={"quantity": 2}, headers=headers)

        assert response.status_code == 404

    def test_cart_requires_token(self, client):
        assert client.get("/api/cart").status_code == 401

    def test_each_user_sees_own_cart(self, client, make_user, auth_headers, make_product):
        product = make_product()
        first, second = make_user(), make_user()
        _add(client, auth_headers(first), product.id, 2)

        body = client.get("/api/cart", headers=auth_headers(second)).json()

        assert body["data"]["items"] == []


class TestPlaceOrderEndpoint:
    def test_checkout_creates_order_and_empties_cart(self, client, db, shopper, make_product):
        user, headers = shopper
        product = make_product(title="Basmati Rice", price=100.0, stock=5)
        _add(client, headers, product.id, 2)

        response = _checkout(client, headers, paymentMethod="cod")

        assert response.status_code == 201
        order = response.json()["data"]
        assert order["status"] == "pending"
        assert order["total"] == 250.0
        assert order["totalPrice"] == 250.0
        assert order["userId"] == user.id
        assert order["shippingAddress"]["postalCode"] == "411001"
        assert order["paymentInfo"]["status"] == "PENDING"
        assert order["isPaid"] is False
        assert order["orderItems"] == order["items"]
        line = order["items"][0]
        assert (line["title"], line["name"], line["quantity"], line["qty"]) == ("Basmati Rice", "Basmati Rice", 2, 2)

        assert client.get("/api/cart", headers=headers).json()["data"]["items"] == []
        db.expire_all()
        assert db.get(Product, product.id).stock == 3

    def test_empty_cart(self, client, shopper):
        _, headers = shopper

        response = _checkout(client, headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Cart is empty. Add items before placing order."

    def test_incomplete_address(self, client, shopper, make_product):
        _, headers = shopper
        _add(client, headers, make_product().id)

        response = client.post(
            "/api/orders", json={"shippingAddress": {"address": "12 Market Street"}}, headers=headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Complete shipping address is required."

    def test_stock_sold_out_since_adding(self, client, db, shopper, make_product):
        _, headers = shopper
        product = make_product(title="Farm Eggs", stock=4)
        _add(client, headers, product.id, 3)
        product.stock = 2
        db.commit()

        response = _checkout(client, headers)

        assert response.status_code == 400
        assert "Farm Eggs" in response.json()["message"]
        assert client.get("/api/orders/my-orders", headers=headers).json()["data"] == []
        assert len(client.get("/api/cart", headers=headers).json()["data"]["items"]) == 1


class TestOrderEndpoints:
    @pytest.fixture
    def order_id(self, client, shopper, make_product):
        _, headers = shopper
        _add(client, headers, make_product(stock=10).id, 1)
        return _checkout(client, headers).json()["data"]["id"]

    def test_my_orders_newest_first(self, client, shopper, make_product, order_id):
        _, headers = shopper
        _add(client, headers, make_product(title="Grapes", stock=3).id, 1)
        newer = _checkout(client, headers).json()["data"]["id"]

        ids = [o["id"] for o in client.get("/api/orders/my-orders", headers=headers).json()["data"]]

        assert ids == [newer, order_id]

    def test_owner_reads_order(self, client, shopper, order_id):
        _, headers = shopper

        response = client.get(f"/api/orders/{order_id}", headers=headers)

        assert response.status_code == 200
        assert response.json()["data"]["user"]["id"] == shopper[0].id

    def test_stranger_is_forbidden(self, client, make_user, auth_headers, order_id):
        response = client.get(f"/api/orders/{order_id}", headers=auth_headers(make_user()))

        assert response.status_code == 403

    def test_missing_order(self, client, shopper):
        assert client.get("/api/orders/999", headers=shopper[1]).status_code == 404

    def test_pay_without_body(self, client, shopper, order_id):
        _, headers = shopper

        response = client.put(f"/api/orders/{order_id}/pay", headers=headers)

        assert response.status_code == 200
        order = response.json()["data"]
        assert order["status"] == "processing"
        assert order["isPaid"] is True
        assert order["paidAt"] is not None
        assert order["paymentResult"]["transactionId"] == f"mock_{order_id}"

    def test_pay_with_gateway_reference(self, client, shopper, order_id):
        _, headers = shopper

        response = client.put(f"/api/orders/{order_id}/pay", json={"id": "pay_42"}, headers=headers)

        assert response.json()["data"]["paymentInfo"]["transactionId"] == "pay_42"

    def test_admin_lists_and_updates_status(self, client, admin, auth_headers, order_id):
        headers = auth_headers(admin)

        listing = client.get("/api/orders", headers=headers).json()["data"]
        assert [o["id"] for o in listing] == [order_id]

        response = client.put(f"/api/orders/{order_id}/status", json={"status": "delivered"}, headers=headers)
        assert response.json()["data"]["status"] == "delivered"

        response = client.put(f"/api/orders/{order_id}/status", json={"status": "pending"}, headers=headers)
        assert response.json()["data"]["status"] == "pending"

    def test_invalid_status_value(self, client, admin, auth_headers, order_id):
        response = client.put(f"/api/orders/{order_id}/status", json={"status": "lost"}, headers=auth_headers(admin))

        assert response.status_code == 400

    def test_shopper_cannot_list_or_update_all_orders(self, client, shopper, order_id):
        _, headers = shopper

        assert client.get("/api/orders", headers=headers).status_code == 403
        response = client.put(f"/api/orders/{order_id}/status", json={"status": "shipped"}, headers=headers)
        assert response.status_code == 403
