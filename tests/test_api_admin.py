"""Tests for the admin dashboard, audit logs and user management."""

import pytest
from sqlalchemy import create_engine, delete, event, select

from models.cart import Cart
from models.order import Order
from models.users import User
from services import cart as cart_service
from services import checkout
from services import orders as order_service


@pytest.fixture
def paid_and_unpaid(db, make_user, make_product, shipping_address):
    buyer = make_user()
    cheap = make_product(title="Carrots", price=100.0, stock=20)
    cart_service.add_item(db, buyer.id, cheap.id, 2)
    paid = checkout.place_order(db, buyer.id, shipping_address)
    order_service.mark_paid(db, paid.id, buyer)

    cart_service.add_item(db, buyer.id, cheap.id, 1)
    unpaid = checkout.place_order(db, buyer.id, shipping_address)
    return paid, unpaid


class TestDashboard:
    def test_counts_revenue_and_alerts(self, client, admin, auth_headers, make_product, paid_and_unpaid):
        make_product(title="Saffron 1g", price=300.0, stock=2)
        paid, unpaid = paid_and_unpaid

        response = client.get("/api/admin/dashboard", headers=auth_headers(admin))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["counts"] == {"users": 2, "products": 2, "orders": 2, "categories": 1}
        assert data["revenue"]["total"] == paid.total == 250.0
        assert sum(m["revenue"] for m in data["revenue"]["monthlySales"]) == 250.0
        assert [o["id"] for o in data["recentOrders"]] == [unpaid.id, paid.id]
        assert [p["title"] for p in data["lowStockProducts"]] == ["Saffron 1g"]

    def test_shopper_is_forbidden(self, client, user, auth_headers):
        response = client.get("/api/admin/dashboard", headers=auth_headers(user))

        assert response.status_code == 403
        assert response.json()["success"] is False


class TestLogs:
    def test_actions_are_recorded(self, client, admin, auth_headers):
        client.post("/api/auth/register", json={"name": "Asha", "email": "asha@example.com", "password": "secret123"})
        client.post("/api/auth/login", json={"email": "asha@example.com", "password": "wrong-pass"})

        body = client.get("/api/logs", headers=auth_headers(admin)).json()

        assert [(e["action"], e["status"]) for e in body["data"]] == [("LOGIN", "FAIL"), ("REGISTER", "SUCCESS")]
        assert body["pagination"]["total"] == 2

    def test_filters(self, client, admin, auth_headers, user, make_product):
        headers = auth_headers(user)
        product = make_product()
        client.post("/api/cart/items", json={"productId": product.id}, headers=headers)
        client.delete("/api/cart/clear", headers=headers)

        body = client.get(
            "/api/logs", params={"resource": "cart", "action": "CLEAR", "userId": user.id},
            headers=auth_headers(admin),
        ).json()

        assert [e["action"] for e in body["data"]] == ["CART_CLEAR"]
        assert body["data"][0]["userId"] == user.id

    def test_bad_date_filter(self, client, admin, auth_headers):
        response = client.get("/api/logs", params={"dateFrom": "yesterday"}, headers=auth_headers(admin))

        assert response.status_code == 400


class TestUserAdmin:
    def test_list_and_promote(self, client, admin, user, auth_headers):
        headers = auth_headers(admin)

        emails = {u["email"] for u in client.get("/api/users", headers=headers).json()["data"]}
        assert emails == {admin.email, user.email}

        response = client.put(f"/api/users/{user.id}", json={"role": "admin"}, headers=headers)
        assert response.json()["data"]["role"] == "admin"

    def test_unknown_role_is_rejected(self, client, admin, user, auth_headers):
        response = client.put(f"/api/users/{user.id}", json={"role": "superuser"}, headers=auth_headers(admin))

        assert response.status_code == 400

    def test_delete_user_removes_cart(self, client, db, admin, user, auth_headers, make_product):
        user_id = user.id
        cart_service.add_item(db, user_id, make_product().id, 1)

        response = client.delete(f"/api/users/{user_id}", headers=auth_headers(admin))

        assert response.status_code == 200
        db.expire_all()
        assert db.query(Cart).filter(Cart.user_id == user_id).count() == 0
        assert client.get(f"/api/users/{user_id}", headers=auth_headers(admin)).status_code == 404

    def test_delete_user_keeps_their_orders(self, client, db, admin, user, auth_headers, make_product,
                                            shipping_address):
        user_id = user.id
        cart_service.add_item(db, user_id, make_product().id, 2)
        order_id = checkout.place_order(db, user_id, shipping_address).id

        response = client.delete(f"/api/users/{user_id}", headers=auth_headers(admin))

        assert response.status_code == 200
        order = client.get(f"/api/orders/{order_id}", headers=auth_headers(admin)).json()["data"]
        assert order["userId"] is None
        assert order["user"] is None
        assert order["total"] == 250.0
        assert [o["id"] for o in client.get("/api/orders", headers=auth_headers(admin)).json()["data"]] == [order_id]

    def test_owner_link_is_cleared_by_the_database(self, db, user, make_product, shipping_address):
        # Same file, fresh connections with foreign keys enforced
        engine = create_engine(str(db.get_bind().url))
        event.listen(engine, "connect", lambda conn, _: conn.execute("PRAGMA foreign_keys=ON"))
        user_id = user.id
        cart_service.add_item(db, user_id, make_product().id, 1)
        order_id = checkout.place_order(db, user_id, shipping_address).id
        db.close()

        try:
            with engine.begin() as conn:
                conn.execute(delete(User).where(User.id == user_id))
            with engine.connect() as conn:
                owner = conn.execute(select(Order.user_id).where(Order.id == order_id)).scalar_one()
        finally:
            engine.dispose()

        assert owner is None

    def test_admin_cannot_delete_self(self, client, admin, auth_headers):
        response = client.delete(f"/api/users/{admin.id}", headers=auth_headers(admin))

        assert response.status_code == 400
