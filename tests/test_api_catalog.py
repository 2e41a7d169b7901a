"""Tests for product and category endpoints."""

import pytest

from models.category import Category


@pytest.fixture
def dairy(db):
    category = Category(name="Dairy Eggs", description="Milk, curd and eggs")
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@pytest.fixture
def catalog(make_product, dairy):
    return {
        "milk": make_product(title="Full Cream Milk", price=68.0, stock=40, category_id=dairy.id),
        "eggs": make_product(title="Farm Eggs", price=90.0, stock=3, category_id=dairy.id,
                             description="A dozen brown eggs"),
        "tomato": make_product(title="Tomatoes", price=40.0, stock=25),
        "potato": make_product(title="Potatoes", price=30.0, stock=0),
    }


def _titles(response):
    return [p["title"] for p in response.json()["data"]]


class TestProductListing:
    def test_default_listing_is_newest_first_with_pagination(self, client, catalog):
        response = client.get("/api/products")

        assert response.status_code == 200
        body = response.json()
        assert _titles(response) == ["Potatoes", "Tomatoes", "Farm Eggs", "Full Cream Milk"]
        assert body["pagination"] == {"total": 4, "page": 1, "pages": 1, "limit": 12}

    def test_keyword_matches_title_and_description(self, client, catalog):
        assert _titles(client.get("/api/products", params={"keyword": "EGGS"})) == ["Farm Eggs"]
        assert _titles(client.get("/api/products", params={"keyword": "brown"})) == ["Farm Eggs"]

    @pytest.mark.parametrize("slug", ["dairy-eggs", "Dairy Eggs", "dairy_eggs"])
    def test_category_by_name_or_slug(self, client, catalog, slug):
        response = client.get("/api/products", params={"category": slug, "sort": "priceAsc"})

        assert _titles(response) == ["Full Cream Milk", "Farm Eggs"]

    def test_category_by_id(self, client, catalog, dairy):
        response = client.get("/api/products", params={"category": str(dairy.id), "sort": "titleAsc"})

        assert _titles(response) == ["Farm Eggs", "Full Cream Milk"]

    def test_unknown_category_gives_empty_page(self, client, catalog):
        body = client.get("/api/products", params={"category": "frozen-food"}).json()

        assert body["data"] == []
        assert body["pagination"]["total"] == 0

    def test_price_range_and_sort(self, client, catalog):
        response = client.get("/api/products", params={"minPrice": 35, "maxPrice": 90, "sort": "priceDesc"})

        assert _titles(response) == ["Farm Eggs", "Full Cream Milk", "Tomatoes"]

    def test_pagination(self, client, catalog):
        body = client.get("/api/products", params={"sort": "priceAsc", "page": 2, "limit": 3}).json()

        assert [p["title"] for p in body["data"]] == ["Farm Eggs"]
        assert body["pagination"] == {"total": 4, "page": 2, "pages": 2, "limit": 3}

    def test_limit_is_capped(self, client):
        assert client.get("/api/products", params={"limit": 500}).status_code == 400

    def test_product_detail_carries_legacy_aliases(self, client, catalog):
        milk = catalog["milk"]

        data = client.get(f"/api/products/{milk.id}").json()["data"]

        assert data["name"] == data["title"] == "Full Cream Milk"
        assert data["images"] == [milk.image]
        assert data["category"]["name"] == "Dairy Eggs"

    def test_missing_product(self, client):
        response = client.get("/api/products/31337")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Product not found."}


class TestProductAdmin:
    def _payload(self, category_id, **overrides):
        payload = {
            "title": "Sona Masoori Rice",
            "description": "5kg bag",
            "category": category_id,
            "price": 420.0,
            "stock": 12,
            "image": "https://img.example.com/rice.jpg",
        }
        payload.update(overrides)
        return payload

    def test_admin_creates_product(self, client, admin, auth_headers, category):
        response = client.post("/api/products", json=self._payload(category.id), headers=auth_headers(admin))

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["title"] == "Sona Masoori Rice"
        assert data["category"]["id"] == category.id

    def test_legacy_name_and_images_are_accepted(self, client, admin, auth_headers, category):
        payload = self._payload(category.id, name="Brown Rice", images=["https://img.example.com/brown.jpg"])
        del payload["title"]
        del payload["image"]

        data = client.post("/api/products", json=payload, headers=auth_headers(admin)).json()["data"]

        assert data["title"] == "Brown Rice"
        assert data["image"] == "https://img.example.com/brown.jpg"

    def test_missing_fields(self, client, admin, auth_headers, category):
        payload = self._payload(category.id)
        del payload["image"]

        response = client.post("/api/products", json=payload, headers=auth_headers(admin))

        assert response.status_code == 400
        assert response.json()["message"] == "title, description, category, price, stock, and image are required."

    def test_negative_stock_is_rejected(self, client, admin, auth_headers, category):
        response = client.post("/api/products", json=self._payload(category.id, stock=-1), headers=auth_headers(admin))

        assert response.status_code == 400

    def test_shopper_cannot_create(self, client, user, auth_headers, category):
        response = client.post("/api/products", json=self._payload(category.id), headers=auth_headers(user))

        assert response.status_code == 403

    def test_update_and_delete(self, client, admin, auth_headers, catalog):
        headers = auth_headers(admin)
        tomato = catalog["tomato"]

        response = client.put(f"/api/products/{tomato.id}", json={"price": 45.5, "stock": 30}, headers=headers)
        assert (response.json()["data"]["price"], response.json()["data"]["stock"]) == (45.5, 30)
        assert response.json()["data"]["title"] == "Tomatoes"

        assert client.delete(f"/api/products/{tomato.id}", headers=headers).json()["success"] is True
        assert client.get(f"/api/products/{tomato.id}").status_code == 404


class TestCategories:
    def test_public_listing(self, client, category, dairy):
        names = {c["name"] for c in client.get("/api/categories").json()["data"]}

        assert names == {"Vegetables", "Dairy Eggs"}

    def test_admin_creates_category(self, client, admin, auth_headers):
        response = client.post("/api/categories", json={"name": "Snacks"}, headers=auth_headers(admin))

        assert response.status_code == 201
        assert response.json()["data"]["name"] == "Snacks"

    def test_duplicate_name_conflicts(self, client, admin, auth_headers, category):
        response = client.post("/api/categories", json={"name": "vegetables"}, headers=auth_headers(admin))

        assert response.status_code == 409

    def test_linked_category_cannot_be_deleted(self, client, admin, auth_headers, catalog, dairy):
        response = client.delete(f"/api/categories/{dairy.id}", headers=auth_headers(admin))

        assert response.status_code == 400
        assert "linked to products" in response.json()["message"]

    def test_empty_category_is_deleted(self, client, admin, auth_headers, dairy):
        response = client.delete(f"/api/categories/{dairy.id}", headers=auth_headers(admin))

        assert response.status_code == 200
        assert client.get(f"/api/categories/{dairy.id}").status_code == 404


class TestEnvelope:
    def test_unknown_route(self, client):
        response = client.get("/api/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Route not found: /api/does-not-exist"}

    def test_health(self, client):
        assert client.get("/api/health").json()["success"] is True
