"""Integration tests for account, category, product and review endpoints."""

from protean import current_domain
from storefront.catalogue.product import Product


class TestAccountEndpoints:
    def test_register(self, client):
        response = client.post("/api/accounts", json={"name": "Sam", "email": "Sam@Example.com"})
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["email"] == "sam@example.com"

    def test_me_requires_identity(self, client):
        response = client.get("/api/accounts/me")
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_unknown_identity(self, client):
        response = client.get("/api/accounts/me", headers={"X-Account-Id": "missing"})
        assert response.status_code == 401

    def test_me(self, client, customer, as_customer):
        response = client.get("/api/accounts/me", headers=as_customer)
        assert response.status_code == 200
        assert response.json()["data"]["id"] == str(customer.id)

    def test_delete_me(self, client, as_customer):
        assert client.delete("/api/accounts/me", headers=as_customer).status_code == 200
        assert client.get("/api/accounts/me", headers=as_customer).status_code == 401


class TestCategoryEndpoints:
    def test_admin_creates_category(self, client, as_admin):
        response = client.post("/api/categories", json={"name": "Kitchen"}, headers=as_admin)
        assert response.status_code == 201
        assert response.json()["data"]["slug"] == "kitchen"

        listing = client.get("/api/categories").json()
        assert [c["name"] for c in listing["data"]] == ["Kitchen"]

    def test_customers_are_forbidden(self, client, as_customer):
        response = client.post("/api/categories", json={"name": "Kitchen"}, headers=as_customer)
        assert response.status_code == 403
        assert response.json()["error"] == "Access denied. Admin privileges required."

    def test_delete_with_products_conflicts(self, client, as_admin, category, make_product):
        make_product()
        response = client.delete(f"/api/categories/{category.id}", headers=as_admin)
        assert response.status_code == 400
        assert response.json()["success"] is False


class TestProductEndpoints:
    def test_create_product(self, client, as_admin, category):
        payload = {
            "name": "Steel Bottle",
            "description": "Keeps drinks cold",
            "category_id": str(category.id),
            "price": 25.0,
            "sku": "sb-01",
            "stock_quantity": 12,
            "images": [{"url": "/bottle.jpg", "is_primary": True}],
        }
        response = client.post("/api/products", json=payload, headers=as_admin)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["sku"] == "SB-01"
        assert data["slug"] == "steel-bottle"
        assert data["inventory"]["quantity"] == 12
        assert data["primary_image"] == "/bottle.jpg"

    def test_invalid_payload(self, client, as_admin, category):
        response = client.post(
            "/api/products",
            json={"name": "", "category_id": str(category.id), "price": -1},
            headers=as_admin,
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    def test_list_with_pagination(self, client, make_product):
        for _ in range(3):
            make_product()
        body = client.get("/api/products", params={"limit": 2}).json()

        assert len(body["data"]) == 2
        assert body["pagination"] == {
            "page": 1,
            "limit": 2,
            "total": 3,
            "pages": 2,
            "has_next": True,
            "has_prev": False,
        }

    def test_featured(self, client, make_product):
        make_product(is_featured=True)
        make_product()
        assert len(client.get("/api/products/featured").json()["data"]) == 1

    def test_get_by_id_and_slug(self, client, make_product):
        product = make_product(name="Cast Iron Pan")
        assert client.get(f"/api/products/{product.id}").json()["data"]["name"] == "Cast Iron Pan"
        assert client.get("/api/products/cast-iron-pan").json()["data"]["id"] == str(product.id)

    def test_inactive_product_is_hidden_from_public(self, client, as_admin, make_product):
        product = make_product()
        client.put(f"/api/products/{product.id}", json={"is_active": False}, headers=as_admin)

        assert client.get(f"/api/products/{product.id}").status_code == 404
        assert client.get(f"/api/products/{product.id}", headers=as_admin).status_code == 200

    def test_update_product_and_images(self, client, as_admin, make_product):
        product = make_product(price=10.0)
        response = client.put(
            f"/api/products/{product.id}",
            json={"price": 9.5, "images": [{"url": "/new.jpg"}]},
            headers=as_admin,
        )
        data = response.json()["data"]
        assert data["price"] == 9.5
        assert data["primary_image"] == "/new.jpg"

    def test_adjust_stock(self, client, as_admin, make_product):
        product = make_product(stock=2)
        response = client.put(f"/api/products/{product.id}/stock", json={"delta": 5}, headers=as_admin)
        assert response.json()["data"]["quantity"] == 7

        response = client.put(f"/api/products/{product.id}/stock", json={"delta": -10}, headers=as_admin)
        assert response.status_code == 400
        assert response.json()["details"] == {"available": 7, "requested": 10}

    def test_delete_product(self, client, as_admin, make_product):
        product = make_product()
        assert client.delete(f"/api/products/{product.id}", headers=as_admin).status_code == 200
        assert current_domain.repository_for(Product)._dao.query.all().total == 0


class TestReviewEndpoints:
    def test_submit_and_list(self, client, as_customer, make_product):
        product = make_product()
        response = client.post(
            f"/api/products/{product.id}/reviews",
            json={"title": "Solid", "text": "Does the job", "rating": 4},
            headers=as_customer,
        )
        assert response.status_code == 201

        listing = client.get(f"/api/products/{product.id}/reviews").json()
        assert [r["title"] for r in listing["data"]] == ["Solid"]
        assert client.get(f"/api/products/{product.id}").json()["data"]["average_rating"] == 4.0

    def test_rating_out_of_range(self, client, as_customer, make_product):
        product = make_product()
        response = client.post(
            f"/api/products/{product.id}/reviews",
            json={"title": "Bad", "text": "Bad", "rating": 9},
            headers=as_customer,
        )
        assert response.status_code == 400

    def test_author_edits_and_deletes(self, client, as_customer, make_product):
        product = make_product()
        review_id = client.post(
            f"/api/products/{product.id}/reviews",
            json={"title": "Solid", "text": "Does the job", "rating": 4},
            headers=as_customer,
        ).json()["data"]["id"]

        edited = client.put(f"/api/products/{product.id}/reviews/{review_id}", json={"rating": 2}, headers=as_customer)
        assert edited.json()["data"]["rating"] == 2

        assert client.delete(f"/api/products/{product.id}/reviews/{review_id}", headers=as_customer).status_code == 200
        assert client.get(f"/api/products/{product.id}/reviews").json()["data"] == []
