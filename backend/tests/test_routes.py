"""
HTTP tests against the SQL storage backend.

Each test starts from an empty storage_entries table; tests that need the
default records seed them through the CLI.
"""

import pytest


@pytest.fixture
def seeded_client(app, client):
    result = app.test_cli_runner().invoke(args=["storage", "init"])
    assert result.exit_code == 0, result.output
    return client


class TestHealth:
    def test_health_reports_collections(self, seeded_client):
        resp = seeded_client.get("/health")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["status"] == "healthy"
        storage = body["checks"]["storage"]["details"]
        assert storage["backend"] == "sql"
        assert storage["collections"]["products"] is True
        assert storage["rows"] == 6

    def test_cors_allow_list(self, client):
        allowed = client.get("/health", headers={"Origin": "http://localhost:5173"})
        assert allowed.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"

        denied = client.get("/health", headers={"Origin": "http://evil.example"})
        assert "Access-Control-Allow-Origin" not in denied.headers


class TestProductRoutes:
    def test_create_and_fetch(self, client):
        resp = client.post("/api/products", json={"title": "Widget", "price": 100, "discount": 10, "category": "Tools"})
        assert resp.status_code == 201
        created = resp.get_json()
        assert created["salesPrice"] == 90

        fetched = client.get(f"/api/products/{created['id']}")
        assert fetched.status_code == 200
        assert fetched.get_json()["title"] == "Widget"

    def test_create_validation(self, client):
        assert client.post("/api/products", json={"price": 10}).status_code == 400
        assert client.post("/api/products", json={"title": "X", "price": 10, "category": "A", "hack": 1}).status_code == 400
        resp = client.post("/api/products", json={"title": "X", "price": 10, "category": "A", "discount": 150})
        assert resp.status_code == 400
        assert "discount" in resp.get_json()["error"]

    def test_list_filters(self, seeded_client):
        resp = seeded_client.get("/api/products?category=Electronics&sortBy=price-high")
        body = resp.get_json()
        assert body["count"] == 4
        assert body["items"][0]["id"] == "PROD-003"

        colors = seeded_client.get("/api/products?colors=%23FFD700,%23FF69B4").get_json()
        assert sorted(p["id"] for p in colors["items"]) == ["PROD-001", "PROD-005", "PROD-009", "PROD-010"]

    def test_soft_delete_restore_permanent(self, seeded_client):
        assert seeded_client.delete("/api/products/PROD-001").status_code == 200
        active = seeded_client.get("/api/products").get_json()
        assert "PROD-001" not in [p["id"] for p in active["items"]]
        deleted = seeded_client.get("/api/products?view=deleted").get_json()
        assert [p["id"] for p in deleted["items"]] == ["PROD-001"]

        restored = seeded_client.post("/api/products/PROD-001/restore")
        assert restored.get_json()["isDeleted"] is False

        resp = seeded_client.delete("/api/products/PROD-001/permanent")
        assert resp.get_json() == {"deleted": True, "id": "PROD-001"}
        assert seeded_client.get("/api/products/PROD-001").status_code == 404

    def test_missing_product(self, client):
        assert client.put("/api/products/PROD-NOPE", json={"price": 5}).status_code == 404
        assert client.delete("/api/products/PROD-NOPE").status_code == 404

    def test_stats_and_facets(self, seeded_client):
        stats = seeded_client.get("/api/products/stats").get_json()
        assert stats["totalProducts"] == 10
        facets = seeded_client.get("/api/products/facets").get_json()
        assert facets["categories"] == ["Electronics", "Fashion"]


class TestUserRoutes:
    def test_toggle_and_stats(self, seeded_client):
        resp = seeded_client.post("/api/users/1/toggle-status")
        assert resp.get_json()["status"] == "inactive"

        stats = seeded_client.get("/api/users/stats").get_json()
        assert stats["active"] == 1
        assert stats["inactive"] == 2

    def test_create_requires_valid_email_and_role(self, client):
        base = {"firstName": "A", "lastName": "B"}
        assert client.post("/api/users", json={**base, "email": "not-an-email"}).status_code == 400
        assert client.post("/api/users", json={**base, "email": "a@b.co", "role": "root"}).status_code == 400
        assert client.post("/api/users", json={**base, "email": "a@b.co"}).status_code == 201

    def test_search_and_status_filter(self, seeded_client):
        body = seeded_client.get("/api/users?search=example.com&status=active").get_json()
        assert [u["id"] for u in body["items"]] == ["1", "2"]
        assert seeded_client.get("/api/users?status=bogus").status_code == 400

    def test_permissions(self, seeded_client):
        resp = seeded_client.put("/api/users/3/permissions", json={"permissions": ["read", "read", "write"]})
        assert resp.get_json()["permissions"] == ["read", "write"]
        assert seeded_client.put("/api/users/3/permissions", json={"permissions": "read"}).status_code == 400


class TestSellerRoutes:
    def test_duplicate_email_conflict(self, seeded_client):
        resp = seeded_client.post("/api/sellers", json={
            "firstName": "X",
            "lastName": "Y",
            "email": "Ahmed.Hassan@seller.com",
            "sellerId": "SELL900",
            "businessName": "Dup",
        })
        assert resp.status_code == 409
        assert "already exists" in resp.get_json()["error"]

    def test_permanent_delete_missing_is_404(self, seeded_client):
        assert seeded_client.delete("/api/sellers/5/permanent").status_code == 200
        assert seeded_client.delete("/api/sellers/5/permanent").status_code == 404

    def test_lookup_and_sales(self, seeded_client):
        seller = seeded_client.get("/api/sellers/lookup?email=NOUR.MAHMOUD@seller.com").get_json()
        assert seller["sellerId"] == "SELL004"

        resp = seeded_client.post(f"/api/sellers/{seller['id']}/sales", json={"amount": 1000})
        assert resp.get_json()["totalOrders"] == 201

        assert seeded_client.post("/api/sellers/4/sales", json={"amount": "lots"}).status_code == 400

    def test_status_change(self, seeded_client):
        assert seeded_client.put("/api/sellers/3/status", json={"status": "active"}).status_code == 200
        assert seeded_client.put("/api/sellers/3/status", json={"status": "deleted"}).status_code == 400


class TestWarehouseRoutes:
    def test_stock_update(self, seeded_client):
        resp = seeded_client.post("/api/warehouse/inventory/inv-1/stock", json={"quantity": 100, "operation": "subtract"})
        assert resp.status_code == 200
        assert resp.get_json()["currentStock"] == 0

        out = seeded_client.get("/api/warehouse/inventory?stockLevel=out").get_json()
        assert [i["id"] for i in out["items"]] == ["inv-1"]

    def test_purchase_delivery_flow(self, seeded_client):
        resp = seeded_client.post("/api/warehouse/purchases", json={
            "supplierId": "supplier-2",
            "items": [{"sku": "NAM270-004", "productName": "Nike Air Max 270", "quantity": 20, "unitCost": 80}],
        })
        assert resp.status_code == 201
        purchase = resp.get_json()
        assert purchase["supplierName"] == "Fashion World"
        assert purchase["total"] == 1760

        resp = seeded_client.put(
            f"/api/warehouse/purchases/{purchase['id']}/status",
            json={"status": "delivered", "deliveredDate": "2024-03-01"},
        )
        assert resp.status_code == 200

        item = seeded_client.get("/api/warehouse/inventory/inv-3").get_json()
        assert item["currentStock"] == 70

    def test_status_sent_with_field_update_receives_stock(self, client):
        resp = client.post("/api/warehouse/inventory", json={"productName": "Bolt", "sku": "B-1", "currentStock": 10})
        assert resp.status_code == 201
        item_id = resp.get_json()["id"]

        purchase = client.post("/api/warehouse/purchases", json={
            "supplierId": "supplier-1",
            "items": [{"sku": "B-1", "productName": "Bolt", "quantity": 5, "unitCost": 2}],
        }).get_json()

        resp = client.put(f"/api/warehouse/purchases/{purchase['id']}", json={"status": "delivered"})
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "delivered"

        resp = client.put(f"/api/warehouse/purchases/{purchase['id']}/status", json={"status": "delivered"})
        assert resp.status_code == 200

        assert client.get(f"/api/warehouse/inventory/{item_id}").get_json()["currentStock"] == 15

    def test_purchase_validation(self, seeded_client):
        assert seeded_client.post("/api/warehouse/purchases", json={"supplierId": "supplier-1", "items": []}).status_code == 400
        bad_line = {"supplierId": "supplier-1", "items": [{"sku": "X", "quantity": -1, "unitCost": 1}]}
        assert seeded_client.post("/api/warehouse/purchases", json=bad_line).status_code == 400
        assert seeded_client.put("/api/warehouse/purchases/purchase-1/status", json={"status": "lost"}).status_code == 400

    def test_supplier_conflict_and_stats(self, seeded_client):
        assert seeded_client.post("/api/warehouse/suppliers", json={"name": "FASHION WORLD"}).status_code == 409

        stats = seeded_client.get("/api/warehouse/stats").get_json()
        assert stats["totalItems"] == 3
        assert stats["pendingPurchases"] == 1


class TestStorageCli:
    def test_init_is_idempotent(self, app, db_session):
        runner = app.test_cli_runner()
        first = runner.invoke(args=["storage", "init"])
        assert "PASS products" in first.output

        second = runner.invoke(args=["storage", "init"])
        assert "SKIP products" in second.output

    def test_reset_domain(self, app, seeded_client):
        seeded_client.delete("/api/warehouse/purchases/purchase-1")
        runner = app.test_cli_runner()

        result = runner.invoke(args=["storage", "reset", "purchases", "--yes"])
        assert result.exit_code == 0
        assert "2 seed records" in result.output

        body = seeded_client.get("/api/warehouse/purchases").get_json()
        assert body["count"] == 2

    def test_list(self, app, seeded_client):
        result = app.test_cli_runner().invoke(args=["storage", "list"])
        assert "Kontainar-products" in result.output
        assert "10 records" in result.output
