import pytest


# Minimal valid payload per route
MINIMAL = {
    "customers": {"name": "Acme Corp"},
    "complaints": {"title": "Late delivery"},
    "departments": {"name": "Sales"},
    "employees": {"name": "Jane Doe"},
    "teams": {"name": "Platform"},
    "products": {"name": "Sourdough", "price": 4.5},
    "financial-records": {"type": "invoice", "amount": 120.0},
    "budgets": {
        "name": "Q1 marketing",
        "amount": 5000.0,
        "start_date": "2026-01-01T00:00:00",
        "end_date": "2026-03-31T00:00:00",
    },
    "projects": {"name": "Website relaunch"},
    "meetings": {"title": "Weekly sync", "date": "2026-02-02T10:00:00"},
    "tasks": {"title": "Write copy"},
}


class TestCreateAndRead:
    """Every entity kind round-trips through create and get"""

    @pytest.mark.parametrize("route", sorted(MINIMAL))
    def test_create_then_get(self, client, auth_headers, user_a, route):
        response = client.post(f"/api/{route}", headers=auth_headers, json=MINIMAL[route])
        assert response.status_code == 201, response.text
        created = response.json()
        assert created["user_id"] == user_a["id"]
        for name, value in MINIMAL[route].items():
            assert created[name] == value
        assert "created_at" in created

        response = client.get(f"/api/{route}/{created['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == created

    def test_defaults_applied(self, client, auth_headers, make):
        """Omitted fields take their defaults"""
        customer = make("customers", auth_headers, name="Acme")
        assert customer["type"] == "customer"
        assert customer["total_sales"] == 0
        assert customer["total_purchases"] == 0
        assert customer["complaint_count"] == 0

        task = make("tasks", auth_headers, title="Ship it")
        assert task["status"] == "pending"
        assert task["priority"] == "medium"
        assert task["progress"] == 0

        employee = make("employees", auth_headers, name="Sam")
        assert employee["status"] == "active"
        assert employee["permissions"] == {}
        assert employee["tasks_assigned"] == 0

    def test_transient_fields_accepted_not_stored(self, client, auth_headers, make):
        product = make("products", auth_headers, name="Bagel", popularity=9.5)
        assert "popularity" not in product

        meeting = make(
            "meetings",
            auth_headers,
            title="Kickoff",
            date="2026-02-02T10:00:00",
            location="Room 4",
            attendees=[1, 2],
        )
        assert "location" not in meeting

    def test_timezone_aware_dates_stored_as_utc(self, client, auth_headers, make):
        meeting = make("meetings", auth_headers, title="Call", date="2026-02-02T10:00:00+02:00")
        assert meeting["date"].startswith("2026-02-02T08:00:00")

    def test_get_missing(self, client, auth_headers):
        response = client.get("/api/customers/999", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_get_id_beyond_integer_range(self, client, auth_headers):
        response = client.get(f"/api/customers/{10**20}", headers=auth_headers)

        assert response.status_code == 404

    def test_get_other_users_record(self, client, auth_headers, user_b_headers, make):
        """Records outside the caller's scope look like they don't exist"""
        customer = make("customers", user_b_headers, name="Bob's client")

        response = client.get(f"/api/customers/{customer['id']}", headers=auth_headers)

        assert response.status_code == 404


class TestMalformedPayloads:
    """Shape errors are rejected before any rule runs"""

    def test_unknown_field(self, client, auth_headers):
        response = client.post(
            "/api/customers", headers=auth_headers, json={"name": "Acme", "fax": "123"}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "unknown_field"
        assert body["fields"] == [{"field": "fax"}]

    def test_owner_cannot_be_set(self, client, auth_headers):
        response = client.post(
            "/api/customers", headers=auth_headers, json={"name": "Acme", "user_id": 2}
        )

        assert response.status_code == 400

    def test_derived_counter_not_writable(self, client, auth_headers):
        response = client.post(
            "/api/customers", headers=auth_headers, json={"name": "Acme", "complaint_count": 3}
        )

        assert response.status_code == 400

    def test_type_mismatch(self, client, auth_headers):
        response = client.post(
            "/api/products", headers=auth_headers, json={"name": "Bagel", "inventory": "lots"}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "type_mismatch"
        assert body["fields"][0]["field"] == "inventory"

    def test_numeric_string_not_coerced(self, client, auth_headers):
        response = client.post(
            "/api/products", headers=auth_headers, json={"name": "Bagel", "price": "4.50"}
        )

        assert response.status_code == 400

    @pytest.mark.parametrize("body", [["Acme"], "Acme", 42])
    def test_body_must_be_object(self, client, auth_headers, body):
        response = client.post("/api/customers", headers=auth_headers, json=body)

        assert response.status_code == 400
        assert response.json()["error"] == "type_mismatch"

    def test_update_body_must_be_object(self, client, auth_headers, make):
        customer = make("customers", auth_headers, name="Acme")

        response = client.patch(
            f"/api/customers/{customer['id']}", headers=auth_headers, json=["phone"]
        )

        assert response.status_code == 400
        assert response.json()["error"] == "type_mismatch"

    def test_infinite_amount_rejected(self, client, auth_headers):
        response = client.post(
            "/api/financial-records",
            headers={**auth_headers, "Content-Type": "application/json"},
            content='{"type": "payment", "amount": Infinity}',
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "type_mismatch"
        assert body["fields"][0]["field"] == "amount"

    def test_nan_price_rejected(self, client, auth_headers):
        response = client.post(
            "/api/products",
            headers={**auth_headers, "Content-Type": "application/json"},
            content='{"name": "Bagel", "price": NaN}',
        )

        assert response.status_code == 400


class TestUpdate:
    """Partial updates"""

    def test_partial_update(self, client, auth_headers, make):
        customer = make("customers", auth_headers, name="Acme", email="a@acme.test")

        response = client.patch(
            f"/api/customers/{customer['id']}", headers=auth_headers, json={"phone": "555-0100"}
        )

        assert response.status_code == 200
        updated = response.json()
        assert updated["phone"] == "555-0100"
        assert updated["email"] == "a@acme.test"
        assert updated["name"] == "Acme"

    def test_created_at_unchanged(self, client, auth_headers, make):
        customer = make("customers", auth_headers, name="Acme")

        response = client.patch(
            f"/api/customers/{customer['id']}", headers=auth_headers, json={"notes": "VIP"}
        )

        assert response.json()["created_at"] == customer["created_at"]

    def test_clear_optional_field(self, client, auth_headers, make):
        customer = make("customers", auth_headers, name="Acme", email="a@acme.test")

        response = client.patch(
            f"/api/customers/{customer['id']}", headers=auth_headers, json={"email": None}
        )

        assert response.status_code == 200
        assert response.json()["email"] is None

    def test_clear_required_field(self, client, auth_headers, make):
        customer = make("customers", auth_headers, name="Acme")

        response = client.patch(
            f"/api/customers/{customer['id']}", headers=auth_headers, json={"name": None}
        )

        assert response.status_code == 422

    def test_update_other_users_record(self, client, auth_headers, user_b_headers, make):
        customer = make("customers", user_b_headers, name="Bob's client")

        response = client.patch(
            f"/api/customers/{customer['id']}", headers=auth_headers, json={"name": "Mine now"}
        )

        assert response.status_code == 404

    def test_unknown_field_on_update(self, client, auth_headers, make):
        customer = make("customers", auth_headers, name="Acme")

        response = client.patch(
            f"/api/customers/{customer['id']}", headers=auth_headers, json={"colour": "red"}
        )

        assert response.status_code == 400


class TestDelete:
    def test_delete(self, client, auth_headers, make):
        product = make("products", auth_headers, name="Bagel")

        response = client.delete(f"/api/products/{product['id']}", headers=auth_headers)
        assert response.status_code == 204

        response = client.get(f"/api/products/{product['id']}", headers=auth_headers)
        assert response.status_code == 404

    def test_delete_missing(self, client, auth_headers):
        response = client.delete("/api/products/999", headers=auth_headers)

        assert response.status_code == 404

    def test_deleted_id_not_reused(self, client, auth_headers, make):
        make("customers", auth_headers, name="First")
        newest = make("customers", auth_headers, name="Second")
        client.delete(f"/api/customers/{newest['id']}", headers=auth_headers)

        replacement = make("customers", auth_headers, name="Third")

        assert replacement["id"] > newest["id"]
        response = client.get(f"/api/customers/{newest['id']}", headers=auth_headers)
        assert response.status_code == 404

    def test_delete_id_beyond_integer_range(self, client, auth_headers):
        response = client.delete(f"/api/products/{10**20}", headers=auth_headers)

        assert response.status_code == 404


class TestList:
    """Listing with filters and pagination"""

    def test_list_only_own_records(self, client, auth_headers, user_b_headers, make):
        make("customers", auth_headers, name="Mine")
        make("customers", user_b_headers, name="Theirs")

        response = client.get("/api/customers", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert [c["name"] for c in data["items"]] == ["Mine"]

    def test_filter_by_field(self, client, auth_headers, make):
        make("customers", auth_headers, name="Acme", type="customer")
        make("customers", auth_headers, name="Parts Inc", type="supplier")

        response = client.get("/api/customers?type=supplier", headers=auth_headers)

        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["name"] == "Parts Inc"

    def test_filter_by_reference(self, client, auth_headers, make):
        acme = make("customers", auth_headers, name="Acme")
        other = make("customers", auth_headers, name="Other")
        make("complaints", auth_headers, title="Broken", customer_id=acme["id"])
        make("complaints", auth_headers, title="Slow", customer_id=other["id"])

        response = client.get(f"/api/complaints?customer_id={acme['id']}", headers=auth_headers)

        assert [c["title"] for c in response.json()["items"]] == ["Broken"]

    def test_filter_by_bool(self, client, auth_headers, make):
        make("products", auth_headers, name="Live", is_published=True)
        make("products", auth_headers, name="Draft")

        response = client.get("/api/products?is_published=true", headers=auth_headers)

        assert [p["name"] for p in response.json()["items"]] == ["Live"]

    def test_filter_unknown_field(self, client, auth_headers):
        response = client.get("/api/customers?colour=red", headers=auth_headers)

        assert response.status_code == 400

    def test_filter_bad_value(self, client, auth_headers):
        response = client.get("/api/customers?complaint_count=many", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "type_mismatch"

    def test_filter_id_beyond_integer_range(self, client, auth_headers):
        response = client.get(f"/api/complaints?customer_id={10**20}", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "type_mismatch"

    def test_pagination(self, client, auth_headers, make):
        for i in range(5):
            make("customers", auth_headers, name=f"Customer {i}")

        response = client.get("/api/customers?limit=2&offset=2", headers=auth_headers)

        data = response.json()
        assert data["total"] == 5
        assert [c["name"] for c in data["items"]] == ["Customer 2", "Customer 3"]

    def test_limit_bounds(self, client, auth_headers):
        response = client.get("/api/customers?limit=0", headers=auth_headers)

        assert response.status_code == 422

    def test_offset_beyond_integer_range(self, client, auth_headers):
        response = client.get(f"/api/customers?offset={10**20}", headers=auth_headers)

        assert response.status_code == 422
