import pytest

from tests.fixtures_data import CUSTOMER_BRUNO, CUSTOMER_HEITOR, INVALID_CUSTOMER_PAYLOADS


def _create_customer(client, headers, payload=None):
    response = client.post("/api/customers", json=payload or CUSTOMER_BRUNO, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_customer_returns_location_and_camel_case_body(client, user_headers):
    response = client.post("/api/customers", json=CUSTOMER_BRUNO, headers=user_headers)

    assert response.status_code == 201
    body = response.json()
    assert response.headers["Location"] == f"/api/customers/{body['id']}"
    assert body["name"] == "Bruno"
    assert body["email"] == "bruno@exemplo.com"
    assert "createdAt" in body


def test_create_customer_requires_bearer_token(client):
    response = client.post("/api/customers", json=CUSTOMER_BRUNO)

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_create_customer_rejects_invalid_token(client):
    response = client.post("/api/customers", json=CUSTOMER_BRUNO, headers={"Authorization": "Bearer nope"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid or expired token"


@pytest.mark.parametrize(("payload", "field"), INVALID_CUSTOMER_PAYLOADS)
def test_create_customer_validation_errors_are_listed_per_field(client, user_headers, payload, field):
    response = client.post("/api/customers", json=payload, headers=user_headers)

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == 400
    assert body["title"] == "One or more validation errors occurred."
    assert field in body["errors"]


def test_create_customer_with_duplicate_email_conflicts(client, user_headers):
    _create_customer(client, user_headers)

    response = client.post(
        "/api/customers",
        json={"name": "Other Bruno", "email": "BRUNO@exemplo.com"},
        headers=user_headers,
    )

    assert response.status_code == 409
    assert response.json()["title"] == "E-mail already registered"


def test_get_customer_returns_404_for_unknown_id(client):
    response = client.get("/api/customers/999")

    assert response.status_code == 404
    assert response.json()["detail"] == "Customer not found: 999"


def test_update_customer_returns_no_content(client, user_headers):
    created = _create_customer(client, user_headers)

    response = client.put(
        f"/api/customers/{created['id']}",
        json={"name": "Bruno Souza", "email": "bruno.souza@exemplo.com"},
        headers=user_headers,
    )

    assert response.status_code == 204
    fetched = client.get(f"/api/customers/{created['id']}").json()
    assert fetched["name"] == "Bruno Souza"
    assert fetched["email"] == "bruno.souza@exemplo.com"


def test_update_customer_keeping_own_email_is_allowed(client, user_headers):
    created = _create_customer(client, user_headers)

    response = client.put(
        f"/api/customers/{created['id']}",
        json={"name": "Bruno 2", "email": CUSTOMER_BRUNO["email"]},
        headers=user_headers,
    )

    assert response.status_code == 204


def test_update_customer_to_taken_email_conflicts(client, user_headers):
    _create_customer(client, user_headers)
    heitor = _create_customer(client, user_headers, CUSTOMER_HEITOR)

    response = client.put(
        f"/api/customers/{heitor['id']}",
        json={"name": "Heitor", "email": CUSTOMER_BRUNO["email"]},
        headers=user_headers,
    )

    assert response.status_code == 409


def test_delete_customer_requires_admin(client, user_headers):
    created = _create_customer(client, user_headers)

    response = client.delete(f"/api/customers/{created['id']}", headers=user_headers)

    assert response.status_code == 403
    assert response.json()["detail"] == "Insufficient permissions"


def test_delete_customer_hides_it_and_second_delete_restores(client, user_headers, admin_headers):
    created = _create_customer(client, user_headers)
    customer_url = f"/api/customers/{created['id']}"

    assert client.delete(customer_url, headers=admin_headers).status_code == 204
    assert client.get(customer_url).status_code == 404
    assert client.get("/api/customers").json()["total"] == 0

    assert client.delete(customer_url, headers=admin_headers).status_code == 204
    assert client.get(customer_url).status_code == 200


def test_deleted_customer_email_can_be_reused_but_blocks_restore(client, user_headers, admin_headers):
    created = _create_customer(client, user_headers)
    client.delete(f"/api/customers/{created['id']}", headers=admin_headers)

    _create_customer(client, user_headers, {"name": "New Bruno", "email": CUSTOMER_BRUNO["email"]})
    response = client.delete(f"/api/customers/{created['id']}", headers=admin_headers)

    assert response.status_code == 409


def test_delete_unknown_customer_returns_404(client, admin_headers):
    assert client.delete("/api/customers/404", headers=admin_headers).status_code == 404


def test_list_customers_searches_name_and_email(client, user_headers):
    _create_customer(client, user_headers)
    _create_customer(client, user_headers, CUSTOMER_HEITOR)

    by_name = client.get("/api/customers", params={"search": "heit"}).json()
    by_email = client.get("/api/customers", params={"search": "BRUNO@"}).json()

    assert [item["name"] for item in by_name["items"]] == ["Heitor"]
    assert [item["name"] for item in by_email["items"]] == ["Bruno"]


def test_list_customers_search_treats_wildcards_literally(client, user_headers):
    _create_customer(client, user_headers)

    response = client.get("/api/customers", params={"search": "%"})

    assert response.json()["total"] == 0


def test_list_customers_paginates_newest_first(client, user_headers):
    for index in range(12):
        _create_customer(client, user_headers, {"name": f"Customer {index}", "email": f"c{index}@exemplo.com"})

    first = client.get("/api/customers", params={"page": 1, "pageSize": 5}).json()
    last = client.get("/api/customers", params={"page": 3, "pageSize": 5}).json()

    assert first["total"] == 12
    assert first["page"] == 1
    assert first["pageSize"] == 5
    assert [item["name"] for item in first["items"]] == [f"Customer {i}" for i in range(11, 6, -1)]
    assert [item["name"] for item in last["items"]] == ["Customer 1", "Customer 0"]


@pytest.mark.parametrize("params", [{"page": 0}, {"pageSize": 0}, {"pageSize": 101}])
def test_list_customers_rejects_out_of_range_paging(client, params):
    response = client.get("/api/customers", params=params)

    assert response.status_code == 400
