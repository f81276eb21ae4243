from conftest import PASSWORD, assert_inventory_consistent, auth_headers


def _register(client, name="Reader One", phone="5551112222", password=PASSWORD, **extra):
    return client.post("/auth/register", json={"name": name, "phone": phone, "password": password, **extra})


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"ok": True}


def test_register_login_me(client):
    resp = _register(client, role="admin")
    assert resp.status_code == 201
    body = resp.get_json()
    # a client-supplied role is ignored
    assert body["data"]["role"] == "user"
    assert "password_hash" not in body["data"]

    headers = auth_headers(client, "5551112222")
    me = client.get("/auth/me", headers=headers).get_json()
    assert me["user"]["name"] == "Reader One"


def test_register_duplicate_phone(client):
    assert _register(client).status_code == 201
    resp = _register(client, name="Someone Else")
    assert resp.status_code == 409
    assert resp.get_json()["message"] == "User already exists"


def test_register_validation(client):
    resp = _register(client, phone="12345")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "ValidationError"

    resp = _register(client, password="weakpassword")
    assert resp.status_code == 400


def test_login_failures(client):
    _register(client)
    resp = client.post("/auth/login", json={"phone": "5551112222", "password": "Wrong1!x"})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid credentials"

    resp = client.post("/auth/login", json={"phone": "5551112222", "password": PASSWORD, "role": "admin"})
    assert resp.status_code == 403
    assert resp.get_json()["message"] == "Access denied for this role"


def test_protected_routes_need_token(client):
    resp = client.get("/books/")
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Unauthenticated"

    resp = client.get("/books/", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


def test_rent_and_return_over_http(client, session, make_book):
    book = make_book(copies=2, title="Neuromancer")
    _register(client)
    headers = auth_headers(client, "5551112222")

    listing = client.get("/books/", headers=headers).get_json()["data"]
    assert [b["title"] for b in listing] == ["Neuromancer"]
    assert listing[0]["available_copies"] == 2

    resp = client.post("/rentals/", json={"book_id": book.id}, headers=headers)
    assert resp.status_code == 201
    rental = resp.get_json()["data"]
    assert rental["returned"] is False
    assert rental["book_id"] == book.id

    mine = client.get("/rentals/my", headers=headers).get_json()["data"]
    assert [r["book_title"] for r in mine] == ["Neuromancer"]

    resp = client.post(f"/rentals/{rental['id']}/return", headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()["data"]["returned"] is True

    resp = client.post(f"/rentals/{rental['id']}/return", headers=headers)
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "RentalNotFoundOrClosed"

    assert_inventory_consistent(session)


def test_rent_errors_over_http(client, make_book):
    book = make_book(copies=1, rented=1)
    _register(client)
    headers = auth_headers(client, "5551112222")

    resp = client.post("/rentals/", json={"book_id": book.id}, headers=headers)
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "OutOfStock"

    resp = client.post("/rentals/", json={"book_id": 999}, headers=headers)
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "BookNotFound"

    resp = client.post("/rentals/", json={"book_id": "abc"}, headers=headers)
    assert resp.status_code == 400


def test_user_cannot_use_admin_routes(client, make_book):
    book = make_book(copies=2)
    _register(client)
    headers = auth_headers(client, "5551112222")

    resp = client.put(f"/admin/books/{book.id}/copies", json={"copies": 1}, headers=headers)
    assert resp.status_code == 403
    assert resp.get_json()["error"] == "Forbidden"


def test_customer_self_service(client):
    _register(client)
    _register(client, name="Other Reader", phone="5553334444")
    headers = auth_headers(client, "5551112222")
    me_id = client.get("/auth/me", headers=headers).get_json()["user"]["id"]
    other_headers = auth_headers(client, "5553334444")
    other_id = client.get("/auth/me", headers=other_headers).get_json()["user"]["id"]

    resp = client.put(f"/customers/{me_id}", json={"name": "Renamed Reader", "password": "NewPass1$"}, headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()["data"]["name"] == "Renamed Reader"
    # new password works, and is stored hashed
    auth_headers(client, "5551112222", password="NewPass1$")

    assert client.get(f"/customers/{other_id}", headers=headers).status_code == 403
    assert client.put(f"/customers/{me_id}", json={"role": "admin"}, headers=headers).status_code == 400

    resp = client.delete(f"/customers/{me_id}", headers=headers)
    assert resp.status_code == 200
    # token of a deleted customer no longer resolves
    assert client.get("/auth/me", headers=headers).status_code == 401


def test_login_rejects_non_string_credentials(client):
    _register(client)
    resp = client.post("/auth/login", json={"phone": 5551112222, "password": PASSWORD})
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Unauthenticated"

    resp = client.post("/auth/login", json={"phone": "5551112222", "password": 12345678})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid credentials"


def test_json_body_must_be_an_object(client, make_book):
    book = make_book(copies=1)
    resp = client.post("/auth/register", json=["a"])
    assert resp.status_code == 400
    assert resp.get_json() == {"success": False, "error": "ValidationError", "message": "JSON object expected"}

    assert client.post("/auth/login", json="5551112222").status_code == 400

    _register(client)
    headers = auth_headers(client, "5551112222")
    resp = client.post("/rentals/", json=[book.id], headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "ValidationError"


def test_rent_rejects_out_of_range_book_id(client, session, make_book):
    make_book(copies=1)
    _register(client)
    headers = auth_headers(client, "5551112222")

    for book_id in (10**20, 2**31):
        resp = client.post("/rentals/", json={"book_id": book_id}, headers=headers)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "ValidationError"

    resp = client.post(
        "/rentals/", data='{"book_id": Infinity}', content_type="application/json", headers=headers
    )
    assert resp.status_code == 400
    assert_inventory_consistent(session)
