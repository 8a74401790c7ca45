from conftest import auth


def test_profile(client, employee):
    resp = client.get("/api/users/profile", headers=auth(employee))
    assert resp.status_code == 200
    assert resp.json()["email"] == "employee@example.com"
    assert resp.json()["role"] == "employee"


def test_user_admin_routes(client, admin, employee):
    assert client.get("/api/users/", headers=auth(employee)).status_code == 403

    resp = client.post(
        "/api/users/",
        json={"nama": "New Person", "email": "New@Example.com"},
        headers=auth(admin),
    )
    assert resp.status_code == 201
    created = resp.json()
    assert created["email"] == "new@example.com"
    assert created["role"] == "employee"

    resp = client.post(
        "/api/users/",
        json={"nama": "Again", "email": "new@example.com"},
        headers=auth(admin),
    )
    assert resp.status_code == 400

    assert len(client.get("/api/users/", headers=auth(admin)).json()) == 3
    assert client.get(f"/api/users/{created['id_user']}", headers=auth(admin)).status_code == 200
    assert client.get("/api/users/999", headers=auth(admin)).status_code == 404


def test_user_validation(client, admin):
    resp = client.post("/api/users/", json={"nama": "X", "email": "x@example.com"}, headers=auth(admin))
    assert resp.status_code == 422
    resp = client.post("/api/users/", json={"nama": "Valid", "email": "nope"}, headers=auth(admin))
    assert resp.status_code == 422
    resp = client.post(
        "/api/users/", json={"nama": "Valid", "email": "v@example.com", "role": "root"}, headers=auth(admin)
    )
    assert resp.status_code == 422


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/api/status").json()["database"] == "connected"


def test_update_user_as_admin(client, admin, employee, other_employee):
    resp = client.put(
        f"/api/users/{employee.id}",
        json={"nama": "  Renamed  ", "role": "admin"},
        headers=auth(admin),
    )
    assert resp.status_code == 200
    assert resp.json()["nama"] == "Renamed"
    assert resp.json()["role"] == "admin"
    assert resp.json()["email"] == "employee@example.com"

    resp = client.put(f"/api/users/{employee.id}", json={"email": "Other@example.com"}, headers=auth(admin))
    assert resp.status_code == 400
    assert resp.json()["message"] == "Email already registered"

    resp = client.put(f"/api/users/{employee.id}", json={"email": "employee@example.com"}, headers=auth(admin))
    assert resp.status_code == 200

    assert client.put(f"/api/users/{employee.id}", json={}, headers=auth(admin)).status_code == 400
    assert client.put("/api/users/999", json={"nama": "Ghost"}, headers=auth(admin)).status_code == 404


def test_update_user_requires_admin(client, employee, other_employee):
    resp = client.put(f"/api/users/{other_employee.id}", json={"nama": "Hijack"}, headers=auth(employee))
    assert resp.status_code == 403


def test_update_own_profile(client, employee, other_employee):
    resp = client.put(
        "/api/users/profile",
        json={"nama": "Me Again", "email": "ME@example.com", "role": "admin"},
        headers=auth(employee),
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["nama"] == "Me Again"
    assert body["email"] == "me@example.com"
    assert body["role"] == "employee"

    resp = client.put("/api/users/profile", json={"email": "other@example.com"}, headers=auth(employee))
    assert resp.status_code == 400

    assert client.put("/api/users/profile", json={}, headers=auth(employee)).status_code == 400
    assert client.get("/api/users/profile", headers=auth(employee)).json()["email"] == "me@example.com"


def test_delete_user(client, admin, employee, make_product, add_to_cart):
    product = make_product("P", "1.00", 5)
    add_to_cart(employee, product, 1)

    resp = client.delete(f"/api/users/{admin.id}", headers=auth(admin))
    assert resp.status_code == 400
    assert resp.json()["message"] == "Cannot delete your own account"

    assert client.delete(f"/api/users/{employee.id}", headers=auth(employee)).status_code == 403
    assert client.delete("/api/users/999", headers=auth(admin)).status_code == 404

    resp = client.delete(f"/api/users/{employee.id}", headers=auth(admin))
    assert resp.status_code == 200
    assert client.get(f"/api/users/{employee.id}", headers=auth(admin)).status_code == 404


def test_delete_user_with_orders_refused(client, admin, employee, make_product):
    product = make_product("P", "1.00", 5)
    client.post(
        "/api/transactions/direct-checkout",
        json={"metode_pembayaran": "cash", "items": [{"id_product": product.id, "jumlah": 1}]},
        headers=auth(employee),
    )

    resp = client.delete(f"/api/users/{employee.id}", headers=auth(admin))

    assert resp.status_code == 400
    assert resp.json()["message"] == "Cannot delete user with transaction history"
