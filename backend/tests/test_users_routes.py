from prm.core.exceptions import StoreError
from prm.repositories.user_repository import UserRepository


def test_admin_routes_require_session(client):
    assert client.get("/api/users/").status_code == 401
    assert client.get("/api/users/1").status_code == 401


def test_list_users(client, register, logged_in_user):
    register(email="bob@x.com", first_name="Bob")

    response = client.get("/api/users/")

    assert response.status_code == 200
    assert [user["email"] for user in response.json()] == ["ann@x.com", "bob@x.com"]


def test_get_user(client, logged_in_user):
    response = client.get(f"/api/users/{logged_in_user['id']}")
    assert response.status_code == 200
    assert response.json()["email"] == "ann@x.com"

    missing = client.get("/api/users/999")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "User not found"


def test_update_user(client, csrf_headers, register, logged_in_user):
    bob = register(email="bob@x.com", first_name="Bob").json()["user"]

    response = client.put(
        f"/api/users/{bob['id']}",
        json={"first_name": "Robert", "last_name": "Lee", "email": "robert@x.com", "is_active": False},
        headers=csrf_headers,
    )

    assert response.status_code == 200
    assert response.json()["message"] == "User updated successfully"
    updated = client.get(f"/api/users/{bob['id']}").json()
    assert updated["first_name"] == "Robert"
    assert updated["email"] == "robert@x.com"
    assert updated["is_active"] is False
    assert updated["created_at"] == bob["created_at"]


def test_update_missing_user(client, csrf_headers, logged_in_user):
    response = client.put(
        "/api/users/999",
        json={"first_name": "X", "last_name": "Y", "email": "x@x.com", "is_active": True},
        headers=csrf_headers,
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"
    assert client.get(f"/api/users/{logged_in_user['id']}").json()["email"] == "ann@x.com"


def test_update_to_taken_email(client, csrf_headers, register, logged_in_user):
    bob = register(email="bob@x.com", first_name="Bob").json()["user"]

    response = client.put(
        f"/api/users/{bob['id']}",
        json={"first_name": "Bob", "last_name": "Lee", "email": "ann@x.com", "is_active": True},
        headers=csrf_headers,
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Email already registered"


def test_update_requires_csrf(client, logged_in_user):
    response = client.put(
        f"/api/users/{logged_in_user['id']}",
        json={"first_name": "X", "last_name": "Y", "email": "x@x.com", "is_active": True},
    )
    assert response.status_code == 403


def test_delete_then_get(client, csrf_headers, register, logged_in_user):
    bob = register(email="bob@x.com", first_name="Bob").json()["user"]

    response = client.delete(f"/api/users/{bob['id']}", headers=csrf_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "User deleted successfully"
    assert client.get(f"/api/users/{bob['id']}").status_code == 404


def test_delete_missing_user(client, csrf_headers, logged_in_user):
    response = client.delete("/api/users/999", headers=csrf_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"


def test_deleting_own_account_ends_session(client, csrf_headers, logged_in_user):
    response = client.delete(f"/api/users/{logged_in_user['id']}", headers=csrf_headers)

    assert response.status_code == 200
    assert client.get("/api/auth/profile").status_code == 401


def test_store_failure_on_read_returns_500(client, logged_in_user, monkeypatch):
    def failing_get_all_users(self):
        raise StoreError("connection refused")

    monkeypatch.setattr(UserRepository, "get_all_users", failing_get_all_users)

    response = client.get("/api/users/")

    assert response.status_code == 500
    assert response.json() == {"detail": "Database error occurred"}
