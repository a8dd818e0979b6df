"""
Tests d'intégration API pour la gestion des rôles (réservée aux administrateurs).
"""

from unittest.mock import patch

from app.schemas.role import RoleResponse
from app.services.role_service import ensure_default_roles, list_roles
from conftest import add_user


def make_role(role_id=1, name="admin") -> RoleResponse:
    return RoleResponse(id=role_id, name=name, description=None)


# ============================================================
# Autorisation
# ============================================================

def test_roles_sans_jeton(client):
    response = client.get("/roles")
    assert response.status_code == 401


def test_roles_sans_role_admin(client, user_headers):
    response = client.get("/roles", headers=user_headers)
    assert response.status_code == 403
    assert response.json() == {"Message": "Role 'admin' required"}


# ============================================================
# GET /roles
# ============================================================

def test_list_roles(client, admin_headers):
    with patch("app.routers.roles.role_service.list_roles") as mock:
        mock.return_value = [make_role(1, "admin"), make_role(2, "trainer")]
        response = client.get("/roles", headers=admin_headers)

    assert response.status_code == 200
    assert [r["name"] for r in response.json()] == ["admin", "trainer"]


# ============================================================
# GET /roles/user/{user_id}
# ============================================================

def test_roles_utilisateur(client, admin_headers):
    with patch("app.routers.roles.role_service.get_roles_for_user") as mock:
        mock.return_value = [make_role(3, "manager")]
        response = client.get("/roles/user/12", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()[0]["name"] == "manager"


def test_roles_utilisateur_introuvable(client, admin_headers):
    with patch("app.routers.roles.role_service.get_roles_for_user") as mock:
        mock.return_value = None
        response = client.get("/roles/user/12", headers=admin_headers)

    assert response.status_code == 404
    assert response.json() == {"Message": "User not found"}


# ============================================================
# POST /roles/assign
# ============================================================

def test_assign_succes(client, admin_headers):
    with patch("app.routers.roles.role_service.assign_role") as mock:
        response = client.post("/roles/assign", json={"user_id": 2, "role_id": 1}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {"message": "Role assigned successfully"}
    mock.assert_called_once()


def test_assign_introuvable(client, admin_headers):
    with patch("app.routers.roles.role_service.assign_role") as mock:
        mock.side_effect = LookupError("Role not found")
        response = client.post("/roles/assign", json={"user_id": 2, "role_id": 99}, headers=admin_headers)

    assert response.status_code == 404
    assert response.json() == {"Message": "Role not found"}


def test_assign_doublon(client, admin_headers):
    with patch("app.routers.roles.role_service.assign_role") as mock:
        mock.side_effect = ValueError("User already has this role")
        response = client.post("/roles/assign", json={"user_id": 2, "role_id": 1}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json() == {"Message": "User already has this role"}


def test_assign_corps_invalide(client, admin_headers):
    response = client.post("/roles/assign", json={"user_id": "abc"}, headers=admin_headers)
    assert response.status_code == 422


# ============================================================
# DELETE /roles/remove
# ============================================================

def test_remove_succes(client, admin_headers):
    with patch("app.routers.roles.role_service.remove_role") as mock:
        mock.return_value = True
        response = client.request("DELETE", "/roles/remove", json={"user_id": 2, "role_id": 1},
                                  headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {"message": "Role removed successfully"}


def test_remove_lien_inexistant(client, admin_headers):
    with patch("app.routers.roles.role_service.remove_role") as mock:
        mock.return_value = False
        response = client.request("DELETE", "/roles/remove", json={"user_id": 2, "role_id": 1},
                                  headers=admin_headers)

    assert response.status_code == 404
    assert response.json() == {"Message": "User does not have this role"}


# ============================================================
# Doublon sur SQLite : une seule ligne reste
# ============================================================

def test_assign_doublon_sqlite(sqlite_client, db_session, admin_headers):
    ensure_default_roles(db_session)
    user = add_user(db_session, matricule="T00001")
    trainer_id = next(r.id for r in list_roles(db_session) if r.name == "trainer")

    first = sqlite_client.post("/roles/assign", json={"user_id": user.id, "role_id": trainer_id},
                               headers=admin_headers)
    second = sqlite_client.post("/roles/assign", json={"user_id": user.id, "role_id": trainer_id},
                                headers=admin_headers)

    assert first.status_code == 200
    assert second.status_code == 400
    roles = sqlite_client.get(f"/roles/user/{user.id}", headers=admin_headers).json()
    assert [r["name"] for r in roles] == ["trainer"]
