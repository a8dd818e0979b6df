"""
Tests d'intégration API pour l'historique des connexions.
"""

from datetime import datetime
from unittest.mock import patch

from app.schemas.login_history import LoginHistoryEntry, LoginHistoryUser, LoginHistoryWithUser
from conftest import bearer


def make_entry(entry_id=1, successful=True) -> LoginHistoryEntry:
    return LoginHistoryEntry(
        id=entry_id,
        login_time=datetime.now(),
        ip_address="10.0.0.1",
        user_agent="pytest",
        is_successful=successful,
    )


# ============================================================
# GET /login-history
# ============================================================

def test_historique_global_admin(client, admin_headers):
    with patch("app.routers.login_history.login_history_service.get_all_history") as mock:
        mock.return_value = [
            LoginHistoryWithUser(
                **make_entry(1).model_dump(),
                user=LoginHistoryUser(id=2, matricule="E12345", first_name="Jean", last_name="Dupont"),
            ),
            LoginHistoryWithUser(**make_entry(2, successful=False).model_dump(), user=None),
        ]
        response = client.get("/login-history", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()
    assert data[0]["user"]["matricule"] == "E12345"
    assert data[1]["user"] is None
    assert data[1]["is_successful"] is False


def test_historique_global_refuse_sans_admin(client, user_headers):
    response = client.get("/login-history", headers=user_headers)
    assert response.status_code == 403


def test_historique_global_sans_jeton(client):
    response = client.get("/login-history")
    assert response.status_code == 401


# ============================================================
# GET /login-history/user/{user_id}
# ============================================================

def test_historique_utilisateur(client, admin_headers):
    with patch("app.routers.login_history.login_history_service.get_user_history") as mock:
        mock.return_value = [make_entry(1), make_entry(2)]
        response = client.get("/login-history/user/7", headers=admin_headers)

    assert response.status_code == 200
    assert len(response.json()) == 2
    assert mock.call_args.args[1] == 7
    assert "user" not in response.json()[0]


def test_historique_utilisateur_refuse_sans_admin(client, user_headers):
    response = client.get("/login-history/user/7", headers=user_headers)
    assert response.status_code == 403


# ============================================================
# GET /login-history/my-history
# ============================================================

def test_mon_historique(client):
    with patch("app.routers.login_history.login_history_service.get_user_history") as mock:
        mock.return_value = [make_entry(1)]
        response = client.get("/login-history/my-history", headers=bearer(user_id=9))

    assert response.status_code == 200
    assert mock.call_args.args[1] == 9
    assert mock.call_args.kwargs["limit"] == 20


def test_mon_historique_identite_mal_formee(client):
    response = client.get("/login-history/my-history", headers=bearer(user_id="x"))
    assert response.status_code == 400
