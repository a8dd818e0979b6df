"""
Configuration partagée pour tous les tests.

Les variables d'environnement sont posées avant tout import de `app` :
SECRET_KEY est obligatoire et DATABASE_URL pointe vers SQLite en mémoire
pour que le démarrage (lifespan) n'essaie pas de joindre PostgreSQL.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CSV_FILE_PATH", "absent-seed-file.csv")

from types import SimpleNamespace  # noqa: E402
from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import app.models  # noqa: E402,F401
from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.user import Role, User, UserRole  # noqa: E402
from app.services import password_service  # noqa: E402
from app.services.token_service import create_access_token  # noqa: E402


@pytest.fixture
def client():
    """Client HTTP de test avec la BDD mockée."""
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def fast_hashing(monkeypatch):
    """Réduit le nombre d'itérations PBKDF2 pour les tests qui hachent beaucoup."""
    monkeypatch.setattr(password_service, "ITERATIONS", 1_000)


@pytest.fixture
def db_session():
    """Session SQLAlchemy sur une base SQLite en mémoire, partagée entre threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def sqlite_client(db_session, fast_hashing):
    """Client HTTP de test branché sur la base SQLite en mémoire."""
    app.dependency_overrides[get_db] = lambda: db_session
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def add_user(db, matricule="E12345", password="Secret123!", first_name="Jean",
             last_name="Dupont", roles=()):
    """Insère un utilisateur (et ses rôles, créés si besoin) dans la base de test."""
    user = User(
        matricule=matricule,
        first_name=first_name,
        last_name=last_name,
        password_hash=password_service.hash_password(password),
    )
    db.add(user)
    db.flush()
    for name in roles:
        role = db.query(Role).filter_by(name=name).one_or_none()
        if role is None:
            role = Role(name=name)
            db.add(role)
            db.flush()
        db.add(UserRole(user_id=user.id, role_id=role.id))
    db.commit()
    db.refresh(user)
    return user


def bearer(user_id=1, roles=(), matricule="E12345"):
    """En-tête Authorization avec un access token valide."""
    token = create_access_token(SimpleNamespace(id=user_id, matricule=matricule), list(roles))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers():
    return bearer(user_id=1, roles=["admin"])


@pytest.fixture
def user_headers():
    return bearer(user_id=2, roles=["trainer"], matricule="E22222")
