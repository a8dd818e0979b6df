"""
Service d'authentification : login, refresh, logout, utilisateur courant.

Cycle de vie du refresh token stocké sur l'utilisateur :
    aucun → actif(token, expiration) → actif(nouveau, nouvelle expiration) → aucun
Chaque refresh ou login fait tourner le token ; l'ancien devient inutilisable.

Chaque tentative de login produit exactement une ligne login_history,
même en cas d'échec.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.user import User
from app.schemas.auth import AuthResponse, CurrentUserResponse
from app.services import login_history_service, role_service, token_service
from app.services.password_service import verify_password

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_REFRESH_TOKEN = "Invalid or expired refresh token"
MISSING_REFRESH_TOKEN = "Refresh token is required"


class AuthError(Exception):
    """Erreur d'authentification : le message est destiné au client."""


class InvalidCredentialsError(AuthError):
    def __init__(self):
        super().__init__(INVALID_CREDENTIALS)


class InvalidRefreshTokenError(AuthError):
    def __init__(self):
        super().__init__(INVALID_REFRESH_TOKEN)


class MissingRefreshTokenError(AuthError):
    def __init__(self):
        super().__init__(MISSING_REFRESH_TOKEN)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    """Certains backends (SQLite) renvoient des dates naïves : on les considère en UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _save_failed_attempt(
    db: Session,
    user_id: Optional[int],
    ip_address: Optional[str],
    user_agent: Optional[str],
    login_time: datetime,
) -> None:
    """Enregistre une tentative échouée. Une erreur d'écriture est journalisée, jamais propagée."""
    try:
        login_history_service.record_attempt(
            db, user_id, ip_address, user_agent, is_successful=False, login_time=login_time,
        )
    except SQLAlchemyError:
        logger.exception("Impossible d'enregistrer la tentative de connexion (user_id=%s)", user_id)
        db.rollback()


def _issue_tokens(db: Session, user: User, now: datetime) -> AuthResponse:
    """Émet un nouveau couple de jetons et met à jour le refresh token de l'utilisateur (sans commit)."""
    roles = role_service.get_role_names(db, user.id)
    access_token = token_service.create_access_token(user, roles, now=now)
    refresh_token = token_service.generate_refresh_token()

    user.refresh_token = refresh_token
    user.refresh_token_expiry = token_service.refresh_token_expiry(now)

    return AuthResponse(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        matricule=user.matricule,
        access_token=access_token,
        refresh_token=refresh_token,
        roles=roles,
    )


def login(
    db: Session,
    matricule: str,
    password: str,
    ip_address: Optional[str],
    user_agent: Optional[str],
    now: Optional[datetime] = None,
) -> AuthResponse:
    """
    Authentifie un utilisateur par matricule et mot de passe.

    Lève InvalidCredentialsError avec le même message que le matricule soit inconnu
    ou le mot de passe erroné ; seuls les logs serveur distinguent les deux cas.
    """
    now = now or _utcnow()

    user = db.execute(
        select(User).where(User.matricule == matricule)
    ).scalar_one_or_none()

    if user is None:
        logger.warning("Échec de connexion : matricule %s introuvable", matricule)
        _save_failed_attempt(db, None, ip_address, user_agent, now)
        raise InvalidCredentialsError()

    # Lu avant tout rollback, qui expirerait l'instance
    user_id = user.id

    if not verify_password(password, user.password_hash):
        logger.warning("Échec de connexion : mot de passe invalide pour %s", matricule)
        _save_failed_attempt(db, user_id, ip_address, user_agent, now)
        raise InvalidCredentialsError()

    try:
        response = _issue_tokens(db, user, now)
    except Exception:
        db.rollback()
        _save_failed_attempt(db, user_id, ip_address, user_agent, now)
        raise

    # Mise à jour du refresh token et historique dans la même transaction
    try:
        login_history_service.record_attempt(
            db, user_id, ip_address, user_agent, is_successful=True, login_time=now,
        )
    except SQLAlchemyError:
        db.rollback()
        _save_failed_attempt(db, user_id, ip_address, user_agent, now)
        raise

    logger.info("Connexion réussie pour %s", matricule)
    return response


def resolve_refresh_token(cookie_value: Optional[str], body_value: Optional[str]) -> Optional[str]:
    """Le cookie est prioritaire sur le corps de requête ; une chaîne vide compte comme absente."""
    if cookie_value:
        return cookie_value
    if body_value:
        return body_value
    return None


def refresh(db: Session, refresh_token: Optional[str], now: Optional[datetime] = None) -> AuthResponse:
    """
    Échange un refresh token valide contre un nouveau couple de jetons.
    Un token dont l'expiration est égale ou antérieure à `now` est refusé.
    """
    if not refresh_token:
        raise MissingRefreshTokenError()

    now = now or _utcnow()

    user = db.execute(
        select(User).where(User.refresh_token == refresh_token)
    ).scalar_one_or_none()

    if user is None or user.refresh_token_expiry is None or _as_utc(user.refresh_token_expiry) <= now:
        raise InvalidRefreshTokenError()

    response = _issue_tokens(db, user, now)
    db.commit()
    return response


def logout(db: Session, user_id: int) -> None:
    """Invalide le refresh token de l'utilisateur. Sans effet s'il n'en a pas."""
    user = db.get(User, user_id)
    if user is None:
        return

    user.refresh_token = None
    user.refresh_token_expiry = None
    db.commit()
    logger.info("Déconnexion de l'utilisateur %s", user_id)


def get_current_user(db: Session, user_id: int) -> Optional[CurrentUserResponse]:
    """Identité et rôles de l'appelant, ou None si l'utilisateur a été supprimé."""
    user = db.get(User, user_id)
    if user is None:
        return None

    return CurrentUserResponse(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        matricule=user.matricule,
        roles=role_service.get_role_names(db, user.id),
    )
