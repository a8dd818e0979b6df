"""
Router d'authentification.
POST /auth/login   : connexion par matricule + mot de passe
POST /auth/refresh : rotation des jetons (cookie X-Refresh-Token ou corps)
POST /auth/logout  : invalidation du refresh token
GET  /auth/me      : identité et rôles de l'appelant
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.dependencies import get_client_ip, get_current_user_id, get_user_agent
from app.schemas.auth import AuthResponse, CurrentUserResponse, LoginRequest, MessageResponse, RefreshTokenRequest
from app.services import auth_service

router = APIRouter(prefix="/auth", tags=["Authentification"])

REFRESH_COOKIE_NAME = "X-Refresh-Token"


def _set_refresh_cookie(response: Response, refresh_token: str) -> None:
    """Dépose le refresh token en cookie HttpOnly, Secure, SameSite=Strict."""
    max_age = settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 3600
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=refresh_token,
        max_age=max_age,
        expires=datetime.now(timezone.utc) + timedelta(seconds=max_age),
        httponly=True,
        secure=True,
        samesite="strict",
    )


@router.post("/login", response_model=AuthResponse, summary="Connexion")
def login(data: LoginRequest, request: Request, response: Response, db: Session = Depends(get_db)):
    """
    Authentifie un utilisateur par matricule et mot de passe.

    Le refresh token est renvoyé dans le corps (clients sans cookie) et dans le
    cookie X-Refresh-Token. Matricule inconnu et mot de passe erroné donnent la
    même réponse 401.
    """
    try:
        result = auth_service.login(
            db,
            matricule=data.matricule,
            password=data.password,
            ip_address=get_client_ip(request),
            user_agent=get_user_agent(request),
        )
    except auth_service.InvalidCredentialsError as e:
        raise HTTPException(status_code=401, detail=str(e))

    _set_refresh_cookie(response, result.refresh_token)
    return result


@router.post("/refresh", response_model=AuthResponse, summary="Renouveler les jetons")
def refresh(
    response: Response,
    data: Optional[RefreshTokenRequest] = None,
    refresh_cookie: Optional[str] = Cookie(default=None, alias=REFRESH_COOKIE_NAME),
    db: Session = Depends(get_db),
):
    """
    Échange un refresh token contre un nouveau couple de jetons.
    Le cookie est prioritaire sur le champ `refresh_token` du corps.
    L'ancien refresh token devient immédiatement invalide.
    """
    token = auth_service.resolve_refresh_token(refresh_cookie, data.refresh_token if data else None)
    try:
        result = auth_service.refresh(db, token)
    except auth_service.MissingRefreshTokenError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except auth_service.InvalidRefreshTokenError as e:
        raise HTTPException(status_code=401, detail=str(e))

    _set_refresh_cookie(response, result.refresh_token)
    return result


@router.post("/logout", response_model=MessageResponse, summary="Déconnexion")
def logout(
    response: Response,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Invalide le refresh token de l'appelant et supprime le cookie. Idempotent."""
    auth_service.logout(db, user_id)
    response.delete_cookie(REFRESH_COOKIE_NAME, httponly=True, secure=True, samesite="strict")
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=CurrentUserResponse, summary="Utilisateur courant")
def me(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """Retourne l'identité et les rôles de l'appelant."""
    user = auth_service.get_current_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user
