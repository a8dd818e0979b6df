"""
Dépendances FastAPI partagées : identité de l'appelant et contrôle des rôles.

L'identité provient uniquement de l'access token (Authorization: Bearer),
validé par token_service.verify_access_token. Le client reçoit toujours le même
message d'erreur ; la cause précise n'apparaît que dans les logs serveur.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from app.services.token_service import TokenPayload, verify_access_token

logger = logging.getLogger(__name__)

INVALID_TOKEN = "Invalid or expired token"

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=INVALID_TOKEN,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_token_payload(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> TokenPayload:
    """Valide le bearer token et retourne ses claims. 401 si absent ou invalide."""
    if credentials is None or not credentials.credentials:
        raise _unauthorized()

    try:
        return verify_access_token(credentials.credentials)
    except JWTError as e:
        logger.warning("Access token refusé : %s", e)
        raise _unauthorized()


def get_current_user_id(payload: TokenPayload = Depends(get_token_payload)) -> int:
    """ID de l'appelant extrait du claim `sub`. 400 si le claim n'est pas un entier."""
    try:
        return int(payload.sub)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid user ID")


def require_role(role: str):
    """
    Dépendance exigeant un rôle présent dans l'access token.

    Usage :
        @router.get("", dependencies=[Depends(require_role("admin"))])
    """
    def role_checker(payload: TokenPayload = Depends(get_token_payload)) -> TokenPayload:
        if role not in payload.roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{role}' required",
            )
        return payload

    return role_checker


def get_client_ip(request: Request) -> Optional[str]:
    """IP du client ; premier élément de X-Forwarded-For derrière un proxy."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


def get_user_agent(request: Request) -> Optional[str]:
    """User-Agent tronqué à la taille de la colonne."""
    user_agent = request.headers.get("User-Agent")
    return user_agent[:500] if user_agent else None
