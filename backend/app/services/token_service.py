"""
Émission des jetons.

- Access token : JWT HS256 court (ACCESS_TOKEN_EXPIRE_MINUTES), porte l'ID,
  le matricule et les rôles de l'utilisateur, avec issuer et audience.
- Refresh token : chaîne opaque aléatoire, stockée sur la ligne users.
  Sa validité (REFRESH_TOKEN_EXPIRE_DAYS) est suivie en base, pas par signature.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel

from app.config import settings
from app.models.user import User

ACCESS_TOKEN_TYPE = "access"


class TokenPayload(BaseModel):
    """Claims validés d'un access token."""
    sub: str
    matricule: str
    roles: List[str]
    exp: datetime
    jti: Optional[str] = None


def create_access_token(user: User, roles: List[str], now: Optional[datetime] = None) -> str:
    """Construit et signe l'access token d'un utilisateur."""
    now = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "matricule": user.matricule,
        "roles": list(roles),
        "type": ACCESS_TOKEN_TYPE,
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "jti": secrets.token_urlsafe(16),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_access_token(token: str) -> TokenPayload:
    """
    Vérifie signature, issuer, audience, expiration et type du jeton.
    Lève JWTError si l'une de ces vérifications échoue.
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
        )
    except ExpiredSignatureError:
        raise JWTError("Token has expired")

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise JWTError("Invalid token type")
    if "sub" not in payload:
        raise JWTError("Missing subject claim")

    return TokenPayload(
        sub=payload["sub"],
        matricule=payload.get("matricule", ""),
        roles=payload.get("roles", []),
        exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        jti=payload.get("jti"),
    )


def generate_refresh_token() -> str:
    """Génère un refresh token opaque (512 bits d'aléa, encodé base64 URL)."""
    return secrets.token_urlsafe(64)


def refresh_token_expiry(now: Optional[datetime] = None) -> datetime:
    """Date d'expiration d'un refresh token émis à `now`."""
    now = now or datetime.now(timezone.utc)
    return now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
