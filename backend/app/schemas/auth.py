"""
Schémas Pydantic pour l'authentification (login, refresh, me).
"""

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class LoginRequest(BaseModel):
    """Corps de POST /auth/login. `identifier` est accepté comme alias de `matricule`."""
    model_config = ConfigDict(populate_by_name=True)

    matricule: str = Field(validation_alias=AliasChoices("matricule", "identifier"))
    password: str

    @field_validator("matricule", "password")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v


class RefreshTokenRequest(BaseModel):
    """Corps optionnel de POST /auth/refresh (clients sans cookie)."""
    refresh_token: Optional[str] = None


class AuthResponse(BaseModel):
    """Réponse de login et de refresh."""
    id: int
    first_name: str
    last_name: str
    matricule: str
    access_token: str
    refresh_token: str
    roles: List[str]


class CurrentUserResponse(BaseModel):
    """Réponse de GET /auth/me."""
    id: int
    first_name: str
    last_name: str
    matricule: str
    roles: List[str]


class MessageResponse(BaseModel):
    message: str
