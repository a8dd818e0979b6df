"""
Schémas Pydantic pour la création d'utilisateurs par un administrateur.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class UserCreate(BaseModel):
    first_name: str = Field(max_length=50)
    last_name: str = Field(max_length=50)
    matricule: str = Field(max_length=10)
    password: str = Field(min_length=6)

    @field_validator("first_name", "last_name", "matricule")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip()


class UserResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    matricule: str

    model_config = {"from_attributes": True}


class UserImportRow(BaseModel):
    """Représente une ligne valide du CSV d'amorçage après parsing."""
    matricule: str
    password: str
    first_name: str
    last_name: str
    role: Optional[str] = None  # nom d'un rôle existant (colonne optionnelle)
