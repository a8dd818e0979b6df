"""
Schémas Pydantic pour l'historique des connexions.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class LoginHistoryUser(BaseModel):
    """Résumé de l'utilisateur propriétaire d'une entrée."""
    id: int
    matricule: str
    first_name: str
    last_name: str

    model_config = {"from_attributes": True}


class LoginHistoryEntry(BaseModel):
    id: int
    login_time: datetime
    ip_address: Optional[str]
    user_agent: Optional[str]
    is_successful: bool

    model_config = {"from_attributes": True}


class LoginHistoryWithUser(LoginHistoryEntry):
    """Entrée de l'historique global : inclut l'utilisateur (null si matricule inconnu)."""
    user: Optional[LoginHistoryUser] = None
