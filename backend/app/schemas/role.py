"""
Schémas Pydantic pour les rôles et leurs assignations.
"""

from typing import Optional

from pydantic import BaseModel, Field


class RoleResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]

    model_config = {"from_attributes": True}


class RoleAssignRequest(BaseModel):
    """Corps de POST /roles/assign et DELETE /roles/remove."""
    user_id: int = Field(gt=0)
    role_id: int = Field(gt=0)
