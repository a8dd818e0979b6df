"""
Router pour la gestion des rôles. Toutes les routes exigent le rôle admin.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_role
from app.schemas.auth import MessageResponse
from app.schemas.role import RoleAssignRequest, RoleResponse
from app.services import role_service

router = APIRouter(
    prefix="/roles",
    tags=["Rôles"],
    dependencies=[Depends(require_role(role_service.ADMIN_ROLE))],
)


@router.get("", response_model=List[RoleResponse], summary="Lister les rôles")
def list_roles(db: Session = Depends(get_db)):
    return role_service.list_roles(db)


@router.get("/user/{user_id}", response_model=List[RoleResponse], summary="Rôles d'un utilisateur")
def get_user_roles(user_id: int, db: Session = Depends(get_db)):
    roles = role_service.get_roles_for_user(db, user_id)
    if roles is None:
        raise HTTPException(status_code=404, detail="User not found")
    return roles


@router.post("/assign", response_model=MessageResponse, summary="Assigner un rôle")
def assign_role(data: RoleAssignRequest, db: Session = Depends(get_db)):
    """Assigne un rôle à un utilisateur. Un même couple ne peut être assigné qu'une fois."""
    try:
        role_service.assign_role(db, data.user_id, data.role_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return MessageResponse(message="Role assigned successfully")


@router.delete("/remove", response_model=MessageResponse, summary="Retirer un rôle")
def remove_role(data: RoleAssignRequest, db: Session = Depends(get_db)):
    success = role_service.remove_role(db, data.user_id, data.role_id)
    if not success:
        raise HTTPException(status_code=404, detail="User does not have this role")
    return MessageResponse(message="Role removed successfully")
