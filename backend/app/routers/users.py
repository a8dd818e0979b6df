"""
Router pour la création d'utilisateurs par un administrateur.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_role
from app.schemas.user import UserCreate, UserResponse
from app.services import user_service
from app.services.role_service import ADMIN_ROLE

router = APIRouter(prefix="/users", tags=["Utilisateurs"])


@router.post(
    "",
    response_model=UserResponse,
    status_code=201,
    dependencies=[Depends(require_role(ADMIN_ROLE))],
    summary="Créer un utilisateur",
)
def create_user(data: UserCreate, db: Session = Depends(get_db)):
    """Crée un utilisateur avec un matricule unique. Le mot de passe est haché avant stockage."""
    try:
        return user_service.create_user(db, data)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
