"""
Router pour l'historique des connexions.
L'historique global et celui d'un utilisateur sont réservés aux administrateurs.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user_id, require_role
from app.schemas.login_history import LoginHistoryEntry, LoginHistoryWithUser
from app.services import login_history_service
from app.services.role_service import ADMIN_ROLE

router = APIRouter(prefix="/login-history", tags=["Historique de connexion"])


@router.get(
    "",
    response_model=List[LoginHistoryWithUser],
    dependencies=[Depends(require_role(ADMIN_ROLE))],
    summary="Historique global",
)
def get_login_history(db: Session = Depends(get_db)):
    """Les 100 dernières tentatives de connexion, de la plus récente à la plus ancienne."""
    return login_history_service.get_all_history(db)


@router.get("/my-history", response_model=List[LoginHistoryEntry], summary="Mon historique")
def get_my_login_history(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """Les 20 dernières tentatives de l'appelant."""
    return login_history_service.get_user_history(db, user_id, limit=login_history_service.OWN_HISTORY_LIMIT)


@router.get(
    "/user/{user_id}",
    response_model=List[LoginHistoryEntry],
    dependencies=[Depends(require_role(ADMIN_ROLE))],
    summary="Historique d'un utilisateur",
)
def get_user_login_history(user_id: int, db: Session = Depends(get_db)):
    """Les 50 dernières tentatives d'un utilisateur."""
    return login_history_service.get_user_history(db, user_id)
