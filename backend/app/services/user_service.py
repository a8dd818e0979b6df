"""
Service de création manuelle d'utilisateurs (hors import CSV).
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.user import User
from app.schemas.user import UserCreate, UserResponse
from app.services.password_service import hash_password

logger = logging.getLogger(__name__)


def create_user(db: Session, data: UserCreate) -> UserResponse:
    """
    Crée un utilisateur avec un mot de passe haché.
    Lève une ValueError si le matricule existe déjà.
    """
    user = User(
        matricule=data.matricule,
        first_name=data.first_name,
        last_name=data.last_name,
        password_hash=hash_password(data.password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValueError(f"Un utilisateur avec le matricule '{data.matricule}' existe déjà.")
    db.refresh(user)

    logger.info("Utilisateur %s créé (id=%s)", user.matricule, user.id)
    return UserResponse.model_validate(user)
