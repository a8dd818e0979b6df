"""
Service métier pour la gestion des rôles et de leurs assignations.
L'autorisation (rôle admin requis) est vérifiée par les dépendances des routers.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.user import Role, User, UserRole
from app.schemas.role import RoleResponse

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"

# Données de référence insérées au démarrage
DEFAULT_ROLES = {
    "admin": "Administration des utilisateurs et des rôles",
    "manager": "Gestion des formations et des équipes",
    "trainer": "Formateur",
    "scheduler": "Planification des sessions",
}


def ensure_default_roles(db: Session) -> int:
    """Insère les rôles de référence manquants. Retourne le nombre de rôles créés."""
    existing = set(db.execute(select(Role.name)).scalars().all())

    to_insert = [
        {"name": name, "description": description}
        for name, description in DEFAULT_ROLES.items()
        if name not in existing
    ]

    if to_insert:
        db.bulk_insert_mappings(Role, to_insert)
        db.commit()
        logger.info("%d rôle(s) de référence créé(s)", len(to_insert))

    return len(to_insert)


def list_roles(db: Session) -> list[RoleResponse]:
    """Retourne tous les rôles, triés par ID."""
    roles = db.execute(select(Role).order_by(Role.id)).scalars().all()
    return [RoleResponse.model_validate(r) for r in roles]


def get_role_names(db: Session, user_id: int) -> list[str]:
    """Noms des rôles d'un utilisateur (ordre non significatif)."""
    return list(db.execute(
        select(Role.name)
        .join(UserRole, UserRole.role_id == Role.id)
        .where(UserRole.user_id == user_id)
    ).scalars().all())


def get_roles_for_user(db: Session, user_id: int) -> Optional[list[RoleResponse]]:
    """Rôles d'un utilisateur, ou None si l'utilisateur n'existe pas."""
    if db.get(User, user_id) is None:
        return None

    roles = db.execute(
        select(Role)
        .join(UserRole, UserRole.role_id == Role.id)
        .where(UserRole.user_id == user_id)
        .order_by(Role.id)
    ).scalars().all()
    return [RoleResponse.model_validate(r) for r in roles]


def assign_role(db: Session, user_id: int, role_id: int) -> None:
    """
    Assigne un rôle à un utilisateur.
    Lève LookupError si l'utilisateur ou le rôle est introuvable,
    ValueError si le couple existe déjà.
    """
    if db.get(User, user_id) is None:
        raise LookupError("User not found")
    if db.get(Role, role_id) is None:
        raise LookupError("Role not found")

    existing = db.execute(
        select(UserRole).where(UserRole.user_id == user_id, UserRole.role_id == role_id)
    ).scalar_one_or_none()
    if existing is not None:
        raise ValueError("User already has this role")

    db.add(UserRole(user_id=user_id, role_id=role_id))
    try:
        db.commit()
    except IntegrityError:
        # Assignation concurrente du même couple
        db.rollback()
        raise ValueError("User already has this role")

    logger.info("Rôle %s assigné à l'utilisateur %s", role_id, user_id)


def remove_role(db: Session, user_id: int, role_id: int) -> bool:
    """Retire un rôle. Retourne True si retiré, False si le lien n'existe pas."""
    link = db.execute(
        select(UserRole).where(UserRole.user_id == user_id, UserRole.role_id == role_id)
    ).scalar_one_or_none()
    if link is None:
        return False

    db.delete(link)
    db.commit()
    logger.info("Rôle %s retiré de l'utilisateur %s", role_id, user_id)
    return True
