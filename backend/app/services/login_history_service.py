"""
Service d'historique des connexions.
Écriture en ajout seul ; lecture triée de la plus récente à la plus ancienne.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.login_history import LoginHistory
from app.models.user import User
from app.schemas.login_history import LoginHistoryEntry, LoginHistoryUser, LoginHistoryWithUser

logger = logging.getLogger(__name__)

ALL_HISTORY_LIMIT = 100
USER_HISTORY_LIMIT = 50
OWN_HISTORY_LIMIT = 20


def build_entry(
    user_id: Optional[int],
    ip_address: Optional[str],
    user_agent: Optional[str],
    is_successful: bool = False,
    login_time: Optional[datetime] = None,
) -> LoginHistory:
    """Construit une entrée d'historique (non ajoutée à la session)."""
    return LoginHistory(
        user_id=user_id,
        login_time=login_time or datetime.now(timezone.utc),
        ip_address=ip_address,
        user_agent=user_agent,
        is_successful=is_successful,
    )


def record_attempt(
    db: Session,
    user_id: Optional[int],
    ip_address: Optional[str],
    user_agent: Optional[str],
    is_successful: bool,
    login_time: Optional[datetime] = None,
) -> LoginHistory:
    """
    Enregistre une tentative de connexion et committe.
    Les modifications déjà en attente dans la session partent dans le même commit.
    """
    entry = build_entry(user_id, ip_address, user_agent, is_successful, login_time)
    db.add(entry)
    db.commit()
    return entry


def get_all_history(db: Session, limit: int = ALL_HISTORY_LIMIT) -> list[LoginHistoryWithUser]:
    """Retourne les dernières tentatives, tous utilisateurs confondus, avec le résumé utilisateur."""
    rows = db.execute(
        select(LoginHistory, User)
        .outerjoin(User, User.id == LoginHistory.user_id)
        .order_by(LoginHistory.login_time.desc(), LoginHistory.id.desc())
        .limit(limit)
    ).all()

    return [
        LoginHistoryWithUser(
            id=entry.id,
            login_time=entry.login_time,
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
            is_successful=entry.is_successful,
            user=LoginHistoryUser.model_validate(user) if user is not None else None,
        )
        for entry, user in rows
    ]


def get_user_history(db: Session, user_id: int, limit: int = USER_HISTORY_LIMIT) -> list[LoginHistoryEntry]:
    """Retourne les dernières tentatives d'un utilisateur."""
    entries = db.execute(
        select(LoginHistory)
        .where(LoginHistory.user_id == user_id)
        .order_by(LoginHistory.login_time.desc(), LoginHistory.id.desc())
        .limit(limit)
    ).scalars().all()
    return [LoginHistoryEntry.model_validate(e) for e in entries]
