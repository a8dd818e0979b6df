"""
Modèles SQLAlchemy pour les utilisateurs, les rôles et leur association.
Les rôles d'un utilisateur sont chargés par requête sur user_roles (pas de relationship).
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint

from app.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    matricule = Column(String(10), unique=True, nullable=False, index=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    password_hash = Column(Text, nullable=False)
    # Les deux champs sont renseignés ensemble ou tous deux NULL
    refresh_token = Column(Text, nullable=True, index=True)
    refresh_token_expiry = Column(DateTime(timezone=True), nullable=True)


class Role(Base):
    """Groupe de permissions nommé (admin, manager, trainer, scheduler)."""
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), unique=True, nullable=False)
    description = Column(String(255), nullable=True)


class UserRole(Base):
    """Association utilisateur ↔ rôle, une seule fois par couple."""
    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role_id", name="uq_user_roles_user_role"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False)
