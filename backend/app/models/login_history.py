"""
Modèle SQLAlchemy pour l'historique des connexions.
Une ligne par tentative de connexion, réussie ou non. Jamais modifiée.
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, func

from app.database import Base


class LoginHistory(Base):
    __tablename__ = "login_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # NULL si le matricule saisi ne correspond à aucun utilisateur
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    login_time = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(500), nullable=True)
    is_successful = Column(Boolean, nullable=False, default=False)
