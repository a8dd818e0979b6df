# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.
# user.py doit précéder login_history.py (FK login_history.user_id → users.id).

from app.models.user import Role, User, UserRole  # noqa: F401
from app.models.login_history import LoginHistory  # noqa: F401
