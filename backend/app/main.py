"""
Point d'entrée principal de l'API d'authentification.
Démarrage : uvicorn app.main:app --reload
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

import app.models  # noqa: F401 — enregistre tous les modèles dans Base.metadata avant les routers
from app.config import settings
from app.database import SessionLocal, get_db, init_db
from app.routers import auth, login_history, roles, users
from app.services.role_service import ensure_default_roles
from app.services.user_import import import_users_from_csv

logger = logging.getLogger(__name__)


def initialize_data() -> None:
    """
    Crée le schéma, insère les rôles de référence puis importe le CSV d'amorçage.
    Une erreur est journalisée mais n'empêche pas l'API de démarrer.
    """
    try:
        init_db()
        db = SessionLocal()
        try:
            ensure_default_roles(db)
            import_users_from_csv(db, settings.CSV_FILE_PATH)
        finally:
            db.close()
    except Exception as exc:
        logger.error("Erreur lors de l'initialisation de la base : %s", exc, exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Cycle de vie de l'application : initialise la base au démarrage."""
    initialize_data()
    yield


app = FastAPI(
    title="Auth API",
    description="API d'authentification, de gestion des rôles et d'historique de connexion",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# CORS — origines explicites car le cookie de refresh exige allow_credentials
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)


app.include_router(auth.router)
app.include_router(login_history.router)
app.include_router(roles.router)
app.include_router(users.router)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Toutes les erreurs HTTP sont renvoyées sous la forme {"Message": "..."}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"Message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte toutes les exceptions non gérées pour garantir que la réponse 500
    passe bien par CORSMiddleware (qui injecte les headers CORS).
    Le détail reste dans les logs serveur, le client reçoit un message générique.
    """
    logger.error("Exception non gérée sur %s %s : %s", request.method, request.url.path, exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"Message": "An unexpected error occurred."},
    )


@app.get("/health", tags=["Santé"])
def health_check(db: Session = Depends(get_db)):
    """Vérifie que l'API et la base répondent ; response_time_ms mesure un SELECT 1."""
    start = time.perf_counter()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Health check : base de données injoignable : %s", e)
        return JSONResponse(
            status_code=503,
            content={"status": "Unhealthy", "timestamp": datetime.now(timezone.utc).isoformat()},
        )
    return {
        "status": "Healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "response_time_ms": round((time.perf_counter() - start) * 1000, 3),
    }
