"""
Point d'entrée principal de l'API MonRépétiteur.
Démarrage : uvicorn app.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

import app.models  # noqa: F401 (enregistre tous les modèles dans Base.metadata avant les routers)
from app.config import settings
from app.errors import DomainError
from app.routers import accounts, applications, contracts, offers, stats, tutors

logger = logging.getLogger(__name__)

app = FastAPI(
    title="MonRépétiteur API",
    description="Mise en relation parents / répétiteurs : offres, candidatures et contrats",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

# allow_origin_regex est nécessaire pour les requêtes preflight POST avec Content-Type JSON.
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=settings.CORS_ORIGIN_REGEX,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)


app.include_router(accounts.router)
app.include_router(tutors.router)
app.include_router(offers.router)
app.include_router(applications.router)
app.include_router(contracts.router)
app.include_router(stats.router)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Convertit une erreur métier en réponse JSON avec son statut HTTP et son code machine."""
    if exc.status_code >= 500:
        logger.error("%s %s : %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s refusé (%s) : %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code, "details": exc.details},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Corps de requête invalide : même enveloppe {detail, code, details} que les erreurs métier."""
    errors = [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": str(error.get("msg", "")).removeprefix("Value error, "),
        }
        for error in exc.errors()
    ]
    message = errors[0]["msg"] if errors else "Requête invalide."
    logger.info("%s %s refusé (validation_error) : %s", request.method, request.url.path, message)
    return JSONResponse(
        status_code=422,
        content={"detail": message, "code": "validation_error", "details": {"errors": errors}},
    )


@app.exception_handler(OperationalError)
async def database_unavailable_handler(request: Request, exc: OperationalError) -> JSONResponse:
    """Base de données injoignable : 503 plutôt qu'une erreur interne opaque."""
    logger.error("Base de données indisponible : %s", exc)
    return JSONResponse(
        status_code=503,
        content={
            "detail": "Service momentanément indisponible, réessayez plus tard.",
            "code": "backend_unavailable",
            "details": {},
        },
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte toutes les exceptions non gérées pour garantir que la réponse 500
    passe bien par CORSMiddleware (qui injecte les headers CORS).
    """
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Une erreur interne est survenue."},
    )


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "MonRépétiteur API", "version": "0.1.0"}
