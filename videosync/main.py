"""
➡️ But : assembler toutes les pièces du puzzle.

Crée l'instance FastAPI (app).

Configure :

CORS, titre, version, tags

handler unique des ServiceError → {"error": ..., "message": ...}

schéma OpenAPI personnalisé

Inclut les routers (/api/v1/webhooks, /api/v1/video-processing, /api/v1/health).

Au démarrage : logging, tables, sweep périodique si SWEEP_INTERVAL_SECONDS > 0.

Point unique d'exécution : uvicorn videosync.main:app --reload.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import Session

from videosync.core.config import settings
from videosync.core.errors import ServiceError
from videosync.core.logging import configure_logging
from videosync.core.openapi import custom_openapi
from videosync.db.session import engine, init_db
from videosync.api.v1.dependencies import build_reconciliation_service
from videosync.api.v1.routers import health, processing, webhooks
from videosync.features.processing.scheduler import SweepScheduler

import uvicorn

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    openapi_tags=[
        {"name": "webhooks", "description": "Événements poussés par la plateforme de streaming"},
        {"name": "video-processing", "description": "Réconciliation et relance des traitements vidéo"},
        {"name": "health", "description": "Sonde de vie"},
    ],
)

# CORS (ajustez selon vos besoins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], allow_credentials=True,
    allow_methods=["*"], allow_headers=["*"],
)

@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())

# Routers
app.include_router(webhooks.router, prefix="/api/v1")
app.include_router(processing.router, prefix="/api/v1")
app.include_router(health.router, prefix="/api/v1")

app.openapi = lambda: custom_openapi(app)


async def run_scheduled_sweep():
    with Session(engine) as session:
        return await build_reconciliation_service(session).sweep()

scheduler = SweepScheduler(settings.SWEEP_INTERVAL_SECONDS, run_scheduled_sweep)

# Démarrage
@app.on_event("startup")
async def on_startup():
    configure_logging(settings.LOG_LEVEL)
    init_db()
    if settings.SWEEP_INTERVAL_SECONDS > 0:
        scheduler.start()
    else:
        logger.info("Periodic sweep disabled (SWEEP_INTERVAL_SECONDS=0)")

@app.on_event("shutdown")
async def on_shutdown():
    await scheduler.stop()

if __name__ == "__main__":
    uvicorn.run("videosync.main:app", host="127.0.0.1", port=8080, reload=(settings.ENV == "dev"))
