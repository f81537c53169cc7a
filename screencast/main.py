"""
➡️ But : assembler toutes les pièces du puzzle.

Crée l’instance FastAPI (app).

Configure :

CORS (autorisations de qui peut appeler ces API)

logging, handlers d'erreurs métier

schéma OpenAPI personnalisé

Inclut les routers (ex : /api/v1/videos, /api/v1/analytics).

Initialise la base au démarrage (lifespan).

🔹 Point unique d’exécution : uvicorn screencast.main:app --reload.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from screencast.core.config import settings
from screencast.core.errors import register_exception_handlers
from screencast.core.logging import setup_logging
from screencast.core.openapi import custom_openapi
from screencast.db.session import init_db

from screencast.api.v1.routers import analytics, health, videos

import uvicorn


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    init_db()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "videos", "description": "Upload, partage et liste des enregistrements"},
        {"name": "analytics", "description": "Vues et complétion de visionnage"},
        {"name": "health", "description": "Supervision"},
    ],
)

# CORS (ajustez selon vos besoins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS, allow_credentials=True,
    allow_methods=["*"], allow_headers=["*"],
)

register_exception_handlers(app)

# Routers
app.include_router(videos.router, prefix="/api/v1")
app.include_router(analytics.router, prefix="/api/v1")
app.include_router(health.router, prefix="/api/v1")

# Génération du schéma OpenAPI custom
app.openapi = lambda: custom_openapi(app)

if __name__ == "__main__":
    uvicorn.run("screencast.main:app", host="127.0.0.1", port=8080, reload=(settings.ENV == "dev")) # http://localhost:8080
