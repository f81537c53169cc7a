"""
➡️ But : Personnaliser la documentation Swagger/OpenAPI.

custom_openapi(app) modifie le schéma généré par FastAPI pour :

ajouter une description détaillée (conventions de l'API),

centraliser la personnalisation du Swagger.
"""

from fastapi.openapi.utils import get_openapi

def custom_openapi(app):
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=(
            "Enregistrement d'écran : upload, partage et statistiques de visionnage.\n\n"
            "### Conventions\n"
            "- Toutes les heures sont en UTC.\n"
            "- Les erreurs ont la forme `{\"error\", \"stage\", \"details\"}`.\n"
            "- Les URLs signées expirent (1h en lecture, 7 jours à l'upload).\n"
        ),
        routes=app.routes,
    )
    app.openapi_schema = openapi_schema
    return app.openapi_schema
