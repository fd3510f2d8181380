"""
➡️ But : Personnaliser la documentation Swagger/OpenAPI.

custom_openapi(app) modifie le schéma généré par FastAPI pour :

ajouter une description détaillée (conventions webhook, signature, réconciliation),

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
            "Réconciliation des vidéos hébergées sur la plateforme de streaming.\n\n"
            "### Conventions\n"
            "- Toutes les heures sont en UTC.\n"
            "- Webhook : en-tête `x-signature: sha256=<hex-hmac>` calculé sur le corps brut.\n"
            "- Erreurs : `{\"error\": ..., \"message\": ...}`.\n"
            "- Routes `video-processing` : jeton Bearer avec un rôle admin.\n"
        ),
        routes=app.routes,
    )
    app.openapi_schema = openapi_schema
    return app.openapi_schema
