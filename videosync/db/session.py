"""
➡️ But : Configurer la base et gérer les sessions de base de données.

engine : connexion à la base (SQLite par défaut, DATABASE_URL sinon).

init_db() : crée les tables à partir des modèles SQLModel.

get_session() : dépendance FastAPI qui ouvre une session, la fournit aux routes, puis la ferme proprement.

🔹 Avantages :

Un seul endroit pour gérer les connexions DB.

Réutilisable par injection (Depends(get_session)) et par le sweep périodique (Session(engine)).
"""

from typing import Dict, Any
from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy.engine import Engine

# Import all models for creating all tables
from videosync.db.models.profiles import Profile
from videosync.db.models.videos import Video
from videosync.db.models.webhook_logs import WebhookLog
from videosync.db.models.notifications import Notification
from videosync.db.models.system_logs import SystemLog

from videosync.core.config import settings

def _build_engine() -> Engine:
    url = settings.DATABASE_URL
    assert url, "DATABASE_URL must be set"

    is_sqlite = url.startswith("sqlite:")

    connect_args: Dict[str, Any] = {}
    if is_sqlite:
        # Requis pour SQLite quand utilisé dans un app serveur (multi-threads)
        connect_args["check_same_thread"] = False

    engine = create_engine(
        url,
        echo=False,
        connect_args=connect_args,
        pool_pre_ping=not is_sqlite,  # ping utile pour Postgres/MySQL ; inutile pour SQLite
    )
    return engine

engine: Engine = _build_engine()

def init_db(bind: Engine = engine) -> None:
    """
    Crée les tables si elles n'existent pas.
    Le schéma de prod est géré hors de ce service.
    """
    SQLModel.metadata.create_all(bind)


def get_session():
    """
    Dépendance FastAPI : fournit une session par requête.
    Utilisation :
        def route(..., session: Session = Depends(get_session)):
            ...
    """
    with Session(engine) as session:
        yield session
