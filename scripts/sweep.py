import asyncio
import json

from videosync.core.config import settings
from videosync.core.logging import configure_logging
from videosync.db.session import engine, Session, init_db
from videosync.api.v1.dependencies import build_reconciliation_service


async def run_sweep():
    """Sweep unique, pour un cron externe plutôt que le scheduler intégré."""
    configure_logging(settings.LOG_LEVEL)
    init_db()
    with Session(engine) as session:
        summary = await build_reconciliation_service(session).sweep()
    print(json.dumps(summary.model_dump(by_alias=True), indent=2))
    return summary


if __name__ == "__main__":
    asyncio.run(run_sweep())
