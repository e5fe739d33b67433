from contextlib import asynccontextmanager
import logging

from career_helper.storage.db import init_db, purge_old_records

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    init_db()
    deleted = purge_old_records()
    if any(deleted.values()):
        logger.info("ai_run_retention_purge deleted=%s", deleted)
    yield
