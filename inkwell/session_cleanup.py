"""
CLI entrypoint for the expired-session sweep. Run from cron, e.g.:

  python -m inkwell.session_cleanup

Or hourly: 0 * * * * cd /path/to/inkwell && .venv/bin/python -m inkwell.session_cleanup
"""

import logging
import sys

from dotenv import load_dotenv

from inkwell.core.config import get_settings
from inkwell.core.database import Database
from inkwell.services.auth import cleanup_expired_sessions

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def run(database: Database) -> int:
    """Delete expired sessions; return a process exit code."""
    db = database.session()
    try:
        sessions_deleted = cleanup_expired_sessions(db)
        logger.info("Session cleanup completed: sessions_deleted=%s", sessions_deleted)
        return 0
    except Exception as e:
        db.rollback()
        logger.exception("Session cleanup failed: %s", e)
        return 1
    finally:
        db.close()


def main() -> int:
    load_dotenv()
    database = Database.from_settings(get_settings())
    database.connect()
    try:
        return run(database)
    finally:
        database.dispose()


if __name__ == "__main__":
    sys.exit(main())
