"""
Seed the standard roles (ROLE_EMPLOYEE, ROLE_MANAGER, ROLE_ADMIN). Run from project root:

  python -m usermanagement.scripts.seed_roles

Idempotent: existing roles are left alone.
"""

import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from usermanagement.core.database import SessionLocal
from usermanagement.services.seed import seed_roles

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Insert any missing standard roles."""
    db = SessionLocal()
    try:
        created = seed_roles(db)
        logger.info("Role seeding completed: created=%s", len(created))
        return 0
    except SQLAlchemyError as e:
        logger.exception("Role seeding failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
