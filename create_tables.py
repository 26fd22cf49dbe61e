# create_tables.py
"""
Create the schema and, when ADMIN_EMAIL and ADMIN_PASSWORD are set, a first admin account
"""

import logging
import os
import sys

from workforce.config import get_settings
from workforce.database import Database
from workforce.models import Role, User, UserStatus
from workforce.utils.logging import configure_logging
from workforce.utils.security import hash_password

logger = logging.getLogger("workforce.create_tables")


def create_default_admin(database: Database) -> bool:
    email = os.getenv("ADMIN_EMAIL")
    password = os.getenv("ADMIN_PASSWORD")
    if not email or not password:
        logger.info("ADMIN_EMAIL/ADMIN_PASSWORD not set, skipping admin seed")
        return False

    with database.session() as db:
        if db.query(User.id).filter(User.email == email).first():
            logger.info("Admin user %s already exists", email)
            return False
        db.add(User(
            email=email,
            password_hash=hash_password(password),
            first_name=os.getenv("ADMIN_FIRST_NAME", "System"),
            last_name=os.getenv("ADMIN_LAST_NAME", "Administrator"),
            role=Role.ADMIN,
            status=UserStatus.ACTIVE,
        ))
    logger.info("Default admin user %s created", email)
    return True


def create_tables() -> int:
    settings = get_settings()
    configure_logging(settings.log_level)
    database = Database(settings.database_url, echo=settings.database_echo)
    try:
        database.initialize()
        create_default_admin(database)
    except Exception:
        logger.exception("Error creating tables")
        return 1
    finally:
        database.close()
    return 0


if __name__ == "__main__":
    sys.exit(create_tables())
