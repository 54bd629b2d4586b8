"""
Create a user from the command line. Run from project root:
  python -m app.scripts.create_user USERNAME EMAIL PASSWORD [--admin]
Example:
  python -m app.scripts.create_user alice alice@example.com your-secure-password --admin
"""
import argparse
import logging
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal, engine
from app.core.errors import AppError
from app.core.i18n import translate
from app.models import ADMIN_ROLE
from app.services.bootstrap import ensure_default_roles, ensure_schema
from app.services.users import create_user

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a user (optionally with the Admin role).")
    parser.add_argument("username", help="Username (1-255 chars)")
    parser.add_argument("email", help="Email address (must be unique)")
    parser.add_argument("password", help="Password (8-128 chars)")
    parser.add_argument("--admin", action="store_true", help="Assign the Admin role")
    args = parser.parse_args(argv)

    ensure_schema(engine)
    db = SessionLocal()
    try:
        roles = ensure_default_roles(db)
        role_ids = [roles[ADMIN_ROLE].id] if args.admin else None
        user = create_user(db, args.username, args.email, args.password, role_ids=role_ids)
        logger.info("Created user '%s' (id=%s) roles=%s", user.username, user.id, user.role_names)
        return 0
    except AppError as e:
        print(translate(e.message_key, get_settings().DEFAULT_LOCALE), file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
