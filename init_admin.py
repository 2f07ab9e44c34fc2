# init_admin.py
"""
Promote an existing account to admin.

Accounts are created on first login (Supabase Auth + auto-provisioning), so
the first admin is bootstrapped by promoting that profile:

    python init_admin.py admin@example.com

Does nothing if an admin already exists, unless --force is given.
"""
import argparse
import logging

from sqlmodel import Session

from app.database import create_db_and_tables, engine
from app.models import booking as _booking_models  # noqa: F401
from app.models import product as _product_models  # noqa: F401
from app.repositories.user_repo import UserRepository

logger = logging.getLogger("init_admin")


def init_admin(email: str, force: bool = False) -> int:
    repo = UserRepository()
    create_db_and_tables()

    with Session(engine) as session:
        existing = repo.get_first_admin(session)
        if existing is not None and not force:
            logger.info("Admin user already exists: %s", existing.email)
            return 0

        user = repo.get_by_email(session, email)
        if user is None:
            logger.error("No profile for %s. Sign in once so it gets provisioned.", email)
            return 1

        user.role = "admin"
        user.is_active = True
        repo.update(session, user)
        logger.info("Admin user ready: %s", user.email)
        return 0


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("email", help="email of the profile to promote")
    parser.add_argument("--force", action="store_true", help="promote even if an admin exists")
    args = parser.parse_args()

    raise SystemExit(init_admin(args.email, force=args.force))


if __name__ == "__main__":
    main()
