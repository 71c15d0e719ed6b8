"""
Create a user from the command line. Run from project root:
  python -m tracky.scripts.create_user USERNAME PASSWORD
Example:
  python -m tracky.scripts.create_user alice your-secure-password
"""
import argparse
import logging
import sys

from tracky.core.config import get_settings
from tracky.core.database import build_engine, build_session_factory, init_db
from tracky.core.errors import UsernameTakenError
from tracky.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    hash_password,
)
from tracky.services import store


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Tracky user with a Default notebook.")
    parser.add_argument("username", help=f"Username (1-{USERNAME_MAX_LEN} chars, case-sensitive)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    args = parser.parse_args(argv)

    username = args.username
    if not username or len(username) > USERNAME_MAX_LEN:
        print("Invalid username length.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    settings = get_settings()
    engine = build_engine(settings.DATABASE_URL)
    if settings.DB_AUTO_CREATE:
        init_db(engine)
    db = build_session_factory(engine)()
    try:
        user_id = store.create_user(db, username, hash_password(args.password)).id
        store.ensure_default_notebook(db, user_id)
    except UsernameTakenError:
        print(f"User '{username}' already exists.", file=sys.stderr)
        return 1
    finally:
        db.close()
        engine.dispose()
    print(f"Created user '{username}' with id {user_id}.")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    sys.exit(main())
