"""
Create a user (e.g. an extra admin). Run from project root:
  python -m inkwell.scripts.create_user NAME EMAIL PASSWORD [role]
Example:
  python -m inkwell.scripts.create_user "Site Admin" admin@example.com your-secure-password admin
"""
import argparse
import sys

from dotenv import load_dotenv

from inkwell.core.config import get_settings
from inkwell.core.database import Database
from inkwell.core.security import NAME_MAX_LEN, PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from inkwell.models import Role
from inkwell.services.auth import EmailTakenError, create_user


def main(argv: list[str] | None = None, database: Database | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create an Inkwell user.")
    parser.add_argument("name", help=f"Display name (1-{NAME_MAX_LEN} chars)")
    parser.add_argument("email", help="Email address (stored lowercased)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument(
        "role", nargs="?", default=Role.USER.value, choices=[r.value for r in Role]
    )
    args = parser.parse_args(argv)

    name = args.name.strip()
    if not name or len(name) > NAME_MAX_LEN:
        print("Invalid name length.", file=sys.stderr)
        return 1
    if "@" not in args.email:
        print("Invalid email address.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(
            f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.",
            file=sys.stderr,
        )
        return 1

    owns_database = database is None
    if database is None:
        load_dotenv()
        database = Database.from_settings(get_settings())
        database.connect()
    db = database.session()
    try:
        user = create_user(db, name, args.email, args.password, Role(args.role))
        print(f"Created user '{user.email}' with role '{args.role}'.")
        return 0
    except EmailTakenError as e:
        print(f"{e.message}: {args.email}", file=sys.stderr)
        return 1
    finally:
        db.close()
        if owns_database:
            database.dispose()


if __name__ == "__main__":
    sys.exit(main())
