"""
Create a user (e.g. the first admin). Run from project root:
  python -m usermanagement.scripts.create_user USERNAME PASSWORD FIRST LAST EMAIL [--role ROLE ...]
Example:
  python -m usermanagement.scripts.create_user susan your-secure-password Susan Admin susan@example.com \
      --role ROLE_MANAGER --role ROLE_ADMIN

The user is registered like any other (default role included); each --role is added on top.
"""
import argparse
import logging
import sys

from pydantic import ValidationError

from usermanagement.core.config import get_settings
from usermanagement.core.database import SessionLocal
from usermanagement.core.security import PasswordHasher
from usermanagement.repositories.credential_store import SqlAlchemyCredentialStore
from usermanagement.schemas.users import RegistrationRequest
from usermanagement.services.errors import UserManagementError
from usermanagement.services.registration import register_user
from usermanagement.services.roles import role_authority

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a user account from the command line.")
    parser.add_argument("username", help="Username (3-50 chars)")
    parser.add_argument("password", help="Password (6-100 chars)")
    parser.add_argument("first_name")
    parser.add_argument("last_name")
    parser.add_argument("email")
    parser.add_argument(
        "--role",
        action="append",
        default=[],
        help="Extra role to grant, e.g. ADMIN or ROLE_ADMIN (repeatable)",
    )
    args = parser.parse_args(argv)

    try:
        request = RegistrationRequest(
            username=args.username,
            password=args.password,
            first_name=args.first_name,
            last_name=args.last_name,
            email=args.email,
        )
    except ValidationError as e:
        for err in e.errors():
            print(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}", file=sys.stderr)
        return 1

    settings = get_settings()
    db = SessionLocal()
    try:
        store = SqlAlchemyCredentialStore(db)
        # Resolve every extra role before anything is written.
        extra_roles = []
        for name in dict.fromkeys(role_authority(r.strip().upper()) for r in args.role):
            role = store.find_role_by_name(name)
            if role is None:
                print(f"Role '{name}' does not exist; run seed_roles first.", file=sys.stderr)
                return 1
            extra_roles.append(role)

        summary = register_user(
            store,
            PasswordHasher(rounds=settings.BCRYPT_ROUNDS),
            request,
            default_role=settings.DEFAULT_ROLE,
        )
        user = store.find_user_by_id(summary.id)
        missing = [role for role in extra_roles if role not in user.roles]
        if missing:
            user.roles.extend(missing)
            store.save(user)
        print(f"Created user '{user.username}' with roles {', '.join(sorted(user.role_names))}.")
        return 0
    except UserManagementError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
