"""
Create an account (e.g. the first admin). Run from project root:
  python -m medadmin.scripts.create_user EMAIL PASSWORD [NAME] [--role ADMIN|COLLABORATOR]
Example:
  python -m medadmin.scripts.create_user admin@example.com your-secure-password "Admin User" --role ADMIN

Accounts created here are marked as email-verified.
"""
import argparse
import sys
from datetime import UTC, datetime

from medadmin.core.config import get_settings
from medadmin.core.database import build_engine, build_session_factory
from medadmin.core.security import (
    EMAIL_MAX_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    hash_password,
)
from medadmin.models import Role, User


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a dashboard account (no registration UI).")
    parser.add_argument("email", help=f"Email (1-{EMAIL_MAX_LEN} chars)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("name", nargs="?", default="Admin User")
    parser.add_argument(
        "--role",
        default=Role.ADMIN.value,
        choices=[r.value for r in Role],
    )
    args = parser.parse_args(argv)

    email = args.email.strip()
    if not email or len(email) > EMAIL_MAX_LEN or "@" not in email:
        print("Invalid email.", file=sys.stderr)
        return 1
    if len(args.password) < PASSWORD_MIN_LEN or len(args.password) > PASSWORD_MAX_LEN:
        print(
            f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.",
            file=sys.stderr,
        )
        return 1

    settings = get_settings()
    engine = build_engine(settings)
    db = build_session_factory(engine)()
    try:
        existing = db.query(User).filter(User.email == email).first()
        if existing:
            print(f"User '{email}' already exists.", file=sys.stderr)
            return 1
        user = User(
            name=args.name.strip(),
            email=email,
            password_hash=hash_password(args.password, settings.BCRYPT_ROUNDS),
            role=args.role,
            disabled=False,
            email_verified_at=datetime.now(UTC),
        )
        db.add(user)
        db.commit()
        print(f"Created user '{email}' with role '{args.role}'.")
        return 0
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
