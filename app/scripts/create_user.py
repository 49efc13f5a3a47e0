"""
Create a user through the registration workflow (e.g. the first admin). Run from project root:
  python -m app.scripts.create_user EMAIL PASSWORD [--name NAME] [--role USER|ADMIN]
Example:
  python -m app.scripts.create_user admin@example.com your-secure-password --name Admin

The first user ever created becomes an active ADMIN; later ADMIN requests are
left pending for approval, exactly as with POST /auth/register.
"""
import argparse
import logging
import sys

from pydantic import ValidationError as PydanticValidationError

from app.core.config import get_settings
from app.core.database import Database
from app.core.errors import AppError, field_errors
from app.core.logging_config import configure_logging
from app.models.user import Role
from app.schemas.auth import RegisterRequest
from app.services.auth import register_user

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Create an ELibrary user.")
    parser.add_argument("email", help="Login email")
    parser.add_argument("password", help="Password (6-128 chars)")
    parser.add_argument("--name", default=None, help="Display name (3+ chars)")
    parser.add_argument("--role", default=Role.USER.value, choices=[r.value for r in Role])
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    try:
        body = RegisterRequest(
            name=args.name,
            email=args.email.strip(),
            password=args.password,
            role=Role(args.role),
        )
    except PydanticValidationError as e:
        for err in field_errors(e.errors()):
            print(f"{err['field']}: {err['message']}", file=sys.stderr)
        return 1

    database = Database(settings.DATABASE_URL, echo=settings.DEBUG)
    db = database.session()
    try:
        user, _token = register_user(db, body, settings)
        print(f"Created user '{user.email}' with role {user.role.value} and status {user.status.value}.")
        return 0
    except AppError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
        database.dispose()


if __name__ == "__main__":
    sys.exit(main())
