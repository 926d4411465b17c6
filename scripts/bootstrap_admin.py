#!/usr/bin/env python3
"""Grant the admin role to an existing user.

The role/claim administration endpoints require the admin role, so the first
administrator has to be created out of band.

Usage:
    python scripts/bootstrap_admin.py --email admin@example.com
    ADMIN_EMAIL=admin@example.com python scripts/bootstrap_admin.py --dry-run
"""
import argparse
import os
import sys
from pathlib import Path

# Add project root to path for imports
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def bootstrap_admin(email: str, dry_run: bool = False) -> dict:
    """Ensure the admin role exists and ``email`` holds it.

    Returns:
        dict with email, role and status ('promoted', 'already_admin',
        'dry_run' or 'missing_user')
    """
    # Import here so the env is read only after argument parsing
    import models  # noqa: F401
    from core.config import settings
    from core.database import Base, SessionLocal, engine
    from models.roles import Role
    from services.auth_service import AuthService

    role_name = settings.ADMIN_ROLE
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        user = AuthService.get_user_by_email(db, email)
        if user is None:
            print(f"No user registered with {email}; register first via POST /auth/register")
            return {"email": email, "role": role_name, "status": "missing_user"}

        if any(role.name == role_name for role in user.roles):
            print(f"User {email} already has role {role_name}")
            return {"email": email, "role": role_name, "status": "already_admin"}

        if dry_run:
            print(f"[DRY RUN] Would grant {role_name} to {email}")
            return {"email": email, "role": role_name, "status": "dry_run"}

        role = db.query(Role).filter(Role.name == role_name).one_or_none()
        if role is None:
            role = Role(name=role_name)
            db.add(role)

        user.roles.append(role)
        db.commit()
        print(f"Granted {role_name} to {email} (id: {user.id})")
        return {"email": email, "role": role_name, "status": "promoted"}
    finally:
        db.close()


def main() -> int:
    parser = argparse.ArgumentParser(description="Grant the admin role to a registered user")
    parser.add_argument("--email", default=os.getenv("ADMIN_EMAIL"), help="Email of the user to promote")
    parser.add_argument("--dry-run", action="store_true", help="Report what would change without writing")
    args = parser.parse_args()

    if not args.email:
        parser.error("--email or ADMIN_EMAIL is required")

    result = bootstrap_admin(args.email, dry_run=args.dry_run)
    return 1 if result["status"] == "missing_user" else 0


if __name__ == "__main__":
    sys.exit(main())
