from typing import List
from fastapi import HTTPException
from starlette import status
from sqlalchemy.orm import Session
from models.users import User
from models.roles import Role, UserClaim
from services.auth_service import AuthService
from utils.logger import get_logger

logger = get_logger(__name__)


def _bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


class RoleService:
    """
    Role and claim administration.
    """

    @staticmethod
    def require_user(db: Session, email: str) -> User:
        user = AuthService.get_user_by_email(db, email)
        if user is None:
            logger.info("Admin action on unknown user", extra={"email": email})
            raise _bad_request(f"The user {email} does not exist")
        return user

    @staticmethod
    def require_role(db: Session, name: str) -> Role:
        role = db.query(Role).filter(Role.name == name).one_or_none()
        if role is None:
            logger.info("Admin action on unknown role", extra={"role": name})
            raise _bad_request(f"The role {name} does not exist")
        return role

    @staticmethod
    def list_roles(db: Session) -> List[Role]:
        return db.query(Role).order_by(Role.name).all()

    @staticmethod
    def create_role(db: Session, name: str) -> Role:
        if db.query(Role).filter(Role.name == name).first():
            raise _bad_request("Role already exists")

        role = Role(name=name)
        db.add(role)
        db.commit()
        db.refresh(role)

        logger.info(f"The role {name} has been added successfully", extra={"role": name})
        return role

    @staticmethod
    def list_users(db: Session) -> List[User]:
        return db.query(User).order_by(User.email).all()

    @staticmethod
    def add_user_to_role(db: Session, email: str, role_name: str) -> User:
        user = RoleService.require_user(db, email)
        role = RoleService.require_role(db, role_name)

        if role in user.roles:
            raise _bad_request(f"The user {email} is already in the role {role_name}")

        user.roles.append(role)
        db.commit()

        logger.info("User added to role", extra={"user_id": user.id, "role": role_name})
        return user

    @staticmethod
    def get_user_roles(db: Session, email: str) -> List[str]:
        user = RoleService.require_user(db, email)
        return sorted(role.name for role in user.roles)

    @staticmethod
    def remove_user_from_role(db: Session, email: str, role_name: str) -> User:
        user = RoleService.require_user(db, email)
        role = RoleService.require_role(db, role_name)

        if role not in user.roles:
            raise _bad_request(f"The user {email} is not in the role {role_name}")

        user.roles.remove(role)
        db.commit()

        logger.info("User removed from role", extra={"user_id": user.id, "role": role_name})
        return user

    @staticmethod
    def get_user_claims(db: Session, email: str) -> List[UserClaim]:
        user = RoleService.require_user(db, email)
        return list(user.claims)

    @staticmethod
    def add_claim_to_user(db: Session, email: str, claim_type: str, claim_value: str) -> UserClaim:
        user = RoleService.require_user(db, email)

        claim = UserClaim(user_id=user.id, claim_type=claim_type, claim_value=claim_value)
        db.add(claim)
        db.commit()
        db.refresh(claim)

        logger.info("Claim added to user", extra={"user_id": user.id, "claim_type": claim_type})
        return claim
