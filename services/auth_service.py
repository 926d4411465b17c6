from typing import Optional
from utils.hashing import verify_password, get_password_hash
from models.users import User
from schemas.auth_schemas import CreateUserRequest
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from core.exceptions import AuthenticationFailure, ConflictFailure, PersistenceFailure
from utils.logger import get_logger

logger = get_logger(__name__)

INVALID_LOGIN = "Invalid login request"


class AuthService:
    """
    Credential store operations. Raw passwords never leave this class.
    """

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email.strip().lower()).one_or_none()

    @staticmethod
    def get_user_by_id(db: Session, user_id: str) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).one_or_none()

    @staticmethod
    def create_user(request: CreateUserRequest, db: Session) -> User:
        """
        Creates a new user.

        Raises:
            ConflictFailure: the email is already registered
            PersistenceFailure: the store rejected the insert for another reason
        """
        email = request.email.strip().lower()

        if AuthService.get_user_by_email(db, email):
            logger.warning(
                "Registration attempt with existing email",
                extra={"email": email}
            )
            raise ConflictFailure("Email is already in use")

        model = User(
            email=email,
            username=request.username,
            hashed_password=get_password_hash(request.password)
        )

        try:
            db.add(model)
            db.commit()
        except IntegrityError:
            # lost a race with a concurrent registration of the same email
            db.rollback()
            logger.warning("Registration conflict on commit", extra={"email": email})
            raise ConflictFailure("Email is already in use")
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(
                "Unable to create user",
                extra={"email": email, "error_type": type(exc).__name__},
                exc_info=True
            )
            raise PersistenceFailure("Unable to create user") from exc

        db.refresh(model)
        return model

    @staticmethod
    def authenticate_user(email: str, password: str, db: Session) -> User:
        user = AuthService.get_user_by_email(db, email)

        if not user:
            logger.warning(
                "Login failed - user not found",
                extra={"email": email}
            )
            raise AuthenticationFailure(INVALID_LOGIN)

        if not verify_password(password, user.hashed_password):
            logger.warning(
                "Login failed - invalid password",
                extra={"user_id": user.id, "email": email}
            )
            raise AuthenticationFailure(INVALID_LOGIN)

        logger.debug(
            "User authenticated successfully",
            extra={"user_id": user.id, "email": email}
        )

        return user
