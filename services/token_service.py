import secrets
import string
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from jose import jwt, JWTError
from core.config import JwtConfig
from core.exceptions import PersistenceFailure
from models.users import User
from services.auth_service import AuthService
from services.ledger_service import LedgerService
from utils.logger import get_logger, sanitize_log_data

logger = get_logger(__name__)

REFRESH_TOKEN_ALPHABET = string.ascii_uppercase + string.digits
REFRESH_TOKEN_RANDOM_LENGTH = 35

# Signatures verify against any HMAC variant; the algorithm gate then pins
# the configured one
HMAC_ALGORITHMS = ["HS256", "HS384", "HS512"]

# Claims the issuer sets itself; user claims may not shadow them
RESERVED_CLAIMS = {"Id", "email", "sub", "jti", "exp", "iat", "nbf", "iss", "aud", "roles"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def generate_refresh_token_string(length: int = REFRESH_TOKEN_RANDOM_LENGTH) -> str:
    """Random uppercase-alphanumeric prefix from ``secrets`` followed by a UUID4."""
    prefix = "".join(secrets.choice(REFRESH_TOKEN_ALPHABET) for _ in range(length))
    return prefix + str(uuid.uuid4())


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class FailureKind(str, Enum):
    AUTHENTICATION = "authentication"
    PERSISTENCE = "persistence"


@dataclass(frozen=True)
class VerificationFailure:
    kind: FailureKind
    reason: str


@dataclass(frozen=True)
class RefreshResult:
    """Outcome of a refresh attempt: exactly one of ``tokens`` / ``failure`` is set."""
    tokens: Optional[TokenPair] = None
    failure: Optional[VerificationFailure] = None

    @property
    def succeeded(self) -> bool:
        return self.tokens is not None

    @classmethod
    def ok(cls, tokens: TokenPair) -> "RefreshResult":
        return cls(tokens=tokens)

    @classmethod
    def fail(cls, reason: str, kind: FailureKind = FailureKind.AUTHENTICATION) -> "RefreshResult":
        return cls(failure=VerificationFailure(kind=kind, reason=reason))


class TokenIssuer:
    """
    Mints access tokens and their paired refresh-token ledger records.
    """

    def __init__(self, config: JwtConfig):
        self.config = config

    def build_claims(self, user: User, jti: str, expires_at: datetime) -> dict:
        claims = {
            claim.claim_type: claim.claim_value
            for claim in user.claims
            if claim.claim_type not in RESERVED_CLAIMS
        }
        claims.update({
            "Id": user.id,
            "email": user.email,
            "sub": user.email,
            "jti": jti,
            "roles": sorted(role.name for role in user.roles),
            "exp": int(expires_at.timestamp())
        })
        return claims

    def create_access_token(self, user: User, issued_at: Optional[datetime] = None) -> Tuple[str, str]:
        """
        Returns:
            Tuple of (signed access token, its jti)
        """
        issued_at = issued_at or _utcnow()
        jti = str(uuid.uuid4())
        claims = self.build_claims(user, jti, issued_at + self.config.access_token_lifetime)

        token = jwt.encode(claims, self.config.secret, algorithm=self.config.algorithm)
        return token, jti

    def issue(self, user: User, db: Session) -> TokenPair:
        """
        Creates an access token + refresh token pair and records the refresh
        token in the ledger. Commits the session, including any pending
        ledger change the caller made (the rotated record during refresh).

        Raises:
            PersistenceFailure: the ledger insert could not be committed
        """
        issued_at = _utcnow()
        access_token, jti = self.create_access_token(user, issued_at)
        refresh_token = generate_refresh_token_string()

        try:
            LedgerService.add(
                db,
                jwt_id=jti,
                token=refresh_token,
                user_id=user.id,
                issued_at=issued_at,
                expires_at=issued_at + self.config.refresh_token_lifetime
            )
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(
                "Failed to persist refresh token",
                extra={"user_id": user.id, "jti": jti, "error_type": type(exc).__name__},
                exc_info=True
            )
            raise PersistenceFailure("Unable to issue tokens") from exc

        logger.info("Token pair issued", extra={"user_id": user.id, "jti": jti})

        return TokenPair(access_token=access_token, refresh_token=refresh_token)


class TokenVerifier:
    """
    Exchanges an access token + refresh token for a fresh pair.

    Gates run in a fixed order and the first failure wins; nothing is written
    unless every gate passes.
    """

    def __init__(self, config: JwtConfig, issuer: TokenIssuer):
        self.config = config
        self.issuer = issuer

    def _accepted_algorithms(self) -> List[str]:
        if self.config.algorithm in HMAC_ALGORITHMS:
            return HMAC_ALGORITHMS
        return [self.config.algorithm]

    def _reject(self, reason: str, **context) -> RefreshResult:
        logger.warning(f"Token refresh rejected: {reason}", extra=sanitize_log_data(context))
        return RefreshResult.fail(reason)

    def refresh(self, access_token: str, refresh_token: str, db: Session) -> RefreshResult:
        # Signature and structure; lifetime is judged separately below
        try:
            claims = jwt.decode(
                access_token,
                self.config.secret,
                algorithms=self._accepted_algorithms(),
                options={"verify_exp": False}
            )
            header = jwt.get_unverified_header(access_token)
        except JWTError:
            return self._reject("Invalid token")

        if str(header.get("alg", "")).upper() != self.config.algorithm.upper():
            return self._reject("Invalid token algorithm", alg=header.get("alg"))

        exp = claims.get("exp")
        jti = claims.get("jti")
        if not isinstance(exp, (int, float)) or not jti:
            return self._reject("Invalid token")

        now = _utcnow()
        if self.config.require_expired_access_token and datetime.fromtimestamp(exp, tz=timezone.utc) > now:
            return self._reject("Token has not yet expired", jti=jti)

        try:
            stored = LedgerService.get_by_token(db, refresh_token)
            if stored is None:
                return self._reject("Token does not exist", refresh_token=refresh_token)

            if stored.is_used:
                return self._reject("Token has been used", jti=stored.jwt_id)

            if stored.is_revoked:
                return self._reject("Token has been revoked", jti=stored.jwt_id)

            if _as_utc(stored.expires_at) <= now:
                return self._reject("Token has expired", jti=stored.jwt_id)

            if stored.jwt_id != jti:
                return self._reject("Token does not match", jti=jti, stored_jti=stored.jwt_id)

            user_id = stored.user_id
            # The is_used flip stays uncommitted until issue() commits it
            # together with the new record; any failure rolls both back.
            if not LedgerService.mark_used(db, stored.id):
                db.rollback()
                return self._reject("Token has been used", jti=jti)

            user = AuthService.get_user_by_id(db, user_id)
            if user is None:
                db.rollback()
                return self._reject("Token does not exist", user_id=user_id)

            tokens = self.issuer.issue(user, db)

        except PersistenceFailure as exc:
            return RefreshResult.fail(exc.message, kind=FailureKind.PERSISTENCE)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(
                "Token refresh aborted by storage error",
                extra={"jti": jti, "error_type": type(exc).__name__},
                exc_info=True
            )
            return RefreshResult.fail("Unable to verify token", kind=FailureKind.PERSISTENCE)

        logger.info("Token pair rotated", extra={"user_id": user_id, "old_jti": jti})
        return RefreshResult.ok(tokens)
