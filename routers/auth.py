from fastapi import APIRouter, Request
from starlette import status
from utils.deps import db_dependency, issuer_dependency, verifier_dependency
from schemas.auth_schemas import (AuthResult, CreateUserRequest, LoginRequest,
                                  TokenRequest, RevokeTokenRequest)
from services.auth_service import AuthService
from services.ledger_service import LedgerService
from services.token_service import FailureKind, TokenPair
from core.exceptions import AuthenticationFailure, PersistenceFailure
from middleware.rate_limiter import limiter
from utils.logger import get_logger

# Setup logger
logger = get_logger(__name__)


router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


def _auth_result(tokens: TokenPair) -> AuthResult:
    return AuthResult(token=tokens.access_token, refresh_token=tokens.refresh_token, success=True)


@router.post("/register", response_model=AuthResult, status_code=status.HTTP_200_OK)
@limiter.limit("3/minute")
async def register(request: Request, body: CreateUserRequest, db: db_dependency, issuer: issuer_dependency):
    user = AuthService.create_user(body, db)

    logger.info(
        "User registered successfully",
        extra={"user_id": user.id, "email": user.email}
    )

    return _auth_result(issuer.issue(user, db))


@router.post("/login", response_model=AuthResult)
@limiter.limit("5/minute")
async def login(request: Request, body: LoginRequest, db: db_dependency, issuer: issuer_dependency):
    user = AuthService.authenticate_user(body.email, body.password, db)

    tokens = issuer.issue(user, db)

    logger.info(
        "User logged in successfully",
        extra={"user_id": user.id, "email": user.email}
    )

    return _auth_result(tokens)


@router.post("/refresh-token", response_model=AuthResult)
@limiter.limit("10/minute")
async def refresh_token(request: Request, body: TokenRequest, db: db_dependency, verifier: verifier_dependency):
    """
    Exchange an access token and its paired refresh token for a new pair.
    The presented refresh token can never be redeemed again.
    """
    result = verifier.refresh(body.token, body.refresh_token, db)

    if not result.succeeded:
        if result.failure.kind is FailureKind.PERSISTENCE:
            raise PersistenceFailure(result.failure.reason)
        raise AuthenticationFailure(result.failure.reason)

    return _auth_result(result.tokens)


@router.post("/logout", status_code=status.HTTP_200_OK)
@limiter.limit("10/minute")
async def logout(request: Request, body: RevokeTokenRequest, db: db_dependency):
    """
    Revoke a refresh token. Unknown or already revoked tokens are ignored.
    """
    LedgerService.revoke(db, body.refresh_token)

    logger.info("User logged out")

    return {"success": True, "errors": []}
