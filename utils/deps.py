from functools import lru_cache
from typing import Annotated, Optional
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from jose import JWTError, jwt
from starlette import status
from core.config import settings, JwtConfig
from core.database import SessionLocal
from services.token_service import TokenIssuer, TokenVerifier


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

db_dependency = Annotated[Session, Depends(get_db)]


@lru_cache
def get_jwt_config() -> JwtConfig:
    return JwtConfig.from_settings(settings)

jwt_config_dependency = Annotated[JwtConfig, Depends(get_jwt_config)]


def get_token_issuer(config: jwt_config_dependency) -> TokenIssuer:
    return TokenIssuer(config)

issuer_dependency = Annotated[TokenIssuer, Depends(get_token_issuer)]


def get_token_verifier(config: jwt_config_dependency, issuer: issuer_dependency) -> TokenVerifier:
    return TokenVerifier(config, issuer)

verifier_dependency = Annotated[TokenVerifier, Depends(get_token_verifier)]


bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                         detail=detail,
                         headers={"WWW-Authenticate": "Bearer"})


def get_current_user(config: jwt_config_dependency,
                     credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)]):
    if credentials is None:
        raise _unauthorized("Not authenticated.")

    try:
        payload = jwt.decode(credentials.credentials, config.secret, algorithms=[config.algorithm])
    except JWTError:
        raise _unauthorized("Could not validate credentials.")

    user_id = payload.get("Id")
    email = payload.get("email")
    if user_id is None or email is None:
        raise _unauthorized("Could not validate credentials.")

    return {"user_id": user_id, "email": email, "roles": list(payload.get("roles") or [])}


user_dependency = Annotated[dict, Depends(get_current_user)]


def require_role(role_name: str):
    """Dependency factory: the caller's access token must carry ``role_name``."""
    def checker(user: user_dependency) -> dict:
        if role_name not in user["roles"]:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                                detail=f"Role '{role_name}' required.")
        return user
    return checker


admin_dependency = Annotated[dict, Depends(require_role(settings.ADMIN_ROLE))]
