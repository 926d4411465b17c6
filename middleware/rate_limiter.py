from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
from jose import jwt, JWTError
from core.config import settings


def get_user_id(request: Request) -> str:
    """
    Rate-limit key.

    Signed-in callers are throttled per user, so one account cannot dodge its
    limits by hopping addresses. The token's lifetime is not checked here:
    a client refreshing an expired access token still counts against its own
    bucket. Anything else is keyed by client address.
    """
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and token:
        try:
            payload = jwt.decode(
                token,
                settings.JWT_SECRET,
                algorithms=[settings.JWT_ALGORITHM],
                options={"verify_exp": False}
            )
        except JWTError:
            payload = {}

        if payload.get("Id"):
            return f"user:{payload['Id']}"

    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_user_id,
    default_limits=["200/hour"],
    enabled=settings.ENV != "testing"
)
