import string
import dataclasses
import uuid
from datetime import timedelta, datetime, timezone
import pytest
from jose import jwt, JWTError
from core.config import Settings, JwtConfig
from models.users import User
from models.roles import Role, UserClaim
from services.token_service import (TokenIssuer, RefreshResult, FailureKind,
                                    generate_refresh_token_string, REFRESH_TOKEN_RANDOM_LENGTH)

SECRET = "unit-test-secret-0123456789-abcdefghij"


def make_transient_user(**kwargs) -> User:
    return User(id=kwargs.get("id", str(uuid.uuid4())),
                email=kwargs.get("email", "user@example.com"),
                username="user",
                hashed_password="x")


def test_refresh_token_string_shape():
    token = generate_refresh_token_string()

    prefix, suffix = token[:REFRESH_TOKEN_RANDOM_LENGTH], token[REFRESH_TOKEN_RANDOM_LENGTH:]
    assert len(prefix) == 35
    assert set(prefix) <= set(string.ascii_uppercase + string.digits)
    assert uuid.UUID(suffix)


def test_refresh_token_strings_are_unique():
    tokens = {generate_refresh_token_string() for _ in range(200)}
    assert len(tokens) == 200


def test_jwt_config_from_settings():
    settings = Settings(JWT_SECRET=SECRET, ACCESS_TOKEN_EXPIRE_SECONDS=45,
                        REFRESH_TOKEN_EXPIRE_DAYS=3, REFRESH_REQUIRES_EXPIRED_ACCESS_TOKEN=True)
    config = JwtConfig.from_settings(settings)

    assert config.secret == SECRET
    assert config.algorithm == "HS256"
    assert config.access_token_lifetime == timedelta(seconds=45)
    assert config.refresh_token_lifetime == timedelta(days=3)
    assert config.require_expired_access_token is True


def test_jwt_config_is_immutable():
    config = JwtConfig(secret=SECRET)
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.secret = "other"


def test_access_token_claims():
    issuer = TokenIssuer(JwtConfig(secret=SECRET, access_token_lifetime=timedelta(minutes=5)))
    user = make_transient_user(email="claims@example.com")

    token, jti = issuer.create_access_token(user)

    payload = jwt.decode(token, SECRET, algorithms=["HS256"])
    assert payload["Id"] == user.id
    assert payload["email"] == "claims@example.com"
    assert payload["sub"] == "claims@example.com"
    assert payload["jti"] == jti
    assert uuid.UUID(payload["jti"])
    assert payload["roles"] == []
    assert jwt.get_unverified_header(token)["alg"] == "HS256"


def test_access_token_expiry_follows_config():
    issuer = TokenIssuer(JwtConfig(secret=SECRET, access_token_lifetime=timedelta(seconds=30)))
    issued_at = datetime(2030, 1, 1, tzinfo=timezone.utc)

    token, _ = issuer.create_access_token(make_transient_user(), issued_at)

    payload = jwt.decode(token, SECRET, algorithms=["HS256"], options={"verify_exp": False})
    assert payload["exp"] == int((issued_at + timedelta(seconds=30)).timestamp())


def test_each_access_token_gets_a_new_jti():
    issuer = TokenIssuer(JwtConfig(secret=SECRET))
    user = make_transient_user()

    _, jti_1 = issuer.create_access_token(user)
    _, jti_2 = issuer.create_access_token(user)

    assert jti_1 != jti_2


def test_roles_and_custom_claims_in_token():
    issuer = TokenIssuer(JwtConfig(secret=SECRET))
    user = make_transient_user()
    user.roles = [Role(name="Editor"), Role(name="Admin")]
    user.claims = [
        UserClaim(claim_type="department", claim_value="finance"),
        UserClaim(claim_type="sub", claim_value="spoofed@example.com"),
    ]

    token, _ = issuer.create_access_token(user)
    payload = jwt.decode(token, SECRET, algorithms=["HS256"])

    assert payload["roles"] == ["Admin", "Editor"]
    assert payload["department"] == "finance"
    # reserved claims cannot be overridden by user claims
    assert payload["sub"] == user.email


def test_expired_access_token_rejected_by_strict_decode():
    issuer = TokenIssuer(JwtConfig(secret=SECRET, access_token_lifetime=timedelta(seconds=-1)))
    token, _ = issuer.create_access_token(make_transient_user())

    with pytest.raises(JWTError):
        jwt.decode(token, SECRET, algorithms=["HS256"])


def test_refresh_result_helpers():
    failed = RefreshResult.fail("Token has been used")
    assert failed.succeeded is False
    assert failed.failure.kind is FailureKind.AUTHENTICATION
    assert failed.failure.reason == "Token has been used"

    storage = RefreshResult.fail("Unable to verify token", kind=FailureKind.PERSISTENCE)
    assert storage.failure.kind is FailureKind.PERSISTENCE
