from fastapi import APIRouter, Request
from starlette import status
from utils.deps import db_dependency, admin_dependency
from services.role_service import RoleService
from services.ledger_service import LedgerService
from middleware.rate_limiter import limiter
from utils.logger import get_logger

logger = get_logger(__name__)


router = APIRouter(
    prefix="/setup",
    tags=["setup"]
)


@router.get("/roles", status_code=status.HTTP_200_OK)
async def get_all_roles(admin: admin_dependency, db: db_dependency):
    return [{"id": role.id, "name": role.name} for role in RoleService.list_roles(db)]


@router.post("/roles", status_code=status.HTTP_200_OK)
@limiter.limit("10/minute")
async def create_role(request: Request, name: str, admin: admin_dependency, db: db_dependency):
    role = RoleService.create_role(db, name)
    return {"result": f"The role {role.name} has been added successfully"}


@router.get("/users", status_code=status.HTTP_200_OK)
async def get_all_users(admin: admin_dependency, db: db_dependency):
    return [
        {"id": user.id, "email": user.email, "username": user.username}
        for user in RoleService.list_users(db)
    ]


@router.post("/users/add-to-role", status_code=status.HTTP_200_OK)
@limiter.limit("10/minute")
async def add_user_to_role(request: Request, email: str, role_name: str, admin: admin_dependency, db: db_dependency):
    RoleService.add_user_to_role(db, email, role_name)
    return {"result": f"The user with email: {email} was added to the role {role_name}"}


@router.get("/users/roles", status_code=status.HTTP_200_OK)
async def get_user_roles(email: str, admin: admin_dependency, db: db_dependency):
    return RoleService.get_user_roles(db, email)


@router.post("/users/remove-from-role", status_code=status.HTTP_200_OK)
@limiter.limit("10/minute")
async def remove_user_from_role(request: Request, email: str, role_name: str, admin: admin_dependency, db: db_dependency):
    RoleService.remove_user_from_role(db, email, role_name)
    return {"result": f"The user with email: {email} has been removed from the role {role_name}"}


@router.post("/users/revoke-tokens", status_code=status.HTTP_200_OK)
@limiter.limit("10/minute")
async def revoke_user_tokens(request: Request, email: str, admin: admin_dependency, db: db_dependency):
    """
    Revoke every outstanding refresh token of a user (forces re-login everywhere).
    """
    user = RoleService.require_user(db, email)
    revoked = LedgerService.revoke_all_for_user(db, user.id)

    logger.info(
        "Admin revoked user tokens",
        extra={"user_id": user.id, "admin_id": admin["user_id"], "revoked_count": revoked}
    )

    return {"result": f"Revoked {revoked} refresh token(s) for {email}"}
