from fastapi import APIRouter, Request
from starlette import status
from utils.deps import db_dependency, admin_dependency
from services.role_service import RoleService
from middleware.rate_limiter import limiter


router = APIRouter(
    prefix="/claims",
    tags=["claims"]
)


@router.get("", status_code=status.HTTP_200_OK)
async def get_all_claims(email: str, admin: admin_dependency, db: db_dependency):
    return [
        {"type": claim.claim_type, "value": claim.claim_value}
        for claim in RoleService.get_user_claims(db, email)
    ]


@router.post("/add-to-user", status_code=status.HTTP_200_OK)
@limiter.limit("10/minute")
async def add_claim_to_user(request: Request, email: str, claim_name: str, claim_value: str,
                            admin: admin_dependency, db: db_dependency):
    claim = RoleService.add_claim_to_user(db, email, claim_name, claim_value)
    return {"result": f"User {email} has a claim {claim.claim_type} added to them"}
