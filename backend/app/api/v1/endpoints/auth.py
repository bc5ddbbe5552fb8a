from fastapi import APIRouter, Depends

from app.api.v1.dependencies import get_current_user
from app.schemas.auth import CallerIdentity

router = APIRouter()


@router.post("/verify-token", response_model=CallerIdentity)
async def verify_token(
    current_user: CallerIdentity = Depends(get_current_user),
) -> CallerIdentity:
    """Validate the bearer token and echo the identity it belongs to."""
    return current_user


@router.get("/me", response_model=CallerIdentity)
async def read_current_user(
    current_user: CallerIdentity = Depends(get_current_user),
) -> CallerIdentity:
    return current_user
