"""Bearer-token authentication helpers."""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.exceptions import UnauthorizedError
from app.schemas.auth import CallerIdentity
from app.services.identity import IdentityVerifier

bearer_scheme = HTTPBearer(auto_error=False)


def get_identity_verifier(request: Request) -> IdentityVerifier:
    """Verifier owned by the Firebase client the lifespan put on ``app.state``."""
    return request.app.state.firebase.identity_verifier()


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("No token provided")
    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_bearer_token),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> CallerIdentity:
    """Resolve the caller from the Authorization header or fail with 401."""
    return verifier.verify(token)
