"""Bearer token verification against Firebase Authentication."""
import logging
from typing import Any, Protocol

from firebase_admin import auth

from app.core.exceptions import UnauthorizedError
from app.schemas.auth import CallerIdentity

logger = logging.getLogger(__name__)


class IdentityVerifier(Protocol):
    def verify(self, token: str) -> CallerIdentity:
        ...


class FirebaseIdentityVerifier:
    def __init__(self, app: Any) -> None:
        self.app = app

    def verify(self, token: str) -> CallerIdentity:
        if not token:
            raise UnauthorizedError("Missing ID token")
        try:
            decoded = auth.verify_id_token(token, app=self.app)
        except Exception as e:
            logger.warning(f"Firebase auth error: {e}")
            raise UnauthorizedError("Invalid or expired token") from e

        return CallerIdentity(
            id=decoded["uid"],
            email=decoded.get("email"),
            role=decoded.get("role") or "user",
        )
