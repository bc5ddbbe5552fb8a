from app.schemas.common import CamelModel


class CallerIdentity(CamelModel):
    """Identity of the authenticated caller as reported by the identity provider."""

    id: str
    email: str | None = None
    role: str = "user"
