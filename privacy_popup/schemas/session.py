"""Shop session schema."""

from datetime import UTC, datetime

from pydantic import Field

from privacy_popup.schemas.common import BaseSchema


class ShopSession(BaseSchema):
    """Binds a shop to the access token granted during installation."""

    shop: str
    access_token: str = Field(repr=False)
    scope: str = ""
    expires_at: datetime | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def is_expired(self, now: datetime | None = None) -> bool:
        """Offline sessions (no ``expires_at``) never expire."""
        if self.expires_at is None:
            return False
        return (now or datetime.now(UTC)) >= self.expires_at
