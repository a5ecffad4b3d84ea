"""Verified access token claims."""

from typing import Any

from pydantic import BaseModel, Field


class TokenClaims(BaseModel):
    """Claims extracted from a verified access token."""

    subject: str = Field(description="User id (sub)")
    issuer: str | None = Field(default=None)
    email: str | None = Field(default=None)
    roles: set[str] = Field(default_factory=set)
    expires_at: int | None = Field(default=None)
    jti: str | None = Field(default=None)
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "TokenClaims":
        roles = payload.get("roles") or []
        if isinstance(roles, str):
            roles = [roles]
        return cls(
            subject=payload["sub"],
            issuer=payload.get("iss"),
            email=payload.get("email"),
            roles=set(roles),
            expires_at=payload.get("exp"),
            jti=payload.get("jti"),
            raw=dict(payload),
        )
