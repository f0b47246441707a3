"""
Auth Models
-----------
Pydantic models for the token claim set, the verified request identity and
the auth API responses.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# CLAIM SET
# ============================================================================
class TokenPayload(BaseModel):
    """
    Signed claim set embedded in every token.

    Field aliases are the wire claim names (iss, sub, aud, iat, nbf, exp, jti).
    Timestamps travel as integer UNIX seconds and are always timezone-aware here.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        json_schema_extra={
            "example": {
                "iss": "token_auth_api",
                "sub": "u1",
                "aud": "token_auth",
                "iat": 1760868000,
                "exp": 1760868900,
                "jti": "9f2c4b1e6a7d8c90e1f2a3b4c5d6e7f8",
                "user_id": "u1",
                "email": "a@example.com",
                "roles": ["user"],
            }
        },
    )

    # Standard claims
    issuer: str = Field(default="", alias="iss", description="Token issuer")
    subject: str = Field(default="", alias="sub", description="Token subject")
    audience: str = Field(default="", alias="aud", description="Intended audience")
    issued_at: datetime = Field(..., alias="iat", description="Issued-at time")
    not_before: Optional[datetime] = Field(
        default=None, alias="nbf", description="Not valid before this time"
    )
    expiration: datetime = Field(..., alias="exp", description="Expiration time")
    token_id: str = Field(default="", alias="jti", description="Unique token identifier")

    # Custom claims
    user_id: str = Field(default="", description="Authenticated user's ID")
    email: str = Field(default="", description="Authenticated user's email")
    roles: List[str] = Field(default_factory=list, description="Granted role names")

    @field_validator("issued_at", "not_before", "expiration")
    @classmethod
    def ensure_aware(cls, value: Optional[datetime]) -> Optional[datetime]:
        """Treat naive datetimes as UTC."""
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_claims(self) -> Dict[str, Any]:
        """Serialize to the wire claim dictionary, omitting unset optional claims."""
        claims: Dict[str, Any] = {
            "iss": self.issuer,
            "sub": self.subject,
            "aud": self.audience,
            "iat": int(self.issued_at.timestamp()),
            "exp": int(self.expiration.timestamp()),
            "jti": self.token_id,
            "user_id": self.user_id,
            "email": self.email,
            "roles": list(self.roles),
        }
        if self.not_before is not None:
            claims["nbf"] = int(self.not_before.timestamp())

        return {k: v for k, v in claims.items() if v != ""}

    def has_any_role(self, required: List[str]) -> bool:
        """Set intersection between granted and required roles (empty requirement passes)."""
        if not required:
            return True
        return not set(self.roles).isdisjoint(required)


# ============================================================================
# VERIFIED REQUEST IDENTITY
# ============================================================================
class AuthContext(BaseModel):
    """
    Verified identity attached to a request after successful authorization.

    Stored as a single value on ``request.state``; read it back through the
    accessors in ``token_auth.auth.dependencies``.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str
    email: str
    roles: List[str]
    subject: str
    token: str
    payload: TokenPayload

    @classmethod
    def from_payload(cls, payload: TokenPayload, token: str) -> "AuthContext":
        return cls(
            user_id=payload.user_id,
            email=payload.email,
            roles=list(payload.roles),
            subject=payload.subject,
            token=token,
            payload=payload,
        )


# ============================================================================
# RESPONSES
# ============================================================================
class AuthenticatedUserResponse(BaseModel):
    """Identity of the caller as seen by the auth middleware."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "user_id": "u1",
                "email": "a@example.com",
                "subject": "u1",
                "roles": ["user"],
                "expires_at": "2026-10-19T10:45:00Z",
            }
        }
    )

    user_id: str = Field(..., description="Authenticated user's ID")
    email: str = Field(..., description="Authenticated user's email")
    subject: str = Field(..., description="Token subject")
    roles: List[str] = Field(default_factory=list, description="Granted roles")
    expires_at: datetime = Field(..., description="Token expiration time")


class HealthStatus(BaseModel):
    """
    Health check response schema.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "healthy",
                "timestamp": "2025-10-13T10:30:00Z",
                "version": "1.0.0",
            }
        }
    )

    status: str = Field(..., description="Service health status")
    version: Optional[str] = Field(default=None, description="Application version")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Health check timestamp",
    )
