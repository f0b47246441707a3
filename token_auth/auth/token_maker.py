"""
Token Maker
-----------
Public-facing token service: issues tokens for an authenticated identity and
verifies presented tokens end-to-end (signature, time window, issuer,
audience, mandatory claims).

The keypair is loaded once at construction and never mutated afterwards, so a
single TokenMaker can be shared by all concurrent requests without locking.
"""

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, List, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator

from token_auth.auth import token_codec
from token_auth.auth.errors import (
    InvalidAudience,
    InvalidInput,
    InvalidIssuer,
    MalformedToken,
    SigningError,
    TokenExpired,
    TokenNotYetValid,
)
from token_auth.auth.key_store import KeyPair, KeyStore
from token_auth.core.config_manager import ApplicationSettings
from token_auth.models.auth_models import TokenPayload

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenMakerConfig(BaseModel):
    """Immutable TokenMaker configuration, validated once at construction."""

    model_config = ConfigDict(frozen=True)

    token_lifetime: timedelta = Field(
        default=timedelta(minutes=15), description="Time from issuance to expiry"
    )
    key_directory: Path = Field(
        default=Path("keys"), description="Directory holding the keypair"
    )
    issuer: str = Field(default="token_auth_api", description="Issuer claim")
    audience: str = Field(default="token_auth", description="Audience claim")

    @field_validator("token_lifetime")
    @classmethod
    def validate_lifetime(cls, v: timedelta) -> timedelta:
        """Validate token lifetime is positive."""
        if v <= timedelta(0):
            raise ValueError("Token lifetime must be positive")
        return v

    @classmethod
    def from_settings(cls, settings: ApplicationSettings) -> "TokenMakerConfig":
        return cls(
            token_lifetime=timedelta(minutes=settings.token_lifetime_minutes),
            key_directory=Path(settings.token_key_directory),
            issuer=settings.token_issuer,
            audience=settings.token_audience,
        )


@dataclass
class TokenOptions:
    """Optional per-token overrides for create_token."""

    subject: str = ""
    not_before: Optional[datetime] = None
    token_id: str = ""
    roles: Optional[List[str]] = None


def generate_token_id() -> str:
    """
    Generate a random token identifier (16 bytes, hex-encoded).

    Raises:
        SigningError: If the system randomness source fails
    """
    try:
        return secrets.token_hex(16)
    except OSError as e:
        logger.error(f"Randomness source failed while generating token ID: {e}")
        raise SigningError(f"Failed to generate token ID: {e}") from e


class TokenMaker:
    """
    Issues and verifies signed tokens.

    Usage:
        maker = TokenMaker(TokenMakerConfig(key_directory=Path("keys")))
        token = maker.create_token("u1", "a@example.com")
        payload = maker.verify_token(token)
    """

    def __init__(
        self,
        config: Optional[TokenMakerConfig] = None,
        keys: Optional[KeyPair] = None,
        clock: Clock = _utc_now,
    ):
        """
        Build a TokenMaker.

        Args:
            config: Lifetime, key directory, issuer and audience
            keys: Pre-loaded keypair; when omitted the key directory is
                initialised (if empty) and loaded
            clock: Source of the current time, timezone-aware

        Raises:
            KeyIOError: If key material cannot be established
        """
        self.config = config or TokenMakerConfig()
        self._clock = clock

        if keys is None:
            store = KeyStore(self.config.key_directory)
            store.ensure()
            keys = store.load()
        self._keys = keys

        logger.info(
            f"TokenMaker ready (issuer={self.config.issuer!r}, "
            f"audience={self.config.audience!r}, "
            f"lifetime={self.config.token_lifetime}, kid={self._keys.key_id})"
        )

    def create_token(
        self, user_id: str, email: str, options: Optional[TokenOptions] = None
    ) -> str:
        """
        Issue a signed token for an authenticated identity.

        Args:
            user_id: User's unique identifier (also the default subject)
            email: User's email address
            options: Optional subject, not-before, token ID and role overrides

        Returns:
            Signed token string

        Raises:
            InvalidInput: If user_id or email is empty
            SigningError: If the token cannot be produced
        """
        if not user_id:
            raise InvalidInput("userID cannot be empty")
        if not email:
            raise InvalidInput("email cannot be empty")

        options = options or TokenOptions()

        issued_at = self._clock().replace(microsecond=0)
        payload = TokenPayload(
            issuer=self.config.issuer,
            subject=options.subject or user_id,
            audience=self.config.audience,
            issued_at=issued_at,
            not_before=options.not_before,
            expiration=issued_at + self.config.token_lifetime,
            token_id=options.token_id or generate_token_id(),
            user_id=user_id,
            email=email,
            roles=list(options.roles) if options.roles is not None else [],
        )

        token = token_codec.sign(payload, self._keys.private_key, self._keys.key_id)
        logger.debug(f"Token {payload.token_id} issued for user {user_id}")
        return token

    def verify_token(self, token: str) -> TokenPayload:
        """
        Verify a token and return its claim set.

        Checks run in a fixed order and the first failure is raised:
        signature, expiration, not-before, issuer, audience, user ID.

        Args:
            token: Token string presented by the caller

        Returns:
            TokenPayload: Verified claim set

        Raises:
            InvalidInput: If token is empty
            SignatureInvalid: If the signature check fails
            TokenExpired: If the token is past its expiration
            TokenNotYetValid: If the token is before its not-before time
            InvalidIssuer: If the issuer claim mismatches the configuration
            InvalidAudience: If the audience claim mismatches the configuration
            MalformedToken: If the claim set lacks a user ID
        """
        if not token:
            raise InvalidInput("token cannot be empty")

        payload = token_codec.verify(token, self._keys.public_key)

        now = self._clock()

        if now > payload.expiration:
            raise TokenExpired("token expired")

        if payload.not_before is not None and now < payload.not_before:
            raise TokenNotYetValid("token not yet valid")

        # An empty value on either side means "no constraint"
        if payload.issuer and self.config.issuer and payload.issuer != self.config.issuer:
            raise InvalidIssuer("invalid issuer")

        if (
            payload.audience
            and self.config.audience
            and payload.audience != self.config.audience
        ):
            raise InvalidAudience("invalid audience")

        if not payload.user_id:
            raise MalformedToken("invalid token: missing user ID")

        logger.debug(f"Token {payload.token_id} verified for user {payload.user_id}")
        return payload

    def public_key(self) -> bytes:
        """Raw 32-byte Ed25519 verification key, for independent verifiers."""
        return self._keys.public_bytes

    @property
    def key_id(self) -> str:
        return self._keys.key_id
