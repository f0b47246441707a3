"""
Token Codec
-----------
Signs a claim set into a compact token and verifies a token back into a claim set.

Tokens are compact JWS strings (``header.payload.signature``) signed with
EdDSA over Ed25519. Only the signature is checked here; temporal and
issuer/audience policy belongs to the TokenMaker.
"""

from typing import Dict

import jwt
from cryptography.hazmat.primitives.asymmetric import ed25519
from jwt.utils import base64url_decode, base64url_encode
from loguru import logger
from pydantic import ValidationError

from token_auth.auth.errors import MalformedToken, SignatureInvalid, SigningError
from token_auth.models.auth_models import TokenPayload

ALGORITHM = "EdDSA"
TOKEN_TYPE = "JWT"

# Signature only: every claim check is done by the caller, in a fixed order
_SIGNATURE_ONLY = {
    "verify_signature": True,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
    "require": [],
}


def sign(
    payload: TokenPayload, private_key: ed25519.Ed25519PrivateKey, key_id: str = ""
) -> str:
    """
    Serialize and sign a claim set.

    Args:
        payload: Claim set to embed
        private_key: Ed25519 signing key
        key_id: Optional key fingerprint placed in the ``kid`` header

    Returns:
        Compact signed token string

    Raises:
        SigningError: If serialization or signing fails
    """
    headers: Dict[str, str] = {"typ": TOKEN_TYPE}
    if key_id:
        headers["kid"] = key_id

    try:
        return jwt.encode(
            payload.to_claims(), private_key, algorithm=ALGORITHM, headers=headers
        )
    except (TypeError, ValueError, jwt.PyJWTError) as e:
        logger.error(f"Failed to sign token: {e}")
        raise SigningError(f"Failed to sign token: {e}") from e


def _check_signature_encoding(token: str) -> None:
    # base64url tolerates non-zero trailing bits, so two different strings can
    # decode to the same signature. Only the canonical encoding is accepted.
    segments = token.split(".")
    if len(segments) != 3:
        raise SignatureInvalid("Token must have exactly three segments")

    signature = segments[2]
    try:
        raw = base64url_decode(signature)
    except ValueError as e:
        raise SignatureInvalid("Signature segment is not valid base64url") from e

    if base64url_encode(raw).decode("ascii") != signature:
        raise SignatureInvalid("Signature segment is not canonically encoded")


def verify(token: str, public_key: ed25519.Ed25519PublicKey) -> TokenPayload:
    """
    Verify a token's signature and deserialize its claim set.

    No claim is inspected until the signature has been verified.

    Args:
        token: Compact token string
        public_key: Ed25519 verification key

    Returns:
        TokenPayload: Claim set carried by the token

    Raises:
        SignatureInvalid: If the token is malformed, truncated, tampered with
            or signed by another key
        MalformedToken: If the signature is valid but the claims cannot be parsed
    """
    _check_signature_encoding(token)

    try:
        claims = jwt.decode(
            token, public_key, algorithms=[ALGORITHM], options=_SIGNATURE_ONLY
        )
    except jwt.InvalidTokenError as e:
        raise SignatureInvalid(f"Token signature verification failed: {e}") from e

    try:
        return TokenPayload.model_validate(claims)
    except ValidationError as e:
        raise MalformedToken(f"Token claims are malformed: {e}") from e
