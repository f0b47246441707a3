"""
Token Errors
------------
Exception taxonomy for key management, token issuance and token verification.

Every verification failure is a distinct type so logs and tests can tell an
expired token from a forged one. At the HTTP boundary all of them collapse
into the same generic 401 response.
"""


class TokenAuthError(Exception):
    """Base class for all token subsystem errors."""


class KeyIOError(TokenAuthError):
    """Key material cannot be created, read or trusted. Fatal at startup."""


class InvalidInput(TokenAuthError, ValueError):
    """A required caller-supplied value was empty."""


class SigningError(TokenAuthError):
    """Token could not be produced (serialization, key or randomness fault)."""


class TokenVerificationError(TokenAuthError):
    """Base class for every reason a presented token is rejected."""


class SignatureInvalid(TokenVerificationError):
    """Signature check failed: tampered, truncated, malformed or foreign-signed."""


class TokenExpired(TokenVerificationError):
    """Current time is past the token's expiration."""


class TokenNotYetValid(TokenVerificationError):
    """Current time is before the token's not-before time."""


class InvalidIssuer(TokenVerificationError):
    """Issuer claim does not match the configured issuer."""


class InvalidAudience(TokenVerificationError):
    """Audience claim does not match the configured audience."""


class MalformedToken(TokenVerificationError):
    """Signature is valid but the claim set is unusable (e.g. no user ID)."""
