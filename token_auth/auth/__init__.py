"""
Token Authentication Module
---------------------------
Stateless token issuance and verification with role-based request gating.

Core Components:
- key_store: Ed25519 keypair generation and loading
- token_codec: Compact EdDSA-signed token encoding and signature verification
- token_maker: Token issuance and end-to-end verification policy
- dependencies: FastAPI dependencies for route-group protection
- errors: Exception taxonomy

Usage:
    from token_auth.auth import TokenMaker, require_roles

    maker = TokenMaker()
    admin = APIRouter(dependencies=[Depends(require_roles(maker, "admin"))])
"""

from token_auth.auth.dependencies import (
    AuthMiddleware,
    AuthMiddlewareConfig,
    UserRateLimiter,
    current_auth_context,
    get_auth_context,
    get_auth_email,
    get_auth_payload,
    get_auth_roles,
    get_auth_subject,
    get_auth_token,
    get_auth_user_id,
    has_any_role,
    has_role,
    is_authenticated,
    require_auth,
    require_roles,
)
from token_auth.auth.errors import (
    InvalidAudience,
    InvalidInput,
    InvalidIssuer,
    KeyIOError,
    MalformedToken,
    SignatureInvalid,
    SigningError,
    TokenAuthError,
    TokenExpired,
    TokenNotYetValid,
    TokenVerificationError,
)
from token_auth.auth.key_store import KeyPair, KeyStore
from token_auth.auth.token_maker import TokenMaker, TokenMakerConfig, TokenOptions

__all__ = [
    # Dependencies
    "AuthMiddleware",
    "AuthMiddlewareConfig",
    "UserRateLimiter",
    "current_auth_context",
    "get_auth_context",
    "get_auth_email",
    "get_auth_payload",
    "get_auth_roles",
    "get_auth_subject",
    "get_auth_token",
    "get_auth_user_id",
    "has_any_role",
    "has_role",
    "is_authenticated",
    "require_auth",
    "require_roles",
    # Errors
    "InvalidAudience",
    "InvalidInput",
    "InvalidIssuer",
    "KeyIOError",
    "MalformedToken",
    "SignatureInvalid",
    "SigningError",
    "TokenAuthError",
    "TokenExpired",
    "TokenNotYetValid",
    "TokenVerificationError",
    # Keys and tokens
    "KeyPair",
    "KeyStore",
    "TokenMaker",
    "TokenMakerConfig",
    "TokenOptions",
]
