"""
Auth Endpoints
--------------
Public-key export and caller identity.

The public key is served as raw bytes so other services can verify tokens
without calling back into this one.
"""

from typing import Sequence

from fastapi import APIRouter, Depends, Response

from token_auth.auth.dependencies import (
    DEFAULT_COOKIE_NAME,
    AuthMiddleware,
    AuthMiddlewareConfig,
    current_auth_context,
)
from token_auth.auth.token_maker import TokenMaker
from token_auth.models.auth_models import AuthContext, AuthenticatedUserResponse


def build_auth_router(
    token_maker: TokenMaker,
    cookie_name: str = DEFAULT_COOKIE_NAME,
    skip_paths: Sequence[str] = (),
) -> APIRouter:
    """Create the auth router bound to a TokenMaker."""
    authenticate = AuthMiddleware(
        AuthMiddlewareConfig(
            token_maker=token_maker, skip_paths=skip_paths, cookie_name=cookie_name
        )
    )
    router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])

    @router.get("/public-key", response_class=Response)
    async def get_public_key():
        """Raw Ed25519 verification key (32 bytes)."""
        return Response(
            content=token_maker.public_key(),
            media_type="application/octet-stream",
            headers={"Cache-Control": "public, max-age=3600"},
        )

    @router.get(
        "/me",
        response_model=AuthenticatedUserResponse,
        dependencies=[Depends(authenticate)],
    )
    async def get_me(context: AuthContext = Depends(current_auth_context)):
        """Identity carried by the caller's access token."""
        return AuthenticatedUserResponse(
            user_id=context.user_id,
            email=context.email,
            subject=context.subject,
            roles=context.roles,
            expires_at=context.payload.expiration,
        )

    return router
