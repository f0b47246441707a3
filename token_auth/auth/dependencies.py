"""
FastAPI Authentication Dependencies
-----------------------------------
Request gate for token-protected routes.

An ``AuthMiddleware`` instance reads the token from a cookie, verifies it with
the shared TokenMaker, optionally enforces a required-role set and attaches a
typed ``AuthContext`` to ``request.state``. Attach one instance per route group:

    router = APIRouter(dependencies=[Depends(require_roles(maker, "admin"))])

Per request:  Unauthenticated -> Skipped | Verifying -> Authorized | Rejected

Security Notes:
- Every verification failure yields the same 401 detail; the specific reason
  is only logged, so callers cannot learn why a token was rejected
- Handlers never see verification errors, only an authorized context
"""

import threading
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from fastapi import HTTPException, Request, status
from loguru import logger

from token_auth.auth.errors import InvalidInput, TokenVerificationError
from token_auth.auth.token_maker import TokenMaker
from token_auth.models.auth_models import AuthContext, TokenPayload

AUTH_CONTEXT_STATE_KEY = "auth_context"
DEFAULT_COOKIE_NAME = "access_token"
AUTHENTICATE_HEADERS = {"WWW-Authenticate": "Bearer"}


@dataclass(frozen=True)
class AuthMiddlewareConfig:
    """Configuration for one AuthMiddleware instance."""

    token_maker: TokenMaker
    skip_paths: Sequence[str] = ()
    required_roles: Sequence[str] = ()
    cookie_name: str = DEFAULT_COOKIE_NAME


class AuthMiddleware:
    """
    Dependency class that authenticates and authorizes a request.

    Returns the attached AuthContext, or None when the path is skipped.
    """

    def __init__(self, config: AuthMiddlewareConfig):
        self.config = config
        self.required_roles: List[str] = list(config.required_roles)

    def __call__(self, request: Request) -> Optional[AuthContext]:
        """
        Authenticate the request.

        Raises:
            HTTPException 401: If the token is missing or fails verification
            HTTPException 403: If the token lacks every required role
        """
        path = request.url.path

        if should_skip_auth(path, self.config.skip_paths):
            logger.debug(f"Authentication skipped for {path}")
            return None

        token = request.cookies.get(self.config.cookie_name)
        if not token:
            logger.warning(f"Missing access token for {path}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authorization token required",
                headers=AUTHENTICATE_HEADERS,
            )

        try:
            payload = self.config.token_maker.verify_token(token)
        except (TokenVerificationError, InvalidInput) as e:
            logger.warning(f"Token rejected for {path}: {type(e).__name__}: {e}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or expired token",
                headers=AUTHENTICATE_HEADERS,
            )

        if not payload.has_any_role(self.required_roles):
            logger.warning(
                f"Access denied for user {payload.user_id} with roles {payload.roles}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )

        context = AuthContext.from_payload(payload, token)
        setattr(request.state, AUTH_CONTEXT_STATE_KEY, context)

        logger.debug(f"Request to {path} authorized for user {payload.user_id}")
        return context


def require_auth(token_maker: TokenMaker, *skip_paths: str) -> AuthMiddleware:
    """Authentication only, no role requirement."""
    return AuthMiddleware(AuthMiddlewareConfig(token_maker=token_maker, skip_paths=skip_paths))


def require_roles(token_maker: TokenMaker, *roles: str) -> AuthMiddleware:
    """Authentication plus membership in at least one of ``roles``."""
    return AuthMiddleware(AuthMiddlewareConfig(token_maker=token_maker, required_roles=roles))


def should_skip_auth(path: str, skip_paths: Sequence[str]) -> bool:
    return any(path.startswith(prefix) for prefix in skip_paths)


# ============================================================================
# TYPED ACCESSORS
# ============================================================================
# All accessors fail closed: a missing or foreign value reads as "absent".


def get_auth_context(request: Request) -> Optional[AuthContext]:
    context = getattr(request.state, AUTH_CONTEXT_STATE_KEY, None)
    if isinstance(context, AuthContext):
        return context
    return None


def get_auth_user_id(request: Request) -> Optional[str]:
    context = get_auth_context(request)
    return context.user_id if context else None


def get_auth_email(request: Request) -> Optional[str]:
    context = get_auth_context(request)
    return context.email if context else None


def get_auth_payload(request: Request) -> Optional[TokenPayload]:
    context = get_auth_context(request)
    return context.payload if context else None


def get_auth_roles(request: Request) -> Optional[List[str]]:
    context = get_auth_context(request)
    return list(context.roles) if context else None


def get_auth_subject(request: Request) -> Optional[str]:
    context = get_auth_context(request)
    return context.subject if context else None


def get_auth_token(request: Request) -> Optional[str]:
    context = get_auth_context(request)
    return context.token if context else None


def has_role(request: Request, role: str) -> bool:
    roles = get_auth_roles(request)
    return roles is not None and role in roles


def has_any_role(request: Request, *roles: str) -> bool:
    payload = get_auth_payload(request)
    return payload is not None and payload.has_any_role(list(roles))


def is_authenticated(request: Request) -> bool:
    return get_auth_context(request) is not None


def current_auth_context(request: Request) -> AuthContext:
    """
    Handler dependency returning the context set by the route group's AuthMiddleware.

    Raises:
        HTTPException 401: If the request was not authorized (e.g. a skipped path)
    """
    context = get_auth_context(request)
    if context is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers=AUTHENTICATE_HEADERS,
        )
    return context


# ============================================================================
# PER-USER RATE LIMITING
# ============================================================================
class UserRateLimiter:
    """
    Dependency that authenticates, then allows one request per user per window.

    In-memory and per-process. Token verification runs outside any lock. Users
    are spread over a fixed set of lock stripes; each stripe's lock guards only
    its own last-request times, and entries older than the window are dropped
    under that lock, so memory tracks users active within the last window.
    """

    def __init__(
        self,
        token_maker: TokenMaker,
        window: timedelta,
        cookie_name: str = DEFAULT_COOKIE_NAME,
        clock: Callable[[], float] = time.monotonic,
        stripes: int = 64,
    ):
        if stripes < 1:
            raise ValueError("stripes must be at least 1")
        self._auth = AuthMiddleware(
            AuthMiddlewareConfig(token_maker=token_maker, cookie_name=cookie_name)
        )
        self._window = window.total_seconds()
        self._clock = clock
        self._stripes: List[Tuple[threading.Lock, Dict[str, float]]] = [
            (threading.Lock(), {}) for _ in range(stripes)
        ]

    def _stripe_for(self, user_id: str) -> Tuple[threading.Lock, Dict[str, float]]:
        return self._stripes[hash(user_id) % len(self._stripes)]

    def tracked_users(self) -> int:
        """Number of users currently holding a last-request entry."""
        total = 0
        for lock, last_request in self._stripes:
            with lock:
                total += len(last_request)
        return total

    def __call__(self, request: Request) -> Optional[AuthContext]:
        """
        Raises:
            HTTPException 401/403: From authentication
            HTTPException 429: If the user's previous request is inside the window
        """
        context = self._auth(request)
        if context is None:
            return None

        now = self._clock()
        lock, last_request = self._stripe_for(context.user_id)
        with lock:
            expired = [
                user_id
                for user_id, seen in last_request.items()
                if now - seen >= self._window
            ]
            for user_id in expired:
                del last_request[user_id]

            limited = context.user_id in last_request
            if not limited:
                last_request[context.user_id] = now

        if limited:
            logger.warning(f"Rate limit exceeded for user {context.user_id}")
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Rate limit exceeded",
            )
        return context
