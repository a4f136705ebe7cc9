"""
guards.py
=========
Route access control as an ordered pipeline of checks.

A check takes an AccessContext and returns it (possibly enriched) or
raises a PortalError. `guard(...)` turns a sequence of checks into a
FastAPI dependency, so a route can require authentication only,
authentication + admin role, or nothing at all.
"""

import logging
from dataclasses import dataclass, replace
from datetime import timedelta
from typing import Callable, Optional

from fastapi import Depends, Header

from . import config
from .db import get_store
from .errors import Forbidden, Unauthenticated
from .models import Role
from .store import Store
from .tokens import TokenExpired, TokenService, TokenVerificationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessContext:
    """What the guards know about the caller so far."""
    authorization: Optional[str]
    store: Store
    tokens: TokenService
    email: Optional[str] = None
    role: Optional[Role] = None


Check = Callable[[AccessContext], AccessContext]


def get_token_service() -> TokenService:
    return TokenService(
        config.ACCESS_TOKEN_SECRET,
        expires_in=timedelta(minutes=config.ACCESS_TOKEN_EXPIRES_MINUTES),
    )


# ---------------------------------------------------------------------------
# CHECKS
# ---------------------------------------------------------------------------

def authenticate(context: AccessContext) -> AccessContext:
    """Require a trusted bearer token and attach its email."""
    if not context.authorization:
        raise Unauthenticated(reason="missing Authorization header")

    scheme, _, token = context.authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Forbidden(reason="Authorization header is not a bearer credential")

    try:
        email = context.tokens.verify(token.strip())
    except TokenExpired:
        raise Forbidden(reason="expired token")
    except TokenVerificationError as e:
        raise Forbidden(reason=f"invalid token ({e})")

    return replace(context, email=email)


def require_admin(context: AccessContext) -> AccessContext:
    """Require the authenticated user to hold the admin role."""
    if context.email is None:
        raise Unauthenticated(reason="admin check ran before authentication")

    account = context.store.users.find_one({"email": context.email})
    role = Role.from_value(account.get("role")) if account else Role.regular
    if role is not Role.admin:
        raise Forbidden(message="forbidden", reason=f"{context.email} is not an admin")

    return replace(context, role=role)


# ---------------------------------------------------------------------------
# PIPELINE
# ---------------------------------------------------------------------------

def guard(*checks: Check):
    """Build a dependency that runs `checks` in order and returns the context."""

    def dependency(
        authorization: Optional[str] = Header(None),
        store: Store = Depends(get_store),
        tokens: TokenService = Depends(get_token_service),
    ) -> AccessContext:
        context = AccessContext(authorization=authorization, store=store, tokens=tokens)
        for check in checks:
            context = check(context)
        return context

    return dependency


require_user = guard(authenticate)
require_admin_user = guard(authenticate, require_admin)
