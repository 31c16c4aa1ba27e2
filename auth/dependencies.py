"""
auth/dependencies.py -- FastAPI Depends() helper for authentication.

Protected routes accept exactly one credential: an
"Authorization: Bearer <token>" header carrying a JWT issued by
POST /api/auth/login. There is no cookie or API-key fallback.

get_current_identity() raises the domain errors from core/errors.py; the
exception handler in api/main.py turns them into 401 (no token) or 403
(bad or expired token).

Layer rule: may import from fastapi because this module is part of the
FastAPI dependency injection system. No imports from api/ or drives/.
"""

from __future__ import annotations

from fastapi import Request

from auth.models import Identity
from auth.tokens import bearer_token, verify_access_token


def get_current_identity(request: Request) -> Identity:
    """Require a valid bearer token and return the caller's Identity.

    Use as a FastAPI dependency:
        @router.post("/protected")
        def route(identity: Identity = Depends(get_current_identity)): ...
    """
    token = bearer_token(request.headers.get("Authorization"))
    return verify_access_token(token)
