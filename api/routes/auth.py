"""
api/routes/auth.py -- Signup, login and identity endpoints.

Routes:
  POST /api/auth/signup  -- create an account; 201, 400 or 409
  POST /api/auth/login   -- password login; returns a bearer token or 401
  GET  /api/auth/me      -- identity carried by the caller's token; 401/403

Security:
  Signup and login are rate-limited per client IP (LOGIN_RATE_LIMIT); over
  the limit they return 429 with Retry-After.
  authenticate_user() provides timing equalization -- use it, never inline
  get_by_email() + verify_password().
  Cache-Control: no-store on login responses so tokens are not cached.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter, login_rate_limit
from api.models import LoginRequest, LoginResponse, MeResponse, MessageResponse, SignupRequest
from auth.dependencies import get_current_identity
from auth.models import Identity
from auth.store import UserStore
from auth.tokens import authenticate_user, create_access_token
from core.config import get_settings

_settings = get_settings()

# Auth policy:
# - POST /api/auth/signup: public
# - POST /api/auth/login:  public
# - GET  /api/auth/me:     requires bearer token (get_current_identity)
router = APIRouter()


# The limiter wraps the endpoint before the router registers it.
@router.post("/auth/signup", response_model=MessageResponse, status_code=201)
@limiter.limit(login_rate_limit)
def signup(request: Request, body: SignupRequest) -> MessageResponse:
    """Register a new account.

    Duplicate emails return 409 and leave the existing account untouched.
    """
    user_store: UserStore = request.app.state.user_store
    user_store.register(body.email, body.password)
    return MessageResponse(message="User registered successfully!")


@router.post("/auth/login", response_model=LoginResponse)
@limiter.limit(login_rate_limit)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Exchange email and password for a signed, time-limited bearer token.

    Unknown email and wrong password produce the same 401 so the endpoint
    cannot be used to discover which emails are registered.
    """
    user_store: UserStore = request.app.state.user_store
    identity = authenticate_user(user_store, body.email.strip(), body.password)
    token = create_access_token(identity)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(token=token, expires_in=_settings.token_expire_seconds).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.get("/auth/me", response_model=MeResponse)
def me(identity: Identity = Depends(get_current_identity)) -> MeResponse:
    """Return the identity embedded in the caller's token."""
    return MeResponse(id=identity.id, email=identity.email)
