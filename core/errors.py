"""
core/errors.py -- Domain error taxonomy for LifeLink.

Every failure a store or token helper can report is one of these classes.
Each class carries the HTTP status and machine-readable code it maps to, so
api/main.py renders all of them with a single exception handler and route
handlers never build error responses by hand.

  InvalidInput         400  missing/blank fields, bad dates, unknown location
  Unauthorized         401  wrong email or password (one generic message)
  Unauthenticated      401  no bearer token on a protected route
  InvalidToken         403  bad signature, expired, or malformed claims
  NotFoundOrForbidden  404  no drive matches both id and owner
  Conflict             409  email already registered
  StorageFailure       500  database error; details are logged, never returned

NotFoundOrForbidden deliberately has one message for both cases so a caller
cannot learn whether a drive it does not own exists.

Layer rule: stdlib only. Imported by auth/, drives/ and api/.
"""

from __future__ import annotations


class LifeLinkError(Exception):
    status_code: int = 500
    code: str = "internal_error"
    message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.message
        super().__init__(self.message)


class InvalidInput(LifeLinkError):
    status_code = 400
    code = "invalid_input"
    message = "All fields are required."


class Unauthorized(LifeLinkError):
    status_code = 401
    code = "bad_credentials"
    message = "Invalid credentials."


class Unauthenticated(LifeLinkError):
    status_code = 401
    code = "unauthenticated"
    message = "Authentication required."


class InvalidToken(LifeLinkError):
    status_code = 403
    code = "invalid_token"
    message = "Token is invalid or has expired."


class NotFoundOrForbidden(LifeLinkError):
    status_code = 404
    code = "not_found"
    message = "Drive not found or you do not have permission to change it."


class Conflict(LifeLinkError):
    status_code = 409
    code = "conflict"
    message = "An account with this email already exists."


class StorageFailure(LifeLinkError):
    status_code = 500
    code = "storage_failure"
    message = "A storage error occurred. Please try again later."
