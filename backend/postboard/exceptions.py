"""
Postboard Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for every anticipated failure.
How:   Each class carries a client-safe message, an optional context dict
       (logged, never returned), its HTTP status and a machine-readable code.
       A single global handler in main.py renders them.
Who:   Raised by services, dependencies and routes.

Exception Hierarchy:
    PostboardError (base)                       → 500
    ├── AuthenticationError                     → 401 unauthenticated
    │   ├── InvalidTokenError
    │   └── TokenExpiredError
    ├── ValidationError (field error list)      → 400 validation_error
    ├── BadRequestError                         → 400 bad_request
    ├── InvalidCredentialsError                 → 400 invalid_credentials
    ├── InvalidIdError                          → 400 invalid_id
    ├── NotFoundError                           → 404 not_found
    │   └── CommentNotFoundError
    ├── ConflictError                           → 400 conflict
    │   ├── DuplicateEmailError
    │   ├── AlreadyLikedError
    │   └── NotLikedError
    ├── ForbiddenError                          → 401 not_authorized
    └── DatabaseError                           → 500 server_error

Note: ForbiddenError answers 401, not 403. Existing clients key on 401 for
"not your post/comment"; renumbering would be a breaking API change.
"""

from typing import Any, Dict, List, Optional


class PostboardError(Exception):
    """
    Base exception for all Postboard application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500
    error_code: str = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


# ── Authentication ────────────────────────────────────────────────────────

class AuthenticationError(PostboardError):
    """
    The caller could not be identified.

    Every subclass renders identically to the client; the concrete class is
    only visible in server logs.
    """

    status_code = 401
    error_code = "unauthenticated"

    def __init__(
        self,
        message: str = "Token is not valid",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidTokenError(AuthenticationError):
    """Token missing, malformed, or signed with a different secret."""


class TokenExpiredError(AuthenticationError):
    """Token signature is valid but its `exp` has passed."""


# ── Client input ──────────────────────────────────────────────────────────

class ValidationError(PostboardError):
    """
    Raised when a request body breaks one or more field rules.

    `errors` holds every violation, not just the first:
        [{"field": "email", "message": "Please include a valid email", "location": "body"}]
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        errors: Optional[List[Dict[str, str]]] = None,
        message: str = "Validation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.errors = errors or []
        ctx = context or {}
        ctx["fields"] = [e.get("field") for e in self.errors]
        super().__init__(message=message, context=ctx)


class BadRequestError(PostboardError):
    """Generic 400 for route-specific remapping of other errors."""

    status_code = 400
    error_code = "bad_request"

    def __init__(
        self,
        message: str = "Bad request",
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        if error_code:
            self.error_code = error_code


class InvalidCredentialsError(PostboardError):
    """Login failed. Unknown email and wrong password look the same."""

    status_code = 400
    error_code = "invalid_credentials"

    def __init__(
        self,
        message: str = "Invalid credentials",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidIdError(PostboardError):
    """
    An identifier in the path is not a well-formed UUID.

    HTTP: 400, matching how the API has always answered malformed ids.
    """

    status_code = 400
    error_code = "invalid_id"

    def __init__(
        self,
        resource: str = "resource",
        raw_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if raw_id is not None:
            ctx["raw_id"] = raw_id
        super().__init__(message=f"{resource.capitalize()} not found", context=ctx)
        self.resource = resource


# ── Resources ─────────────────────────────────────────────────────────────

class NotFoundError(PostboardError):
    """
    Raised when a requested resource does not exist.

    Repositories return None for missing rows; services convert that into
    this exception so routes stay free of status-code logic.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource


class CommentNotFoundError(NotFoundError):
    """The post exists but has no comment with the requested id."""

    def __init__(self, comment_id: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(resource="comment", resource_id=comment_id, context=context)


class ConflictError(PostboardError):
    """The request conflicts with current state. Answered with 400."""

    status_code = 400
    error_code = "conflict"

    def __init__(
        self,
        message: str = "Request conflicts with the current state",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DuplicateEmailError(ConflictError):
    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="User already exists", context=context)


class AlreadyLikedError(ConflictError):
    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Post already liked", context=context)


class NotLikedError(ConflictError):
    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Post has not yet been liked", context=context)


class ForbiddenError(PostboardError):
    """Caller is authenticated but does not own the resource. HTTP 401."""

    status_code = 401
    error_code = "not_authorized"

    def __init__(
        self,
        message: str = "User not authorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


# ── Infrastructure ────────────────────────────────────────────────────────

class DatabaseError(PostboardError):
    """
    Raised when a database operation fails unexpectedly.

    The client always receives a generic message; the original exception
    type and identifiers go into `context` for the server log.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
