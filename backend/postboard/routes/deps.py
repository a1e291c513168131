"""
Postboard Backend — Shared Route Dependencies
===============================================

What:  Resolves the caller's identity from the token header.
How:   Reads the configured header (default `x-auth-token`) and verifies it
       with the app's TokenService. Any failure raises an
       AuthenticationError subclass, rendered as 401 by the global handler.
"""

import logging

from fastapi import Request

from postboard.exceptions import AuthenticationError
from postboard.middleware.request_id import request_id_var
from postboard.services.token_service import TokenService

logger = logging.getLogger(__name__)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


async def get_current_user_id(request: Request) -> str:
    """Verified user id of the caller, for every protected route."""
    header = request.app.state.settings.auth_header
    token = request.headers.get(header)
    try:
        return get_token_service(request).verify(token)
    except AuthenticationError as exc:
        logger.info(
            "[%s] Rejected token on %s %s: %s",
            request_id_var.get(""),
            request.method,
            request.url.path,
            type(exc).__name__,
        )
        raise
