"""
FastAPI dependencies for authentication and authorization.

A bearer token is optional on every request: a valid one identifies the
caller, a missing or invalid one leaves the request anonymous. Routes that
need more depend on require_admin or require_admin_or_self, which answer
401 otherwise.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError

from app.core.errors import UnauthorizedError, ValidationError
from app.core.security import decode_token

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme (Authorization: Bearer <token>); absence is not an error here
bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class TokenUser:
    """Identity carried by a valid token."""
    username: str
    is_admin: bool = False


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> Optional[TokenUser]:
    """Return the token's user, or None for anonymous / invalid tokens."""
    if not credentials:
        return None

    try:
        payload = decode_token(credentials.credentials)
    except JWTError as e:
        logger.debug(f"Ignoring invalid token: {e}")
        return None

    username = payload.get("sub")
    if not username:
        return None
    return TokenUser(username=username, is_admin=bool(payload.get("is_admin", False)))


def require_admin(user: Optional[TokenUser] = Depends(get_optional_user)) -> TokenUser:
    """Logged-in user with the admin flag."""
    if user is None or not user.is_admin:
        raise UnauthorizedError()
    return user


def require_admin_or_self(
    username: str,
    user: Optional[TokenUser] = Depends(get_optional_user),
) -> TokenUser:
    """
    Admin, or the user named by the `username` path parameter.
    """
    if user is None or not (user.is_admin or user.username == username):
        raise UnauthorizedError()
    return user


def query_filters(*allowed: str) -> Callable[[Request], Dict[str, str]]:
    """
    Build a dependency returning the query string as a dict, after checking
    that every key is one of `allowed`.

    Usage:
        @router.get("")
        def list_jobs(filters: dict = Depends(query_filters("title", "minSalary", "hasEquity"))):
            ...
    """
    def dependency(request: Request) -> Dict[str, str]:
        params = request.query_params
        unsupported = [key for key in params.keys() if key not in allowed]
        if len(unsupported) == 1:
            raise ValidationError(f"Query {unsupported[0]} is not supported.")
        if unsupported:
            raise ValidationError(f"Queries {', '.join(unsupported)} are not supported.")
        return {key: params[key] for key in params.keys()}

    return dependency
