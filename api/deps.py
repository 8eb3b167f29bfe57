"""
API dependencies.

Provides dependency injection for services and the bearer-token gate used by
every protected route.
"""

import logging
from typing import Optional, Annotated
from dataclasses import dataclass

from fastapi import Depends, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from virtualdoc.errors import AuthzError
from virtualdoc.services import Services

logger = logging.getLogger(__name__)

# Security scheme (missing credentials are handled below, not by FastAPI)
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """Identity decoded from a valid bearer token, for one request."""
    account_id: str
    email: str


def services_dep(request: Request) -> Services:
    """FastAPI dependency for the services container built at startup."""
    return request.app.state.services


ServicesDep = Annotated[Services, Depends(services_dep)]


async def get_auth_context(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    services: ServicesDep
) -> AuthContext:
    """
    Authenticate the request from its bearer token.

    Raises 401 when no token is sent and 403 when the token is invalid or
    expired. The reason a token failed is not reported.
    """
    if credentials is None or not credentials.credentials:
        raise AuthzError("Access token required", status_code=status.HTTP_401_UNAUTHORIZED)

    identity = services.account_service.authenticate(credentials.credentials)
    if identity is None:
        raise AuthzError("Invalid or expired token", status_code=status.HTTP_403_FORBIDDEN)

    account_id, email = identity
    return AuthContext(account_id=account_id, email=email)


# Type aliases for dependencies
CurrentAuth = Annotated[AuthContext, Depends(get_auth_context)]
