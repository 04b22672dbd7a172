from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from user_api.container import Container
from user_api.models.principal import Principal
from user_api.models.role import ADMIN, USER, authority_for

logger = logging.getLogger(__name__)

basic_scheme = HTTPBasic(realm="userAPI")

ROLE_ADMIN = authority_for(ADMIN)
ROLE_USER = authority_for(USER)


def get_container(request: Request) -> Container:
    return request.app.state.container


def require_principal(
    request: Request,
    credentials: Annotated[HTTPBasicCredentials, Depends(basic_scheme)],
    container: Annotated[Container, Depends(get_container)],
) -> Principal:
    """Check HTTP Basic credentials against the user store. Returns a Principal.

    The login is the user's email; the secret is verified against the
    stored hash.  Used as a FastAPI dependency on every /userAPI endpoint.
    """
    principal = container.credentials.authenticate(
        credentials.username, credentials.password
    )
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": 'Basic realm="userAPI"'},
        )
    logger.debug(
        "Authenticated login=%s authorities=%s",
        principal.login,
        sorted(principal.authorities),
    )
    request.state.login = principal.login
    return principal


def require_any_authority(authorities: set[str]):
    """Dependency factory: demand at least one of the given authorities.

    Usage: Depends(require_any_authority({ROLE_USER, ROLE_ADMIN}))
    Returns the Principal if one is present, else 403.
    """

    def _guard(
        principal: Annotated[Principal, Depends(require_principal)],
    ) -> Principal:
        if not principal.has_any_authority(authorities):
            logger.warning(
                "Access denied: login=%s has none of authorities=%s",
                principal.login,
                sorted(authorities),
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return principal

    return _guard


require_reader = require_any_authority({ROLE_USER, ROLE_ADMIN})
require_admin = require_any_authority({ROLE_ADMIN})
