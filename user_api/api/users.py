from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from user_api.api.dependencies import get_container, require_admin, require_reader
from user_api.api.envelope import envelope
from user_api.api.schemas import Envelope, UserRequest
from user_api.container import Container
from user_api.core.errors import RequestValidationFailedError
from user_api.models.principal import Principal

logger = logging.getLogger(__name__)

# Endpoint logic for /userAPI.  Handlers are plain `def`: every store call
# and hash blocks, so FastAPI runs them on its threadpool.

router = APIRouter(prefix="/userAPI", tags=["users"])


@router.get("", response_model=Envelope)
def list_users(
    _principal: Annotated[Principal, Depends(require_reader)],
    container: Annotated[Container, Depends(get_container)],
) -> JSONResponse:
    users = container.user_service.list_all()
    return envelope(
        status.HTTP_200_OK,
        "All users fetched",
        container.user_mapper.to_response_list(users),
    )


@router.get("/id/{user_id}", response_model=Envelope)
def get_user_by_id(
    user_id: int,
    _principal: Annotated[Principal, Depends(require_reader)],
    container: Annotated[Container, Depends(get_container)],
) -> JSONResponse:
    user = container.user_service.get_by_id(user_id)
    return envelope(
        status.HTTP_200_OK,
        "User fetched successfully",
        container.user_mapper.to_response(user),
    )


@router.get("/email/{email}", response_model=Envelope)
def get_user_by_email(
    email: str,
    _principal: Annotated[Principal, Depends(require_reader)],
    container: Annotated[Container, Depends(get_container)],
) -> JSONResponse:
    user = container.user_service.get_by_email(email)
    return envelope(
        status.HTTP_200_OK,
        "User fetched successfully",
        container.user_mapper.to_response(user),
    )


@router.post(
    "/createUser", response_model=Envelope, status_code=status.HTTP_201_CREATED
)
def create_user(
    payload: UserRequest,
    principal: Annotated[Principal, Depends(require_admin)],
    container: Annotated[Container, Depends(get_container)],
) -> JSONResponse:
    entity = container.user_mapper.to_entity(payload)
    user = container.user_service.create(entity)
    logger.info("User id=%s created by login=%s", user.id, principal.login)
    return envelope(
        status.HTTP_201_CREATED,
        "User successfully created",
        container.user_mapper.to_response(user),
    )


@router.put("/updateUser", response_model=Envelope)
def update_user(
    payload: UserRequest,
    principal: Annotated[Principal, Depends(require_admin)],
    container: Annotated[Container, Depends(get_container)],
) -> JSONResponse:
    if payload.id is None:
        raise RequestValidationFailedError({"id": "Id is required to update a user."})
    entity = container.user_mapper.to_entity(payload)
    user = container.user_service.update(entity)
    logger.info("User id=%s updated by login=%s", user.id, principal.login)
    return envelope(
        status.HTTP_200_OK,
        "User updated successfully",
        container.user_mapper.to_response(user),
    )


@router.delete("/deleteUser/{user_id}", response_model=Envelope)
def delete_user(
    user_id: int,
    principal: Annotated[Principal, Depends(require_admin)],
    container: Annotated[Container, Depends(get_container)],
) -> JSONResponse:
    container.user_service.delete(user_id)
    logger.info("User id=%s deleted by login=%s", user_id, principal.login)
    return envelope(status.HTTP_200_OK, "User deleted successfully", None)
