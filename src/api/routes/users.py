"""
User management API routes
All database access goes through UsersService; this module only maps
ServiceResult error kinds onto HTTP responses.
"""

import logging
from typing import Optional
from fastapi import APIRouter, HTTPException, Depends, Body, status

from models.user import (
    UserCreateRequest,
    UserUpdateRequest,
    UserData,
    UserMutationResponse,
    UserListResponse,
    UserDeleteResponse,
)
from services.base_service import (
    ServiceResult,
    VALIDATION_ERROR,
    NOT_FOUND,
    CONFLICT_ERROR,
)
from services.users_service import UsersService, get_users_service

router = APIRouter()
logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    NOT_FOUND: status.HTTP_404_NOT_FOUND,
    CONFLICT_ERROR: status.HTTP_409_CONFLICT,
}

NOT_FOUND_MESSAGE = "User not found"


def raise_for_result(result: ServiceResult) -> None:
    """Translate a failed ServiceResult into the matching HTTPException"""
    if result.success:
        return

    status_code = ERROR_STATUS_CODES.get(result.error_type, status.HTTP_500_INTERNAL_SERVER_ERROR)
    detail = NOT_FOUND_MESSAGE if result.error_type == NOT_FOUND else result.error
    raise HTTPException(status_code=status_code, detail=detail)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=UserMutationResponse)
async def create_user(
    request: Optional[UserCreateRequest] = Body(None),
    users_service: UsersService = Depends(get_users_service)
):
    """Create a new user. A missing or null body is treated like an empty one."""
    if request is None:
        request = UserCreateRequest()
    result = await users_service.create_user(
        name=request.name,
        email=request.email,
        age=request.age
    )
    raise_for_result(result)

    return {
        "message": "User created successfully",
        "user": result.first
    }


@router.get("", response_model=UserListResponse)
async def list_users(users_service: UsersService = Depends(get_users_service)):
    """Get all users ordered by id"""
    result = await users_service.list_users()
    raise_for_result(result)

    return {
        "count": result.count,
        "users": result.data
    }


@router.get("/{user_id}", response_model=UserData)
async def get_user(
    user_id: int,
    users_service: UsersService = Depends(get_users_service)
):
    """Get user details"""
    result = await users_service.get_user_by_id(user_id)
    raise_for_result(result)

    return result.first


@router.put("/{user_id}", response_model=UserMutationResponse)
async def update_user(
    user_id: int,
    request: UserUpdateRequest,
    users_service: UsersService = Depends(get_users_service)
):
    """Update any subset of name, email and age"""
    result = await users_service.update_user(user_id, request.supplied_fields())
    raise_for_result(result)

    return {
        "message": "User updated successfully",
        "user": result.first
    }


@router.delete("/{user_id}", response_model=UserDeleteResponse)
async def delete_user(
    user_id: int,
    users_service: UsersService = Depends(get_users_service)
):
    """Delete a user"""
    result = await users_service.delete_user(user_id)
    raise_for_result(result)

    return {
        "message": "User deleted successfully",
        "id": user_id
    }
