"""Staff user management routes."""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from loguru import logger

from hkapi.core.exceptions import RecordNotFoundError
from hkapi.repositories import UserRepository
from web.dependencies import get_user_repository
from web.models import UserPayload

router = APIRouter(prefix="/users", tags=["users"])


@router.get("")
async def list_users(users: UserRepository = Depends(get_user_repository)) -> Dict[str, Any]:
    return {"success": True, "users": await users.get_all()}


@router.post("")
async def create_user(
    body: UserPayload, users: UserRepository = Depends(get_user_repository)
) -> Dict[str, Any]:
    """
    Create a user.

    Returns:
        Created user ID
    """
    user_id = await users.create(body.model_dump(exclude_unset=True))
    logger.info(f"User created: {user_id}")
    return {"success": True, "id": user_id}


@router.put("/{user_id}")
async def update_user(
    user_id: str, body: UserPayload, users: UserRepository = Depends(get_user_repository)
) -> Dict[str, Any]:
    """
    Merge fields into a user.

    Raises:
        RecordNotFoundError: If the user does not exist
    """
    if not await users.update(user_id, body.model_dump(exclude_unset=True)):
        raise RecordNotFoundError("User", user_id)
    return {"success": True}


@router.delete("/{user_id}")
async def delete_user(
    user_id: str, users: UserRepository = Depends(get_user_repository)
) -> Dict[str, Any]:
    await users.delete(user_id)
    logger.info(f"User deleted: {user_id}")
    return {"success": True}
