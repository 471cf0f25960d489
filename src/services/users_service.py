"""
Users service - business logic for user record management
"""

import logging
from typing import Dict, Any, Optional

from fastapi import Depends

from database.connection import get_db_pool
from services.base_service import (
    BaseService,
    ServiceResult,
    serialize_row,
    VALIDATION_ERROR,
    NOT_FOUND,
)

logger = logging.getLogger(__name__)

USER_COLUMNS = "id, name, email, age, created_at"

MUTABLE_FIELDS = ("name", "email", "age")


def merge_user_update(current: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    """
    Compute the values to persist for an update.

    Text fields fall back to the stored value when the update is missing or
    empty. ``age`` only falls back when the key is absent, so ``0`` and
    ``None`` sent by the caller both overwrite the stored age.
    """
    return {
        "name": updates.get("name") or current["name"],
        "email": updates.get("email") or current["email"],
        "age": updates["age"] if "age" in updates else current["age"],
    }


class UsersService(BaseService):
    """Service for user record operations"""

    def __init__(self, pool):
        super().__init__(pool, "users")

    async def create_user(
        self,
        name: Optional[str],
        email: Optional[str],
        age: Optional[int] = None
    ) -> ServiceResult:
        """
        Create a new user

        Args:
            name: Name of the user, required and non-empty
            email: Email address of the user, required, non-empty and unique
            age: Age of the user (optional)

        Returns:
            ServiceResult with the created user
        """
        if not name or not email:
            return ServiceResult.fail("Name and email are required", VALIDATION_ERROR)

        logger.info(f"Creating new user: {email}")
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"INSERT INTO users (name, email, age) VALUES ($1, $2, $3) RETURNING {USER_COLUMNS}",
                    name, email, age
                )
        except Exception as e:
            return self.store_error("Create", e, email=email)

        return ServiceResult.ok([serialize_row(row)])

    async def list_users(self) -> ServiceResult:
        """Get all users ordered by ascending id"""
        try:
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(f"SELECT {USER_COLUMNS} FROM users ORDER BY id ASC")
        except Exception as e:
            return self.store_error("List", e)

        return ServiceResult.ok([serialize_row(row) for row in rows])

    async def get_user_by_id(self, user_id: int) -> ServiceResult:
        """Get a single user by primary key"""
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(f"SELECT {USER_COLUMNS} FROM users WHERE id = $1", user_id)
        except Exception as e:
            return self.store_error("Get", e, id=user_id)

        if row is None:
            return ServiceResult.fail(f"User not found with ID: {user_id}", NOT_FOUND)

        return ServiceResult.ok([serialize_row(row)])

    async def update_user(self, user_id: int, updates: Dict[str, Any]) -> ServiceResult:
        """
        Update a user with merge-by-presence semantics

        The existence check and the write share one transaction, and the
        checked row stays locked until the UPDATE commits.

        Args:
            user_id: Primary key of the user
            updates: Only the fields the caller supplied (any of name, email, age)

        Returns:
            ServiceResult with the updated user, or NOT_FOUND
        """
        unknown = set(updates) - set(MUTABLE_FIELDS)
        if unknown:
            return ServiceResult.fail(
                f"Fields cannot be updated: {', '.join(sorted(unknown))}",
                VALIDATION_ERROR
            )

        logger.info(f"Updating user {user_id}")
        try:
            async with self.pool.acquire() as conn:
                async with conn.transaction():
                    current = await conn.fetchrow(
                        f"SELECT {USER_COLUMNS} FROM users WHERE id = $1 FOR UPDATE",
                        user_id
                    )
                    if current is None:
                        return ServiceResult.fail(f"User not found with ID: {user_id}", NOT_FOUND)

                    merged = merge_user_update(dict(current), updates)
                    row = await conn.fetchrow(
                        f"UPDATE users SET name = $1, email = $2, age = $3 WHERE id = $4 RETURNING {USER_COLUMNS}",
                        merged["name"], merged["email"], merged["age"], user_id
                    )
        except Exception as e:
            return self.store_error("Update", e, id=user_id)

        return ServiceResult.ok([serialize_row(row)])

    async def delete_user(self, user_id: int) -> ServiceResult:
        """
        Delete a user by primary key

        Returns:
            ServiceResult whose single record carries the deleted id, or NOT_FOUND
        """
        logger.info(f"Deleting user {user_id}")
        try:
            async with self.pool.acquire() as conn:
                async with conn.transaction():
                    existing = await conn.fetchval("SELECT id FROM users WHERE id = $1 FOR UPDATE", user_id)
                    if existing is None:
                        return ServiceResult.fail(f"User not found with ID: {user_id}", NOT_FOUND)

                    await conn.execute("DELETE FROM users WHERE id = $1", user_id)
        except Exception as e:
            return self.store_error("Delete", e, id=user_id)

        return ServiceResult.ok([{"id": user_id}])


async def get_users_service(pool=Depends(get_db_pool)) -> UsersService:
    """FastAPI dependency building a UsersService bound to the application pool"""
    return UsersService(pool)
