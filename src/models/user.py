"""
User-related Pydantic models
"""

from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class UserData(BaseModel):
    id: int
    name: str
    email: str
    age: Optional[int] = None
    created_at: Optional[datetime] = None


class UserCreateRequest(BaseModel):
    """Body of POST /users. name and email are checked for emptiness by the service, not here."""
    name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=100)
    age: Optional[int] = None


class UserUpdateRequest(BaseModel):
    """
    Body of PUT /users/{id}.

    Every field is optional. Whether ``age`` was sent at all is read from
    ``model_fields_set`` so that an explicit ``0`` or ``null`` is kept apart
    from an omitted key. Keys other than the three mutable fields are rejected.
    """
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=100)
    age: Optional[int] = None

    def supplied_fields(self) -> dict:
        """Only the keys the caller actually sent"""
        return self.model_dump(include=self.model_fields_set)


class UserMutationResponse(BaseModel):
    message: str
    user: UserData


class UserListResponse(BaseModel):
    count: int
    users: List[UserData]


class UserDeleteResponse(BaseModel):
    message: str
    id: int
