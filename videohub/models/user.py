"""User identity models."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class User(BaseModel):
    """Public view of a registered user.

    Never carries the password hash or refresh token.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: UUID = Field(serialization_alias="_id")
    username: str
    email: str
    full_name: str
    created_at: datetime
    updated_at: datetime


class UserRecord(BaseModel):
    """A user row as held by the credential store."""

    id: UUID
    username: str
    email: str
    full_name: str
    password_hash: str = Field(repr=False)
    refresh_token: Optional[str] = Field(default=None, repr=False)
    created_at: datetime
    updated_at: datetime

    def to_user(self) -> User:
        """Strip credentials for returning to callers."""
        return User(
            id=self.id,
            username=self.username,
            email=self.email,
            full_name=self.full_name,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
