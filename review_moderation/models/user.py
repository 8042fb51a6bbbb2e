"""Reference models the core reads but never mutates: users and products."""
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Role(str, Enum):
    USER = "user"
    MODERATOR = "moderator"


class User(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    email: str
    role: Role = Role.USER

    @property
    def is_moderator(self) -> bool:
        return self.role is Role.MODERATOR


class Product(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
