"""User directory schemas (users/*)."""

from typing import Optional

from pydantic import BaseModel


class User(BaseModel):
    id: str
    name: str = ""
    email: str = ""
    phone: str = ""
    role: Optional[str] = None


class UserRole(BaseModel):
    uid: str
    role: Optional[str] = None
