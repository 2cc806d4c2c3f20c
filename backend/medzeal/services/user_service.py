"""User directory (users/*) and role lookup.

Sign-in happens in the identity provider; this service only reads what the
admin pages show and the `role` used to gate them.
"""

import logging
from typing import List, Optional

from medzeal.exceptions import NotFoundError
from medzeal.models import paths
from medzeal.schemas.user import User, UserRole
from medzeal.services.subscriptions import fetch
from medzeal.services.tree import as_dict, text

logger = logging.getLogger(__name__)


def search_users(tree, query: Optional[str] = None) -> List[User]:
    """Case-insensitive match on name, email or phone."""
    needle = (query or "").strip().lower()
    users = []
    for uid, raw in as_dict(tree).items():
        raw = as_dict(raw)
        user = User(
            id=uid,
            name=text(raw.get("name")),
            email=text(raw.get("email")),
            phone=text(raw.get("phone")),
            role=raw.get("role"),
        )
        if needle and not any(needle in field.lower() for field in (user.name, user.email, user.phone)):
            continue
        users.append(user)
    return users


class UserService:
    async def list_users(self, store, query: Optional[str] = None) -> List[User]:
        return search_users(await fetch(store, paths.USERS), query)

    async def get_role(self, store, uid: str) -> UserRole:
        user = await fetch(store, paths.user_path(uid))
        if not user:
            raise NotFoundError(resource="User", resource_id=uid)
        return UserRole(uid=uid, role=as_dict(user).get("role"))


user_service = UserService()
