"""User directory routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from medzeal.database import RealtimeStore, get_store
from medzeal.schemas.common import ErrorResponse
from medzeal.schemas.user import User, UserRole
from medzeal.services.user_service import user_service

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("", response_model=List[User], summary="List users")
async def list_users(
    q: Optional[str] = Query(default=None, description="Search by name, email, or phone"),
    store: RealtimeStore = Depends(get_store),
) -> List[User]:
    return await user_service.list_users(store, q)


@router.get(
    "/{uid}/role",
    response_model=UserRole,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Role of a user",
)
async def get_role(uid: str, store: RealtimeStore = Depends(get_store)) -> UserRole:
    return await user_service.get_role(store, uid)
