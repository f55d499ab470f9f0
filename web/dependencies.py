"""
FastAPI dependencies shared by the routers.

Authentication reads the access token from the http-only cookie only.
Authorization goes through the capability table in utils/permission_utils.py.
"""

from typing import AsyncIterator

from fastapi import Cookie, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import get_db_session
from enums.capability import Capability
from exceptions.auth import AuthenticationRequiredException, AuthException, InvalidTokenException
from exceptions.user import UserNotFoundException
from models.user import UserDTO
from repositories.user import UserRepository
from utils.permission_utils import ensure_capability
from utils.security import decode_access_token


async def get_session() -> AsyncIterator[AsyncSession]:
    async with get_db_session() as session:
        yield session


async def get_current_user(
        access_token: str | None = Cookie(default=None, alias=config.ACCESS_TOKEN_COOKIE),
        session: AsyncSession = Depends(get_session),
) -> UserDTO:
    if not access_token:
        raise AuthenticationRequiredException()
    user_id = decode_access_token(access_token).get("userId")
    if not isinstance(user_id, int):
        raise InvalidTokenException()
    user = await UserRepository.get_by_id(user_id, session)
    if user is None:
        raise UserNotFoundException(user_id)
    return user


async def get_optional_user(
        access_token: str | None = Cookie(default=None, alias=config.ACCESS_TOKEN_COOKIE),
        session: AsyncSession = Depends(get_session),
) -> UserDTO | None:
    """Any authentication failure means the caller is treated as a guest."""
    if not access_token:
        return None
    try:
        user_id = decode_access_token(access_token).get("userId")
    except AuthException:
        return None
    if not isinstance(user_id, int):
        return None
    return await UserRepository.get_by_id(user_id, session)


async def get_guest_id(
        guest_id: str | None = Cookie(default=None, alias=config.GUEST_CART_COOKIE),
) -> str | None:
    return guest_id


def require_capability(capability: Capability):
    """Dependency factory: the authenticated user must hold the capability."""

    async def dependency(user: UserDTO = Depends(get_current_user)) -> UserDTO:
        ensure_capability(user.role, capability)
        return user

    return dependency


class PageParams:
    def __init__(self,
                 page: int = Query(default=1, ge=1),
                 limit: int = Query(default=config.PAGE_ENTRIES, ge=1, le=100)):
        self.page = page
        self.limit = limit
