from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from enums.user_role import UserRole
from models.address import Address
from models.user import UserDTO, User


class UserRepository:
    @staticmethod
    async def get_by_id(user_id: int, session: AsyncSession) -> UserDTO | None:
        user = await session.get(User, user_id)
        if user is not None:
            return UserDTO.model_validate(user, from_attributes=True)
        else:
            return user

    @staticmethod
    async def get_by_email(email: str, session: AsyncSession) -> UserDTO | None:
        stmt = select(User).where(User.email == email)
        user = await session_execute(stmt, session)
        user = user.scalar()
        if user is not None:
            return UserDTO.model_validate(user, from_attributes=True)
        else:
            return user

    @staticmethod
    async def is_taken(field: str, value: str, session: AsyncSession, exclude_user_id: int | None = None) -> bool:
        """True when another user already holds this username or email."""
        column = {'username': User.username, 'email': User.email}[field]
        stmt = select(func.count(User.id)).where(column == value)
        if exclude_user_id is not None:
            stmt = stmt.where(User.id != exclude_user_id)
        count = await session_execute(stmt, session)
        return count.scalar_one() > 0

    @staticmethod
    async def create(user_dto: UserDTO, session: AsyncSession) -> UserDTO:
        values = user_dto.model_dump(exclude={'id', 'addresses', 'created_at', 'updated_at'}, exclude_none=True)
        # Excluded-from-output fields are dropped by model_dump
        values.update({k: getattr(user_dto, k) for k in ('password', 'otp', 'otp_expires', 'pending_update')
                       if getattr(user_dto, k) is not None})
        user = User(**values, addresses=[])
        session.add(user)
        await session_flush(session)
        return UserDTO.model_validate(user, from_attributes=True)

    @staticmethod
    async def update(user_id: int, values: dict, session: AsyncSession) -> UserDTO | None:
        user = await session.get(User, user_id)
        if user is None:
            return None
        for key, value in values.items():
            setattr(user, key, value)
        await session_flush(session)
        return UserDTO.model_validate(user, from_attributes=True)

    @staticmethod
    async def replace_addresses(user_id: int, addresses: list[dict], session: AsyncSession) -> UserDTO | None:
        user = await session.get(User, user_id)
        if user is None:
            return None
        user.addresses = [Address(**address) for address in addresses]
        await session_flush(session)
        return UserDTO.model_validate(user, from_attributes=True)

    @staticmethod
    async def delete(user_id: int, session: AsyncSession) -> bool:
        stmt = delete(User).where(User.id == user_id)
        result = await session_execute(stmt, session)
        return result.rowcount > 0

    @staticmethod
    async def get_by_roles(roles: list[UserRole], page: int, limit: int,
                           session: AsyncSession) -> tuple[list[UserDTO], int]:
        count_stmt = select(func.count(User.id)).where(User.role.in_(roles))
        total = await session_execute(count_stmt, session)
        total = total.scalar_one()

        stmt = (
            select(User)
            .where(User.role.in_(roles))
            .order_by(User.created_at.desc(), User.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        users = await session_execute(stmt, session)
        return [UserDTO.model_validate(u, from_attributes=True) for u in users.scalars().all()], total
