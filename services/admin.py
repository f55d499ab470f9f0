import logging

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit
from enums.user_role import UserRole
from enums.user_status import UserStatus
from exceptions.base import ValidationException
from exceptions.user import (
    UserNotFoundException,
    UserAlreadyExistsException,
    SuperAdminProtectedException,
    NotAnAdminException,
)
from models.user import UserDTO
from repositories.user import UserRepository
from services.notification import NotificationService
from services.user import PROFILE_UPDATE_FIELDS, validate_addresses, validate_password
from utils.security import hash_password

logger = logging.getLogger(__name__)

STAFF_ROLES = [UserRole.ADMIN, UserRole.SUPER_ADMIN]


def parse_status(status: str) -> UserStatus:
    try:
        return UserStatus(status)
    except ValueError:
        valid = ", ".join(s.value for s in UserStatus)
        raise ValidationException(f"Invalid status. Valid statuses are: {valid}", field="status")


class AdminService:
    """
    Account administration for staff.

    User management covers USER-role accounts. Admin management is reserved
    for the super admin, and a SUPER_ADMIN account can never be changed,
    deleted or demoted through either path.
    """

    @staticmethod
    async def _get_user(user_id: int, session: AsyncSession) -> UserDTO:
        user = await UserRepository.get_by_id(user_id, session)
        if user is None:
            raise UserNotFoundException(user_id)
        return user

    @staticmethod
    async def _build_update(user: UserDTO, update_data: dict, session: AsyncSession) -> dict:
        """camelCase request fields -> column values, with uniqueness and status checks."""
        values = {}
        for field, column in PROFILE_UPDATE_FIELDS.items():
            if field == "addresses" or update_data.get(field) is None:
                continue
            value = update_data[field]
            if field in ("username", "email") and value != getattr(user, field):
                if await UserRepository.is_taken(field, value, session, exclude_user_id=user.id):
                    raise UserAlreadyExistsException(field)
            values[column] = value
        if update_data.get("password"):
            validate_password(update_data["password"])
            values["password"] = hash_password(update_data["password"])
        if update_data.get("status"):
            values["status"] = parse_status(update_data["status"])
        if not values and not update_data.get("addresses"):
            raise ValidationException("No valid fields to update")
        return values

    @staticmethod
    async def _apply_update(user: UserDTO, update_data: dict, session: AsyncSession) -> UserDTO:
        values = await AdminService._build_update(user, update_data, session)
        if update_data.get("addresses"):
            await UserRepository.replace_addresses(user.id, validate_addresses(update_data["addresses"]), session)
        return await UserRepository.update(user.id, values, session)

    # User management

    @staticmethod
    async def get_users(page: int, limit: int, session: AsyncSession) -> tuple[list[UserDTO], int]:
        return await UserRepository.get_by_roles([UserRole.USER], page, limit, session)

    @staticmethod
    async def get_user(user_id: int, session: AsyncSession) -> UserDTO:
        return await AdminService._get_user(user_id, session)

    @staticmethod
    async def update_user(actor: UserDTO, user_id: int, update_data: dict, session: AsyncSession) -> UserDTO:
        """An activation or deactivation by staff is mailed to the account owner."""
        user = await AdminService._get_user(user_id, session)
        if user.role == UserRole.SUPER_ADMIN:
            raise SuperAdminProtectedException(user_id, "update")
        updated = await AdminService._apply_update(user, update_data, session)
        await session_commit(session)

        if updated.status != user.status:
            if updated.status == UserStatus.ACTIVE:
                await NotificationService.send_approval(updated.email, updated.username)
            else:
                await NotificationService.send_rejection(updated.email, updated.username)
        logger.info(f"✅ [{actor.username}] updateUser: user {user_id} updated")
        return updated

    @staticmethod
    async def delete_user(actor: UserDTO, user_id: int, session: AsyncSession) -> None:
        user = await AdminService._get_user(user_id, session)
        if user.role == UserRole.SUPER_ADMIN:
            raise SuperAdminProtectedException(user_id, "delete")
        await UserRepository.delete(user_id, session)
        await session_commit(session)
        logger.info(f"✅ [{actor.username}] deleteUser: user {user_id} deleted")

    # Admin management

    @staticmethod
    async def create_admin(actor: UserDTO, username: str | None, email: str | None, password: str | None,
                           session: AsyncSession, first_name: str | None = None,
                           last_name: str | None = None) -> UserDTO:
        if not username or not email or not password:
            raise ValidationException("Username, email, and password are required")
        validate_password(password)
        if await UserRepository.is_taken("email", email, session) \
                or await UserRepository.is_taken("username", username, session):
            raise UserAlreadyExistsException("email or username")
        admin = await UserRepository.create(UserDTO(
            username=username,
            email=email,
            password=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            role=UserRole.ADMIN,
            status=UserStatus.ACTIVE,
        ), session)
        await session_commit(session)
        logger.info(f"✅ [{actor.username}] createAdmin: admin {username} created")
        return admin

    @staticmethod
    async def get_admins(page: int, limit: int, session: AsyncSession) -> tuple[list[UserDTO], int]:
        return await UserRepository.get_by_roles(STAFF_ROLES, page, limit, session)

    @staticmethod
    async def get_admin(admin_id: int, session: AsyncSession) -> UserDTO:
        admin = await AdminService._get_user(admin_id, session)
        if admin.role not in STAFF_ROLES:
            raise NotAnAdminException(admin_id)
        return admin

    @staticmethod
    async def _get_modifiable_admin(admin_id: int, operation: str, session: AsyncSession) -> UserDTO:
        admin = await AdminService._get_user(admin_id, session)
        if admin.role == UserRole.SUPER_ADMIN:
            raise SuperAdminProtectedException(admin_id, operation)
        if admin.role != UserRole.ADMIN:
            raise NotAnAdminException(admin_id)
        return admin

    @staticmethod
    async def update_admin(actor: UserDTO, admin_id: int, update_data: dict, session: AsyncSession) -> UserDTO:
        admin = await AdminService._get_modifiable_admin(admin_id, "update", session)
        allowed = {k: v for k, v in update_data.items() if k in ("username", "email", "status")}
        updated = await AdminService._apply_update(admin, allowed, session)
        await session_commit(session)
        logger.info(f"✅ [{actor.username}] updateAdmin: admin {admin_id} updated")
        return updated

    @staticmethod
    async def delete_admin(actor: UserDTO, admin_id: int, session: AsyncSession) -> UserDTO:
        admin = await AdminService._get_modifiable_admin(admin_id, "delete", session)
        await UserRepository.delete(admin_id, session)
        await session_commit(session)
        logger.info(f"✅ [{actor.username}] deleteAdmin: admin {admin.username} deleted")
        return admin

    @staticmethod
    async def demote_admin(actor: UserDTO, admin_id: int, session: AsyncSession) -> UserDTO:
        await AdminService._get_modifiable_admin(admin_id, "demote", session)
        demoted = await UserRepository.update(admin_id, {"role": UserRole.USER}, session)
        await session_commit(session)
        logger.info(f"✅ [{actor.username}] demoteAdmin: admin {admin_id} demoted to USER")
        return demoted

    @staticmethod
    async def ensure_super_admin(username: str, email: str, password: str,
                                 session: AsyncSession) -> tuple[UserDTO, bool]:
        """
        Bootstrap the super admin account.

        Returns:
            (account, True if it was created, False if the email was already registered)
        """
        existing = await UserRepository.get_by_email(email, session)
        if existing is not None:
            return existing, False
        if await UserRepository.is_taken("username", username, session):
            raise UserAlreadyExistsException("username")
        validate_password(password)
        super_admin = await UserRepository.create(UserDTO(
            username=username,
            email=email,
            password=hash_password(password),
            role=UserRole.SUPER_ADMIN,
            status=UserStatus.ACTIVE,
        ), session)
        await session_commit(session)
        logger.info(f"✅ [system] createSuperAdmin: {username} created")
        return super_admin, True
