"""
Account endpoints: registration with OTP, login, profile, and staff
administration of users and admins.
"""

from fastapi import APIRouter, Body, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from enums.capability import Capability
from models.user import UserDTO
from services.admin import AdminService
from services.user import UserService
from utils.pagination import build_pagination
from web.dependencies import get_session, get_current_user, get_guest_id, require_capability, PageParams
from web.payloads import RegisterPayload, LoginPayload, SendOtpPayload, VerifyOtpPayload, \
    CompleteRegistrationPayload, ResetPasswordPayload, UpdateProfilePayload, CreateAdminPayload
from web.responses import envelope, set_auth_cookie, clear_auth_cookie, clear_guest_cookie

user_router = APIRouter(prefix="/api/users", tags=["users"])

require_user_manager = require_capability(Capability.USER_MANAGE)
require_admin_manager = require_capability(Capability.ADMIN_MANAGE)


@user_router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterPayload, session: AsyncSession = Depends(get_session)):
    user = await UserService.register(
        payload.username, payload.email, payload.password, payload.confirm_password,
        payload.first_name, payload.last_name, payload.phone_number, payload.country_code, session,
    )
    return envelope({"user": user}, "User registered successfully. Please check your email for OTP verification.")


@user_router.post("/login")
async def login(payload: LoginPayload, response: Response,
                guest_id: str | None = Depends(get_guest_id),
                session: AsyncSession = Depends(get_session)):
    user, token = await UserService.login(payload.email, payload.password, session, guest_id=guest_id)
    set_auth_cookie(response, token)
    if guest_id:
        clear_guest_cookie(response)
    return envelope({"user": user}, "Login successful")


@user_router.post("/logout")
async def logout(response: Response, user: UserDTO = Depends(get_current_user)):
    clear_auth_cookie(response)
    return envelope(message="Logout successful")


@user_router.post("/send-otp")
async def send_otp(payload: SendOtpPayload, response: Response, session: AsyncSession = Depends(get_session)):
    result = await UserService.send_otp(payload.email, payload.purpose, payload.update_data, session)
    email_sent = result.pop("emailSent")
    if not email_sent:
        response.status_code = status.HTTP_206_PARTIAL_CONTENT
        return envelope(result, "Email service unavailable. Please try again later.", success=False)
    return envelope(result, "OTP sent to your email")


@user_router.post("/verify-otp")
async def verify_otp(payload: VerifyOtpPayload, session: AsyncSession = Depends(get_session)):
    user = await UserService.verify_otp(payload.email, payload.otp, session)
    return envelope(
        {"id": user.id, "email": user.email, "status": user.status, "requiresAddress": True},
        "OTP verified successfully. Please provide your address details to complete registration.",
    )


@user_router.post("/complete-registration")
async def complete_registration(payload: CompleteRegistrationPayload, session: AsyncSession = Depends(get_session)):
    addresses = [a.model_dump(by_alias=True) for a in payload.addresses] if payload.addresses else None
    user = await UserService.complete_registration(payload.email, addresses, session)
    return envelope({"user": user}, "Registration completed successfully. You can now login.")


@user_router.post("/reset-password")
async def reset_password(payload: ResetPasswordPayload, session: AsyncSession = Depends(get_session)):
    await UserService.reset_password(payload.email, payload.otp, payload.new_password, session)
    return envelope(message="Password reset successfully. Please login with your new password.")


@user_router.post("/update-profile")
async def update_profile(payload: UpdateProfilePayload,
                         user: UserDTO = Depends(require_capability(Capability.PROFILE_UPDATE)),
                         session: AsyncSession = Depends(get_session)):
    updated, fields = await UserService.update_profile(user, payload.otp, session)
    return envelope({"user": updated, "updatedFields": fields}, "Profile updated successfully")


@user_router.get("/profile")
async def get_profile(user: UserDTO = Depends(get_current_user), session: AsyncSession = Depends(get_session)):
    profile = await UserService.get_profile(user.id, session)
    return envelope({"user": profile}, "Profile retrieved successfully")


# Admin management

@user_router.post("/admin/create", status_code=status.HTTP_201_CREATED)
async def create_admin(payload: CreateAdminPayload,
                       user: UserDTO = Depends(require_admin_manager),
                       session: AsyncSession = Depends(get_session)):
    admin = await AdminService.create_admin(user, payload.username, payload.email, payload.password, session,
                                            first_name=payload.first_name, last_name=payload.last_name)
    return envelope({"user": admin}, "Admin user created successfully")


@user_router.get("/admin/list")
async def get_admins(paging: PageParams = Depends(),
                     user: UserDTO = Depends(require_admin_manager),
                     session: AsyncSession = Depends(get_session)):
    admins, total = await AdminService.get_admins(paging.page, paging.limit, session)
    return envelope(admins, "Admin users retrieved successfully",
                    pagination=build_pagination(paging.page, paging.limit, total))


@user_router.get("/admin/{admin_id}")
async def get_admin(admin_id: int,
                    user: UserDTO = Depends(require_admin_manager),
                    session: AsyncSession = Depends(get_session)):
    return envelope({"user": await AdminService.get_admin(admin_id, session)}, "Admin user retrieved successfully")


@user_router.put("/admin/{admin_id}")
async def update_admin(admin_id: int, update_data: dict = Body(...),
                       user: UserDTO = Depends(require_admin_manager),
                       session: AsyncSession = Depends(get_session)):
    admin = await AdminService.update_admin(user, admin_id, update_data, session)
    return envelope({"user": admin}, "Admin user updated successfully")


@user_router.delete("/admin/{admin_id}")
async def delete_admin(admin_id: int,
                       user: UserDTO = Depends(require_admin_manager),
                       session: AsyncSession = Depends(get_session)):
    admin = await AdminService.delete_admin(user, admin_id, session)
    return envelope({"deletedUser": {"id": admin.id, "username": admin.username, "email": admin.email}},
                    "Admin user deleted successfully")


@user_router.patch("/admin/{admin_id}/demote")
async def demote_admin(admin_id: int,
                       user: UserDTO = Depends(require_admin_manager),
                       session: AsyncSession = Depends(get_session)):
    demoted = await AdminService.demote_admin(user, admin_id, session)
    return envelope({"user": demoted}, "Admin user demoted to regular user successfully")


# User management

@user_router.get("")
async def get_users(paging: PageParams = Depends(),
                    user: UserDTO = Depends(require_user_manager),
                    session: AsyncSession = Depends(get_session)):
    users, total = await AdminService.get_users(paging.page, paging.limit, session)
    return envelope(users, "Users retrieved successfully",
                    pagination=build_pagination(paging.page, paging.limit, total))


@user_router.get("/{user_id}")
async def get_user(user_id: int,
                   user: UserDTO = Depends(require_user_manager),
                   session: AsyncSession = Depends(get_session)):
    return envelope({"user": await AdminService.get_user(user_id, session)}, "User retrieved successfully")


@user_router.put("/{user_id}")
async def update_user(user_id: int, update_data: dict = Body(...),
                      user: UserDTO = Depends(require_user_manager),
                      session: AsyncSession = Depends(get_session)):
    updated = await AdminService.update_user(user, user_id, update_data, session)
    return envelope({"user": updated}, "User updated successfully")


@user_router.delete("/{user_id}")
async def delete_user(user_id: int,
                      user: UserDTO = Depends(require_user_manager),
                      session: AsyncSession = Depends(get_session)):
    await AdminService.delete_user(user, user_id, session)
    return envelope(message="User deleted successfully")
