import logging
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import session_commit
from enums.address_type import AddressType
from enums.otp_purpose import OtpPurpose
from enums.user_role import UserRole
from enums.user_status import UserStatus
from exceptions.auth import InvalidCredentialsException
from exceptions.base import ValidationException
from exceptions.cart import GuestCartNotFoundException
from exceptions.user import (
    UserNotFoundException,
    UserAlreadyExistsException,
    InvalidOtpException,
    OtpExpiredException,
    AccountNotActiveException,
    AccountAlreadyActiveException,
)
from models.base import utc_now
from models.user import UserDTO
from repositories.user import UserRepository
from services.cart import CartService
from services.notification import NotificationService
from utils.security import hash_password, verify_password, create_access_token, generate_otp

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
# bcrypt only reads the first 72 bytes and refuses longer input
MAX_PASSWORD_BYTES = 72
ADDRESS_REQUIRED_FIELDS = ("street", "city", "state", "postalCode", "country")

# Profile fields a customer may change through the OTP flow, camelCase -> column
PROFILE_UPDATE_FIELDS = {
    "username": "username",
    "email": "email",
    "firstName": "first_name",
    "lastName": "last_name",
    "phoneNumber": "phone_number",
    "countryCode": "country_code",
    "addresses": "addresses",
}


def address_to_columns(address: dict) -> dict:
    return {
        "street": address["street"],
        "city": address["city"],
        "state": address["state"],
        "postal_code": address["postalCode"],
        "country": address["country"],
        "is_default": bool(address.get("isDefault", False)),
        "address_type": AddressType(address.get("addressType") or AddressType.HOME.value),
    }


def validate_password(password: str, field: str = "password") -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationException(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long", field=field)
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationException(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long", field=field)


def validate_addresses(addresses: list[dict] | None) -> list[dict]:
    """Every address needs the required fields; the first becomes default when none is marked."""
    if not addresses:
        raise ValidationException("Addresses are required", field="addresses")
    for address in addresses:
        for field in ADDRESS_REQUIRED_FIELDS:
            if not address.get(field):
                raise ValidationException(f"address.{field} is required", field=f"address.{field}")
        if address.get("addressType") and address["addressType"] not in {t.value for t in AddressType}:
            raise ValidationException("Invalid addressType", field="address.addressType")
    addresses = [dict(address) for address in addresses]
    if not any(address.get("isDefault") for address in addresses):
        addresses[0]["isDefault"] = True
    return [address_to_columns(address) for address in addresses]


def check_otp(user: UserDTO, otp: str, combined_message: str | None = None) -> None:
    """
    Raise unless the stored OTP matches and has not expired.

    With combined_message both failures share one message, so callers that
    should not reveal which check failed can say "Invalid or expired OTP".
    """
    if not user.otp or user.otp != otp:
        raise InvalidOtpException(user.email, combined_message or "Invalid OTP")
    if user.otp_expires is None or user.otp_expires < utc_now():
        if combined_message:
            raise InvalidOtpException(user.email, combined_message)
        raise OtpExpiredException(user.email)


class UserService:

    @staticmethod
    async def register(username: str | None, email: str | None, password: str | None,
                       confirm_password: str | None, first_name: str | None, last_name: str | None,
                       phone_number: str | None, country_code: str | None, session: AsyncSession) -> UserDTO:
        if not all((username, email, password, confirm_password, first_name, last_name, phone_number, country_code)):
            raise ValidationException(
                "Username, email, password, confirm password, firstName, lastName, phoneNumber, "
                "and countryCode are required"
            )
        if password != confirm_password:
            raise ValidationException("Passwords do not match", field="confirmPassword")
        validate_password(password)
        if await UserRepository.is_taken("email", email, session) \
                or await UserRepository.is_taken("username", username, session):
            raise UserAlreadyExistsException("email or username")

        otp = generate_otp(config.REGISTRATION_OTP_DIGITS)
        user = await UserRepository.create(UserDTO(
            username=username,
            email=email,
            password=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            phone_number=phone_number,
            country_code=country_code,
            status=UserStatus.INACTIVE,
            role=UserRole.USER,
            otp=otp,
            otp_expires=utc_now() + timedelta(minutes=config.REGISTRATION_OTP_TTL_MINUTES),
        ), session)
        await session_commit(session)

        await NotificationService.send_otp(email, otp)
        logger.info(f"✅ [anonymous] register: user registered {email}, OTP sent")
        return user

    @staticmethod
    async def send_otp(email: str | None, purpose: str | None, update_data: dict | None,
                       session: AsyncSession) -> dict:
        """
        Issue a fresh OTP for registration, password reset or a profile update.

        Returns a dict with emailSent, otpExpiry and, for profile updates,
        updateData. When the email could not be sent and the service is not
        running in production, the OTP itself is included under "otp".
        """
        if not email:
            raise ValidationException("Email is required", field="email")
        if purpose:
            try:
                purpose = OtpPurpose(purpose)
            except ValueError:
                valid = ", ".join(p.value for p in OtpPurpose)
                raise ValidationException(f"Invalid purpose: '{purpose}'. Valid purposes are: {valid}",
                                          field="purpose")
        else:
            purpose = OtpPurpose.REGISTRATION

        user = await UserRepository.get_by_email(email, session)
        if user is None:
            raise UserNotFoundException(email)

        otp = generate_otp(config.OTP_DIGITS)
        otp_expiry = utc_now() + timedelta(minutes=config.OTP_TTL_MINUTES)
        values = {"otp": otp, "otp_expires": otp_expiry}

        if purpose == OtpPurpose.PROFILE_UPDATE:
            UserService._validate_pending_update(update_data)
            for field in ("username", "email"):
                if update_data.get(field) and await UserRepository.is_taken(
                        field, update_data[field], session, exclude_user_id=user.id):
                    raise UserAlreadyExistsException(field)
            values["pending_update"] = update_data
        await UserRepository.update(user.id, values, session)
        await session_commit(session)

        match purpose:
            case OtpPurpose.PASSWORD_RESET:
                email_sent = await NotificationService.send_password_reset_otp(email, otp)
            case OtpPurpose.PROFILE_UPDATE:
                email_sent = await NotificationService.send_profile_update_otp(email, otp)
            case _:
                email_sent = await NotificationService.send_otp(email, otp)

        result = {"emailSent": email_sent, "email": email, "otpExpiry": otp_expiry}
        if purpose == OtpPurpose.PROFILE_UPDATE:
            result["updateData"] = update_data
        if email_sent:
            logger.info(f"✅ [{email}] sendOtp: {purpose.value} OTP sent")
        else:
            logger.error(f"❌ [{email}] sendOtp: failed to send {purpose.value} OTP email")
            if not config.IS_PRODUCTION:
                result["otp"] = otp
        return result

    @staticmethod
    def _validate_pending_update(update_data: dict | None) -> None:
        if not update_data or not isinstance(update_data, dict):
            raise ValidationException("Update data is required for profile update", field="updateData")
        if "password" in update_data:
            raise ValidationException(
                "Password updates are not allowed through profile update. Use password_reset instead.",
                field="updateData.password",
            )
        unknown = sorted(set(update_data) - set(PROFILE_UPDATE_FIELDS))
        if unknown:
            raise ValidationException(f"Fields cannot be updated: {', '.join(unknown)}", field="updateData")
        if "addresses" in update_data:
            validate_addresses(update_data["addresses"])

    @staticmethod
    async def verify_otp(email: str | None, otp: str | None, session: AsyncSession) -> UserDTO:
        """Confirms the email address. The account stays INACTIVE until an address is provided."""
        if not email or not otp:
            raise ValidationException("Email and OTP are required")
        user = await UserRepository.get_by_email(email, session)
        if user is None:
            raise UserNotFoundException(email)
        check_otp(user, otp)
        user = await UserRepository.update(user.id, {"otp": None, "otp_expires": None}, session)
        await session_commit(session)
        logger.info(f"✅ [{user.username}] verifyOtp: OTP verified, address required")
        return user

    @staticmethod
    async def complete_registration(email: str | None, addresses: list[dict] | None,
                                    session: AsyncSession) -> UserDTO:
        if not email or not addresses:
            raise ValidationException("Email and addresses are required")
        user = await UserRepository.get_by_email(email, session)
        if user is None:
            raise UserNotFoundException(email)
        if user.status != UserStatus.INACTIVE:
            raise AccountAlreadyActiveException(user.id)
        columns = validate_addresses(addresses)

        await UserRepository.replace_addresses(user.id, columns, session)
        user = await UserRepository.update(user.id, {"status": UserStatus.ACTIVE}, session)
        await session_commit(session)

        await NotificationService.send_welcome(user.email, user.username)
        logger.info(f"✅ [{user.username}] completeRegistration: registration completed for {email}")
        return user

    @staticmethod
    async def login(email: str | None, password: str | None, session: AsyncSession,
                    guest_id: str | None = None) -> tuple[UserDTO, str]:
        """
        Check credentials and issue an access token.

        A guest cart referenced by guest_id is merged into the user's cart.

        Returns:
            (user, signed access token)
        """
        if not email or not password:
            raise ValidationException("Email and password are required")
        user = await UserRepository.get_by_email(email, session)
        if user is None or not verify_password(password, user.password):
            logger.error(f"❌ [anonymous] login: invalid credentials for {email}")
            raise InvalidCredentialsException()

        if user.status != UserStatus.ACTIVE:
            if user.role == UserRole.USER:
                raise AccountNotActiveException(user.id)
            # Staff accounts never go through the address step
            user = await UserRepository.update(user.id, {"status": UserStatus.ACTIVE}, session)
            await session_commit(session)

        if guest_id:
            try:
                await CartService.merge_guest_cart(user, guest_id, session)
            except GuestCartNotFoundException:
                logger.info(f"🛒 [{user.username}] login: guest cart {guest_id} already gone, nothing to merge")

        logger.info(f"✅ [{user.username}] login: user logged in")
        return user, create_access_token(user)

    @staticmethod
    async def reset_password(email: str | None, otp: str | None, new_password: str | None,
                             session: AsyncSession) -> None:
        if not email or not otp or not new_password:
            raise ValidationException("Email, OTP, and new password are required")
        validate_password(new_password, field="newPassword")
        user = await UserRepository.get_by_email(email, session)
        if user is None:
            raise UserNotFoundException(email)
        check_otp(user, otp, combined_message="Invalid or expired OTP")
        await UserRepository.update(user.id, {
            "password": hash_password(new_password),
            "otp": None,
            "otp_expires": None,
        }, session)
        await session_commit(session)
        logger.info(f"✅ [{user.username}] resetPassword: password reset")

    @staticmethod
    async def update_profile(current_user: UserDTO, otp: str | None,
                             session: AsyncSession) -> tuple[UserDTO, list[str]]:
        """Apply the pending update confirmed by OTP. Returns the user and the camelCase fields changed."""
        if not otp:
            raise ValidationException("OTP is required", field="otp")
        user = await UserRepository.get_by_id(current_user.id, session)
        if user is None:
            raise UserNotFoundException(current_user.id)
        check_otp(user, otp, combined_message="Invalid or expired OTP")
        if not user.pending_update:
            raise ValidationException("No pending update found. Please request OTP first.")

        pending = user.pending_update
        values = {PROFILE_UPDATE_FIELDS[k]: v for k, v in pending.items() if k != "addresses"}
        for field in ("username", "email"):
            if values.get(field) and await UserRepository.is_taken(field, values[field], session,
                                                                   exclude_user_id=user.id):
                raise UserAlreadyExistsException(field)
        if "addresses" in pending:
            await UserRepository.replace_addresses(user.id, validate_addresses(pending["addresses"]), session)
        values.update({"otp": None, "otp_expires": None, "pending_update": None})
        user = await UserRepository.update(user.id, values, session)
        await session_commit(session)

        updated_fields = list(pending.keys())
        logger.info(f"✅ [{user.username}] updateProfile: updated {', '.join(updated_fields)}")
        return user, updated_fields

    @staticmethod
    async def get_profile(user_id: int, session: AsyncSession) -> UserDTO:
        user = await UserRepository.get_by_id(user_id, session)
        if user is None:
            raise UserNotFoundException(user_id)
        return user
