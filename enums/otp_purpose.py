from enum import Enum


class OtpPurpose(str, Enum):
    REGISTRATION = "registration"
    PASSWORD_RESET = "password_reset"
    PROFILE_UPDATE = "profile_update"
