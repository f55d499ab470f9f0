from enum import Enum


class UserStatus(str, Enum):
    """
    Account activation state.

    INACTIVE: registered, OTP pending or address not yet provided
    ACTIVE: address gate passed, may log in
    """
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
