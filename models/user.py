from datetime import datetime

from pydantic import Field
from sqlalchemy import Column, Integer, DateTime, String, JSON, Enum as SQLEnum
from sqlalchemy.orm import relationship

from enums.user_role import UserRole
from enums.user_status import UserStatus
from models.address import AddressDTO
from models.base import Base, CamelDTO, utc_now


class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    username = Column(String, nullable=False, unique=True)
    email = Column(String, nullable=False, unique=True)
    password = Column(String, nullable=False)  # bcrypt hash, never the plain value
    status = Column(SQLEnum(UserStatus), nullable=False, default=UserStatus.INACTIVE)
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.USER)

    # Profile
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    phone_number = Column(String, nullable=True)
    country_code = Column(String, nullable=True)

    # One-time password for registration, password reset and profile updates
    otp = Column(String, nullable=True)
    otp_expires = Column(DateTime, nullable=True)

    # Profile changes waiting for OTP confirmation
    pending_update = Column(JSON, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    addresses = relationship(
        'Address',
        back_populates='user',
        cascade='all, delete-orphan',
        lazy='selectin',
        order_by='Address.id',
    )


class UserDTO(CamelDTO):
    id: int | None = None
    username: str | None = None
    email: str | None = None
    password: str | None = Field(default=None, exclude=True)
    status: UserStatus | None = None
    role: UserRole | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone_number: str | None = None
    country_code: str | None = None
    addresses: list[AddressDTO] = []
    otp: str | None = Field(default=None, exclude=True)
    otp_expires: datetime | None = Field(default=None, exclude=True)
    pending_update: dict | None = Field(default=None, exclude=True)
    created_at: datetime | None = None
    updated_at: datetime | None = None
