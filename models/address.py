from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship

from enums.address_type import AddressType
from models.base import Base, CamelDTO


class Address(Base):
    __tablename__ = 'user_addresses'

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    street = Column(String, nullable=False)
    city = Column(String, nullable=False)
    state = Column(String, nullable=False)
    postal_code = Column(String, nullable=False)
    country = Column(String, nullable=False)
    is_default = Column(Boolean, nullable=False, default=False)
    address_type = Column(SQLEnum(AddressType), nullable=False, default=AddressType.HOME)

    user = relationship('User', back_populates='addresses')


class AddressDTO(CamelDTO):
    street: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    is_default: bool | None = False
    address_type: AddressType | None = AddressType.HOME
