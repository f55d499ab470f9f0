from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship

from enums.user_role import UserRole
from models.base import Base, CamelDTO, utc_now


class TicketMessage(Base):
    """Append-only, rows are never updated or deleted on their own."""
    __tablename__ = 'ticket_messages'

    id = Column(Integer, primary_key=True)
    ticket_id = Column(Integer, ForeignKey('tickets.id', ondelete='CASCADE'), nullable=False, index=True)
    sender_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    sender_role = Column(SQLEnum(UserRole), nullable=False)
    message = Column(Text, nullable=False)
    attachments = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=utc_now)

    ticket = relationship('Ticket', back_populates='messages')


class TicketMessageDTO(CamelDTO):
    sender_id: int | None = None
    sender_role: UserRole | None = None
    message: str | None = None
    attachments: list[str] = []
    created_at: datetime | None = None
