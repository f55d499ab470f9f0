from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship

from enums.ticket_category import TicketCategory
from enums.ticket_priority import TicketPriority
from enums.ticket_status import TicketStatus
from models.base import Base, CamelDTO, utc_now
from models.ticketMessage import TicketMessageDTO


class Ticket(Base):
    __tablename__ = 'tickets'

    id = Column(Integer, primary_key=True)
    ticket_id = Column(String, nullable=False, unique=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete='SET NULL'), nullable=True)
    subject = Column(String, nullable=False)
    category = Column(SQLEnum(TicketCategory), nullable=False)
    priority = Column(SQLEnum(TicketPriority), nullable=False, default=TicketPriority.MEDIUM)
    status = Column(SQLEnum(TicketStatus), nullable=False, default=TicketStatus.OPEN)
    is_escalated = Column(Boolean, nullable=False, default=False)
    # Follows the newest message
    last_response_at = Column(DateTime, nullable=False, default=utc_now)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    messages = relationship(
        'TicketMessage',
        back_populates='ticket',
        cascade='all, delete-orphan',
        lazy='selectin',
        order_by='TicketMessage.id',
    )

    __table_args__ = (
        Index('ix_tickets_user_created', 'user_id', 'created_at'),
        Index('ix_tickets_status', 'status'),
    )


class TicketDTO(CamelDTO):
    id: int | None = None
    ticket_id: str | None = None
    user_id: int | None = None
    order_id: int | None = None
    subject: str | None = None
    category: TicketCategory | None = None
    priority: TicketPriority | None = None
    status: TicketStatus | None = None
    messages: list[TicketMessageDTO] = []
    is_escalated: bool | None = None
    last_response_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
