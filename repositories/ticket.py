from datetime import datetime

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from enums.ticket_category import TicketCategory
from enums.ticket_priority import TicketPriority
from enums.ticket_status import TicketStatus
from enums.user_role import UserRole
from models.base import utc_now
from models.ticket import Ticket, TicketDTO
from models.ticketMessage import TicketMessage


class TicketRepository:
    @staticmethod
    async def create(ticket_dto: TicketDTO, first_message: str, attachments: list[str],
                     session: AsyncSession) -> TicketDTO:
        now = utc_now()
        ticket = Ticket(
            ticket_id=ticket_dto.ticket_id,
            user_id=ticket_dto.user_id,
            order_id=ticket_dto.order_id,
            subject=ticket_dto.subject,
            category=ticket_dto.category,
            priority=ticket_dto.priority,
            status=TicketStatus.OPEN,
            is_escalated=False,
            last_response_at=now,
            messages=[TicketMessage(
                sender_id=ticket_dto.user_id,
                sender_role=UserRole.USER,
                message=first_message,
                attachments=attachments,
                created_at=now,
            )],
        )
        session.add(ticket)
        await session_flush(session)
        return TicketDTO.model_validate(ticket, from_attributes=True)

    @staticmethod
    async def _get(ticket_id: str, session: AsyncSession) -> Ticket | None:
        stmt = select(Ticket).where(Ticket.ticket_id == ticket_id)
        ticket = await session_execute(stmt, session)
        return ticket.scalar()

    @staticmethod
    async def get_by_ticket_id(ticket_id: str, session: AsyncSession) -> TicketDTO | None:
        ticket = await TicketRepository._get(ticket_id, session)
        if ticket is not None:
            return TicketDTO.model_validate(ticket, from_attributes=True)
        return None

    @staticmethod
    async def add_message(ticket_id: str, sender_id: int, sender_role: UserRole, message: str,
                          attachments: list[str], session: AsyncSession,
                          status: TicketStatus | None = None) -> TicketDTO | None:
        ticket = await TicketRepository._get(ticket_id, session)
        if ticket is None:
            return None
        now = utc_now()
        ticket.messages.append(TicketMessage(
            sender_id=sender_id,
            sender_role=sender_role,
            message=message,
            attachments=attachments,
            created_at=now,
        ))
        ticket.last_response_at = now
        if status is not None:
            ticket.status = status
        await session_flush(session)
        return TicketDTO.model_validate(ticket, from_attributes=True)

    @staticmethod
    async def update(ticket_id: str, values: dict, session: AsyncSession) -> TicketDTO | None:
        ticket = await TicketRepository._get(ticket_id, session)
        if ticket is None:
            return None
        for key, value in values.items():
            setattr(ticket, key, value)
        await session_flush(session)
        return TicketDTO.model_validate(ticket, from_attributes=True)

    @staticmethod
    async def find(page: int, limit: int, session: AsyncSession,
                   user_id: int | None = None,
                   status: TicketStatus | None = None,
                   category: TicketCategory | None = None,
                   priority: TicketPriority | None = None,
                   search: str | None = None) -> tuple[list[TicketDTO], int]:
        conditions = []
        if user_id is not None:
            conditions.append(Ticket.user_id == user_id)
        if status is not None:
            conditions.append(Ticket.status == status)
        if category is not None:
            conditions.append(Ticket.category == category)
        if priority is not None:
            conditions.append(Ticket.priority == priority)
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(or_(
                func.lower(Ticket.ticket_id).like(pattern),
                func.lower(Ticket.subject).like(pattern),
                Ticket.messages.any(func.lower(TicketMessage.message).like(pattern)),
            ))

        count_stmt = select(func.count(Ticket.id)).where(*conditions)
        total = await session_execute(count_stmt, session)
        total = total.scalar_one()

        stmt = (
            select(Ticket)
            .where(*conditions)
            .order_by(Ticket.created_at.desc(), Ticket.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        tickets = await session_execute(stmt, session)
        return [TicketDTO.model_validate(t, from_attributes=True) for t in tickets.scalars().all()], total

    @staticmethod
    async def count_by(column, session: AsyncSession) -> dict:
        stmt = select(column, func.count(Ticket.id)).group_by(column)
        rows = await session_execute(stmt, session)
        return {value: count for value, count in rows.all()}

    @staticmethod
    async def count_where(session: AsyncSession, *conditions) -> int:
        stmt = select(func.count(Ticket.id)).where(*conditions)
        count = await session_execute(stmt, session)
        return count.scalar_one()

    @staticmethod
    async def get_closed_since(since: datetime, session: AsyncSession) -> list[TicketDTO]:
        """Resolved or closed tickets created at or after `since`, messages included."""
        stmt = select(Ticket).where(
            Ticket.status.in_([TicketStatus.RESOLVED, TicketStatus.CLOSED]),
            Ticket.created_at >= since,
        )
        tickets = await session_execute(stmt, session)
        return [TicketDTO.model_validate(t, from_attributes=True) for t in tickets.scalars().all()]
