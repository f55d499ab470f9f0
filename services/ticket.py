import logging
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit
from enums.ticket_category import TicketCategory
from enums.ticket_priority import TicketPriority
from enums.ticket_status import TicketStatus
from enums.user_role import UserRole
from exceptions.base import ValidationException
from exceptions.ticket import TicketNotFoundException, TicketOwnershipException
from models.base import utc_now
from models.ticket import Ticket, TicketDTO
from models.user import UserDTO
from repositories.order import OrderRepository
from repositories.ticket import TicketRepository
from utils.security import generate_reference

logger = logging.getLogger(__name__)

URGENT_KEYWORDS = ("urgent", "emergency", "critical", "immediate", "asap",
                   "payment failed", "wrong charge", "double charge")
HIGH_KEYWORDS = ("important", "issue", "problem", "broken", "not working", "delay", "lost", "missing")
ESCALATION_AGE = timedelta(hours=48)
ESCALATION_MESSAGE_COUNT = 10


def determine_ticket_priority(category: TicketCategory, subject: str, message: str) -> TicketPriority:
    """
    Keyword-based priority suggestion.
    Advisory only: ticket creation keeps the requested priority or MEDIUM.
    """
    text = f"{subject} {message}".lower()
    if any(keyword in text for keyword in URGENT_KEYWORDS):
        return TicketPriority.URGENT
    if any(keyword in text for keyword in HIGH_KEYWORDS):
        return TicketPriority.HIGH
    if category in (TicketCategory.PAYMENT, TicketCategory.REFUND):
        return TicketPriority.HIGH
    return TicketPriority.MEDIUM


def should_auto_escalate(ticket: TicketDTO) -> bool:
    """Advisory only, nothing escalates tickets automatically."""
    if ticket.priority == TicketPriority.URGENT:
        return True
    if (ticket.created_at is not None
            and ticket.created_at < utc_now() - ESCALATION_AGE
            and ticket.status not in (TicketStatus.RESOLVED, TicketStatus.CLOSED)):
        return True
    return len(ticket.messages) > ESCALATION_MESSAGE_COUNT


def parse_enum(enum_cls, value, field: str, message: str):
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationException(message, field=field)


class TicketService:

    @staticmethod
    async def create_ticket(user: UserDTO, subject: str | None, category: str | None, message: str | None,
                            session: AsyncSession, priority: str | None = None,
                            order_number: str | None = None) -> TicketDTO:
        errors = []
        if not subject or not subject.strip():
            errors.append("Subject is required and must be a non-empty string")
        if not category or category not in {c.value for c in TicketCategory}:
            errors.append("Valid category is required")
        if priority and priority not in {p.value for p in TicketPriority}:
            errors.append("Invalid priority")
        if not message or not message.strip():
            errors.append("Message is required and must be a non-empty string")
        if errors:
            raise ValidationException("; ".join(errors))

        order_id = None
        if order_number:
            order = await OrderRepository.get_by_order_number(order_number, session)
            # Unknown order numbers are ignored, the ticket stands on its own
            order_id = order.id if order is not None else None

        ticket = await TicketRepository.create(TicketDTO(
            ticket_id=generate_reference("TKT"),
            user_id=user.id,
            order_id=order_id,
            subject=subject.strip(),
            category=TicketCategory(category),
            priority=TicketPriority(priority) if priority else TicketPriority.MEDIUM,
        ), message.strip(), [], session)
        await session_commit(session)
        logger.info(f"🎫 [{user.username}] createTicket: {ticket.ticket_id} ({ticket.category.value})")
        return ticket

    @staticmethod
    async def get_user_tickets(user: UserDTO, page: int, limit: int, session: AsyncSession,
                               status: str | None = None, category: str | None = None) -> tuple[list[TicketDTO], int]:
        return await TicketRepository.find(
            page, limit, session,
            user_id=user.id,
            status=parse_enum(TicketStatus, status, "status", "Invalid status"),
            category=parse_enum(TicketCategory, category, "category", "Invalid category"),
        )

    @staticmethod
    async def get_ticket(user: UserDTO, ticket_id: str, session: AsyncSession,
                         as_staff: bool = False) -> TicketDTO:
        ticket = await TicketRepository.get_by_ticket_id(ticket_id, session)
        if ticket is None:
            raise TicketNotFoundException(ticket_id)
        if not as_staff and ticket.user_id != user.id:
            raise TicketOwnershipException(ticket_id, user.id)
        return ticket

    @staticmethod
    async def add_customer_message(user: UserDTO, ticket_id: str, message: str | None,
                                   session: AsyncSession, attachments: list[str] | None = None) -> TicketDTO:
        """A reply from the customer reopens a ticket that was waiting on them."""
        if not message or not message.strip():
            raise ValidationException("Message is required", field="message")
        ticket = await TicketService.get_ticket(user, ticket_id, session)
        new_status = TicketStatus.OPEN if ticket.status == TicketStatus.WAITING_CUSTOMER else None
        ticket = await TicketRepository.add_message(
            ticket_id, user.id, user.role, message.strip(), attachments or [], session, status=new_status
        )
        await session_commit(session)
        logger.info(f"🎫 [{user.username}] addMessage: {ticket_id} (status {ticket.status.value})")
        return ticket

    @staticmethod
    async def add_staff_message(staff: UserDTO, ticket_id: str, message: str | None,
                                session: AsyncSession, attachments: list[str] | None = None) -> TicketDTO:
        if not message or not message.strip():
            raise ValidationException("Message is required", field="message")
        await TicketService.get_ticket(staff, ticket_id, session, as_staff=True)
        ticket = await TicketRepository.add_message(
            ticket_id, staff.id, staff.role, message.strip(), attachments or [], session
        )
        await session_commit(session)
        logger.info(f"🎫 [{staff.username}] staffReply: {ticket_id}")
        return ticket

    @staticmethod
    async def close_ticket(user: UserDTO, ticket_id: str, session: AsyncSession) -> TicketDTO:
        await TicketService.get_ticket(user, ticket_id, session)
        ticket = await TicketRepository.update(ticket_id, {"status": TicketStatus.CLOSED}, session)
        await session_commit(session)
        logger.info(f"🎫 [{user.username}] closeTicket: {ticket_id}")
        return ticket

    @staticmethod
    async def get_all_tickets(page: int, limit: int, session: AsyncSession, status: str | None = None,
                              category: str | None = None, priority: str | None = None,
                              search: str | None = None) -> tuple[list[TicketDTO], int]:
        return await TicketRepository.find(
            page, limit, session,
            status=parse_enum(TicketStatus, status, "status", "Invalid status"),
            category=parse_enum(TicketCategory, category, "category", "Invalid category"),
            priority=parse_enum(TicketPriority, priority, "priority", "Invalid priority"),
            search=search.strip() if search else None,
        )

    @staticmethod
    async def _admin_update(staff: UserDTO, ticket_id: str, values: dict, session: AsyncSession) -> TicketDTO:
        ticket = await TicketRepository.update(ticket_id, values, session)
        if ticket is None:
            raise TicketNotFoundException(ticket_id)
        await session_commit(session)
        logger.info(f"🎫 [{staff.username}] updateTicket: {ticket_id} {values}")
        return ticket

    @staticmethod
    async def update_status(staff: UserDTO, ticket_id: str, status: str | None, session: AsyncSession) -> TicketDTO:
        new_status = parse_enum(TicketStatus, status, "status", "Invalid status")
        if new_status is None:
            raise ValidationException("Invalid status", field="status")
        return await TicketService._admin_update(staff, ticket_id, {"status": new_status}, session)

    @staticmethod
    async def update_priority(staff: UserDTO, ticket_id: str, priority: str | None,
                              session: AsyncSession) -> TicketDTO:
        new_priority = parse_enum(TicketPriority, priority, "priority", "Invalid priority")
        if new_priority is None:
            raise ValidationException("Invalid priority", field="priority")
        return await TicketService._admin_update(staff, ticket_id, {"priority": new_priority}, session)

    @staticmethod
    async def escalate(staff: UserDTO, ticket_id: str, session: AsyncSession) -> TicketDTO:
        return await TicketService._admin_update(staff, ticket_id, {"is_escalated": True}, session)

    @staticmethod
    async def get_stats(session: AsyncSession) -> dict:
        by_status = await TicketRepository.count_by(Ticket.status, session)
        by_priority = await TicketRepository.count_by(Ticket.priority, session)
        status_counts = {
            "open": by_status.get(TicketStatus.OPEN, 0),
            "inProgress": by_status.get(TicketStatus.IN_PROGRESS, 0),
            "waitingCustomer": by_status.get(TicketStatus.WAITING_CUSTOMER, 0),
            "resolved": by_status.get(TicketStatus.RESOLVED, 0),
            "closed": by_status.get(TicketStatus.CLOSED, 0),
        }
        return {
            "byStatus": status_counts,
            "byPriority": {
                "urgent": by_priority.get(TicketPriority.URGENT, 0),
                "high": by_priority.get(TicketPriority.HIGH, 0),
                "medium": by_priority.get(TicketPriority.MEDIUM, 0),
                "low": by_priority.get(TicketPriority.LOW, 0),
            },
            "escalated": await TicketRepository.count_where(session, Ticket.is_escalated == True),
            "newToday": await TicketRepository.count_where(session, Ticket.created_at >= utc_now() - timedelta(hours=24)),
            "total": sum(status_counts.values()),
        }

    @staticmethod
    async def get_response_time_analytics(session: AsyncSession) -> dict:
        """
        Minutes between the first message and the first reply, over resolved
        or closed tickets created in the last 30 days.
        """
        tickets = await TicketRepository.get_closed_since(utc_now() - timedelta(days=30), session)
        response_times = sorted(
            (t.messages[1].created_at - t.messages[0].created_at).total_seconds()
            for t in tickets if len(t.messages) >= 2
        )
        if not response_times:
            return {
                "averageResponseTime": 0,
                "medianResponseTime": 0,
                "minResponseTime": 0,
                "maxResponseTime": 0,
            }
        average = sum(response_times) / len(response_times)
        median = response_times[len(response_times) // 2]
        return {
            "averageResponseTime": round(average / 60),
            "medianResponseTime": round(median / 60),
            "minResponseTime": round(response_times[0] / 60),
            "maxResponseTime": round(response_times[-1] / 60),
        }
