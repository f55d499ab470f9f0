from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from enums.capability import Capability
from models.user import UserDTO
from services.ticket import TicketService
from utils.pagination import build_ticket_pagination
from web.dependencies import get_session, get_current_user, require_capability, PageParams
from web.payloads import CreateTicketPayload, TicketMessagePayload, TicketStatusPayload, TicketPriorityPayload
from web.responses import envelope

ticket_router = APIRouter(prefix="/api/tickets", tags=["tickets"])

require_ticket_manager = require_capability(Capability.TICKET_MANAGE)


@ticket_router.post("", status_code=status.HTTP_201_CREATED)
async def create_ticket(payload: CreateTicketPayload,
                        user: UserDTO = Depends(get_current_user),
                        session: AsyncSession = Depends(get_session)):
    ticket = await TicketService.create_ticket(
        user, payload.subject, payload.category, payload.message, session,
        priority=payload.priority, order_number=payload.order_id,
    )
    return envelope(ticket, "Ticket created successfully")


@ticket_router.get("")
async def get_user_tickets(ticket_status: str | None = Query(default=None, alias="status"),
                           category: str | None = Query(default=None),
                           paging: PageParams = Depends(),
                           user: UserDTO = Depends(get_current_user),
                           session: AsyncSession = Depends(get_session)):
    tickets, total = await TicketService.get_user_tickets(
        user, paging.page, paging.limit, session, status=ticket_status, category=category
    )
    return envelope(tickets, pagination=build_ticket_pagination(paging.page, paging.limit, total))


# Staff

@ticket_router.get("/admin/all")
async def get_all_tickets(ticket_status: str | None = Query(default=None, alias="status"),
                          category: str | None = Query(default=None),
                          priority: str | None = Query(default=None),
                          search: str | None = Query(default=None),
                          paging: PageParams = Depends(),
                          user: UserDTO = Depends(require_ticket_manager),
                          session: AsyncSession = Depends(get_session)):
    tickets, total = await TicketService.get_all_tickets(
        paging.page, paging.limit, session,
        status=ticket_status, category=category, priority=priority, search=search,
    )
    return envelope(tickets, pagination=build_ticket_pagination(paging.page, paging.limit, total))


@ticket_router.get("/admin/stats")
async def get_ticket_stats(user: UserDTO = Depends(require_ticket_manager),
                           session: AsyncSession = Depends(get_session)):
    return envelope(await TicketService.get_stats(session))


@ticket_router.get("/admin/analytics/response-time")
async def get_response_time_analytics(user: UserDTO = Depends(require_ticket_manager),
                                      session: AsyncSession = Depends(get_session)):
    return envelope(await TicketService.get_response_time_analytics(session))


@ticket_router.patch("/admin/{ticket_id}/status")
async def update_ticket_status(ticket_id: str, payload: TicketStatusPayload,
                               user: UserDTO = Depends(require_ticket_manager),
                               session: AsyncSession = Depends(get_session)):
    ticket = await TicketService.update_status(user, ticket_id, payload.status, session)
    return envelope(ticket, "Ticket status updated successfully")


@ticket_router.patch("/admin/{ticket_id}/priority")
async def update_ticket_priority(ticket_id: str, payload: TicketPriorityPayload,
                                 user: UserDTO = Depends(require_ticket_manager),
                                 session: AsyncSession = Depends(get_session)):
    ticket = await TicketService.update_priority(user, ticket_id, payload.priority, session)
    return envelope(ticket, "Ticket priority updated successfully")


@ticket_router.patch("/admin/{ticket_id}/escalate")
async def escalate_ticket(ticket_id: str,
                          user: UserDTO = Depends(require_ticket_manager),
                          session: AsyncSession = Depends(get_session)):
    ticket = await TicketService.escalate(user, ticket_id, session)
    return envelope(ticket, "Ticket escalated successfully")


@ticket_router.post("/admin/{ticket_id}/messages")
async def add_staff_message(ticket_id: str, payload: TicketMessagePayload,
                            user: UserDTO = Depends(require_ticket_manager),
                            session: AsyncSession = Depends(get_session)):
    ticket = await TicketService.add_staff_message(user, ticket_id, payload.message, session,
                                                   attachments=payload.attachments)
    return envelope(ticket, "Message added successfully")


# Customer

@ticket_router.get("/{ticket_id}")
async def get_ticket(ticket_id: str,
                     user: UserDTO = Depends(get_current_user),
                     session: AsyncSession = Depends(get_session)):
    return envelope(await TicketService.get_ticket(user, ticket_id, session))


@ticket_router.post("/{ticket_id}/messages")
async def add_message(ticket_id: str, payload: TicketMessagePayload,
                      user: UserDTO = Depends(get_current_user),
                      session: AsyncSession = Depends(get_session)):
    ticket = await TicketService.add_customer_message(user, ticket_id, payload.message, session,
                                                      attachments=payload.attachments)
    return envelope(ticket, "Message added successfully")


@ticket_router.patch("/{ticket_id}/close")
async def close_ticket(ticket_id: str,
                       user: UserDTO = Depends(get_current_user),
                       session: AsyncSession = Depends(get_session)):
    ticket = await TicketService.close_ticket(user, ticket_id, session)
    return envelope(ticket, "Ticket closed successfully")
