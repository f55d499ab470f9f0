"""
Support ticket exceptions.
"""

from .base import ShopException


class TicketException(ShopException):
    """Base exception for ticketing errors."""
    pass


class TicketNotFoundException(TicketException):
    def __init__(self, ticket_id: str):
        super().__init__(
            "Ticket not found",
            details={'ticket_id': ticket_id}
        )
        self.ticket_id = ticket_id


class TicketOwnershipException(TicketException):
    def __init__(self, ticket_id: str, user_id: int):
        super().__init__(
            "Access denied",
            details={'ticket_id': ticket_id, 'user_id': user_id}
        )
        self.ticket_id = ticket_id
        self.user_id = user_id
