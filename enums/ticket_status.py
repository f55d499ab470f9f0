from enum import Enum


class TicketStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    WAITING_CUSTOMER = "waiting_customer"  # Reverts to OPEN when the customer replies
    RESOLVED = "resolved"
    CLOSED = "closed"
