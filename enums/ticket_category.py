from enum import Enum


class TicketCategory(str, Enum):
    ORDER = "order"
    PAYMENT = "payment"
    DELIVERY = "delivery"
    REFUND = "refund"
    TECHNICAL = "technical"
    GENERAL = "general"
