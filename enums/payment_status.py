from enum import Enum


class PaymentStatus(str, Enum):
    """
    Payment axis of an order, independent of the fulfillment status.

    Only a verified gateway callback moves an order to PAID.
    """
    PENDING = "PENDING"
    PAID = "PAID"
