from enum import Enum


class PaymentMethod(str, Enum):
    ONLINE = "ONLINE"  # Hosted checkout session at the payment gateway
    COD = "COD"        # Cash on delivery, no gateway call
