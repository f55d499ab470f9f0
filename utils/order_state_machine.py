"""
Order State Machine for validating fulfillment status transitions.

Payment status is a separate axis and is not governed here: it only changes
through the payment gateway webhook.
"""

import logging
from typing import Dict, List, Set

from enums.order_status import OrderStatus

logger = logging.getLogger(__name__)


class OrderStatusTransition:
    """A permitted move between two fulfillment statuses"""

    def __init__(self, from_status: OrderStatus, to_status: OrderStatus, requires_admin: bool = False):
        self.from_status = from_status
        self.to_status = to_status
        self.requires_admin = requires_admin


class OrderStateMachine:
    """
    Finite state machine for order fulfillment status.

    Valid status transitions:
    - PENDING -> CONFIRMED (admin)
    - PENDING -> SHIPPED (admin)
    - PENDING -> CANCELLED (customer or admin)
    - CONFIRMED -> SHIPPED (admin)
    - CONFIRMED -> CANCELLED (customer or admin)
    - SHIPPED -> DELIVERED (admin)

    DELIVERED and CANCELLED are final. Nothing reaches CANCELLED once the
    order is SHIPPED or DELIVERED, whatever its payment status.
    """

    VALID_TRANSITIONS: List[OrderStatusTransition] = [
        OrderStatusTransition(OrderStatus.PENDING, OrderStatus.CONFIRMED, requires_admin=True),
        OrderStatusTransition(OrderStatus.PENDING, OrderStatus.SHIPPED, requires_admin=True),
        OrderStatusTransition(OrderStatus.PENDING, OrderStatus.CANCELLED),
        OrderStatusTransition(OrderStatus.CONFIRMED, OrderStatus.SHIPPED, requires_admin=True),
        OrderStatusTransition(OrderStatus.CONFIRMED, OrderStatus.CANCELLED),
        OrderStatusTransition(OrderStatus.SHIPPED, OrderStatus.DELIVERED, requires_admin=True),
    ]

    _transition_map: Dict[OrderStatus, Set[OrderStatus]] = {}
    _admin_required_transitions: Set[tuple] = set()

    @classmethod
    def _build_transition_map(cls):
        if cls._transition_map:
            return

        for transition in cls.VALID_TRANSITIONS:
            cls._transition_map.setdefault(transition.from_status, set()).add(transition.to_status)
            if transition.requires_admin:
                cls._admin_required_transitions.add((transition.from_status, transition.to_status))

    @classmethod
    def is_valid_transition(cls, from_status: OrderStatus, to_status: OrderStatus) -> bool:
        """
        Check if a status transition is valid according to the state machine.
        Staying in the same status is always valid (no-op).
        """
        cls._build_transition_map()
        if from_status == to_status:
            return True
        return to_status in cls._transition_map.get(from_status, set())

    @classmethod
    def requires_admin(cls, from_status: OrderStatus, to_status: OrderStatus) -> bool:
        cls._build_transition_map()
        return (from_status, to_status) in cls._admin_required_transitions

    @classmethod
    def can_customer_transition(cls, from_status: OrderStatus, to_status: OrderStatus) -> bool:
        # Customers only ever move an order forward, a repeated request is rejected
        if from_status == to_status:
            return False
        return cls.is_valid_transition(from_status, to_status) and not cls.requires_admin(from_status, to_status)

    @classmethod
    def validate_and_log_transition(cls, order_number: str, from_status: OrderStatus, to_status: OrderStatus,
                                    actor: str) -> bool:
        if not cls.is_valid_transition(from_status, to_status):
            logger.error(f"Invalid status transition for order {order_number}: "
                         f"{from_status.value} -> {to_status.value} by {actor}")
            return False

        logger.info(f"ORDER_STATUS_TRANSITION: Order {order_number} {from_status.value} -> {to_status.value} by {actor}")
        return True
