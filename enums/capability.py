from enum import Enum


class Capability(str, Enum):
    """
    Actions guarded by the role policy table in utils/permission_utils.py.
    """
    CART_VIEW_GUESTS = "cart:view_guests"
    ORDER_MANAGE = "order:manage"
    PRODUCT_MANAGE = "product:manage"
    CATALOG_IMPORT = "catalog:import"
    TICKET_MANAGE = "ticket:manage"
    USER_MANAGE = "user:manage"
    ADMIN_MANAGE = "admin:manage"
    PROFILE_UPDATE = "profile:update"
