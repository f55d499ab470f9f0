"""
Centralized permission utilities for user authorization.

A single policy table keyed by (role, capability) replaces role checks
repeated per endpoint. Routers declare the capability they need through
web.dependencies.require_capability; services that branch on the caller's
role ask has_capability.
"""

from enums.capability import Capability
from enums.user_role import UserRole
from exceptions.auth import PermissionDeniedException

_STAFF_CAPABILITIES = frozenset({
    Capability.CART_VIEW_GUESTS,
    Capability.ORDER_MANAGE,
    Capability.PRODUCT_MANAGE,
    Capability.TICKET_MANAGE,
    Capability.USER_MANAGE,
})

ROLE_CAPABILITIES: dict[UserRole, frozenset[Capability]] = {
    UserRole.USER: frozenset({Capability.PROFILE_UPDATE}),
    UserRole.ADMIN: _STAFF_CAPABILITIES,
    UserRole.SUPER_ADMIN: _STAFF_CAPABILITIES | {Capability.CATALOG_IMPORT, Capability.ADMIN_MANAGE},
}


def has_capability(role: UserRole | None, capability: Capability) -> bool:
    """
    Check whether a role holds a capability.

    Args:
        role: Role of the caller, None for guests
        capability: The action being attempted

    Returns:
        True if the policy table grants the capability, False otherwise

    Example:
        >>> has_capability(UserRole.ADMIN, Capability.ORDER_MANAGE)
        True
        >>> has_capability(UserRole.ADMIN, Capability.CATALOG_IMPORT)
        False
    """
    if role is None:
        return False
    return capability in ROLE_CAPABILITIES.get(role, frozenset())


def ensure_capability(role: UserRole | None, capability: Capability) -> None:
    """Raise PermissionDeniedException unless the role holds the capability."""
    if not has_capability(role, capability):
        raise PermissionDeniedException(role.value if role else "GUEST", capability.value)


def is_staff(role: UserRole | None) -> bool:
    return role in (UserRole.ADMIN, UserRole.SUPER_ADMIN)
