"""
Role-Based Access Control (RBAC) Implementation

Maps console roles onto scheduling permissions and answers capability
questions for the scheduling services. Role storage itself belongs to the
identity store and is reached through a RoleProvider.
"""

import logging
from enum import Enum

from shopfloor.domain.scheduling.repositories.readers import RoleProvider
from shopfloor.domain.scheduling.services.override_authority import CapabilityChecker

logger = logging.getLogger(__name__)


class ConsoleRole(str, Enum):
    """Roles held by users of the factory console."""

    ADMIN = "admin"
    PRODUCTION = "production"
    QUALITY = "quality"
    PACKING = "packing"
    SALES = "sales"
    ACCOUNTS = "accounts"
    STORES = "stores"
    PURCHASE = "purchase"


class SchedulingPermission(str, Enum):
    """Scheduling actions that are gated by role."""

    CYCLE_TIME_OVERRIDE = "cycle_time:override"


# Role-Permission Matrix; roles not listed hold no gated permission
SCHEDULING_ROLE_PERMISSIONS: dict[ConsoleRole, set[SchedulingPermission]] = {
    ConsoleRole.ADMIN: set(SchedulingPermission),
    ConsoleRole.PRODUCTION: {SchedulingPermission.CYCLE_TIME_OVERRIDE},
}


def permissions_for_roles(
    roles: set[str],
    matrix: dict[ConsoleRole, set[SchedulingPermission]] | None = None,
) -> set[SchedulingPermission]:
    """Union of permissions granted by ``roles``; unknown role names grant nothing."""
    matrix = SCHEDULING_ROLE_PERMISSIONS if matrix is None else matrix
    permissions: set[SchedulingPermission] = set()
    for role_name in roles:
        try:
            role = ConsoleRole(role_name)
        except ValueError:
            logger.debug(f"Ignoring unknown role {role_name!r}")
            continue
        permissions.update(matrix.get(role, set()))
    return permissions


class RolePermissionCapabilityChecker(CapabilityChecker):
    """
    Capability checker backed by the role-permission matrix.

    The override capability is the ``cycle_time:override`` permission, so
    which roles may override is decided by the matrix, not by the caller.
    """

    def __init__(
        self,
        role_provider: RoleProvider,
        matrix: dict[ConsoleRole, set[SchedulingPermission]] | None = None,
    ):
        self._role_provider = role_provider
        self._matrix = matrix

    async def has_permission(self, actor: str, permission: SchedulingPermission) -> bool:
        roles = await self._role_provider.roles_for(actor)
        granted = permission in permissions_for_roles(roles, self._matrix)
        logger.info(
            f"Permission check: {permission.value} for {actor} -> "
            f"{'granted' if granted else 'denied'}"
        )
        return granted

    async def has_override_capability(self, actor: str) -> bool:
        return await self.has_permission(actor, SchedulingPermission.CYCLE_TIME_OVERRIDE)
