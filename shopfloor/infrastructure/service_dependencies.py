"""
Service Dependencies for Domain Service Injection.

Wires the scheduling services to the configured store: the hosted Supabase
project when its service key is set, the relational database otherwise.
"""

from functools import lru_cache

from shopfloor.core.config import settings
from shopfloor.core.db import get_engine, init_db, session_factory
from shopfloor.core.observability import get_logger, initialize_observability
from shopfloor.core.rbac import RolePermissionCapabilityChecker
from shopfloor.core.supabase import get_supabase_client
from shopfloor.domain.scheduling.repositories.readers import RoleProvider
from shopfloor.domain.scheduling.repositories.unit_of_work import UnitOfWorkFactory
from shopfloor.domain.scheduling.services.machine_assignment_service import (
    MachineAssignmentService,
)
from shopfloor.domain.scheduling.services.override_authority import OverrideAuthority
from shopfloor.domain.scheduling.services.reassignment_coordinator import (
    ReassignmentCoordinator,
)
from shopfloor.infrastructure.database.repositories import SqlModelRoleProvider
from shopfloor.infrastructure.database.unit_of_work import sqlmodel_unit_of_work_factory
from shopfloor.infrastructure.events.event_bus import InMemoryEventBus
from shopfloor.infrastructure.supabase import (
    SupabaseRoleProvider,
    supabase_unit_of_work_factory,
)

logger = get_logger(__name__)


@lru_cache
def get_event_bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@lru_cache
def get_unit_of_work_factory() -> UnitOfWorkFactory:
    """Unit of work factory for the configured store, created once."""
    initialize_observability()
    if settings.supabase_enabled:
        logger.info("Using hosted store", supabase_url=settings.SUPABASE_URL)
        return supabase_unit_of_work_factory(get_supabase_client().admin, get_event_bus())

    engine = get_engine()
    init_db(engine)
    logger.info("Using relational store", database_url=engine.url.render_as_string())
    return sqlmodel_unit_of_work_factory(session_factory(engine), get_event_bus())


def get_role_provider() -> RoleProvider:
    if settings.supabase_enabled:
        return SupabaseRoleProvider(get_supabase_client().admin)
    return SqlModelRoleProvider(session_factory(get_engine()))


def get_machine_assignment_service() -> MachineAssignmentService:
    """Get the assignment workflow with the role-based override gate."""
    authority = OverrideAuthority(RolePermissionCapabilityChecker(get_role_provider()))
    return MachineAssignmentService(get_unit_of_work_factory(), authority)


def get_reassignment_coordinator() -> ReassignmentCoordinator:
    return ReassignmentCoordinator(get_unit_of_work_factory())
