"""Machine read model for production resources."""

from pydantic import Field

from ...shared.base import Entity
from ..value_objects.enums import MachineStatus


class Machine(Entity):
    """A CNC machine that assignments can be scheduled on."""

    machine_code: str = Field(min_length=1, max_length=20)
    name: str = ""
    location: str | None = None
    status: MachineStatus = MachineStatus.IDLE

    @property
    def is_selectable(self) -> bool:
        """Check if machine may receive a new assignment."""
        return self.status.is_selectable

    @property
    def label(self) -> str:
        return f"{self.machine_code} - {self.name}" if self.name else self.machine_code
