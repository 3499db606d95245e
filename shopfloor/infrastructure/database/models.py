"""
SQLModel database models for machine scheduling.

Table and column names follow the hosted store so the SQLModel and Supabase
adapters share one row shape. Statuses are stored as their string values.
"""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column, DateTime, Index
from sqlmodel import Field, SQLModel


class WorkOrderRow(SQLModel, table=True):
    __tablename__ = "work_orders"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    display_id: str | None = Field(default=None, max_length=50, index=True)
    item_code: str | None = Field(default=None, max_length=100)
    customer: str | None = Field(default=None, max_length=200)
    quantity: int = Field(ge=1)
    cycle_time_seconds: float | None = Field(default=None)
    qc_material_passed: bool = Field(default=False)
    due_date: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))
    status: str = Field(default="pending", max_length=30)


class MachineRow(SQLModel, table=True):
    __tablename__ = "machines"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    # Human machine code, e.g. "CNC-01"
    machine_id: str = Field(max_length=20, unique=True, index=True)
    name: str = Field(default="", max_length=100)
    location: str | None = Field(default=None, max_length=100, index=True)
    status: str = Field(default="idle", max_length=20)


class AssignmentRow(SQLModel, table=True):
    __tablename__ = "wo_machine_assignments"
    __table_args__ = (
        Index("ix_wo_machine_assignments_machine_start", "machine_id", "scheduled_start"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    wo_id: UUID = Field(foreign_key="work_orders.id", index=True)
    machine_id: UUID = Field(foreign_key="machines.id")
    assigned_by: str | None = Field(default=None)
    assigned_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))
    scheduled_start: datetime = Field(sa_type=DateTime(timezone=True))
    scheduled_end: datetime = Field(sa_type=DateTime(timezone=True))
    quantity_allocated: int = Field(ge=1)
    status: str = Field(default="scheduled", max_length=20, index=True)

    override_cycle_time_seconds: float | None = Field(default=None)
    override_applied_by: str | None = Field(default=None)
    override_applied_at: datetime | None = Field(
        default=None, sa_type=DateTime(timezone=True)
    )
    original_cycle_time_seconds: float | None = Field(default=None)

    created_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))
    updated_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))


class AuditLogRow(SQLModel, table=True):
    __tablename__ = "wo_actions_log"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    wo_id: UUID = Field(foreign_key="work_orders.id", index=True)
    action_type: str = Field(max_length=50)
    department: str | None = Field(default=None, max_length=50)
    performed_by: str
    action_details: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: datetime = Field(sa_type=DateTime(timezone=True))


class UserRoleRow(SQLModel, table=True):
    __tablename__ = "user_roles"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: str = Field(index=True)
    role: str = Field(max_length=30)
