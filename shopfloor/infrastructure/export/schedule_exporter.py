"""
Printable schedule export.

Serialises the machines and assignments of the visible timeline window into
a paginated, landscape Excel workbook, or into JSON for other consumers.
Formatting only; utilisation comes from the schedule board.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any
from uuid import UUID

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.pagebreak import Break

from shopfloor.core.config import settings
from shopfloor.domain.scheduling.entities.machine import Machine
from shopfloor.domain.scheduling.services import schedule_board
from shopfloor.domain.scheduling.services.schedule_board import ScheduledJob
from shopfloor.domain.scheduling.value_objects.timeline import TimelineProjection
from shopfloor.domain.shared.base import utc_now

logger = logging.getLogger(__name__)

TITLE = "CNC Production Schedule"
COLUMNS = ["Work Order", "Item", "Start", "End", "Status"]
HEADER_ROW = 4


@dataclass(frozen=True)
class MachineSchedule:
    machine: Machine
    utilization: float
    jobs: list[ScheduledJob] = field(default_factory=list)

    @property
    def heading(self) -> str:
        return f"{self.machine.label} ({self.utilization:.0f}% utilized)"


@dataclass(frozen=True)
class ScheduleView:
    """What the timeline currently shows, grouped per machine."""

    projection: TimelineProjection
    machines: list[MachineSchedule]
    generated_at: datetime

    @classmethod
    def build(
        cls,
        machines: list[Machine],
        jobs: list[ScheduledJob],
        projection: TimelineProjection,
        generated_at: datetime | None = None,
    ) -> "ScheduleView":
        usage = schedule_board.utilization(machines, (job.assignment for job in jobs), projection)
        by_machine: dict[UUID, list[ScheduledJob]] = {}
        for job in jobs:
            assignment = job.assignment
            if projection.overlaps(assignment.scheduled_start, assignment.scheduled_end):
                by_machine.setdefault(assignment.machine_id, []).append(job)

        return cls(
            projection=projection,
            machines=[
                MachineSchedule(
                    machine=machine,
                    utilization=usage.get(machine.id, 0.0),
                    jobs=sorted(
                        by_machine.get(machine.id, []),
                        key=lambda job: job.assignment.scheduled_start,
                    ),
                )
                for machine in machines
            ],
            generated_at=generated_at or utc_now(),
        )


class ScheduleExporter:
    """Renders a ScheduleView."""

    def __init__(self, rows_per_page: int | None = None):
        self.rows_per_page = rows_per_page or settings.EXPORT_ROWS_PER_PAGE

    def export_workbook(self, view: ScheduleView) -> Workbook:
        wb = Workbook()
        ws = wb.active
        ws.title = "schedule"

        ws.append([TITLE])
        ws["A1"].font = Font(bold=True, size=16)
        ws.append([f"Generated: {view.generated_at.strftime('%b %d, %Y %H:%M')}"])
        ws.append([f"View: {view.projection.zoom.value.upper()}"])
        ws.append(COLUMNS)
        for cell in ws[HEADER_ROW]:
            cell.font = Font(bold=True)

        rows_on_page = 0
        for machine_schedule in view.machines:
            ws.append([machine_schedule.heading])
            ws.cell(row=ws.max_row, column=1).font = Font(bold=True)
            rows_on_page = self._after_row(ws, rows_on_page)

            for job in machine_schedule.jobs:
                ws.append(self._job_row(job))
                rows_on_page = self._after_row(ws, rows_on_page)

        ws.page_setup.orientation = ws.ORIENTATION_LANDSCAPE
        ws.page_setup.fitToWidth = 1
        ws.print_title_rows = f"{HEADER_ROW}:{HEADER_ROW}"
        _auto_width(ws)
        return wb

    def _after_row(self, ws, rows_on_page: int) -> int:
        rows_on_page += 1
        if rows_on_page >= self.rows_per_page:
            ws.row_breaks.append(Break(id=ws.max_row))
            return 0
        return rows_on_page

    @staticmethod
    def _job_row(job: ScheduledJob) -> list[str]:
        assignment = job.assignment
        return [
            job.display_id,
            job.item_code,
            assignment.scheduled_start.strftime("%b %d %H:%M"),
            assignment.scheduled_end.strftime("%H:%M"),
            assignment.status.value,
        ]

    def save(self, view: ScheduleView, directory: Path | str = ".") -> Path:
        path = Path(directory) / default_filename(view.generated_at)
        self.export_workbook(view).save(path)
        logger.info(f"Exported schedule to {path}")
        return path

    def export_json(self, view: ScheduleView) -> str:
        payload: dict[str, Any] = {
            "generated_at": view.generated_at,
            "zoom": view.projection.zoom.value,
            "window_start": view.projection.window_start,
            "window_end": view.projection.window_end,
            "machines": [
                {
                    "machine_id": machine_schedule.machine.id,
                    "machine_code": machine_schedule.machine.machine_code,
                    "name": machine_schedule.machine.name,
                    "utilization": round(machine_schedule.utilization, 1),
                    "assignments": [
                        {
                            "id": job.assignment.id,
                            "work_order": job.display_id,
                            "item_code": job.item_code,
                            "scheduled_start": job.assignment.scheduled_start,
                            "scheduled_end": job.assignment.scheduled_end,
                            "quantity_allocated": job.assignment.quantity_allocated,
                            "status": job.assignment.status.value,
                        }
                        for job in machine_schedule.jobs
                    ],
                }
                for machine_schedule in view.machines
            ],
        }
        return json.dumps(payload, indent=2, default=_json_default)


def _json_default(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def default_filename(generated_at: datetime) -> str:
    return f"production-schedule-{generated_at.strftime('%Y-%m-%d')}.xlsx"


def _auto_width(ws) -> None:
    for col in ws.iter_cols(min_row=HEADER_ROW):
        col_letter = get_column_letter(col[0].column)
        max_len = max((len(str(cell.value)) for cell in col if cell.value is not None), default=0)
        ws.column_dimensions[col_letter].width = min(60, max(12, max_len + 2))
