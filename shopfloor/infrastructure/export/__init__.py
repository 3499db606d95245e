from .schedule_exporter import MachineSchedule, ScheduleExporter, ScheduleView

__all__ = ["MachineSchedule", "ScheduleExporter", "ScheduleView"]
