"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability_service import AvailabilityService, EditableSchedule, ScheduleStoreProtocol

__all__ = ["AvailabilityService", "EditableSchedule", "ScheduleStoreProtocol"]
