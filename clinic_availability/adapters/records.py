"""
Boundary models for the stored/wire availability shapes.

Raw JSON is turned into explicit domain types exactly once, here. Shape
problems (missing keys, unparseable times or dates) raise FormatError;
semantic problems (start after end, bad day index) are kept for the
validator.
"""

from datetime import date, datetime, time
from typing import Any, Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..domain.exceptions import FormatError
from ..domain.models import ExceptionPeriod, FlatSlot, ScheduleConfig, format_clock, parse_clock


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class FlatSlotRecord(_CamelModel):
    """One stored weekly availability row."""
    day_of_week: int = Field(alias="dayOfWeek")
    start_time: Optional[time] = Field(default=None, alias="startTime")
    end_time: Optional[time] = Field(default=None, alias="endTime")
    is_available: bool = Field(default=True, alias="isAvailable")

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_time(cls, value: Any) -> Any:
        """Accept "HH:MM" strings; empty strings mean no time."""
        if value is None or isinstance(value, time):
            return value
        if isinstance(value, str):
            if not value.strip():
                return None
            return parse_clock(value)
        raise ValueError(f"Invalid time value {value!r}. Use HH:MM")

    def to_domain(self) -> FlatSlot:
        return FlatSlot(
            day_of_week=self.day_of_week,
            start_time=self.start_time,
            end_time=self.end_time,
            is_available=self.is_available,
        )

    @classmethod
    def from_domain(cls, slot: FlatSlot) -> "FlatSlotRecord":
        return cls(
            day_of_week=slot.day_of_week,
            start_time=slot.start_time,
            end_time=slot.end_time,
            is_available=slot.is_available,
        )

    def to_wire(self) -> Dict[str, Any]:
        """Serialize to the stored shape; unavailable rows carry no times."""
        data: Dict[str, Any] = {"dayOfWeek": self.day_of_week}
        if self.start_time is not None:
            data["startTime"] = format_clock(self.start_time)
        if self.end_time is not None:
            data["endTime"] = format_clock(self.end_time)
        data["isAvailable"] = self.is_available
        return data


class ExceptionRecord(_CamelModel):
    """One stored vacation/absence period."""
    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")
    reason: str = ""
    is_recurring: bool = Field(default=False, alias="isRecurring")
    recurrence_pattern: Optional[str] = Field(default=None, alias="recurrencePattern")

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def strip_time_part(cls, value: Any) -> Any:
        """Stored timestamps ("2024-08-01T00:00:00.000Z") keep only their date."""
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and "T" in value:
            return value.split("T", 1)[0]
        return value

    @field_validator("reason", mode="before")
    @classmethod
    def normalize_reason(cls, value: Any) -> Any:
        if value is None:
            return ""
        return value.strip() if isinstance(value, str) else value

    def to_domain(self) -> ExceptionPeriod:
        return ExceptionPeriod(
            start_date=self.start_date,
            end_date=self.end_date,
            reason=self.reason,
            is_recurring_annually=self.is_recurring,
            recurrence_pattern=self.recurrence_pattern,
        )

    @classmethod
    def from_domain(cls, period: ExceptionPeriod) -> "ExceptionRecord":
        return cls(
            start_date=period.start_date,
            end_date=period.end_date,
            reason=period.reason,
            is_recurring=period.is_recurring_annually,
            recurrence_pattern=period.recurrence_pattern,
        )

    def to_wire(self) -> Dict[str, Any]:
        return {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "reason": self.reason,
            "isRecurring": self.is_recurring,
            "recurrencePattern": self.recurrence_pattern,
        }


class ScheduleDocument(_CamelModel):
    """
    The persisted availability document of one professional.

    Rules, exceptions and schedule settings are stored and replaced
    together.
    """
    professional_id: str = Field(alias="professionalId")
    timezone: str = "UTC"
    buffer_minutes: int = Field(default=0, ge=0, alias="bufferMinutes")
    weekly_availability: List[FlatSlotRecord] = Field(default_factory=list, alias="weeklyAvailability")
    vacations: List[ExceptionRecord] = Field(default_factory=list)
    updated_by: Optional[str] = Field(default=None, alias="updatedBy")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    def flat_slots(self) -> List[FlatSlot]:
        return [record.to_domain() for record in self.weekly_availability]

    def exception_periods(self) -> List[ExceptionPeriod]:
        return [record.to_domain() for record in self.vacations]

    def schedule_config(self) -> ScheduleConfig:
        """
        Raises:
            ConfigurationError: If the stored time zone is unknown
        """
        return ScheduleConfig(timezone=self.timezone, buffer_minutes=self.buffer_minutes)

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "ScheduleDocument":
        """
        Raises:
            FormatError: If the document does not match the stored shape
        """
        try:
            return cls.model_validate(data)
        except PydanticValidationError as exc:
            raise FormatError(f"Invalid schedule document: {exc}") from exc

    def to_wire(self) -> Dict[str, Any]:
        return {
            "professionalId": self.professional_id,
            "timezone": self.timezone,
            "bufferMinutes": self.buffer_minutes,
            "weeklyAvailability": [record.to_wire() for record in self.weekly_availability],
            "vacations": [record.to_wire() for record in self.vacations],
            "updatedBy": self.updated_by,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


def parse_flat_slots(raw: Iterable[Dict[str, Any]]) -> List[FlatSlot]:
    """
    Parse stored weekly availability rows.

    Raises:
        FormatError: If a row does not match the flat record shape
    """
    slots: List[FlatSlot] = []
    for index, item in enumerate(raw):
        try:
            slots.append(FlatSlotRecord.model_validate(item).to_domain())
        except PydanticValidationError as exc:
            raise FormatError(f"Invalid availability record at position {index}: {exc}") from exc
    return slots


def dump_flat_slots(slots: Sequence[FlatSlot]) -> List[Dict[str, Any]]:
    """Serialize flat slots to the stored shape."""
    return [FlatSlotRecord.from_domain(slot).to_wire() for slot in slots]


def parse_exceptions(raw: Iterable[Dict[str, Any]]) -> List[ExceptionPeriod]:
    """
    Parse stored vacation periods.

    Raises:
        FormatError: If a period does not match the exception record shape
    """
    periods: List[ExceptionPeriod] = []
    for index, item in enumerate(raw):
        try:
            periods.append(ExceptionRecord.model_validate(item).to_domain())
        except PydanticValidationError as exc:
            raise FormatError(f"Invalid exception period at position {index}: {exc}") from exc
    return periods


def dump_exceptions(periods: Sequence[ExceptionPeriod]) -> List[Dict[str, Any]]:
    """Serialize exception periods to the stored shape."""
    return [ExceptionRecord.from_domain(period).to_wire() for period in periods]
