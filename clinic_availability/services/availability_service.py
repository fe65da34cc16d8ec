"""
Application services for editing schedules and resolving availability.

The service coordinates the schedule store with the pure domain layer:
documents are converted to the editable shape, validated before they are
written back, and resolved into bookable windows on demand. The store is
reached through a small protocol so tests can plug in a stub.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Optional, Protocol, Sequence, Union

import pendulum

from ..adapters.records import ExceptionRecord, FlatSlotRecord, ScheduleDocument
from ..domain.converter import to_editable, to_storage
from ..domain.exceptions import RangeTooLargeError, ScheduleNotFoundError
from ..domain.models import BookableWindow, ExceptionPeriod, ScheduleConfig, WeeklyRule, as_date
from ..domain.resolver import AvailabilityResolver
from ..domain.validator import ValidationError, validate_schedule

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime]


class ScheduleStoreProtocol(Protocol):
    """Protocol describing the persistence behaviour needed by the service."""

    async def load(self, professional_id: str) -> ScheduleDocument:
        """Return the stored schedule document or raise ScheduleNotFoundError."""

    async def save(self, document: ScheduleDocument) -> None:
        """Replace the stored schedule document."""


@dataclass(frozen=True)
class EditableSchedule:
    """A professional's schedule in the grouped, editable shape."""
    professional_id: str
    rules: List[WeeklyRule]
    exceptions: List[ExceptionPeriod]
    config: ScheduleConfig
    updated_by: Optional[str] = None
    updated_at: Optional[datetime] = None


class AvailabilityService:
    """
    Orchestrates schedule loading, validated saving and window resolution.
    """

    def __init__(
        self,
        store: ScheduleStoreProtocol,
        *,
        max_range_days: int = 731,
        default_timezone: str = "UTC",
        default_buffer_minutes: int = 0,
        locale: str = "en",
    ) -> None:
        self._store = store
        self._max_range_days = max_range_days
        self._default_timezone = default_timezone
        self._default_buffer_minutes = default_buffer_minutes
        self._locale = locale

    async def load_editable(self, professional_id: str) -> EditableSchedule:
        """Load a stored schedule and group it for editing."""
        document = await self._store.load(professional_id)

        return EditableSchedule(
            professional_id=professional_id,
            rules=to_editable(document.flat_slots()),
            exceptions=document.exception_periods(),
            config=document.schedule_config(),
            updated_by=document.updated_by,
            updated_at=document.updated_at,
        )

    async def load_editable_or_new(self, professional_id: str) -> EditableSchedule:
        """Like load_editable, but start from an empty schedule if none is stored."""
        try:
            return await self.load_editable(professional_id)
        except ScheduleNotFoundError:
            return EditableSchedule(
                professional_id=professional_id,
                rules=[],
                exceptions=[],
                config=self._default_config(),
            )

    async def save_editable(
        self,
        professional_id: str,
        rules: Sequence[WeeklyRule],
        exceptions: Sequence[ExceptionPeriod],
        *,
        editor_id: str,
        timezone: Optional[str] = None,
        buffer_minutes: Optional[int] = None,
    ) -> List[ValidationError]:
        """
        Validate an edited schedule and, if valid, store it.

        Args:
            professional_id: Owner of the schedule
            rules: Edited weekly rules (grouped shape)
            exceptions: Edited exception periods
            editor_id: Identity of the user making the change (required)
            timezone: New time zone; keeps the stored one when omitted
            buffer_minutes: New buffer; keeps the stored one when omitted

        Returns:
            Validation errors. Nothing is stored unless the list is empty.

        Raises:
            ValueError: If editor_id is empty
            ConfigurationError: If the time zone or buffer is invalid
        """
        if not editor_id or not editor_id.strip():
            raise ValueError("editor_id is required to save a schedule")

        errors = validate_schedule(rules, exceptions, locale=self._locale)
        if errors:
            logger.info(
                "Rejected schedule update for '%s' by '%s': %d validation error(s)",
                professional_id, editor_id, len(errors),
            )
            return errors

        if timezone is None or buffer_minutes is None:
            current = await self._current_config(professional_id)
            timezone = timezone if timezone is not None else current.timezone
            buffer_minutes = buffer_minutes if buffer_minutes is not None else current.buffer_minutes
        config = ScheduleConfig(timezone=timezone, buffer_minutes=buffer_minutes)

        document = ScheduleDocument(
            professional_id=professional_id,
            timezone=config.timezone,
            buffer_minutes=config.buffer_minutes,
            weekly_availability=[FlatSlotRecord.from_domain(slot) for slot in to_storage(list(rules))],
            vacations=[ExceptionRecord.from_domain(period) for period in exceptions],
            updated_by=editor_id,
            updated_at=pendulum.now("UTC"),
        )
        await self._store.save(document)

        logger.info("Saved schedule for '%s' (editor '%s')", professional_id, editor_id)
        return []

    async def _current_config(self, professional_id: str) -> ScheduleConfig:
        try:
            document = await self._store.load(professional_id)
        except ScheduleNotFoundError:
            return self._default_config()
        return document.schedule_config()

    def _default_config(self) -> ScheduleConfig:
        return ScheduleConfig(
            timezone=self._default_timezone,
            buffer_minutes=self._default_buffer_minutes,
        )

    async def find_windows(
        self,
        professional_id: str,
        start_date: DateLike,
        end_date: DateLike,
    ) -> List[BookableWindow]:
        """
        Resolve bookable windows for one professional.

        Raises:
            RangeTooLargeError: If the range spans more than max_range_days
            ScheduleNotFoundError: If the professional has no schedule
        """
        self._check_range(start_date, end_date)
        document = await self._store.load(professional_id)

        resolver = AvailabilityResolver(document.schedule_config())
        return resolver.resolve(
            rules=to_editable(document.flat_slots()),
            exceptions=document.exception_periods(),
            range_start=start_date,
            range_end=end_date,
        )

    async def find_windows_for_many(
        self,
        professional_ids: Sequence[str],
        start_date: DateLike,
        end_date: DateLike,
    ) -> Dict[str, List[BookableWindow]]:
        """
        Resolve windows for several professionals concurrently.

        Professionals without a stored schedule map to an empty list.
        """
        self._check_range(start_date, end_date)

        results = await asyncio.gather(
            *(self._find_or_empty(pid, start_date, end_date) for pid in professional_ids)
        )
        return dict(zip(professional_ids, results))

    async def _find_or_empty(
        self,
        professional_id: str,
        start_date: DateLike,
        end_date: DateLike,
    ) -> List[BookableWindow]:
        try:
            return await self.find_windows(professional_id, start_date, end_date)
        except ScheduleNotFoundError:
            logger.warning("No schedule stored for '%s'; no windows offered", professional_id)
            return []

    def _check_range(self, start_date: DateLike, end_date: DateLike) -> None:
        days = (as_date(end_date) - as_date(start_date)).days + 1

        if days > self._max_range_days:
            raise RangeTooLargeError(
                f"Requested range spans {days} days; the limit is {self._max_range_days}"
            )
