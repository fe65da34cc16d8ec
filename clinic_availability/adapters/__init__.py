"""
Adapters layer - Storage shapes and the schedule document store.
"""

from .json_store import JsonScheduleStore
from .records import (
    ExceptionRecord,
    FlatSlotRecord,
    ScheduleDocument,
    dump_exceptions,
    dump_flat_slots,
    parse_exceptions,
    parse_flat_slots,
)

__all__ = [
    "ExceptionRecord",
    "FlatSlotRecord",
    "JsonScheduleStore",
    "ScheduleDocument",
    "dump_exceptions",
    "dump_flat_slots",
    "parse_exceptions",
    "parse_flat_slots",
]
