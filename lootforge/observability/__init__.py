"""
Observability for lootforge.

Records table selections, generated items, batches and config imports
so a run can be inspected or saved alongside its seed.
"""

from lootforge.observability.run_log import (
    RunLog,
    LogEvent,
    EventType,
    SelectionEvent,
    ItemEvent,
    BatchEvent,
    ImportEvent,
    get_run_log,
    reset_run_log,
)

__all__ = [
    "RunLog",
    "LogEvent",
    "EventType",
    "SelectionEvent",
    "ItemEvent",
    "BatchEvent",
    "ImportEvent",
    "get_run_log",
    "reset_run_log",
]
