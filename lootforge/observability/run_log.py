"""
Run Log for loot generation.

Captures weighted selections, generated items, batches and config imports so a
generation session can be inspected after the fact and compared across seeds.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Callable
import json
import logging

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Types of events that can be logged."""

    SELECTION = "selection"  # Weighted table pick
    ITEM = "item"  # One generated item
    BATCH = "batch"  # One generate_loot call
    IMPORT = "import"  # Config document applied to a catalog
    CUSTOM = "custom"  # Custom event


@dataclass
class LogEvent:
    """Base class for all logged events."""

    # Subclasses set the correct event_type in __post_init__
    event_type: EventType = EventType.CUSTOM
    timestamp: datetime = field(default_factory=datetime.now)
    sequence_number: int = 0
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "event_type": self.event_type.value,
            "timestamp": self.timestamp.isoformat(),
            "sequence_number": self.sequence_number,
            "context": self.context,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LogEvent":
        """Create from dictionary."""
        return cls(
            event_type=EventType(data["event_type"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            sequence_number=data.get("sequence_number", 0),
            context=data.get("context", {}),
        )

    def __str__(self) -> str:
        return f"[{self.sequence_number}] {self.event_type.value.upper()} {self.context}"


@dataclass
class SelectionEvent(LogEvent):
    """A weighted table selection."""

    table_name: str = ""
    roll: int = 0
    total_weight: int = 0
    result: str = ""

    def __post_init__(self):
        self.event_type = EventType.SELECTION

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base.update(
            {
                "table_name": self.table_name,
                "roll": self.roll,
                "total_weight": self.total_weight,
                "result": self.result,
            }
        )
        return base

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SelectionEvent":
        return cls(
            timestamp=datetime.fromisoformat(data["timestamp"]),
            sequence_number=data.get("sequence_number", 0),
            context=data.get("context", {}),
            table_name=data.get("table_name", ""),
            roll=data.get("roll", 0),
            total_weight=data.get("total_weight", 0),
            result=data.get("result", ""),
        )

    def __str__(self) -> str:
        return (
            f"[{self.sequence_number}] SELECT {self.table_name} "
            f"[{self.roll}/{self.total_weight}]: {self.result}"
        )


@dataclass
class ItemEvent(LogEvent):
    """A generated item."""

    name: str = ""
    quality: str = ""
    item_type: str = ""
    subtype: str = ""
    level: float = 0.0
    prefix: str = ""
    suffix: str = ""

    def __post_init__(self):
        self.event_type = EventType.ITEM

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base.update(
            {
                "name": self.name,
                "quality": self.quality,
                "item_type": self.item_type,
                "subtype": self.subtype,
                "level": self.level,
                "prefix": self.prefix,
                "suffix": self.suffix,
            }
        )
        return base

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ItemEvent":
        return cls(
            timestamp=datetime.fromisoformat(data["timestamp"]),
            sequence_number=data.get("sequence_number", 0),
            context=data.get("context", {}),
            name=data.get("name", ""),
            quality=data.get("quality", ""),
            item_type=data.get("item_type", ""),
            subtype=data.get("subtype", ""),
            level=data.get("level", 0.0),
            prefix=data.get("prefix", ""),
            suffix=data.get("suffix", ""),
        )

    def __str__(self) -> str:
        decorated = " ".join(p for p in (self.prefix, self.name, self.suffix) if p)
        return (
            f"[{self.sequence_number}] ITEM {decorated} "
            f"({self.quality} {self.item_type}/{self.subtype}, level {self.level:g})"
        )


@dataclass
class BatchEvent(LogEvent):
    """One generate_loot call, successful or not."""

    key: str = ""
    requested: int = 0
    generated: int = 0
    success: bool = True
    error: str = ""

    def __post_init__(self):
        self.event_type = EventType.BATCH

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base.update(
            {
                "key": self.key,
                "requested": self.requested,
                "generated": self.generated,
                "success": self.success,
                "error": self.error,
            }
        )
        return base

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BatchEvent":
        return cls(
            timestamp=datetime.fromisoformat(data["timestamp"]),
            sequence_number=data.get("sequence_number", 0),
            context=data.get("context", {}),
            key=data.get("key", ""),
            requested=data.get("requested", 0),
            generated=data.get("generated", 0),
            success=data.get("success", True),
            error=data.get("error", ""),
        )

    def __str__(self) -> str:
        status = "ok" if self.success else f"FAILED: {self.error}"
        return f"[{self.sequence_number}] BATCH {self.key} {self.generated}/{self.requested} ({status})"


@dataclass
class ImportEvent(LogEvent):
    """A config document applied to a catalog."""

    source: str = ""
    counts: dict[str, int] = field(default_factory=dict)

    def __post_init__(self):
        self.event_type = EventType.IMPORT

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base.update({"source": self.source, "counts": self.counts})
        return base

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ImportEvent":
        return cls(
            timestamp=datetime.fromisoformat(data["timestamp"]),
            sequence_number=data.get("sequence_number", 0),
            context=data.get("context", {}),
            source=data.get("source", ""),
            counts=data.get("counts", {}),
        )

    def __str__(self) -> str:
        return f"[{self.sequence_number}] IMPORT {self.source} {self.counts}"


_EVENT_CLASSES: dict[EventType, type[LogEvent]] = {
    EventType.SELECTION: SelectionEvent,
    EventType.ITEM: ItemEvent,
    EventType.BATCH: BatchEvent,
    EventType.IMPORT: ImportEvent,
}


class RunLog:
    """
    Event log for a generation session.

    Create one per session and hand it to LootGenerator, or use the
    process-wide instance from get_run_log().
    """

    def __init__(self):
        self._events: list[LogEvent] = []
        self._sequence: int = 0
        self._seed: Optional[int] = None
        self._session_start: datetime = datetime.now()
        self._subscribers: list[Callable[[LogEvent], None]] = []
        self._paused: bool = False

    def reset(self) -> None:
        """Reset the log for a new session."""
        self._events = []
        self._sequence = 0
        self._seed = None
        self._session_start = datetime.now()
        logger.info("RunLog reset")

    def set_seed(self, seed: Optional[int]) -> None:
        """Record the RNG seed used for this session."""
        self._seed = seed

    def get_seed(self) -> Optional[int]:
        return self._seed

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def is_paused(self) -> bool:
        return self._paused

    def subscribe(self, callback: Callable[[LogEvent], None]) -> None:
        """Subscribe to receive events as they are logged."""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[LogEvent], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _log_event(self, event: LogEvent) -> None:
        if self._paused:
            return

        self._sequence += 1
        event.sequence_number = self._sequence
        self._events.append(event)

        for subscriber in self._subscribers:
            try:
                subscriber(event)
            except Exception as e:
                logger.warning(f"Subscriber error: {e}")

    def log_selection(
        self,
        table_name: str,
        roll: int,
        total_weight: int,
        result: str,
        context: Optional[dict[str, Any]] = None,
    ) -> SelectionEvent:
        event = SelectionEvent(
            table_name=table_name,
            roll=roll,
            total_weight=total_weight,
            result=result,
            context=context or {},
        )
        self._log_event(event)
        return event

    def log_item(
        self,
        name: str,
        quality: str,
        item_type: str,
        subtype: str,
        level: float,
        prefix: str = "",
        suffix: str = "",
        context: Optional[dict[str, Any]] = None,
    ) -> ItemEvent:
        event = ItemEvent(
            name=name,
            quality=quality,
            item_type=item_type,
            subtype=subtype,
            level=level,
            prefix=prefix,
            suffix=suffix,
            context=context or {},
        )
        self._log_event(event)
        return event

    def log_batch(
        self,
        key: str,
        requested: int,
        generated: int,
        success: bool = True,
        error: str = "",
        context: Optional[dict[str, Any]] = None,
    ) -> BatchEvent:
        event = BatchEvent(
            key=key,
            requested=requested,
            generated=generated,
            success=success,
            error=error,
            context=context or {},
        )
        self._log_event(event)
        return event

    def log_import(
        self,
        source: str,
        counts: dict[str, int],
        context: Optional[dict[str, Any]] = None,
    ) -> ImportEvent:
        event = ImportEvent(source=source, counts=dict(counts), context=context or {})
        self._log_event(event)
        return event

    def log_custom(self, event_name: str, details: dict[str, Any]) -> LogEvent:
        event = LogEvent(
            event_type=EventType.CUSTOM,
            context={"event_name": event_name, **details},
        )
        self._log_event(event)
        return event

    def get_events(
        self,
        event_type: Optional[EventType] = None,
        since_sequence: int = 0,
    ) -> list[LogEvent]:
        """
        Get logged events.

        Args:
            event_type: Filter by event type (None = all)
            since_sequence: Only events after this sequence number

        Returns:
            List of events
        """
        events = [e for e in self._events if e.sequence_number > since_sequence]
        if event_type:
            events = [e for e in events if e.event_type == event_type]
        return events

    def get_selections(self) -> list[SelectionEvent]:
        return [e for e in self._events if isinstance(e, SelectionEvent)]

    def get_items(self) -> list[ItemEvent]:
        return [e for e in self._events if isinstance(e, ItemEvent)]

    def get_batches(self) -> list[BatchEvent]:
        return [e for e in self._events if isinstance(e, BatchEvent)]

    def get_event_count(self) -> int:
        return len(self._events)

    def get_summary(self) -> dict[str, Any]:
        """Get a summary of the run log."""
        return {
            "session_start": self._session_start.isoformat(),
            "seed": self._seed,
            "total_events": len(self._events),
            "selections": len(self.get_selections()),
            "items": len(self.get_items()),
            "batches": len(self.get_batches()),
            "last_sequence": self._sequence,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_start": self._session_start.isoformat(),
            "seed": self._seed,
            "sequence": self._sequence,
            "events": [e.to_dict() for e in self._events],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, default=str)

    def save(self, filepath: str) -> None:
        """Save the log to a file."""
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.to_json())
        logger.info(f"RunLog saved to {filepath}")

    @classmethod
    def load(cls, filepath: str) -> "RunLog":
        """Load a log from a file into a new RunLog."""
        with open(filepath, "r", encoding="utf-8") as f:
            data = json.load(f)

        log = cls()
        log._session_start = datetime.fromisoformat(data["session_start"])
        log._seed = data.get("seed")
        log._sequence = data.get("sequence", 0)

        for event_data in data.get("events", []):
            event_class = _EVENT_CLASSES.get(EventType(event_data["event_type"]), LogEvent)
            log._events.append(event_class.from_dict(event_data))

        logger.info(f"RunLog loaded from {filepath}: {len(log._events)} events")
        return log

    def format_log(
        self,
        event_types: Optional[list[EventType]] = None,
        max_events: Optional[int] = None,
    ) -> str:
        """
        Format the log as a human-readable string.

        Args:
            event_types: Filter by event types (None = all)
            max_events: Maximum number of events to include (most recent)
        """
        lines = [
            "=== Run Log ===",
            f"Session: {self._session_start.isoformat()}",
            f"Seed: {self._seed if self._seed is not None else 'not set'}",
            f"Total Events: {len(self._events)}",
            "",
        ]

        events = self._events
        if event_types:
            events = [e for e in events if e.event_type in event_types]
        if max_events:
            events = events[-max_events:]

        for event in events:
            lines.append(str(event))

        return "\n".join(lines)


# Process-wide access
_run_log: Optional[RunLog] = None


def get_run_log() -> RunLog:
    """Get the process-wide RunLog instance."""
    global _run_log
    if _run_log is None:
        _run_log = RunLog()
    return _run_log


def reset_run_log() -> RunLog:
    """Reset and return the process-wide RunLog instance."""
    log = get_run_log()
    log.reset()
    return log
