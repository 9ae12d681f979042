"""EventBus - in-process notifications from services to outside collaborators

Quest tracking, notifications and similar concerns subscribe here instead of
being called by the monster service directly.

Rules:
- events carry identifiers and small values only, never ORM rows
- handlers run synchronously in subscription order
- a failing handler is logged and never breaks the publishing request
- propagation depth is capped at MAX_DEPTH
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

from src.core.logging import get_logger

logger = get_logger(__name__)

MAX_DEPTH = 5  # handlers emitting events that trigger handlers ...


@dataclass
class DomainEvent:
    """Event payload.

    Args:
        event_type: see EventTypes (e.g. "monster_interacted")
        data: identifiers and scalar values
        source: name of the emitting service
    """

    event_type: str
    data: Dict[str, Any]
    source: str

    _depth: int = field(default=0, repr=False)


EventHandler = Callable[[DomainEvent], None]


class EventBus:
    """Synchronous event bus

    Usage:
        bus = EventBus()
        bus.subscribe(EventTypes.MONSTER_INTERACTED, quest_tracker.on_interaction)
        bus.emit(DomainEvent(event_type=..., data={"monster_id": "abc"}, source="monster_service"))
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)
        self._current_depth: int = 0

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)
        logger.debug(f"EventBus subscribe: {event_type} → {handler.__qualname__}")

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        try:
            self._handlers[event_type].remove(handler)
        except ValueError:
            logger.warning(
                f"EventBus handler not registered: {event_type} → {handler.__qualname__}"
            )
            return
        logger.debug(f"EventBus unsubscribe: {event_type} → {handler.__qualname__}")

    def emit(self, event: DomainEvent) -> None:
        """Call every handler registered for event.event_type."""
        if self._current_depth >= MAX_DEPTH:
            logger.warning(
                f"EventBus depth limit ({MAX_DEPTH}) reached: "
                f"{event.source}:{event.event_type} dropped"
            )
            return

        event._depth = self._current_depth

        handlers = list(self._handlers.get(event.event_type, []))
        if not handlers:
            logger.debug(f"EventBus: no subscribers for {event.event_type}")
            return

        self._current_depth += 1
        try:
            for handler in handlers:
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        f"EventBus handler failed: {handler.__qualname__} "
                        f"(event={event.event_type})"
                    )
        finally:
            self._current_depth -= 1

    def clear(self) -> None:
        """Drop every subscription (tests)."""
        self._handlers.clear()
        self._current_depth = 0

    @property
    def handler_count(self) -> int:
        return sum(len(h) for h in self._handlers.values())
