"""Event bus with memory: fired events stay fired, conditions wait on sets of them.

Delivery is synchronous. A listener that raises propagates out of the
``emit`` or ``subscribe`` call that invoked it and stops delivery of the
remaining listeners for that call.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

import structlog
from pydantic import BaseModel, ConfigDict, Field

from plugweave.core.table import PluginTable
from plugweave.exceptions import InvalidConditionError, UnknownConditionError

logger = structlog.get_logger()

# Event name constants
CORE_REGISTERED = "core.registered"
CORE_INITIALIZING = "core.initializing"
CORE_INITIALIZED = "core.initialized"

# Per-plugin stages, see plugin_event()
REGISTERING = "registering"
REGISTERED = "registered"
INITIALIZING = "initializing"
INITIALIZED = "initialized"
FINALIZED = "finalized"


def plugin_event(name: str, stage: str) -> str:
    return f"plugin.{name}.{stage}"


Listener = Callable[[PluginTable], None]


class ConditionKind(str, Enum):
    SINGLE = "single"
    ANY = "any"
    ALL = "all"


_KINDS = {kind.value for kind in ConditionKind}


class Condition(BaseModel):
    """What a subscription waits for.

    ``kind`` is kept as a plain string so that a bad kind is reported by
    ``EventBus.subscribe`` rather than at construction time.
    """

    model_config = ConfigDict(frozen=True)

    kind: str
    events: tuple[str, ...]

    @classmethod
    def single(cls, event_name: str) -> Condition:
        return cls(kind=ConditionKind.SINGLE.value, events=(event_name,))

    @classmethod
    def any_of(cls, *event_names: str) -> Condition:
        return cls(kind=ConditionKind.ANY.value, events=event_names)

    @classmethod
    def all_of(cls, *event_names: str) -> Condition:
        return cls(kind=ConditionKind.ALL.value, events=event_names)


# Intentionally mutable: the bus flips ``fired`` and appends listeners in place.
class EventRecord(BaseModel):
    name: str
    listeners: list[Listener] = Field(default_factory=list)
    fired: bool = False


class Trigger(BaseModel):
    kind: ConditionKind
    events: frozenset[str]
    listener: Listener
    satisfied: bool = False


class EventBus:
    def __init__(self, plugins: PluginTable | None = None) -> None:
        self._plugins = plugins if plugins is not None else PluginTable()
        self._events: dict[str, EventRecord] = {}
        self._triggers: list[Trigger] = []
        # Fired events whose single listeners are still running; triggers wait on them.
        self._delivering: set[str] = set()

    @property
    def plugins(self) -> PluginTable:
        return self._plugins

    @property
    def fired_events(self) -> frozenset[str]:
        return frozenset(name for name, rec in self._events.items() if rec.fired)

    @property
    def pending_triggers(self) -> int:
        return len(self._triggers)

    def has_fired(self, event_name: str) -> bool:
        record = self._events.get(event_name)
        return record is not None and record.fired

    def on(self, event_name: str, listener: Listener) -> None:
        self.subscribe(Condition.single(event_name), listener)

    def subscribe(self, condition: Condition, listener: Listener) -> None:
        """Register *listener* against *condition*.

        A condition that already holds runs the listener before this call
        returns. Single subscriptions to an event that already fired run
        once, immediately, and are not kept.
        """
        if condition.kind not in _KINDS:
            raise UnknownConditionError(f"Unknown condition kind: {condition.kind!r}")
        kind = ConditionKind(condition.kind)

        if kind is ConditionKind.SINGLE:
            if len(condition.events) != 1:
                raise InvalidConditionError(
                    "A single condition needs exactly one event, "
                    f"got {len(condition.events)}"
                )
            record = self._record(condition.events[0])
            if record.fired:
                logger.debug("listener_late_subscribed", event_name=record.name)
                listener(self._plugins)
            else:
                record.listeners.append(listener)
        else:
            if not condition.events:
                raise InvalidConditionError(
                    f"An {kind.value} condition needs at least one event"
                )
            self._triggers.append(
                Trigger(kind=kind, events=frozenset(condition.events), listener=listener)
            )

        self._evaluate_triggers()

    def emit(self, event_name: str) -> None:
        record = self._record(event_name)
        if record.fired:
            logger.debug("event_already_fired", event_name=event_name)
            return

        # Marked before delivery so a listener re-emitting this event short-circuits.
        record.fired = True
        logger.debug(
            "event_emitted", event_name=event_name, listener_count=len(record.listeners)
        )
        listeners, record.listeners = record.listeners, []
        self._delivering.add(event_name)
        try:
            for listener in listeners:
                listener(self._plugins)
        finally:
            self._delivering.discard(event_name)

        self._evaluate_triggers()

    def _record(self, event_name: str) -> EventRecord:
        record = self._events.get(event_name)
        if record is None:
            record = self._events[event_name] = EventRecord(name=event_name)
        return record

    def _delivered(self, event_name: str) -> bool:
        return self.has_fired(event_name) and event_name not in self._delivering

    def _holds(self, trigger: Trigger) -> bool:
        if trigger.kind is ConditionKind.ALL:
            return all(self._delivered(name) for name in trigger.events)
        return any(self._delivered(name) for name in trigger.events)

    def _evaluate_triggers(self) -> None:
        # Snapshot: listeners may subscribe or emit, which re-enters this method.
        for trigger in list(self._triggers):
            if trigger.satisfied or not self._holds(trigger):
                continue
            trigger.satisfied = True
            # By identity: identical subscriptions are distinct entries.
            self._triggers = [t for t in self._triggers if t is not trigger]
            logger.debug(
                "trigger_fired", kind=trigger.kind.value, events=sorted(trigger.events)
            )
            trigger.listener(self._plugins)
