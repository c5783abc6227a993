"""
SwarmMind Room and Strategic State
===================================
Plain state containers owned by the host and passed into every
operation. Nothing here is a singleton or module-level global.

- RoomRecord: per-room aggregate (maturity, posture, danger, signals,
  event log, missing structure flags)
- StrategicState: global ranked queues, rebuilt wholesale each cycle
- SwarmState: root aggregate holding both
"""

from collections import deque
from dataclasses import dataclass, field, fields
from typing import Deque, Dict, Iterator, List, Mapping, Optional, Tuple

from .config import ColonyStage, Posture
from .pheromone import SignalVector


DEFAULT_EVENT_LOG_CAPACITY = 20

EventEntry = Tuple[str, int]


class EventLog:
    """
    Fixed-capacity ring buffer of (event tag, tick) pairs.

    Pushing onto a full log evicts the oldest entry first.
    """

    def __init__(self, capacity: int = DEFAULT_EVENT_LOG_CAPACITY,
                 entries: Optional[List[EventEntry]] = None):
        if capacity <= 0:
            raise ValueError(f"Event log capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._entries: Deque[EventEntry] = deque(maxlen=capacity)
        for tag, tick in entries or []:
            self.push(tag, tick)

    def push(self, tag: str, tick: int) -> None:
        self._entries.append((str(tag), int(tick)))

    def entries(self) -> List[EventEntry]:
        """Entries oldest first"""
        return list(self._entries)

    def latest(self) -> Optional[EventEntry]:
        return self._entries[-1] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[EventEntry]:
        return iter(list(self._entries))

    def __eq__(self, other) -> bool:
        if not isinstance(other, EventLog):
            return NotImplemented
        return self.capacity == other.capacity and self.entries() == other.entries()

    def __repr__(self) -> str:
        return f"EventLog(capacity={self.capacity}, entries={self.entries()})"


@dataclass
class MissingStructures:
    """Key structures a colony does not (yet) have"""
    spawn: bool = False
    storage: bool = False
    terminal: bool = False
    labs: bool = False
    nuker: bool = False
    factory: bool = False
    extractor: bool = False
    power_spawn: bool = False
    observer: bool = False

    def update(self, flags: Mapping[str, bool]) -> None:
        """Overwrite known flags; unknown names are ignored"""
        known = {f.name for f in fields(self)}
        for name, value in flags.items():
            if name in known:
                setattr(self, name, bool(value))

    def to_dict(self) -> Dict[str, bool]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def missing(self) -> List[str]:
        return [name for name, value in self.to_dict().items() if value]


@dataclass
class RoomRecord:
    """Per-room swarm memory"""
    room_name: str
    colony_level: ColonyStage = ColonyStage.SEED_NEST
    posture: Posture = Posture.ECO
    danger: int = 0
    signals: SignalVector = field(default_factory=SignalVector)
    event_log: EventLog = field(default_factory=EventLog)
    missing_structures: MissingStructures = field(default_factory=MissingStructures)
    last_updated: int = 0

    @classmethod
    def create(cls, room_name: str,
               event_log_capacity: int = DEFAULT_EVENT_LOG_CAPACITY) -> "RoomRecord":
        """Fresh record with documented defaults"""
        return cls(room_name=room_name, event_log=EventLog(event_log_capacity))

    def push_event(self, tag: str, tick: int) -> None:
        self.event_log.push(tag, tick)


@dataclass
class StrategicObjectives:
    """Host-set strategic switches carried across rebuilds"""
    war_mode: bool = False
    expansion_paused: bool = False


@dataclass
class StrategicState:
    """
    Global ranked queues.

    Never patched in place: the queue builder returns a new instance
    every cycle and the owner swaps it in.
    """
    claim_queue: List[str] = field(default_factory=list)
    war_targets: List[str] = field(default_factory=list)
    strike_candidates: List[str] = field(default_factory=list)
    rooms_seen: Dict[str, int] = field(default_factory=dict)
    last_rebuilt: int = 0
    objectives: StrategicObjectives = field(default_factory=StrategicObjectives)


@dataclass
class SwarmState:
    """Root aggregate handed to the host for persistence"""
    rooms: Dict[str, RoomRecord] = field(default_factory=dict)
    strategic: StrategicState = field(default_factory=StrategicState)

    def get_or_init_room(self, room_name: str,
                         event_log_capacity: int = DEFAULT_EVENT_LOG_CAPACITY) -> RoomRecord:
        """Return the room's record, creating a default one on first observation"""
        record = self.rooms.get(room_name)
        if record is None:
            record = RoomRecord.create(room_name, event_log_capacity)
            self.rooms[room_name] = record
        return record

    def remove_room(self, room_name: str) -> bool:
        """Drop a permanently lost room. Returns whether it was present."""
        return self.rooms.pop(room_name, None) is not None
