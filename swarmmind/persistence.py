"""
SwarmMind State Persistence
============================
Converts RoomRecord / StrategicState / SwarmState to and from the
flat versioned blobs in ``contracts.py``.

Decoding never halts the control loop. Missing data is quietly
filled with defaults; malformed data is discarded, replaced with
defaults and reported as a warning on the ``swarmmind.persistence``
logger and in the LoadReport.
"""

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .config import ColonyStage, Posture
from .contracts import (
    SCHEMA_VERSION,
    MalformedStateError,
    ObjectivesBlob,
    RoomRecordBlob,
    StrategicStateBlob,
    SwarmStateBlob,
)
from .pheromone import SignalVector
from .state import (
    DEFAULT_EVENT_LOG_CAPACITY,
    EventLog,
    MissingStructures,
    RoomRecord,
    StrategicObjectives,
    StrategicState,
    SwarmState,
)

logger = logging.getLogger("swarmmind.persistence")


@dataclass
class LoadReport:
    """What had to be repaired while loading"""
    warnings: List[str] = field(default_factory=list)
    rooms_reset: List[str] = field(default_factory=list)
    strategic_reset: bool = False

    @property
    def clean(self) -> bool:
        return not self.warnings


def _discard(report: Optional[LoadReport], error: MalformedStateError) -> None:
    message = f"{error}; discarded and replaced with defaults"
    logger.warning(message)
    if report is not None:
        report.warnings.append(message)


# =============================================================================
# STRICT FIELD READERS
# =============================================================================

def _mapping(value: Any, path: str) -> Mapping:
    if not isinstance(value, Mapping):
        raise MalformedStateError(path, f"expected mapping, got {type(value).__name__}")
    return value


def _list(value: Any, path: str) -> list:
    if not isinstance(value, list):
        raise MalformedStateError(path, f"expected list, got {type(value).__name__}")
    return value


def _number(value: Any, path: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedStateError(path, f"expected number, got {type(value).__name__}")
    try:
        number = float(value)
    except OverflowError:
        raise MalformedStateError(path, "number out of range")
    if not math.isfinite(number):
        raise MalformedStateError(path, f"expected finite number, got {number}")
    return number


def _int(value: Any, path: str) -> int:
    return int(_number(value, path))


def _bool(value: Any, path: str) -> bool:
    if not isinstance(value, bool):
        raise MalformedStateError(path, f"expected bool, got {type(value).__name__}")
    return value


def _str_list(value: Any, path: str) -> List[str]:
    items = _list(value, path)
    for i, item in enumerate(items):
        if not isinstance(item, str):
            raise MalformedStateError(f"{path}[{i}]", "expected room name string")
    return list(items)


# =============================================================================
# ROOM RECORDS
# =============================================================================

def serialize_room(record: RoomRecord) -> RoomRecordBlob:
    return {
        "colonyLevel": int(record.colony_level),
        "posture": record.posture.value,
        "danger": int(record.danger),
        "signals": record.signals.to_dict(),
        "eventLog": [[tag, tick] for tag, tick in record.event_log.entries()],
        "eventLogCapacity": record.event_log.capacity,
        "missingStructures": record.missing_structures.to_dict(),
        "lastUpdated": int(record.last_updated),
    }


def decode_room(room_name: str, blob: Any,
                event_log_capacity: int = DEFAULT_EVENT_LOG_CAPACITY) -> RoomRecord:
    """
    Strictly decode one room blob.

    Keys absent from the blob take their defaults; keys present with
    the wrong type or an unknown value raise MalformedStateError.
    """
    path = f"rooms.{room_name}"
    data = _mapping(blob, path)
    record = RoomRecord.create(room_name, event_log_capacity)

    if "colonyLevel" in data:
        level = _int(data["colonyLevel"], f"{path}.colonyLevel")
        try:
            record.colony_level = ColonyStage(level)
        except ValueError:
            raise MalformedStateError(f"{path}.colonyLevel", f"unknown colony stage {level}")

    if "posture" in data:
        try:
            record.posture = Posture(data["posture"])
        except ValueError:
            raise MalformedStateError(f"{path}.posture", f"unknown posture {data['posture']!r}")

    if "danger" in data:
        danger = _int(data["danger"], f"{path}.danger")
        if not 0 <= danger <= 3:
            raise MalformedStateError(f"{path}.danger", f"danger {danger} outside 0..3")
        record.danger = danger

    if "signals" in data:
        signals = _mapping(data["signals"], f"{path}.signals")
        values = {name: _number(v, f"{path}.signals.{name}") for name, v in signals.items()}
        try:
            record.signals = SignalVector.from_dict(values)
        except ValueError as e:
            raise MalformedStateError(f"{path}.signals", str(e))

    capacity = event_log_capacity
    if "eventLogCapacity" in data:
        capacity = _int(data["eventLogCapacity"], f"{path}.eventLogCapacity")
        if capacity <= 0:
            raise MalformedStateError(f"{path}.eventLogCapacity", "capacity must be positive")
    entries = []
    for i, entry in enumerate(_list(data.get("eventLog", []), f"{path}.eventLog")):
        entry_path = f"{path}.eventLog[{i}]"
        pair = _list(entry, entry_path)
        if len(pair) != 2 or not isinstance(pair[0], str):
            raise MalformedStateError(entry_path, "expected [tag, tick]")
        entries.append((pair[0], _int(pair[1], entry_path)))
    record.event_log = EventLog(capacity, entries)

    if "missingStructures" in data:
        flags = _mapping(data["missingStructures"], f"{path}.missingStructures")
        record.missing_structures = MissingStructures()
        record.missing_structures.update(
            {name: _bool(v, f"{path}.missingStructures.{name}") for name, v in flags.items()}
        )

    if "lastUpdated" in data:
        record.last_updated = _int(data["lastUpdated"], f"{path}.lastUpdated")

    return record


def load_room_or_default(room_name: str, blob: Any,
                         event_log_capacity: int = DEFAULT_EVENT_LOG_CAPACITY,
                         report: Optional[LoadReport] = None) -> RoomRecord:
    """Decode a room, falling back to a fresh default record"""
    if blob is None:
        return RoomRecord.create(room_name, event_log_capacity)
    try:
        return decode_room(room_name, blob, event_log_capacity)
    except MalformedStateError as e:
        _discard(report, e)
        if report is not None:
            report.rooms_reset.append(room_name)
        return RoomRecord.create(room_name, event_log_capacity)


# =============================================================================
# STRATEGIC STATE
# =============================================================================

def serialize_strategic(state: StrategicState) -> StrategicStateBlob:
    objectives: ObjectivesBlob = {
        "warMode": state.objectives.war_mode,
        "expansionPaused": state.objectives.expansion_paused,
    }
    return {
        "claimQueue": list(state.claim_queue),
        "warTargets": list(state.war_targets),
        "strikeCandidates": list(state.strike_candidates),
        "roomsSeen": {name: int(tick) for name, tick in state.rooms_seen.items()},
        "lastRebuilt": int(state.last_rebuilt),
        "objectives": objectives,
    }


def decode_strategic(blob: Any) -> StrategicState:
    path = "strategic"
    data = _mapping(blob, path)
    state = StrategicState()

    state.claim_queue = _str_list(data.get("claimQueue", []), f"{path}.claimQueue")
    state.war_targets = _str_list(data.get("warTargets", []), f"{path}.warTargets")
    state.strike_candidates = _str_list(data.get("strikeCandidates", []), f"{path}.strikeCandidates")

    seen = _mapping(data.get("roomsSeen", {}), f"{path}.roomsSeen")
    state.rooms_seen = {str(name): _int(tick, f"{path}.roomsSeen.{name}") for name, tick in seen.items()}

    if "lastRebuilt" in data:
        state.last_rebuilt = _int(data["lastRebuilt"], f"{path}.lastRebuilt")

    if "objectives" in data:
        objectives = _mapping(data["objectives"], f"{path}.objectives")
        state.objectives = StrategicObjectives(
            war_mode=_bool(objectives.get("warMode", False), f"{path}.objectives.warMode"),
            expansion_paused=_bool(objectives.get("expansionPaused", False),
                                   f"{path}.objectives.expansionPaused"),
        )

    return state


def load_strategic_or_default(blob: Any, report: Optional[LoadReport] = None) -> StrategicState:
    if blob is None:
        return StrategicState()
    try:
        return decode_strategic(blob)
    except MalformedStateError as e:
        _discard(report, e)
        if report is not None:
            report.strategic_reset = True
        return StrategicState()


# =============================================================================
# ROOT STATE
# =============================================================================

def serialize_state(state: SwarmState) -> SwarmStateBlob:
    return {
        "version": SCHEMA_VERSION,
        "rooms": {name: serialize_room(record) for name, record in state.rooms.items()},
        "strategic": serialize_strategic(state.strategic),
    }


def deserialize_state(blob: Any,
                      event_log_capacity: int = DEFAULT_EVENT_LOG_CAPACITY,
                      report: Optional[LoadReport] = None) -> SwarmState:
    """
    Load-or-default for the whole persisted swarm.

    A malformed room only resets that room; a malformed root or a
    version mismatch resets everything.
    """
    if blob is None:
        return SwarmState()

    try:
        data = _mapping(blob, "root")
        version = data.get("version")
        if version != SCHEMA_VERSION:
            raise MalformedStateError("version", f"expected {SCHEMA_VERSION}, got {version!r}")
        rooms_blob = _mapping(data.get("rooms", {}), "rooms")
    except MalformedStateError as e:
        _discard(report, e)
        return SwarmState()

    rooms: Dict[str, RoomRecord] = {}
    for name, room_blob in rooms_blob.items():
        rooms[str(name)] = load_room_or_default(str(name), room_blob, event_log_capacity, report)

    return SwarmState(
        rooms=rooms,
        strategic=load_strategic_or_default(data.get("strategic"), report),
    )


def to_json(state: SwarmState) -> str:
    return json.dumps(serialize_state(state), sort_keys=True)


def from_json(text: Optional[str],
              event_log_capacity: int = DEFAULT_EVENT_LOG_CAPACITY,
              report: Optional[LoadReport] = None) -> SwarmState:
    """Parse a JSON dump; unparseable text yields a default state"""
    if not text:
        return SwarmState()
    try:
        blob = json.loads(text)
    except json.JSONDecodeError as e:
        _discard(report, MalformedStateError("json", str(e)))
        return SwarmState()
    return deserialize_state(blob, event_log_capacity, report)


def load_state_or_default(blob: Any,
                          event_log_capacity: int = DEFAULT_EVENT_LOG_CAPACITY) -> Tuple[SwarmState, LoadReport]:
    """
    Host entry point, called once per cycle before ``SwarmCycle.run``.

    Returns:
        (state, report) where report lists everything that was reset
    """
    report = LoadReport()
    state = deserialize_state(blob, event_log_capacity, report)
    if report.warnings:
        logger.info(f"Loaded swarm state with {len(report.warnings)} repair(s)")
    return state, report
