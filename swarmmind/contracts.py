"""
SwarmMind Persistence Contracts
================================
Versioned shapes of everything the host persists between ticks.

Persisted state is flat: nested dicts and lists of numbers and
strings only. No derived or cached values are stored, because
posture and queues can always be recomputed from signals.

Loading rules:
- Missing blob or missing room   -> documented defaults
- Wrong shape, type or version   -> discard, use defaults, warn
"""

from typing import Dict, List, TypedDict


SCHEMA_VERSION = 1


# =============================================================================
# PERSISTED SHAPES
# =============================================================================

class RoomRecordBlob(TypedDict):
    """One room's persisted swarm memory"""
    colonyLevel: int
    posture: str
    danger: int
    signals: Dict[str, float]
    eventLog: List[List]           # [[tag, tick], ...] oldest first
    eventLogCapacity: int
    missingStructures: Dict[str, bool]
    lastUpdated: int


class ObjectivesBlob(TypedDict):
    warMode: bool
    expansionPaused: bool


class StrategicStateBlob(TypedDict):
    """Overmind queues and bookkeeping"""
    claimQueue: List[str]
    warTargets: List[str]
    strikeCandidates: List[str]
    roomsSeen: Dict[str, int]
    lastRebuilt: int
    objectives: ObjectivesBlob


class SwarmStateBlob(TypedDict):
    """Root persisted object"""
    version: int
    rooms: Dict[str, RoomRecordBlob]
    strategic: StrategicStateBlob


# =============================================================================
# ERRORS
# =============================================================================

class SwarmMindError(Exception):
    """Base class for swarm core errors."""
    pass


class MalformedStateError(SwarmMindError):
    """Persisted data has the wrong shape or type.

    Raised by the strict decoders only; the load-or-default layer
    catches it, logs a warning and substitutes defaults.
    """

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Malformed persisted state at '{path}': {reason}")
