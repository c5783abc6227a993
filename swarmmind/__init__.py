"""
SwarmMind
==========
Swarm strategy core for a population of autonomous colonies.

Per-tick observations become bounded pheromone signals; signals become
a posture per room, three globally ranked strategic queues, and one
action per agent chosen by a decision tree.

Modules:
--------
- config: Configuration dataclasses, enums and defaults
- pheromone: Per-room signal vectors (decay, emit, diffuse, dominant)
- threat: Danger classification and threat emission
- posture: Posture rules, spawn profiles, resource priorities
- overmind: Strategic queue builder (claims, war targets, strikes)
- decision: Generic arena-backed decision tree engine
- behavior: Role behaviour trees over agent contexts
- state: Room records and strategic state containers
- contracts: Versioned persisted shapes and errors
- persistence: Serialization with load-or-default
- cycle: One full tick wired in data-flow order
- profiling: Scoped timing blocks

Example Usage:
--------------
>>> from swarmmind import SwarmCycle, SwarmState
>>> cycle = SwarmCycle()
>>> state = SwarmState()
>>> report = cycle.run(state, {"W1N1": {"hostile_count": 6}}, tick=100)
>>> report.postures["W1N1"]
<Posture.WAR: 'war'>
"""

import logging

__version__ = "1.0.0"

# Configuration
from .config import (
    SwarmConfig,
    SignalConfig,
    EmissionConfig,
    ThreatConfig,
    PostureConfig,
    OvermindConfig,
    MemoryConfig,
    create_default_config,
    create_small_test_config,
    SignalCategory,
    Posture,
    ColonyStage,
    AgentRole,
    ActionType,
    RoleFamily,
)

# Signals and threat
from .pheromone import SignalVector, SignalField, decay, emit, diffuse, dominant
from .threat import (
    HostileCreep,
    RoomObservation,
    ThreatClassifier,
    classify_danger,
    estimate_incoming_damage,
)

# Posture and strategy
from .posture import (
    PostureController,
    SpawnProfile,
    ResourcePriorities,
    PostureCapabilities,
    derive_colony_stage,
)
from .overmind import RoomIntel, StrategicQueueBuilder

# Decision trees
from .decision import DecisionTree, DecisionTreeBuilder, DecisionTreeError
from .behavior import AgentAction, AgentContext, select_action

# State and persistence
from .state import EventLog, RoomRecord, StrategicObjectives, StrategicState, SwarmState
from .contracts import SCHEMA_VERSION, SwarmMindError, MalformedStateError
from .persistence import (
    LoadReport,
    serialize_state,
    deserialize_state,
    load_room_or_default,
    load_state_or_default,
)

# Orchestration
from .cycle import SwarmCycle, CycleReport, ActionReport
from .profiling import CycleTimings, timed


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """Console logging for hosts that have none configured"""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    return logging.getLogger("swarmmind")


__all__ = [
    # Config
    "SwarmConfig",
    "SignalConfig",
    "EmissionConfig",
    "ThreatConfig",
    "PostureConfig",
    "OvermindConfig",
    "MemoryConfig",
    "create_default_config",
    "create_small_test_config",
    "SignalCategory",
    "Posture",
    "ColonyStage",
    "AgentRole",
    "ActionType",
    "RoleFamily",
    # Signals and threat
    "SignalVector",
    "SignalField",
    "decay",
    "emit",
    "diffuse",
    "dominant",
    "HostileCreep",
    "RoomObservation",
    "ThreatClassifier",
    "classify_danger",
    "estimate_incoming_damage",
    # Posture and strategy
    "PostureController",
    "SpawnProfile",
    "ResourcePriorities",
    "PostureCapabilities",
    "derive_colony_stage",
    "RoomIntel",
    "StrategicQueueBuilder",
    # Decision trees
    "DecisionTree",
    "DecisionTreeBuilder",
    "DecisionTreeError",
    "AgentAction",
    "AgentContext",
    "select_action",
    # State and persistence
    "EventLog",
    "RoomRecord",
    "StrategicObjectives",
    "StrategicState",
    "SwarmState",
    "SCHEMA_VERSION",
    "SwarmMindError",
    "MalformedStateError",
    "LoadReport",
    "serialize_state",
    "deserialize_state",
    "load_room_or_default",
    "load_state_or_default",
    # Orchestration
    "SwarmCycle",
    "CycleReport",
    "ActionReport",
    "CycleTimings",
    "timed",
    "configure_logging",
]
