"""
SwarmMind Cycle
================
One tick of the swarm strategy core, wired in data-flow order:

    observation -> threat -> signals (decay, emit, diffuse)
                -> posture -> strategic queues -> agent actions

The host owns the SwarmState and passes it in every tick; the cycle
mutates room records in place and swaps in a freshly built
StrategicState at the end.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .behavior import AgentAction, AgentContext, build_role_trees, select_action
from .config import AgentRole, Posture, SwarmConfig, create_default_config
from .decision import DecisionTree, DecisionTreeError
from .overmind import RoomIntel, StrategicQueueBuilder
from .pheromone import SignalField, diffuse
from .posture import (
    PostureCapabilities,
    PostureController,
    ResourcePriorities,
    SpawnProfile,
    derive_colony_stage,
)
from .profiling import CycleTimings, timed
from .state import RoomRecord, StrategicState, SwarmState
from .threat import MAX_DANGER, RoomObservation, ThreatClassifier

logger = logging.getLogger("swarmmind.cycle")

Observation = Union[RoomObservation, Mapping[str, Any]]


@dataclass
class CycleReport:
    """Per-room outputs of one cycle, consumed by spawning and dispatch"""
    tick: int
    postures: Dict[str, Posture] = field(default_factory=dict)
    dangers: Dict[str, int] = field(default_factory=dict)
    spawn_profiles: Dict[str, SpawnProfile] = field(default_factory=dict)
    resource_priorities: Dict[str, ResourcePriorities] = field(default_factory=dict)
    capabilities: Dict[str, PostureCapabilities] = field(default_factory=dict)
    role_weights: Dict[str, Dict[AgentRole, float]] = field(default_factory=dict)
    posture_changes: List[str] = field(default_factory=list)
    strategic: StrategicState = field(default_factory=StrategicState)
    timings: CycleTimings = field(default_factory=CycleTimings)


@dataclass
class ActionReport:
    """Chosen actions, plus agents whose tree was misconfigured"""
    actions: Dict[str, AgentAction] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)
    timings: CycleTimings = field(default_factory=CycleTimings)


class SwarmCycle:
    """
    Runs the core once per tick.

    Holds configuration and the stateless subsystems only. All mutable
    state lives in the SwarmState handed to ``run``.
    """

    def __init__(self, config: Optional[SwarmConfig] = None,
                 trees: Optional[Dict[AgentRole, DecisionTree]] = None):
        self.config = config or create_default_config()
        self.config.validate()

        self.signals = SignalField(self.config.signal, self.config.emission)
        self.threat = ThreatClassifier(self.config.threat)
        self.postures = PostureController(self.config.posture)
        self.overmind = StrategicQueueBuilder(self.config.overmind)
        self.trees = trees if trees is not None else build_role_trees()

    # =========================================================================
    # Room update
    # =========================================================================

    def decay_rooms(self, state: SwarmState) -> None:
        """Decay every known room once, before any emission this cycle"""
        for record in state.rooms.values():
            record.signals = self.signals.decay(record.signals)

    def expire_danger(self, record: RoomRecord, tick: int) -> bool:
        """
        Clear the danger of a room that has gone unobserved too long.

        Returns:
            Whether the room's danger was reset
        """
        if record.danger == 0:
            return False
        if tick - record.last_updated < self.config.memory.danger_stale_ticks:
            return False
        logger.info(f"{record.room_name}: unobserved since tick {record.last_updated}, "
                    f"danger {record.danger} -> 0")
        record.danger = 0
        return True

    def update_room(self, record: RoomRecord, observation: RoomObservation,
                    tick: int, owned_rooms: int = 1) -> RoomRecord:
        """
        Classify and emit for one observed room.

        The room must already have been decayed this cycle. Danger is
        re-classified from scratch every tick, so it falls as soon as
        the hostiles leave.
        """
        if observation.controller_level > 0:
            record.colony_level = derive_colony_stage(observation.controller_level, owned_rooms)

        previous_danger = record.danger
        record.danger = self.threat.assess(record.signals, observation)

        if record.danger > previous_danger:
            record.push_event(f"danger:{record.danger}", tick)
            logger.info(f"{record.room_name}: danger {previous_danger} -> {record.danger}")
        if observation.nuke_count > 0 and previous_danger < MAX_DANGER:
            record.push_event("nukeDetected", tick)
            logger.info(f"{record.room_name}: {observation.nuke_count} incoming nuke(s)")

        self.signals.update_from_observation(record.signals, observation, record.colony_level)
        record.missing_structures.update(observation.missing_structures)
        record.last_updated = tick

        logger.debug(f"{record.room_name}: danger={record.danger} signals={record.signals!r}")
        return record

    def diffuse_all(self, state: SwarmState, neighbors: Mapping[str, Sequence[str]]) -> int:
        """
        Broadcast diffusing categories along the neighbour map.

        Sources are snapshotted first so the result does not depend on
        room iteration order. Neighbours without a record are skipped.
        """
        snapshots = {name: state.rooms[name].signals.copy()
                     for name in neighbors if name in state.rooms}
        applied = 0
        for name, source in snapshots.items():
            targets = [state.rooms[n].signals for n in neighbors[name]
                       if n in state.rooms and n != name]
            applied += diffuse(source, targets,
                               self.config.signal.diffusing_categories,
                               self.config.signal.diffusion_fraction)
        return applied

    # =========================================================================
    # Full cycle
    # =========================================================================

    def run(self, state: SwarmState, observations: Mapping[str, Observation], tick: int,
            neighbors: Optional[Mapping[str, Sequence[str]]] = None,
            overrides: Optional[Mapping[str, Posture]] = None,
            intel: Optional[Mapping[str, RoomIntel]] = None,
            owned_rooms: Optional[int] = None) -> CycleReport:
        """
        Run one tick.

        Args:
            state: Host-owned swarm state, updated in place
            observations: {room name: observation or plain mapping}
            tick: Current game tick, monotonically increasing
            neighbors: {room name: adjacent room names} for diffusion
            overrides: Strategic posture overrides per room
            intel: Scouting intel for strike scoring
            owned_rooms: Empire size for colony maturity; defaults to
                the number of observed rooms with a controller

        Returns:
            CycleReport with per-room posture outputs and timings
        """
        overrides = overrides or {}
        capacity = self.config.memory.event_log_capacity
        report = CycleReport(tick=tick)

        parsed = {
            name: obs if isinstance(obs, RoomObservation) else RoomObservation.from_mapping(obs)
            for name, obs in observations.items()
        }
        if owned_rooms is None:
            owned_rooms = max(1, sum(1 for obs in parsed.values() if obs.controller_level > 0))

        with timed("room_update", report.timings):
            # Every known room decays once per cycle, observed or not
            self.decay_rooms(state)
            for name, observation in parsed.items():
                self.update_room(state.get_or_init_room(name, capacity), observation, tick, owned_rooms)
            for name, record in state.rooms.items():
                if name not in parsed:
                    self.expire_danger(record, tick)

        if neighbors:
            with timed("diffusion", report.timings):
                self.diffuse_all(state, neighbors)

        with timed("posture", report.timings):
            for name, record in state.rooms.items():
                posture = self.postures.determine_posture(record, overrides.get(name))
                if posture != record.posture:
                    record.push_event(f"posture:{posture.value}", tick)
                    report.posture_changes.append(name)
                    logger.info(f"{name}: posture {record.posture.value} -> {posture.value}")
                    record.posture = posture

                report.postures[name] = posture
                report.dangers[name] = record.danger
                report.spawn_profiles[name] = self.postures.get_spawn_profile(posture)
                report.resource_priorities[name] = self.postures.get_resource_priorities(posture)
                report.capabilities[name] = self.postures.get_capabilities(posture)
                report.role_weights[name] = self.postures.get_role_weights(posture, record.signals)

        with timed("queue_rebuild", report.timings):
            state.strategic = self.overmind.rebuild(
                state.rooms, tick, intel, state.strategic.objectives
            )
        report.strategic = state.strategic

        return report

    # =========================================================================
    # Agent actions
    # =========================================================================

    def select_actions(self, agents: Iterable[AgentContext]) -> ActionReport:
        """
        Evaluate every agent's role tree.

        A misconfigured tree fails only its own agent: the error is
        logged and recorded, the remaining agents still act.
        """
        report = ActionReport()
        with timed("tree_evaluation", report.timings):
            for agent in agents:
                if agent.role not in self.trees:
                    logger.error(f"{agent.name}: no behaviour tree for role {agent.role.value}")
                    report.failures[agent.name] = f"role:{agent.role.value}"
                    continue
                try:
                    report.actions[agent.name] = select_action(agent, self.trees)
                except DecisionTreeError as e:
                    logger.error(f"{agent.name} ({agent.role.value}): {e}")
                    report.failures[agent.name] = e.node_id
        return report
