"""
SwarmMind Threat Classifier
============================
Turns raw hostile, damage and nuke observations into a discrete
danger level (0-3) and threat emissions on the room's signals.

Danger bands (checked highest first, so boundaries resolve upward):
- 3: hostiles >= 10 OR damage >= 2000 (either trigger alone)
- 2: hostiles >= 5  OR damage >= 1000
- 1: hostile structures present, or any lesser hostile activity
- 0: nothing observed

Incoming nukes always force danger 3.
"""

import math
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Iterable, Mapping, Optional

from .config import SignalCategory, ThreatConfig
from .pheromone import SignalVector, emit


MAX_DANGER = 3


@dataclass
class HostileCreep:
    """Active combat parts of one observed hostile"""
    attack_parts: int = 0
    ranged_parts: int = 0
    boosted: bool = False


@dataclass
class RoomObservation:
    """
    One tick of world observation for a room.

    Produced by the world-observation layer. Any value it could not
    observe is left at its default (zero / absent).
    """
    hostile_count: int = 0
    estimated_damage: float = 0.0
    has_hostile_structures: bool = False
    nuke_count: int = 0
    energy_stored: float = 0.0
    construction_sites: int = 0
    damaged_structures: int = 0
    downgrade_ticks: Optional[int] = None  # None = unknown
    controller_level: int = 0
    missing_structures: Dict[str, bool] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "RoomObservation":
        """
        Build an observation from a loosely-shaped mapping.

        Missing keys, None and non-finite values fall back to defaults;
        partial observation is normal, not an error.
        """
        if not data:
            return cls()

        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            value = data.get(f.name)
            if value is None:
                continue
            if f.name == "missing_structures":
                kwargs[f.name] = {str(k): bool(v) for k, v in dict(value).items()}
            elif f.name == "has_hostile_structures":
                kwargs[f.name] = bool(value)
            else:
                number = float(value)
                if not math.isfinite(number):
                    continue
                if f.name in ("estimated_damage", "energy_stored"):
                    kwargs[f.name] = max(0.0, number)
                else:
                    kwargs[f.name] = max(0, int(number))
        return cls(**kwargs)


def estimate_incoming_damage(hostiles: Iterable[HostileCreep],
                             config: Optional[ThreatConfig] = None) -> float:
    """
    Potential damage per tick from a set of hostiles.

    30 per attack part, 10 per ranged part, multiplied for boosted
    creeps.
    """
    c = config or ThreatConfig()
    total = 0.0
    for hostile in hostiles:
        damage = (hostile.attack_parts * c.attack_part_damage
                  + hostile.ranged_parts * c.ranged_part_damage)
        if hostile.boosted:
            damage *= c.boost_multiplier
        total += damage
    return total


def classify_danger(hostile_count: int, estimated_damage: float,
                    has_hostile_structures: bool,
                    config: Optional[ThreatConfig] = None) -> int:
    """
    Classify danger from hostile presence.

    Args:
        hostile_count: Hostile creeps in the room
        estimated_damage: Estimated incoming damage per tick
        has_hostile_structures: Whether enemy structures are present
        config: Threshold bands (defaults if omitted)

    Returns:
        Danger level 0..3
    """
    c = config or ThreatConfig()

    if hostile_count >= c.critical_hostile_count or estimated_damage >= c.critical_damage:
        return 3
    if hostile_count >= c.medium_hostile_count or estimated_damage >= c.medium_damage:
        return 2
    if has_hostile_structures or hostile_count > 0 or estimated_damage > 0:
        return 1
    return 0


class ThreatClassifier:
    """
    Danger classification and threat emission for rooms.

    Only touches the room's signal vector and danger level; it never
    reads or writes strategic state.
    """

    def __init__(self, config: ThreatConfig):
        self.config = config

    def classify(self, hostile_count: int, estimated_damage: float,
                 has_hostile_structures: bool) -> int:
        return classify_danger(hostile_count, estimated_damage,
                               has_hostile_structures, self.config)

    def apply_threat(self, vector: SignalVector, danger: int, nuke_count: int = 0) -> int:
        """
        Emit threat pressure for a classified danger level.

        Danger >= 2 raises war and defense. Incoming nukes raise siege
        and nukeTarget independently of danger and force danger to 3.

        Returns:
            Danger level after nuke escalation
        """
        c = self.config

        if danger >= 2:
            emit(vector, SignalCategory.WAR, danger * c.war_per_danger_level)
            emit(vector, SignalCategory.DEFENSE, danger * c.defense_per_danger_level)

        if nuke_count > 0:
            emit(vector, SignalCategory.SIEGE, nuke_count * c.siege_per_nuke)
            emit(vector, SignalCategory.NUKE_TARGET, nuke_count * c.nuke_target_per_nuke)
            danger = max(danger, MAX_DANGER)

        return danger

    def assess(self, vector: SignalVector, observation: RoomObservation) -> int:
        """Classify an observation and apply its emissions in one step"""
        danger = self.classify(observation.hostile_count,
                               observation.estimated_damage,
                               observation.has_hostile_structures)
        return self.apply_threat(vector, danger, observation.nuke_count)
