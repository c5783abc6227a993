"""
SwarmMind Configuration
========================
Configuration system for the swarm strategy core.
All tunables for signal dynamics, threat bands, posture rules,
strategic queues and persisted memory.
"""

from dataclasses import dataclass, field
from typing import Tuple
from enum import Enum, IntEnum


class SignalCategory(Enum):
    """Closed set of pheromone signal categories"""
    HARVEST = "harvest"
    BUILD = "build"
    UPGRADE = "upgrade"
    EXPAND = "expand"
    DEFENSE = "defense"
    WAR = "war"
    SIEGE = "siege"
    NUKE_TARGET = "nukeTarget"
    LOGISTICS = "logistics"


class Posture(Enum):
    """Room operating postures"""
    ECO = "eco"
    EXPAND = "expand"
    DEFENSIVE = "defensive"
    WAR = "war"
    SIEGE = "siege"
    EVACUATE = "evacuate"
    NUKE_PREP = "nukePrep"


class ColonyStage(IntEnum):
    """Colony maturity, ordered from youngest to most developed"""
    SEED_NEST = 0
    FORAGING_EXPANSION = 1
    MATURE_COLONY = 2
    FORTIFIED_HIVE = 3
    EMPIRE_DOMINANCE = 4


class AgentRole(Enum):
    """Agent (creep) behavioural roles"""
    LARVA_WORKER = "larvaWorker"
    HARVESTER = "harvester"
    HAULER = "hauler"
    UPGRADER = "upgrader"
    BUILDER = "builderAnt"
    GUARD = "guardAnt"
    HEALER = "healerAnt"
    SOLDIER = "soldierAnt"
    SCOUT = "scoutAnt"
    CLAIMER = "claimAnt"


class ActionType(Enum):
    """Agent action types dispatched to the movement/action layer"""
    HARVEST = "harvest"
    TRANSFER = "transfer"
    WITHDRAW = "withdraw"
    DROP = "drop"
    BUILD = "build"
    REPAIR = "repair"
    UPGRADE = "upgrade"
    MOVE_TO = "moveTo"
    FLEE = "flee"
    ATTACK = "attack"
    HEAL = "heal"
    CLAIM = "claim"
    EXPLORE = "explore"
    IDLE = "idle"


class RoleFamily(Enum):
    """Spawn families that posture profiles weight"""
    ECONOMY = "economy"
    MILITARY = "military"
    UTILITY = "utility"


ROLE_FAMILIES = {
    AgentRole.LARVA_WORKER: RoleFamily.ECONOMY,
    AgentRole.HARVESTER: RoleFamily.ECONOMY,
    AgentRole.HAULER: RoleFamily.ECONOMY,
    AgentRole.UPGRADER: RoleFamily.ECONOMY,
    AgentRole.BUILDER: RoleFamily.ECONOMY,
    AgentRole.GUARD: RoleFamily.MILITARY,
    AgentRole.HEALER: RoleFamily.MILITARY,
    AgentRole.SOLDIER: RoleFamily.MILITARY,
    AgentRole.SCOUT: RoleFamily.UTILITY,
    AgentRole.CLAIMER: RoleFamily.UTILITY,
}


@dataclass
class SignalConfig:
    """Pheromone field dynamics"""
    # Decay: v(t+1) = v(t) * decay_factor
    decay_factor: float = 0.95

    # Below this no category counts as dominant
    dominance_floor: float = 1.0

    # Diffusion to neighbouring rooms (broadcast, source is not depleted)
    diffusion_fraction: float = 0.1
    diffusing_categories: Tuple[SignalCategory, ...] = (
        SignalCategory.EXPAND,
        SignalCategory.WAR,
        SignalCategory.HARVEST,
    )


@dataclass
class EmissionConfig:
    """Observation -> signal gains applied after decay each cycle"""
    # Baseline harvest pressure every room feels
    harvest_baseline: float = 2.0

    # Construction backlog
    build_per_site: float = 2.0
    build_per_damaged_structure: float = 0.5
    defense_per_damaged_structure: float = 0.25

    # Controller upkeep
    downgrade_danger_ticks: int = 5000
    upgrade_on_downgrade_risk: float = 10.0

    # Stored energy
    upgrade_per_10k_energy: float = 1.0
    logistics_per_10k_energy: float = 0.5
    expand_energy_surplus: int = 100000
    expand_on_surplus: float = 5.0

    # Hostile presence
    defense_per_hostile: float = 5.0


@dataclass
class ThreatConfig:
    """Danger classification bands and threat emission"""
    # Level 3: either trigger alone is sufficient
    critical_hostile_count: int = 10
    critical_damage: float = 2000.0

    # Level 2
    medium_hostile_count: int = 5
    medium_damage: float = 1000.0

    # Damage estimate per active body part
    attack_part_damage: float = 30.0
    ranged_part_damage: float = 10.0
    boost_multiplier: float = 2.0

    # Emission when danger >= 2 (scaled by danger level)
    war_per_danger_level: float = 10.0
    defense_per_danger_level: float = 15.0

    # Incoming nukes
    siege_per_nuke: float = 50.0
    nuke_target_per_nuke: float = 50.0


@dataclass
class PostureConfig:
    """Posture rule thresholds"""
    # Expand posture requires expand signal strictly above this
    expand_threshold: float = 30.0

    # Claim role weight requires at least this expand signal
    claim_role_min_signal: float = 20.0


@dataclass
class OvermindConfig:
    """Strategic queue builder configuration"""
    # Claim queue
    claim_min_signal: float = 5.0
    max_claim_queue: int = 10

    # War targets
    war_signal_threshold: float = 20.0
    max_war_targets: int = 10

    # Strike candidates: maturity*w1 + structures*w2 + war*w3 - distance*penalty
    maturity_weight: float = 10.0
    hostile_structure_weight: float = 0.5
    war_signal_weight: float = 0.5
    distance_penalty: float = 5.0
    min_strike_score: float = 30.0
    max_strike_candidates: int = 5

    # Hostile structure count -> [0, 100] signal
    structure_signal_per_structure: float = 5.0


@dataclass
class MemoryConfig:
    """Persisted room memory"""
    event_log_capacity: int = 20
    schema_version: int = 1

    # Unobserved rooms drop back to danger 0 after this many ticks
    danger_stale_ticks: int = 50


@dataclass
class SwarmConfig:
    """Master configuration combining all subsystems"""
    signal: SignalConfig = field(default_factory=SignalConfig)
    emission: EmissionConfig = field(default_factory=EmissionConfig)
    threat: ThreatConfig = field(default_factory=ThreatConfig)
    posture: PostureConfig = field(default_factory=PostureConfig)
    overmind: OvermindConfig = field(default_factory=OvermindConfig)
    memory: MemoryConfig = field(default_factory=MemoryConfig)

    def validate(self):
        """Validate configuration consistency"""
        s = self.signal
        assert 0.0 < s.decay_factor < 1.0, "Decay factor must be in (0, 1)"
        assert 0.0 <= s.diffusion_fraction <= 1.0, "Diffusion fraction must be in [0, 1]"
        assert len(set(s.diffusing_categories)) == len(s.diffusing_categories), \
            "Duplicate diffusing categories"

        t = self.threat
        assert t.medium_hostile_count <= t.critical_hostile_count, "Hostile bands out of order"
        assert t.medium_damage <= t.critical_damage, "Damage bands out of order"

        o = self.overmind
        for length in (o.max_claim_queue, o.max_war_targets, o.max_strike_candidates):
            assert length > 0, f"Queue length must be positive: {length}"

        assert self.memory.event_log_capacity > 0, "Event log needs capacity"
        assert self.memory.danger_stale_ticks > 0, "Danger staleness window must be positive"

        return True


def create_default_config() -> SwarmConfig:
    """Create default configuration"""
    return SwarmConfig()


def create_small_test_config() -> SwarmConfig:
    """Create configuration with short queues and a tiny event log for testing"""
    config = SwarmConfig()
    config.memory.event_log_capacity = 5
    config.overmind.max_claim_queue = 3
    config.overmind.max_war_targets = 3
    config.overmind.max_strike_candidates = 3
    return config
