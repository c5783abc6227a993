"""
SwarmMind Posture Controller
=============================
Maps a room's danger level and signals to an operating posture,
and a posture to spawn weights, resource priorities and capability
flags.

Posture is a pure function of the current inputs. There is no
transition table and no memory of the previous posture, so a
persisted snapshot always reproduces the same decision.

Rule order (first match wins):
1. Strategic override, if supplied
2. danger 3 -> siege
3. danger 2 -> war
4. danger 1 -> defensive
5. expand signal > threshold and danger 0 -> expand
6. eco
"""

from dataclasses import dataclass
from typing import Dict, Optional

from .config import (
    AgentRole,
    ColonyStage,
    Posture,
    PostureConfig,
    RoleFamily,
    ROLE_FAMILIES,
    SignalCategory,
)
from .pheromone import SignalVector
from .state import RoomRecord


@dataclass(frozen=True)
class SpawnProfile:
    """Share of spawn capacity per role family (sums to 1.0)"""
    economy: float
    military: float
    utility: float

    def weight(self, family: RoleFamily) -> float:
        return getattr(self, family.value)


@dataclass(frozen=True)
class ResourcePriorities:
    """Relative energy priorities, 0-100"""
    upgrade: int
    build: int
    repair: int
    defense: int
    logistics: int


@dataclass(frozen=True)
class PostureCapabilities:
    """Behaviour gates other systems consult"""
    building: bool
    upgrading: bool
    expansion: bool
    combat: bool


SPAWN_PROFILES: Dict[Posture, SpawnProfile] = {
    Posture.ECO: SpawnProfile(economy=0.75, military=0.05, utility=0.2),
    Posture.EXPAND: SpawnProfile(economy=0.55, military=0.15, utility=0.3),
    Posture.DEFENSIVE: SpawnProfile(economy=0.5, military=0.35, utility=0.15),
    Posture.WAR: SpawnProfile(economy=0.3, military=0.5, utility=0.2),
    Posture.SIEGE: SpawnProfile(economy=0.2, military=0.7, utility=0.1),
    Posture.EVACUATE: SpawnProfile(economy=0.1, military=0.1, utility=0.8),
    Posture.NUKE_PREP: SpawnProfile(economy=0.4, military=0.4, utility=0.2),
}

RESOURCE_PRIORITIES: Dict[Posture, ResourcePriorities] = {
    Posture.ECO: ResourcePriorities(upgrade=80, build=60, repair=40, defense=20, logistics=50),
    Posture.EXPAND: ResourcePriorities(upgrade=60, build=70, repair=40, defense=20, logistics=60),
    Posture.DEFENSIVE: ResourcePriorities(upgrade=40, build=40, repair=70, defense=80, logistics=50),
    Posture.WAR: ResourcePriorities(upgrade=10, build=20, repair=80, defense=90, logistics=60),
    Posture.SIEGE: ResourcePriorities(upgrade=0, build=0, repair=90, defense=100, logistics=40),
    Posture.EVACUATE: ResourcePriorities(upgrade=0, build=0, repair=10, defense=30, logistics=100),
    Posture.NUKE_PREP: ResourcePriorities(upgrade=20, build=50, repair=80, defense=70, logistics=70),
}

CAPABILITIES: Dict[Posture, PostureCapabilities] = {
    Posture.ECO: PostureCapabilities(building=True, upgrading=True, expansion=True, combat=False),
    Posture.EXPAND: PostureCapabilities(building=True, upgrading=True, expansion=True, combat=False),
    Posture.DEFENSIVE: PostureCapabilities(building=True, upgrading=True, expansion=False, combat=True),
    Posture.WAR: PostureCapabilities(building=True, upgrading=False, expansion=False, combat=True),
    Posture.SIEGE: PostureCapabilities(building=False, upgrading=False, expansion=False, combat=True),
    Posture.EVACUATE: PostureCapabilities(building=False, upgrading=False, expansion=False, combat=False),
    Posture.NUKE_PREP: PostureCapabilities(building=True, upgrading=False, expansion=False, combat=False),
}

# Signal that scales each role's share within its family
ROLE_SIGNALS: Dict[AgentRole, Optional[SignalCategory]] = {
    AgentRole.LARVA_WORKER: SignalCategory.HARVEST,
    AgentRole.HARVESTER: SignalCategory.HARVEST,
    AgentRole.HAULER: SignalCategory.LOGISTICS,
    AgentRole.UPGRADER: SignalCategory.UPGRADE,
    AgentRole.BUILDER: SignalCategory.BUILD,
    AgentRole.GUARD: SignalCategory.DEFENSE,
    AgentRole.HEALER: SignalCategory.WAR,
    AgentRole.SOLDIER: SignalCategory.WAR,
    AgentRole.SCOUT: None,
    AgentRole.CLAIMER: SignalCategory.EXPAND,
}


def derive_colony_stage(controller_level: int, owned_rooms: int = 1) -> ColonyStage:
    """
    Colony maturity from controller level and empire size.

    Level 8 only counts as empire dominance once at least three
    rooms are owned.
    """
    if controller_level <= 2:
        return ColonyStage.SEED_NEST
    if controller_level <= 4:
        return ColonyStage.FORAGING_EXPANSION
    if controller_level <= 6:
        return ColonyStage.MATURE_COLONY
    if controller_level >= 8 and owned_rooms >= 3:
        return ColonyStage.EMPIRE_DOMINANCE
    return ColonyStage.FORTIFIED_HIVE


class PostureController:
    """Posture selection and posture lookups"""

    def __init__(self, config: Optional[PostureConfig] = None):
        self.config = config or PostureConfig()

    def determine_posture(self, record: RoomRecord,
                          override: Optional[Posture] = None) -> Posture:
        """
        Pick the room's posture.

        Danger always beats expansion desire, however strong the
        expand signal is.
        """
        if override is not None:
            return override
        if record.danger >= 3:
            return Posture.SIEGE
        if record.danger == 2:
            return Posture.WAR
        if record.danger == 1:
            return Posture.DEFENSIVE
        if record.signals[SignalCategory.EXPAND] > self.config.expand_threshold:
            return Posture.EXPAND
        return Posture.ECO

    def get_spawn_profile(self, posture: Posture) -> SpawnProfile:
        return SPAWN_PROFILES[posture]

    def get_resource_priorities(self, posture: Posture) -> ResourcePriorities:
        return RESOURCE_PRIORITIES[posture]

    def get_capabilities(self, posture: Posture) -> PostureCapabilities:
        return CAPABILITIES[posture]

    def allows_building(self, posture: Posture) -> bool:
        return CAPABILITIES[posture].building

    def allows_upgrading(self, posture: Posture) -> bool:
        return CAPABILITIES[posture].upgrading

    def allows_expansion(self, posture: Posture) -> bool:
        return CAPABILITIES[posture].expansion

    def is_combat_posture(self, posture: Posture) -> bool:
        return CAPABILITIES[posture].combat

    def get_role_weights(self, posture: Posture, signals: SignalVector) -> Dict[AgentRole, float]:
        """
        Normalised spawn weight per role.

        Each family's profile share is split across its roles, scaled
        by the role's driving signal (1 + s/100), then gated by the
        posture's capabilities. Claimers additionally need an expand
        signal of at least ``claim_role_min_signal``.

        Returns:
            {role: weight}, summing to 1.0 unless every role is gated off
        """
        profile = self.get_spawn_profile(posture)
        caps = self.get_capabilities(posture)

        family_sizes: Dict[RoleFamily, int] = {}
        for family in ROLE_FAMILIES.values():
            family_sizes[family] = family_sizes.get(family, 0) + 1

        weights: Dict[AgentRole, float] = {}
        for role, family in ROLE_FAMILIES.items():
            base = profile.weight(family) / family_sizes[family]
            signal = ROLE_SIGNALS[role]
            scale = 1.0 + (signals[signal] / 100.0 if signal is not None else 0.0)
            weights[role] = base * scale

        if not caps.building:
            weights[AgentRole.BUILDER] = 0.0
        if not caps.upgrading:
            weights[AgentRole.UPGRADER] = 0.0
        if (not caps.expansion
                or signals[SignalCategory.EXPAND] < self.config.claim_role_min_signal):
            weights[AgentRole.CLAIMER] = 0.0

        total = sum(weights.values())
        if total <= 0:
            return weights
        return {role: weight / total for role, weight in weights.items()}
