"""
SwarmMind Agent Behaviour Trees
================================
Decision trees mapping an agent's context (role, room posture,
nearby threats, carried energy) to a tagged action.

Trees are built once at import and are read-only afterwards. Every
per-tick input arrives in the AgentContext passed to ``evaluate``.
Posture capability flags gate building, upgrading and claiming.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from .config import ActionType, AgentRole, Posture
from .decision import DecisionTree, DecisionTreeBuilder
from .posture import CAPABILITIES


@dataclass(frozen=True)
class AgentAction:
    """Tagged action value handed to action dispatch"""
    type: ActionType
    target: Optional[str] = None


@dataclass
class AgentContext:
    """Everything an agent's tree may look at this tick"""
    name: str
    role: AgentRole
    posture: Posture = Posture.ECO
    danger: int = 0
    room_name: str = ""
    home_room: str = ""
    target_room: Optional[str] = None

    # Carried energy
    energy: int = 0
    capacity: int = 50

    # Threats
    nearby_hostiles: int = 0
    hostiles_in_room: int = 0
    is_damaged: bool = False
    damaged_allies: int = 0

    # Room work
    construction_sites: int = 0
    damaged_structures: int = 0
    storage_energy: int = 0
    sources_available: bool = True
    spawn_needs_energy: bool = False

    @property
    def is_empty(self) -> bool:
        return self.energy <= 0

    @property
    def is_full(self) -> bool:
        return self.energy >= self.capacity

    @property
    def in_home_room(self) -> bool:
        return self.room_name == self.home_room

    @property
    def in_target_room(self) -> bool:
        return self.target_room is None or self.room_name == self.target_room


STORAGE_WITHDRAW_MIN = 1000


# Conditions
def _threatened(ctx: AgentContext) -> bool:
    return ctx.nearby_hostiles > 0


def _can_build(ctx: AgentContext) -> bool:
    return CAPABILITIES[ctx.posture].building and ctx.construction_sites > 0


def _can_upgrade(ctx: AgentContext) -> bool:
    return CAPABILITIES[ctx.posture].upgrading


def _can_expand(ctx: AgentContext) -> bool:
    return CAPABILITIES[ctx.posture].expansion


def _storage_has_energy(ctx: AgentContext) -> bool:
    return ctx.storage_energy >= STORAGE_WITHDRAW_MIN


def _away_from_target(ctx: AgentContext) -> bool:
    return not ctx.in_target_room


def _away_from_home(ctx: AgentContext) -> bool:
    return not ctx.in_home_room


def _combat_ordered(ctx: AgentContext) -> bool:
    return CAPABILITIES[ctx.posture].combat or ctx.target_room is not None


def _leaf(b: DecisionTreeBuilder, action: ActionType, target: Optional[str] = None) -> int:
    return b.leaf(AgentAction(action, target))


def _refill(b: DecisionTreeBuilder) -> int:
    """Storage if it has energy, otherwise harvest"""
    return b.conditional(_storage_has_energy,
                         _leaf(b, ActionType.WITHDRAW, "storage"),
                         _leaf(b, ActionType.HARVEST))


def build_larva_worker_tree() -> DecisionTree:
    """harvest -> feed spawn -> build -> upgrade"""
    b = DecisionTreeBuilder()
    return b.build(b.multiway(
        [
            (_threatened, _leaf(b, ActionType.FLEE)),
            (lambda ctx: ctx.is_empty and ctx.sources_available, _leaf(b, ActionType.HARVEST)),
            (lambda ctx: ctx.spawn_needs_energy and not ctx.is_empty,
             _leaf(b, ActionType.TRANSFER, "spawn")),
            (_can_build, _leaf(b, ActionType.BUILD)),
            (_can_upgrade, _leaf(b, ActionType.UPGRADE)),
        ],
        _leaf(b, ActionType.IDLE),
    ))


def build_harvester_tree() -> DecisionTree:
    b = DecisionTreeBuilder()
    return b.build(b.multiway(
        [
            (_away_from_target, _leaf(b, ActionType.MOVE_TO, "targetRoom")),
            (lambda ctx: not ctx.is_full, _leaf(b, ActionType.HARVEST)),
        ],
        _leaf(b, ActionType.DROP, "container"),
    ))


def build_hauler_tree() -> DecisionTree:
    b = DecisionTreeBuilder()
    deliver = b.conditional(lambda ctx: ctx.spawn_needs_energy,
                            _leaf(b, ActionType.TRANSFER, "spawn"),
                            _leaf(b, ActionType.TRANSFER, "storage"))
    return b.build(b.multiway(
        [
            (lambda ctx: ctx.is_empty and ctx.storage_energy > 0, _leaf(b, ActionType.WITHDRAW, "storage")),
            (lambda ctx: not ctx.is_empty, deliver),
        ],
        _leaf(b, ActionType.IDLE),
    ))


def build_upgrader_tree() -> DecisionTree:
    b = DecisionTreeBuilder()
    # Upgrading is gated off in war-like postures; help the spawn instead
    gated = b.passthrough(
        b.conditional(lambda ctx: ctx.spawn_needs_energy and not ctx.is_empty,
                      _leaf(b, ActionType.TRANSFER, "spawn"),
                      _leaf(b, ActionType.IDLE)),
        label="upgrade-gated",
    )
    return b.build(b.multiway(
        [
            (lambda ctx: not _can_upgrade(ctx), gated),
            (lambda ctx: ctx.is_empty, _refill(b)),
        ],
        _leaf(b, ActionType.UPGRADE, "controller"),
    ))


def build_builder_tree() -> DecisionTree:
    b = DecisionTreeBuilder()
    return b.build(b.multiway(
        [
            (_threatened, _leaf(b, ActionType.FLEE)),
            (lambda ctx: ctx.is_empty, _refill(b)),
            (_can_build, _leaf(b, ActionType.BUILD)),
            (lambda ctx: ctx.damaged_structures > 0, _leaf(b, ActionType.REPAIR)),
            (_can_upgrade, _leaf(b, ActionType.UPGRADE, "controller")),
        ],
        _leaf(b, ActionType.IDLE),
    ))


def build_guard_tree() -> DecisionTree:
    b = DecisionTreeBuilder()
    return b.build(b.multiway(
        [
            (_threatened, _leaf(b, ActionType.ATTACK, "nearest")),
            (lambda ctx: ctx.hostiles_in_room > 0, _leaf(b, ActionType.MOVE_TO, "hostiles")),
            (_away_from_home, _leaf(b, ActionType.MOVE_TO, "homeRoom")),
        ],
        _leaf(b, ActionType.IDLE),
    ))


def build_healer_tree() -> DecisionTree:
    b = DecisionTreeBuilder()
    return b.build(b.multiway(
        [
            (lambda ctx: ctx.is_damaged, _leaf(b, ActionType.HEAL, "self")),
            (lambda ctx: ctx.damaged_allies > 0, _leaf(b, ActionType.HEAL, "allies")),
            (_away_from_home, _leaf(b, ActionType.MOVE_TO, "homeRoom")),
        ],
        _leaf(b, ActionType.IDLE),
    ))


def build_soldier_tree() -> DecisionTree:
    b = DecisionTreeBuilder()
    engage = b.multiway(
        [
            (_away_from_target, _leaf(b, ActionType.MOVE_TO, "targetRoom")),
            (_threatened, _leaf(b, ActionType.ATTACK, "nearest")),
            (lambda ctx: ctx.hostiles_in_room > 0, _leaf(b, ActionType.MOVE_TO, "hostiles")),
        ],
        _leaf(b, ActionType.IDLE, "rally"),
    )
    standby = b.passthrough(
        b.conditional(_away_from_home,
                      _leaf(b, ActionType.MOVE_TO, "homeRoom"),
                      _leaf(b, ActionType.IDLE, "rally")),
        label="standby",
    )
    return b.build(b.conditional(_combat_ordered, engage, standby))


def build_scout_tree() -> DecisionTree:
    b = DecisionTreeBuilder()
    return b.build(b.multiway(
        [
            (_threatened, _leaf(b, ActionType.FLEE)),
            (_away_from_target, _leaf(b, ActionType.MOVE_TO, "targetRoom")),
        ],
        _leaf(b, ActionType.EXPLORE),
    ))


def build_claimer_tree() -> DecisionTree:
    b = DecisionTreeBuilder()
    return b.build(b.multiway(
        [
            (lambda ctx: ctx.target_room is None, _leaf(b, ActionType.IDLE)),
            (_threatened, _leaf(b, ActionType.FLEE)),
            (lambda ctx: not _can_expand(ctx), _leaf(b, ActionType.IDLE, "expansionHalted")),
            (_away_from_target, _leaf(b, ActionType.MOVE_TO, "targetRoom")),
        ],
        _leaf(b, ActionType.CLAIM, "controller"),
    ))


def build_role_trees() -> Dict[AgentRole, DecisionTree]:
    """One tree per role"""
    return {
        AgentRole.LARVA_WORKER: build_larva_worker_tree(),
        AgentRole.HARVESTER: build_harvester_tree(),
        AgentRole.HAULER: build_hauler_tree(),
        AgentRole.UPGRADER: build_upgrader_tree(),
        AgentRole.BUILDER: build_builder_tree(),
        AgentRole.GUARD: build_guard_tree(),
        AgentRole.HEALER: build_healer_tree(),
        AgentRole.SOLDIER: build_soldier_tree(),
        AgentRole.SCOUT: build_scout_tree(),
        AgentRole.CLAIMER: build_claimer_tree(),
    }


ROLE_TREES: Dict[AgentRole, DecisionTree] = build_role_trees()


def select_action(context: AgentContext,
                  trees: Optional[Dict[AgentRole, DecisionTree]] = None) -> AgentAction:
    """
    Evaluate the agent's role tree.

    Raises:
        KeyError: no tree is registered for the role
        DecisionTreeError: the tree hit a dead end
    """
    registry = trees if trees is not None else ROLE_TREES
    return registry[context.role].evaluate(context)
