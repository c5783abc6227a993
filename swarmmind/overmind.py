"""
SwarmMind Overmind Strategic Queues
====================================
Aggregates every RoomRecord into three globally ranked queues:

- Claim queue:       rooms with expand >= threshold, by expand signal
- War targets:       rooms in war posture or with war > threshold, by war signal
- Strike candidates: enemy rooms scored by
                     S = maturity*w1 + structures*w2 + war*w3 - distance*penalty
                     kept only when S >= minimum

The Overmind is a REBUILDER, not a patcher. Each call produces a
brand-new StrategicState from current room records; the caller swaps
it in, so a half-built queue is never visible.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .config import OvermindConfig, Posture, SignalCategory
from .pheromone import SIGNAL_MAX
from .state import RoomRecord, StrategicObjectives, StrategicState

logger = logging.getLogger("swarmmind.overmind")


@dataclass
class RoomIntel:
    """Scouted facts about a room we do not necessarily own"""
    room_name: str
    controller_level: int = 0
    hostile_owner: bool = False
    hostile_structures: int = 0
    distance: float = 0.0  # Linear room distance from our nearest colony
    last_seen: int = 0


ScoredRoom = Tuple[str, float]


def _rank(scored: Iterable[ScoredRoom], limit: int) -> List[str]:
    # Stable sort: equal scores keep iteration order
    ordered = sorted(scored, key=lambda item: item[1], reverse=True)
    return [name for name, _ in ordered[:limit]]


class StrategicQueueBuilder:
    """
    Global strategy layer.

    Reads room records (and optional scouting intel) and produces
    ranked queues. Holds configuration only, no queue state.
    """

    def __init__(self, config: OvermindConfig):
        self.config = config

    # =========================================================================
    # Claim queue
    # =========================================================================

    def score_claims(self, rooms: Mapping[str, RoomRecord]) -> List[ScoredRoom]:
        threshold = self.config.claim_min_signal
        return [
            (name, record.signals[SignalCategory.EXPAND])
            for name, record in rooms.items()
            if record.signals[SignalCategory.EXPAND] >= threshold
        ]

    def build_claim_queue(self, rooms: Mapping[str, RoomRecord],
                          objectives: Optional[StrategicObjectives] = None) -> List[str]:
        if objectives is not None and objectives.expansion_paused:
            return []
        return _rank(self.score_claims(rooms), self.config.max_claim_queue)

    # =========================================================================
    # War targets
    # =========================================================================

    def war_threshold(self, objectives: Optional[StrategicObjectives] = None) -> float:
        threshold = self.config.war_signal_threshold
        if objectives is not None and objectives.war_mode:
            threshold *= 0.5
        return threshold

    def score_war_targets(self, rooms: Mapping[str, RoomRecord],
                          objectives: Optional[StrategicObjectives] = None) -> List[ScoredRoom]:
        threshold = self.war_threshold(objectives)
        return [
            (name, record.signals[SignalCategory.WAR])
            for name, record in rooms.items()
            if record.posture == Posture.WAR or record.signals[SignalCategory.WAR] > threshold
        ]

    def build_war_targets(self, rooms: Mapping[str, RoomRecord],
                          objectives: Optional[StrategicObjectives] = None) -> List[str]:
        return _rank(self.score_war_targets(rooms, objectives), self.config.max_war_targets)

    # =========================================================================
    # Strike candidates
    # =========================================================================

    def hostile_structure_signal(self, intel: RoomIntel) -> float:
        """Hostile structure count mapped onto the [0, 100] signal scale"""
        return min(SIGNAL_MAX, intel.hostile_structures * self.config.structure_signal_per_structure)

    def score_strike_target(self, intel: RoomIntel,
                            record: Optional[RoomRecord] = None) -> float:
        """
        Weighted value of striking a room.

        Distance lowers the score but never excludes a target by
        itself; a distant, valuable room can still qualify.
        """
        c = self.config
        war_signal = record.signals[SignalCategory.WAR] if record is not None else 0.0
        return (
            intel.controller_level * c.maturity_weight
            + self.hostile_structure_signal(intel) * c.hostile_structure_weight
            + war_signal * c.war_signal_weight
            - intel.distance * c.distance_penalty
        )

    def score_strike_candidates(self, rooms: Mapping[str, RoomRecord],
                                intel: Mapping[str, RoomIntel]) -> List[ScoredRoom]:
        scored = []
        for name, room_intel in intel.items():
            if not room_intel.hostile_owner:
                continue
            score = self.score_strike_target(room_intel, rooms.get(name))
            if score >= self.config.min_strike_score:
                scored.append((name, score))
        return scored

    def build_strike_candidates(self, rooms: Mapping[str, RoomRecord],
                                intel: Mapping[str, RoomIntel]) -> List[str]:
        return _rank(self.score_strike_candidates(rooms, intel),
                     self.config.max_strike_candidates)

    # =========================================================================
    # Full rebuild
    # =========================================================================

    def rebuild(self, rooms: Mapping[str, RoomRecord], tick: int,
                intel: Optional[Mapping[str, RoomIntel]] = None,
                objectives: Optional[StrategicObjectives] = None) -> StrategicState:
        """
        Build a new StrategicState from scratch.

        Args:
            rooms: Every known room record
            tick: Current game tick
            intel: Scouting intel for strike scoring
            objectives: Switches carried over from the previous state

        Returns:
            A fresh StrategicState; nothing is shared with the previous one
            except the (copied) objectives
        """
        intel = intel or {}
        objectives = objectives or StrategicObjectives()

        rooms_seen: Dict[str, int] = {name: record.last_updated for name, record in rooms.items()}
        for name, room_intel in intel.items():
            rooms_seen[name] = max(rooms_seen.get(name, 0), room_intel.last_seen)

        state = StrategicState(
            claim_queue=self.build_claim_queue(rooms, objectives),
            war_targets=self.build_war_targets(rooms, objectives),
            strike_candidates=self.build_strike_candidates(rooms, intel),
            rooms_seen=rooms_seen,
            last_rebuilt=tick,
            objectives=StrategicObjectives(
                war_mode=objectives.war_mode,
                expansion_paused=objectives.expansion_paused,
            ),
        )

        logger.debug(
            f"Tick {tick}: rebuilt queues claim={len(state.claim_queue)} "
            f"war={len(state.war_targets)} strike={len(state.strike_candidates)}"
        )
        return state
