"""
SwarmMind Pheromone Signal Field
=================================
Per-room bounded signal intensities that drive posture and strategy.

Dynamics per cycle:
- Decay:     v_c(t+1) = max(0, d * v_c(t)),  0 < d < 1
- Emission:  v_c += a, then clip to [0, 100]   (a <= 0 is a no-op)
- Diffusion: v_c(neighbor) += f * v_c(source)  (source is not depleted)

Decay always runs before emission so a spike observed this tick
is never itself decayed this tick.
"""

import numpy as np
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .config import SignalCategory, SignalConfig, EmissionConfig, ColonyStage

# Forward reference for type hints
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from .threat import RoomObservation


SIGNAL_MIN = 0.0
SIGNAL_MAX = 100.0

# Fixed storage order of the category array
CATEGORIES = tuple(SignalCategory)
CATEGORY_INDEX = {category: idx for idx, category in enumerate(CATEGORIES)}


class SignalVector:
    """
    Fixed set of pheromone intensities for one room.

    Values live in a float array ordered like ``CATEGORIES``.
    Every value is kept in [SIGNAL_MIN, SIGNAL_MAX]; only the
    field operations below write to it. Non-finite inputs become 0.
    """

    def __init__(self, values: Optional[Sequence[float]] = None):
        if values is None:
            self.values = np.zeros(len(CATEGORIES))
        else:
            array = np.asarray(values, dtype=float)
            if array.shape != (len(CATEGORIES),):
                raise ValueError(
                    f"Expected {len(CATEGORIES)} signal values, got shape {array.shape}"
                )
            # NaN and inf would escape clipping; treat them as no signal
            array = np.where(np.isfinite(array), array, SIGNAL_MIN)
            self.values = np.clip(array, SIGNAL_MIN, SIGNAL_MAX)

    @classmethod
    def from_dict(cls, mapping: Mapping[str, float]) -> "SignalVector":
        """
        Build a vector from a {category name: value} mapping.

        Absent categories default to zero. Unknown names raise
        ValueError since the category set is closed.
        """
        values = np.zeros(len(CATEGORIES))
        for name, value in mapping.items():
            category = SignalCategory(name)
            values[CATEGORY_INDEX[category]] = float(value)
        return cls(values)

    def to_dict(self) -> Dict[str, float]:
        """Plain {category name: value} mapping for persistence"""
        return {category.value: float(self.values[idx])
                for idx, category in enumerate(CATEGORIES)}

    def __getitem__(self, category: SignalCategory) -> float:
        return float(self.values[CATEGORY_INDEX[category]])

    def copy(self) -> "SignalVector":
        return SignalVector(self.values.copy())

    def total(self) -> float:
        return float(np.sum(self.values))

    def __eq__(self, other) -> bool:
        if not isinstance(other, SignalVector):
            return NotImplemented
        return bool(np.array_equal(self.values, other.values))

    def __repr__(self) -> str:
        active = {k: round(v, 2) for k, v in self.to_dict().items() if v > 0}
        return f"SignalVector({active})"


# =============================================================================
# FIELD OPERATIONS
# =============================================================================

def decay(vector: SignalVector, factor: float) -> SignalVector:
    """
    Return a decayed copy of ``vector``.

    v_c(t+1) = max(0, factor * v_c(t)). The input is not modified.
    """
    return SignalVector(np.maximum(vector.values * factor, SIGNAL_MIN))


def emit(vector: SignalVector, category: SignalCategory, amount: float) -> float:
    """
    Add ``amount`` to one category, then clamp to [0, 100].

    Returns:
        The category's value after emission
    """
    idx = CATEGORY_INDEX[category]
    if amount > 0:
        vector.values[idx] = min(vector.values[idx] + amount, SIGNAL_MAX)
    return float(vector.values[idx])


def diffuse(source: SignalVector, neighbors: Iterable[SignalVector],
            categories: Iterable[SignalCategory], fraction: float) -> int:
    """
    Broadcast a fraction of the source's signals to every neighbour.

    Each neighbour receives source[c] * fraction for every listed
    category, with emit semantics. The source keeps its values.

    Returns:
        Number of (neighbour, category) emissions applied
    """
    amounts = [(category, source[category] * fraction) for category in categories]
    applied = 0
    for neighbor in neighbors:
        for category, amount in amounts:
            if amount > 0:
                emit(neighbor, category, amount)
                applied += 1
    return applied


def dominant(vector: SignalVector, floor: float = 1.0) -> Optional[SignalCategory]:
    """
    Category with the strictly highest value above ``floor``.

    Returns None when every value is at or below the floor, or
    when two categories share the highest value.
    """
    idx = int(np.argmax(vector.values))
    top = vector.values[idx]
    if top <= floor:
        return None
    if np.count_nonzero(vector.values == top) > 1:
        return None
    return CATEGORIES[idx]


class SignalField:
    """
    Configured pheromone field shared by all rooms.

    Holds no per-room state: vectors are owned by their RoomRecord
    and passed in. Wraps the pure operations above with the
    configured decay factor, diffusion set and significance floor,
    and translates world observations into emissions.
    """

    def __init__(self, config: SignalConfig,
                 emission: Optional[EmissionConfig] = None):
        self.config = config
        self.emission = emission or EmissionConfig()

    def decay(self, vector: SignalVector) -> SignalVector:
        return decay(vector, self.config.decay_factor)

    def emit(self, vector: SignalVector, category: SignalCategory, amount: float) -> float:
        return emit(vector, category, amount)

    def diffuse(self, source: SignalVector, neighbors: List[SignalVector]) -> int:
        """Diffuse the configured categories at the configured fraction"""
        return diffuse(source, neighbors,
                       self.config.diffusing_categories,
                       self.config.diffusion_fraction)

    def dominant(self, vector: SignalVector) -> Optional[SignalCategory]:
        return dominant(vector, self.config.dominance_floor)

    def update_from_observation(self, vector: SignalVector,
                                observation: "RoomObservation",
                                colony_stage: ColonyStage = ColonyStage.SEED_NEST) -> None:
        """
        Emit economic and structural pressure from one room's observation.

        Threat emissions (war, siege, nukeTarget) are the
        ThreatClassifier's job and are not applied here.

        Args:
            vector: Room's signal vector, already decayed this cycle
            observation: World snapshot for the room
            colony_stage: Current maturity of the colony
        """
        e = self.emission

        emit(vector, SignalCategory.HARVEST, e.harvest_baseline)

        emit(vector, SignalCategory.BUILD,
             observation.construction_sites * e.build_per_site
             + observation.damaged_structures * e.build_per_damaged_structure)

        emit(vector, SignalCategory.DEFENSE,
             observation.damaged_structures * e.defense_per_damaged_structure
             + observation.hostile_count * e.defense_per_hostile)

        # Controller about to downgrade
        if (observation.controller_level > 0
                and observation.downgrade_ticks is not None
                and observation.downgrade_ticks < e.downgrade_danger_ticks):
            emit(vector, SignalCategory.UPGRADE, e.upgrade_on_downgrade_risk)

        energy_units = observation.energy_stored / 10000.0
        emit(vector, SignalCategory.UPGRADE, energy_units * e.upgrade_per_10k_energy)
        emit(vector, SignalCategory.LOGISTICS, energy_units * e.logistics_per_10k_energy)

        # Surplus in a quiet, established colony pushes expansion
        if (observation.energy_stored >= e.expand_energy_surplus
                and colony_stage >= ColonyStage.FORAGING_EXPANSION
                and observation.hostile_count == 0):
            emit(vector, SignalCategory.EXPAND, e.expand_on_surplus)

    def get_statistics(self, vectors: Iterable[SignalVector]) -> Dict[str, float]:
        """Mean intensity per category across rooms"""
        stacked = [v.values for v in vectors]
        if not stacked:
            return {category.value: 0.0 for category in CATEGORIES}
        means = np.mean(np.stack(stacked), axis=0)
        return {category.value: float(means[idx]) for idx, category in enumerate(CATEGORIES)}
