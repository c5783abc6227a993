"""
Unit tests for swarmmind/posture.py

Tests posture rules, lookup tables, colony stages and role weights.
"""

import pytest
from swarmmind.posture import (
    SPAWN_PROFILES, RESOURCE_PRIORITIES, derive_colony_stage,
)
from swarmmind.config import AgentRole, ColonyStage, Posture, RoleFamily
from swarmmind.pheromone import SignalVector


class TestDeterminePosture:
    """Tests for posture selection"""

    def test_quiet_room_is_eco(self, posture_controller, make_record):
        """Test no danger and low expand gives eco"""
        assert posture_controller.determine_posture(make_record("A")) == Posture.ECO

    @pytest.mark.parametrize("danger,expected", [
        (1, Posture.DEFENSIVE),
        (2, Posture.WAR),
        (3, Posture.SIEGE),
    ])
    def test_danger_levels(self, posture_controller, make_record, danger, expected):
        """Test each danger level maps to its posture"""
        record = make_record("A", danger=danger)
        assert posture_controller.determine_posture(record) == expected

    def test_siege_ignores_signals(self, posture_controller, make_record):
        """Test danger 3 gives siege whatever the signals say"""
        record = make_record("A", danger=3, expand=100.0, harvest=100.0)
        assert posture_controller.determine_posture(record) == Posture.SIEGE

    def test_override_wins(self, posture_controller, make_record):
        """Test a strategic override beats danger"""
        record = make_record("A", danger=3)
        assert posture_controller.determine_posture(record, Posture.EVACUATE) == Posture.EVACUATE

    def test_expand_above_threshold(self, posture_controller, make_record):
        """Test expand > 30 with no danger gives expand"""
        assert posture_controller.determine_posture(make_record("A", expand=50.0)) == Posture.EXPAND
        assert posture_controller.determine_posture(make_record("B", expand=30.0)) == Posture.ECO

    def test_danger_beats_expansion(self, posture_controller, make_record):
        """Test any danger suppresses expand posture"""
        record = make_record("A", danger=1, expand=50.0)
        assert posture_controller.determine_posture(record) == Posture.DEFENSIVE


class TestLookupTables:
    """Tests for spawn profiles, priorities and capabilities"""

    def test_tables_cover_every_posture(self):
        """Test every posture has a profile and priorities"""
        assert set(SPAWN_PROFILES) == set(Posture)
        assert set(RESOURCE_PRIORITIES) == set(Posture)

    def test_profiles_sum_to_one(self):
        """Test spawn shares sum to 1"""
        for profile in SPAWN_PROFILES.values():
            assert profile.economy + profile.military + profile.utility == pytest.approx(1.0)

    def test_known_profiles(self, posture_controller):
        """Test eco, war and evacuate profiles"""
        eco = posture_controller.get_spawn_profile(Posture.ECO)
        assert (eco.economy, eco.military, eco.utility) == (0.75, 0.05, 0.2)
        war = posture_controller.get_spawn_profile(Posture.WAR)
        assert war.weight(RoleFamily.MILITARY) == 0.5
        assert posture_controller.get_spawn_profile(Posture.EVACUATE).utility == 0.8

    def test_priorities(self, posture_controller):
        """Test upgrade leads in eco and repair dominates siege"""
        assert posture_controller.get_resource_priorities(Posture.ECO).upgrade == 80
        siege = posture_controller.get_resource_priorities(Posture.SIEGE)
        assert siege.repair == 90
        assert siege.upgrade == 0

    def test_capabilities(self, posture_controller):
        """Test capability flags per posture"""
        pc = posture_controller
        assert not pc.allows_building(Posture.SIEGE)
        assert not pc.allows_building(Posture.EVACUATE)
        assert pc.allows_building(Posture.WAR)
        assert not pc.allows_upgrading(Posture.WAR)
        assert pc.allows_upgrading(Posture.DEFENSIVE)
        assert {p for p in Posture if pc.allows_expansion(p)} == {Posture.ECO, Posture.EXPAND}
        assert {p for p in Posture if pc.is_combat_posture(p)} == {
            Posture.DEFENSIVE, Posture.WAR, Posture.SIEGE,
        }


class TestColonyStage:
    """Tests for derive_colony_stage"""

    @pytest.mark.parametrize("level,rooms,expected", [
        (1, 1, ColonyStage.SEED_NEST),
        (3, 1, ColonyStage.FORAGING_EXPANSION),
        (6, 1, ColonyStage.MATURE_COLONY),
        (7, 5, ColonyStage.FORTIFIED_HIVE),
        (8, 2, ColonyStage.FORTIFIED_HIVE),
        (8, 3, ColonyStage.EMPIRE_DOMINANCE),
    ])
    def test_stages(self, level, rooms, expected):
        """Test controller level and empire size thresholds"""
        assert derive_colony_stage(level, rooms) == expected


class TestRoleWeights:
    """Tests for per-role spawn weights"""

    def test_weights_normalised(self, posture_controller):
        """Test weights sum to 1"""
        weights = posture_controller.get_role_weights(Posture.ECO, SignalVector())
        assert sum(weights.values()) == pytest.approx(1.0)
        assert set(weights) == set(AgentRole)

    def test_claimer_needs_expand_signal(self, posture_controller):
        """Test claimers are gated on expand signal"""
        quiet = posture_controller.get_role_weights(Posture.EXPAND, SignalVector())
        eager = posture_controller.get_role_weights(
            Posture.EXPAND, SignalVector.from_dict({"expand": 40.0}))
        assert quiet[AgentRole.CLAIMER] == 0.0
        assert eager[AgentRole.CLAIMER] > 0.0

    def test_siege_gates_builders_and_upgraders(self, posture_controller):
        """Test capability gates zero out gated roles"""
        weights = posture_controller.get_role_weights(Posture.SIEGE, SignalVector())
        assert weights[AgentRole.BUILDER] == 0.0
        assert weights[AgentRole.UPGRADER] == 0.0
        assert weights[AgentRole.SOLDIER] > weights[AgentRole.HARVESTER]

    def test_signal_scales_role(self, posture_controller):
        """Test a stronger driving signal raises the role's share"""
        base = posture_controller.get_role_weights(Posture.WAR, SignalVector())
        hot = posture_controller.get_role_weights(
            Posture.WAR, SignalVector.from_dict({"defense": 100.0}))
        assert hot[AgentRole.GUARD] > base[AgentRole.GUARD]
