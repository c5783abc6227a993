"""
Unit tests for swarmmind/config.py

Tests configuration defaults, enums and validation.
"""

import pytest
from swarmmind.config import (
    SignalConfig, ThreatConfig, PostureConfig, OvermindConfig, MemoryConfig,
    SwarmConfig, create_default_config, create_small_test_config,
    SignalCategory, Posture, ColonyStage, AgentRole, RoleFamily, ROLE_FAMILIES,
)


class TestEnums:
    """Tests for configuration enums"""

    def test_signal_categories_closed_set(self):
        """Test the nine signal categories and their names"""
        names = {c.value for c in SignalCategory}
        assert names == {
            "harvest", "build", "upgrade", "expand", "defense",
            "war", "siege", "nukeTarget", "logistics",
        }

    def test_posture_values(self):
        """Test Posture enum values"""
        assert Posture.ECO.value == "eco"
        assert Posture.NUKE_PREP.value == "nukePrep"
        assert len(Posture) == 7

    def test_colony_stage_ordering(self):
        """Test colony stages are ordered youngest first"""
        assert ColonyStage.SEED_NEST < ColonyStage.FORAGING_EXPANSION
        assert ColonyStage.FORTIFIED_HIVE < ColonyStage.EMPIRE_DOMINANCE

    def test_every_role_has_a_family(self):
        """Test each agent role is assigned a spawn family"""
        assert set(ROLE_FAMILIES) == set(AgentRole)
        assert ROLE_FAMILIES[AgentRole.SOLDIER] == RoleFamily.MILITARY
        assert ROLE_FAMILIES[AgentRole.CLAIMER] == RoleFamily.UTILITY


class TestDefaults:
    """Tests for subsystem defaults"""

    def test_signal_defaults(self):
        """Test signal dynamics defaults"""
        config = SignalConfig()
        assert config.decay_factor == 0.95
        assert config.dominance_floor == 1.0
        assert set(config.diffusing_categories) == {
            SignalCategory.EXPAND, SignalCategory.WAR, SignalCategory.HARVEST,
        }

    def test_threat_bands(self):
        """Test danger band thresholds"""
        config = ThreatConfig()
        assert config.critical_hostile_count == 10
        assert config.critical_damage == 2000.0
        assert config.medium_hostile_count == 5
        assert config.medium_damage == 1000.0

    def test_posture_threshold(self):
        """Test expand posture threshold"""
        assert PostureConfig().expand_threshold == 30.0

    def test_memory_defaults(self):
        """Test event log capacity"""
        assert MemoryConfig().event_log_capacity == 20

    def test_overmind_queues_bounded(self):
        """Test every strategic queue has a positive bound"""
        config = OvermindConfig()
        assert config.max_claim_queue > 0
        assert config.max_war_targets > 0
        assert config.max_strike_candidates > 0


class TestSwarmConfig:
    """Tests for the master configuration"""

    def test_default_validates(self):
        """Test default configuration passes validation"""
        assert create_default_config().validate()

    def test_small_config(self):
        """Test the small test configuration"""
        config = create_small_test_config()
        assert config.validate()
        assert config.memory.event_log_capacity == 5
        assert config.overmind.max_claim_queue == 3

    def test_subconfigs_are_independent(self):
        """Test two masters do not share sub-configurations"""
        a = SwarmConfig()
        b = SwarmConfig()
        a.memory.event_log_capacity = 3
        assert b.memory.event_log_capacity == 20

    def test_invalid_decay_factor(self):
        """Test decay factor outside (0, 1) fails validation"""
        config = SwarmConfig()
        config.signal.decay_factor = 1.0
        with pytest.raises(AssertionError):
            config.validate()

    def test_inverted_bands(self):
        """Test medium band above critical band fails validation"""
        config = SwarmConfig()
        config.threat.medium_hostile_count = 20
        with pytest.raises(AssertionError):
            config.validate()

    def test_zero_danger_staleness(self):
        """Test a non-positive danger staleness window fails validation"""
        config = SwarmConfig()
        config.memory.danger_stale_ticks = 0
        with pytest.raises(AssertionError):
            config.validate()

    def test_zero_event_log(self):
        """Test an empty event log capacity fails validation"""
        config = SwarmConfig()
        config.memory.event_log_capacity = 0
        with pytest.raises(AssertionError):
            config.validate()
