"""
Unit tests for swarmmind/overmind.py

Tests claim, war and strike queues and the full rebuild.
"""

import pytest
from swarmmind.overmind import RoomIntel, StrategicQueueBuilder
from swarmmind.config import OvermindConfig, Posture
from swarmmind.state import StrategicObjectives, StrategicState


class TestClaimQueue:
    """Tests for claim queue ranking"""

    def test_descending_by_expand(self, queue_builder, make_record):
        """Test rooms rank by expand signal, highest first"""
        rooms = {
            "A": make_record("A", expand=10.0),
            "B": make_record("B", expand=40.0),
            "C": make_record("C", expand=25.0),
        }
        assert queue_builder.build_claim_queue(rooms) == ["B", "C", "A"]

    def test_threshold_filters(self, queue_builder, make_record):
        """Test rooms below the minimum expand signal are excluded"""
        rooms = {"A": make_record("A", expand=4.9), "B": make_record("B", expand=5.0)}
        assert queue_builder.build_claim_queue(rooms) == ["B"]

    def test_ties_keep_iteration_order(self, queue_builder, make_record):
        """Test equal scores are stable"""
        rooms = {
            "X": make_record("X", expand=20.0),
            "Y": make_record("Y", expand=20.0),
        }
        assert queue_builder.build_claim_queue(rooms) == ["X", "Y"]

    def test_bounded(self, small_config, make_record):
        """Test the queue is truncated to its maximum length"""
        builder = StrategicQueueBuilder(small_config.overmind)
        rooms = {f"R{i}": make_record(f"R{i}", expand=10.0 + i) for i in range(6)}
        assert builder.build_claim_queue(rooms) == ["R5", "R4", "R3"]

    def test_expansion_paused(self, queue_builder, make_record):
        """Test paused expansion empties the claim queue"""
        rooms = {"A": make_record("A", expand=80.0)}
        objectives = StrategicObjectives(expansion_paused=True)
        assert queue_builder.build_claim_queue(rooms, objectives) == []


class TestWarTargets:
    """Tests for war target ranking"""

    def test_posture_or_signal(self, queue_builder, make_record):
        """Test war posture or war signal above threshold qualifies"""
        rooms = {
            "A": make_record("A", posture=Posture.WAR, war=5.0),
            "B": make_record("B", war=35.0),
            "C": make_record("C", war=20.0),
        }
        assert queue_builder.build_war_targets(rooms) == ["B", "A"]

    def test_war_mode_halves_threshold(self, queue_builder, make_record):
        """Test war mode lowers the war signal threshold"""
        rooms = {"C": make_record("C", war=15.0)}
        assert queue_builder.build_war_targets(rooms) == []
        objectives = StrategicObjectives(war_mode=True)
        assert queue_builder.build_war_targets(rooms, objectives) == ["C"]


class TestStrikeCandidates:
    """Tests for strike scoring"""

    def test_score_formula(self, queue_builder, make_record):
        """Test maturity + structures + war - distance weighting"""
        intel = RoomIntel("E1", controller_level=6, hostile_owner=True,
                          hostile_structures=10, distance=2)
        record = make_record("E1", war=40.0)
        # 6*10 + 50*0.5 + 40*0.5 - 2*5
        assert queue_builder.score_strike_target(intel, record) == pytest.approx(95.0)

    def test_structure_signal_capped(self, queue_builder):
        """Test hostile structure signal saturates at 100"""
        intel = RoomIntel("E1", hostile_structures=500)
        assert queue_builder.hostile_structure_signal(intel) == 100.0

    def test_distance_is_penalty_only(self, queue_builder):
        """Test a distant but valuable room still qualifies"""
        intel = {
            "Far": RoomIntel("Far", controller_level=8, hostile_owner=True,
                             hostile_structures=20, distance=6),
        }
        # 80 + 50 - 30 = 100
        assert queue_builder.build_strike_candidates({}, intel) == ["Far"]

    def test_filters_and_orders(self, queue_builder):
        """Test minimum score, hostile ownership and ranking"""
        intel = {
            "Weak": RoomIntel("Weak", controller_level=2, hostile_owner=True),
            "Ally": RoomIntel("Ally", controller_level=8, hostile_owner=False),
            "Mid": RoomIntel("Mid", controller_level=4, hostile_owner=True),
            "Big": RoomIntel("Big", controller_level=7, hostile_owner=True),
        }
        assert queue_builder.build_strike_candidates({}, intel) == ["Big", "Mid"]


class TestRebuild:
    """Tests for full queue rebuilds"""

    def test_returns_new_state(self, queue_builder, make_record):
        """Test every rebuild is a fresh StrategicState"""
        rooms = {"A": make_record("A", expand=40.0, last_updated=90)}
        previous = StrategicState(claim_queue=["stale"])
        state = queue_builder.rebuild(rooms, tick=100, objectives=previous.objectives)
        assert state is not previous
        assert state.claim_queue == ["A"]
        assert state.last_rebuilt == 100
        assert previous.claim_queue == ["stale"]

    def test_objectives_carried(self, queue_builder):
        """Test objectives are copied across rebuilds"""
        objectives = StrategicObjectives(war_mode=True)
        state = queue_builder.rebuild({}, tick=1, objectives=objectives)
        assert state.objectives.war_mode is True
        assert state.objectives is not objectives

    def test_rooms_seen_merges_intel(self, queue_builder, make_record):
        """Test rooms_seen takes the latest of record and intel ticks"""
        rooms = {"A": make_record("A", last_updated=50)}
        intel = {
            "A": RoomIntel("A", last_seen=70),
            "E": RoomIntel("E", last_seen=30),
        }
        state = queue_builder.rebuild(rooms, tick=80, intel=intel)
        assert state.rooms_seen == {"A": 70, "E": 30}

    def test_custom_config(self, make_record):
        """Test weights come from configuration"""
        builder = StrategicQueueBuilder(OvermindConfig(claim_min_signal=50.0))
        rooms = {"A": make_record("A", expand=40.0)}
        assert builder.rebuild(rooms, tick=1).claim_queue == []
