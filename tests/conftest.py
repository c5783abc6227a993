"""
Pytest configuration and shared fixtures for SwarmMind tests.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


@pytest.fixture
def swarm_config():
    """Default swarm configuration"""
    from swarmmind.config import create_default_config
    return create_default_config()


@pytest.fixture
def small_config():
    """Short queues and a tiny event log"""
    from swarmmind.config import create_small_test_config
    return create_small_test_config()


@pytest.fixture
def signal_field(swarm_config):
    """Signal field with default dynamics"""
    from swarmmind.pheromone import SignalField
    return SignalField(swarm_config.signal, swarm_config.emission)


@pytest.fixture
def threat_classifier(swarm_config):
    """Threat classifier with default bands"""
    from swarmmind.threat import ThreatClassifier
    return ThreatClassifier(swarm_config.threat)


@pytest.fixture
def posture_controller(swarm_config):
    """Posture controller with default thresholds"""
    from swarmmind.posture import PostureController
    return PostureController(swarm_config.posture)


@pytest.fixture
def queue_builder(swarm_config):
    """Strategic queue builder with default weights"""
    from swarmmind.overmind import StrategicQueueBuilder
    return StrategicQueueBuilder(swarm_config.overmind)


@pytest.fixture
def make_record():
    """Factory for room records with chosen signals"""
    from swarmmind.pheromone import SignalVector
    from swarmmind.state import RoomRecord

    def _make(name, danger=0, posture=None, last_updated=0, **signals):
        record = RoomRecord.create(name)
        record.danger = danger
        if posture is not None:
            record.posture = posture
        record.signals = SignalVector.from_dict(signals)
        record.last_updated = last_updated
        return record

    return _make


@pytest.fixture
def swarm_cycle(swarm_config):
    """Full cycle with default configuration"""
    from swarmmind.cycle import SwarmCycle
    return SwarmCycle(swarm_config)
