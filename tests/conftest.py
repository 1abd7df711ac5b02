import pytest

from routing_flow.core.cooldown_state import CooldownTracker
from routing_flow.core.errors import ActuationError
from routing_flow.lib.rebalance.models import RX, TX, UsageSample
from routing_flow.lib.topology.topology_resolver import Topology


class FakeTopologySource:
    def __init__(self, topology=None, error=None):
        self.topology = topology
        self.error = error
        self.calls = 0

    def fetch_topology(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.topology


class FakeMetricsSource:
    def __init__(self, capacity=None, usage=None, capacity_error=None, usage_error=None):
        self.capacity = capacity or {}
        self.usage = usage or []
        self.capacity_error = capacity_error
        self.usage_error = usage_error

    def fetch_capacity(self):
        if self.capacity_error is not None:
            raise self.capacity_error
        return dict(self.capacity)

    def fetch_usage(self):
        if self.usage_error is not None:
            raise self.usage_error
        return list(self.usage)


class FakeActuator:
    def __init__(self, fail_with=None):
        self.fail_with = fail_with
        self.calls = []

    def assign(self, flow, uplink):
        self.calls.append((flow, uplink))
        if self.fail_with is not None:
            raise ActuationError(flow, uplink, self.fail_with)


def usage(flow, rx=0.0, tx=0.0):
    samples = []
    if rx:
        samples.append(UsageSample(flow=flow, direction=RX, bps=rx))
    if tx:
        samples.append(UsageSample(flow=flow, direction=TX, bps=tx))
    return samples


@pytest.fixture
def two_uplinks():
    """
    Interface A (wan0) carries 10.0.0.1 and 10.0.0.2, interface B (wan1) carries 10.0.0.9.
    """
    return Topology(
        flow_to_uplink={"10.0.0.1": "wan0", "10.0.0.2": "wan0", "10.0.0.9": "wan1"},
        uplink_to_interface={"wan0": "A", "wan1": "B"},
    )


@pytest.fixture
def overloaded_a_usage():
    # A: rx=60 tx=50 against capacity 100; B: rx=10 tx=10 against capacity 200
    return (
        usage("10.0.0.1", rx=40, tx=30)
        + usage("10.0.0.2", rx=20, tx=20)
        + usage("10.0.0.9", rx=10, tx=10)
    )


@pytest.fixture
def cooldown():
    return CooldownTracker()
