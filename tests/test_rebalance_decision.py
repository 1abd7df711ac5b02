import pytest

from routing_flow.lib.rebalance.models import InterfaceStats
from routing_flow.lib.rebalance.rebalance_decision import (
    is_overloaded,
    pick_target,
    select_flow,
    top_tx_flow,
    uplink_for_target,
)
from routing_flow.lib.topology.topology_resolver import Topology


def stats(interface="A", capacity=100.0, rx=0.0, tx=0.0, flows=(), tx_flows=()):
    return InterfaceStats(
        interface=interface,
        estimated_capacity_bps=capacity,
        actual_rx_bps=rx,
        actual_tx_bps=tx,
        flows=tuple(flows),
        tx_flows=tuple(tx_flows),
    )


# --- Overload Detection ---

@pytest.mark.parametrize("capacity,rx,tx", [(100.0, 60.0, 40.0), (0.0, 0.0, 0.0), (1e9, 5e8, 5e8)])
def test_usage_equal_to_capacity_is_not_overloaded(capacity, rx, tx):
    assert not is_overloaded(stats(capacity=capacity, rx=rx, tx=tx))


@pytest.mark.parametrize("capacity,rx,tx", [(100.0, 60.0, 50.0), (100.0, 100.5, 0.0), (0.0, 0.0, 1.0)])
def test_usage_above_capacity_is_overloaded(capacity, rx, tx):
    assert is_overloaded(stats(capacity=capacity, rx=rx, tx=tx))


def test_zero_capacity_with_traffic_is_overloaded():
    assert is_overloaded(stats(capacity=0.0, rx=1.0))


# --- Flow Selection ---

def test_selects_highest_rx_flow(cooldown):
    s = stats(flows=[("10.0.0.2", 20.0), ("10.0.0.1", 40.0), ("10.0.0.3", 5.0)])
    assert select_flow(s, cooldown, now=1000.0) == ("10.0.0.1", 40.0)


def test_equal_rx_breaks_ties_by_flow_id(cooldown):
    s = stats(flows=[("10.0.0.7", 30.0), ("10.0.0.3", 30.0), ("10.0.0.5", 30.0)])
    assert select_flow(s, cooldown, now=1000.0) == ("10.0.0.3", 30.0)


def test_skips_flows_in_cooldown(cooldown):
    cooldown.record("10.0.0.1", "wan1", now=990.0)
    s = stats(flows=[("10.0.0.1", 40.0), ("10.0.0.2", 20.0)])

    assert select_flow(s, cooldown, now=1000.0) == ("10.0.0.2", 20.0)


def test_no_candidate_when_all_flows_suppressed(cooldown):
    cooldown.record("10.0.0.1", "wan1", now=990.0)
    cooldown.record("10.0.0.2", "wan1", now=995.0)
    s = stats(flows=[("10.0.0.1", 40.0), ("10.0.0.2", 20.0)])

    assert select_flow(s, cooldown, now=1000.0) is None


def test_no_candidate_without_flows(cooldown):
    assert select_flow(stats(rx=0.0, tx=500.0), cooldown, now=1000.0) is None


def test_never_returns_a_suppressed_flow(cooldown):
    flows = [(f"10.0.0.{i}", float(i % 4)) for i in range(1, 20)]
    for flow, _ in flows[::2]:
        cooldown.record(flow, "wan1", now=1000.0)

    chosen = select_flow(stats(flows=flows), cooldown, now=1010.0)

    assert chosen is not None
    assert not cooldown.is_suppressed(chosen[0], 1010.0)


def test_top_tx_flow_breaks_ties_by_flow_id():
    s = stats(tx_flows=[("10.0.0.9", 30.0), ("10.0.0.3", 30.0), ("10.0.0.1", 5.0)])
    assert top_tx_flow(s) == ("10.0.0.3", 30.0)


def test_top_tx_flow_without_tx_samples():
    assert top_tx_flow(stats(flows=[("10.0.0.1", 40.0)])) is None


# --- Target Selection ---

def test_picks_only_alternate_interface():
    by_iface = {"A": stats("A", 100.0), "B": stats("B", 200.0)}
    assert pick_target("A", by_iface) == "B"


def test_picks_highest_estimated_capacity_even_if_busy():
    by_iface = {
        "A": stats("A", 100.0, rx=500.0),
        "B": stats("B", 300.0, rx=290.0),
        "C": stats("C", 200.0),
    }
    assert pick_target("A", by_iface) == "B"


def test_equal_capacity_breaks_ties_by_interface_id():
    by_iface = {"A": stats("A", 10.0), "D": stats("D", 50.0), "C": stats("C", 50.0)}
    assert pick_target("A", by_iface) == "C"


def test_never_returns_current_interface():
    by_iface = {"A": stats("A", 1e9), "B": stats("B", 1.0)}
    assert pick_target("A", by_iface) == "B"


def test_no_target_in_single_interface_topology():
    assert pick_target("A", {"A": stats("A", 100.0)}) is None


def test_target_interface_maps_back_to_uplink():
    topology = Topology(uplink_to_interface={"wan0": "eth0", "wan1": "eth1"})
    assert uplink_for_target("eth1", topology, default_uplink="wan0") == "wan1"


def test_unmapped_target_interface_falls_back_to_default_uplink():
    topology = Topology(uplink_to_interface={"wan0": "eth0", "wan1": "eth1"})
    assert uplink_for_target("eth9", topology, default_uplink="wan0") == "wan0"
