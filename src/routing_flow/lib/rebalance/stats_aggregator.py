"""
stats_aggregator.py
- Combines estimated capacity (measured per interface) and actual usage (measured
  per flow) into one immutable InterfaceStats record per physical interface.
- Pure: no I/O, no shared state between ticks.
"""

import math
from collections import defaultdict

from routing_flow.lib.rebalance.models import RX, TX, InterfaceStats


def coerce_capacity(value):
    """
    Convert a raw capacity sample to bps.

    Missing, non-numeric and NaN values become 0.0 on purpose: an interface with
    unknown capacity is treated as overloaded as soon as it carries traffic.
    """
    try:
        bps = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(bps):
        return 0.0
    return bps


def aggregate_interface_stats(capacity, usage, topology):
    """
    Build the per-interface stats snapshot for one tick.

    Args:
        capacity (dict[str, float | None]): Estimated capacity keyed by physical interface.
        usage (list[UsageSample]): Per-flow RX/TX samples.
        topology (Topology): flow -> uplink -> interface tables for this tick.

    Returns:
        dict[str, InterfaceStats]: One entry per interface that has at least one
        capacity or resolvable usage sample.
    """
    rx_totals = defaultdict(float)
    tx_totals = defaultdict(float)
    flows = defaultdict(list)
    tx_flows = defaultdict(list)
    seen = set()

    for sample in usage:
        interface = topology.resolve_interface(sample.flow)
        if interface is None:
            continue
        seen.add(interface)
        if sample.direction == RX:
            rx_totals[interface] += sample.bps
            flows[interface].append((sample.flow, sample.bps))
        elif sample.direction == TX:
            tx_totals[interface] += sample.bps
            tx_flows[interface].append((sample.flow, sample.bps))

    seen.update(capacity.keys())

    return {
        interface: InterfaceStats(
            interface=interface,
            estimated_capacity_bps=coerce_capacity(capacity.get(interface)),
            actual_rx_bps=rx_totals.get(interface, 0.0),
            actual_tx_bps=tx_totals.get(interface, 0.0),
            flows=tuple(flows.get(interface, ())),
            tx_flows=tuple(tx_flows.get(interface, ())),
        )
        for interface in seen
    }
