#!/usr/bin/env python3
"""
rebalance_decision.py
- Encapsulates the decision logic for bandwidth-aware uplink rebalancing:
    - overload detection per interface
    - selection of the single dominant flow to move
    - selection of the alternate interface / uplink to receive it
"""

from loguru import logger

# --- Overload Detection ---

def is_overloaded(stats):
    """Actual RX+TX strictly above estimated capacity. Equality is not overload."""
    return (stats.actual_rx_bps + stats.actual_tx_bps) > stats.estimated_capacity_bps

# --- Flow Selection ---

def select_flow(stats, cooldown, now):
    """
    Pick the highest-RX flow on an interface that is not in cooldown.

    Ties on RX break by flow id ascending.

    Returns:
        tuple[str, float] or None: (flow, rx_bps), or None when every flow is
        suppressed or the interface has no per-flow RX samples.
    """
    for flow, rx in sorted(stats.flows, key=lambda f: (-f[1], f[0])):
        if cooldown.is_suppressed(flow, now):
            logger.debug(f"[rebalance] {flow} on {stats.interface} is in cooldown, skipping")
            continue
        return flow, rx
    return None


def top_tx_flow(stats):
    """Highest-TX flow on an interface, ties by flow id. Reporting only, cooldown is ignored."""
    if not stats.tx_flows:
        return None
    return min(stats.tx_flows, key=lambda f: (-f[1], f[0]))

# --- Target Selection ---

def pick_target(current_interface, stats_by_interface):
    """
    Choose the alternate interface with the highest estimated capacity.

    Ties break by interface id ascending. Estimated capacity, not spare capacity,
    is compared, so a busy interface can still be chosen.

    Returns:
        str or None: Target interface, or None if no alternate interface exists.
    """
    alternates = [s for iface, s in stats_by_interface.items() if iface != current_interface]
    if not alternates:
        return None
    best = min(alternates, key=lambda s: (-s.estimated_capacity_bps, s.interface))
    return best.interface


def uplink_for_target(target_interface, topology, default_uplink):
    """
    Map a target interface back to the logical uplink the actuator understands.

    Falls back to the default uplink when no uplink is backed by the interface,
    so that a config mismatch still yields a move instead of a failed cycle.
    """
    uplink = topology.uplink_for_interface(target_interface)
    if uplink is None:
        logger.warning(
            f"[rebalance] No uplink is backed by {target_interface}; "
            f"falling back to default uplink {default_uplink}"
        )
        return default_uplink
    return uplink
