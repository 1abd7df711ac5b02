"""
orchestrator.py
- Runs one rebalance tick: fetch topology and metrics, aggregate, detect
  overload, then select / target / actuate once per overloaded interface.
- Owns the cooldown tracker; collaborators are passed in so they can be swapped.
"""

from time import monotonic

from loguru import logger

from routing_flow.core.cooldown_state import CooldownTracker
from routing_flow.core.errors import ActuationError, MetricsFetchError, TopologyFetchError
from routing_flow.lib.rebalance import models
from routing_flow.lib.rebalance.rebalance_decision import (
    is_overloaded,
    pick_target,
    select_flow,
    top_tx_flow,
    uplink_for_target,
)
from routing_flow.lib.rebalance.stats_aggregator import aggregate_interface_stats


class Rebalancer:
    """
    Args:
        topology_source: object with fetch_topology() -> Topology
        metrics_source: object with fetch_capacity() and fetch_usage()
        actuator: object with assign(flow, uplink), raising ActuationError on failure
        default_uplink (str): Uplink used when a target interface has no uplink.
        cooldown (CooldownTracker): Shared anti-flap state; created if omitted.
        dry_run (bool): Report decisions without calling the actuator.
    """

    def __init__(self, topology_source, metrics_source, actuator, default_uplink,
                 cooldown=None, dry_run=False):
        self.topology_source = topology_source
        self.metrics_source = metrics_source
        self.actuator = actuator
        self.default_uplink = default_uplink
        self.cooldown = cooldown if cooldown is not None else CooldownTracker()
        self.dry_run = dry_run
        self.last_topology = None

    def _fetch_capacity(self):
        try:
            return self.metrics_source.fetch_capacity()
        except MetricsFetchError as e:
            logger.warning(f"[rebalance] Capacity unavailable, treating all capacities as 0: {e}")
            return {}

    def _fetch_usage(self):
        try:
            return self.metrics_source.fetch_usage()
        except MetricsFetchError as e:
            logger.warning(f"[rebalance] Usage unavailable, treating all interfaces as idle: {e}")
            return []

    def run_one_tick(self, now):
        """
        Execute a single rebalance cycle at timestamp `now`.

        Returns:
            TickReport: Per-interface overload state, candidate, target and outcome.
        """
        started = monotonic()
        report = models.TickReport(now=now)

        try:
            topology = self.topology_source.fetch_topology()
        except TopologyFetchError as e:
            logger.error(f"[rebalance] Skipping tick, topology unavailable: {e}")
            report.skipped = True
            report.error = str(e)
            self.cooldown.evict_expired(now)
            report.duration_seconds = monotonic() - started
            return report
        self.last_topology = topology

        capacity = self._fetch_capacity()
        usage = self._fetch_usage()
        stats_by_interface = aggregate_interface_stats(capacity, usage, topology)

        for interface in sorted(stats_by_interface):
            stats = stats_by_interface[interface]
            report.interfaces.append(self._handle_interface(stats, stats_by_interface, topology, now))

        self.cooldown.evict_expired(now)
        report.duration_seconds = monotonic() - started
        return report

    def _handle_interface(self, stats, stats_by_interface, topology, now):
        entry = models.InterfaceReport(
            interface=stats.interface,
            estimated_capacity_bps=stats.estimated_capacity_bps,
            actual_rx_bps=stats.actual_rx_bps,
            actual_tx_bps=stats.actual_tx_bps,
            overloaded=is_overloaded(stats),
            outcome=models.NOT_OVERLOADED,
        )
        if not entry.overloaded:
            return entry

        logger.info(
            f"[rebalance] {stats.interface} overloaded: "
            f"{stats.actual_total_bps:.2f} bps > {stats.estimated_capacity_bps:.2f} bps"
        )
        top_tx = top_tx_flow(stats)
        if top_tx is not None:
            entry.top_tx_flow, entry.top_tx_bps = top_tx

        candidate = select_flow(stats, self.cooldown, now)
        if candidate is None:
            entry.outcome = models.NO_CANDIDATE
            logger.info(f"[rebalance] No eligible flow to move on {stats.interface}")
            return entry
        entry.candidate, entry.candidate_rx_bps = candidate

        target_interface = pick_target(stats.interface, stats_by_interface)
        if target_interface is None:
            entry.outcome = models.NO_TARGET
            logger.info(f"[rebalance] No alternate interface for {entry.candidate} on {stats.interface}")
            return entry
        target_uplink = uplink_for_target(target_interface, topology, self.default_uplink)
        if target_uplink == topology.uplink_for_flow(entry.candidate):
            entry.outcome = models.NO_TARGET
            logger.info(
                f"[rebalance] {target_interface} resolves to {target_uplink}, which already carries "
                f"{entry.candidate}; nothing to move"
            )
            return entry
        entry.target_interface = target_interface
        entry.target_uplink = target_uplink

        if self.dry_run:
            entry.outcome = models.DRY_RUN
            logger.info(f"[rebalance] (dry-run) Would move {entry.candidate}: {stats.interface} -> {target_interface} ({entry.target_uplink})")
            return entry

        try:
            self.actuator.assign(entry.candidate, entry.target_uplink)
        except ActuationError as e:
            entry.outcome = models.FAILED
            entry.reason = e.reason
            logger.error(f"[rebalance] {e}")
            return entry

        self.cooldown.record(entry.candidate, entry.target_uplink, now)
        entry.outcome = models.MOVED
        logger.warning(f"[rebalance] Moved {entry.candidate}: {stats.interface} -> {target_interface} ({entry.target_uplink})")
        return entry
