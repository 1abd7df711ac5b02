#!/usr/bin/env python3
"""
rebalance.py
- Entrypoint loop for bandwidth-aware uplink rebalancing.
- Builds the Prometheus / status / actuator adapters from config.yml, runs one
  tick per interval, and exposes loop counters for the /metrics endpoint.
- Can be run via main.py, the CLI, or directly.
"""

import asyncio
from time import time

from loguru import logger

from routing_flow.core.config import CONFIG_PATH, DRY_RUN, NIC_CONFIG_PATH, RUN_ONCE
from routing_flow.core.config_loader import load_settings
from routing_flow.core.cooldown_state import CooldownTracker
from routing_flow.core.errors import ConfigurationInconsistency
from routing_flow.lib.actuator.routing_actuator import RoutingActuator
from routing_flow.lib.common.report import log_tick_report
from routing_flow.lib.metrics.prometheus_client import PrometheusClient
from routing_flow.lib.rebalance.orchestrator import Rebalancer
from routing_flow.lib.topology.status_client import StatusClient

# --- Metrics ---
rebalance_ticks_total = 0
rebalance_skipped_ticks_total = 0
rebalance_tick_errors_total = 0
rebalance_moves_total = 0
rebalance_failures_total = 0
rebalance_overloaded_interfaces = 0
rebalance_last_duration_seconds = 0.0

# --- Process-lifetime State ---
cooldown = CooldownTracker()
settings = None
last_report = None
_rebalancer = None


def build_rebalancer(cfg, cooldown_tracker, dry_run=False):
    """Wire the HTTP adapters described by Settings into a Rebalancer."""
    metrics_source = PrometheusClient(
        cfg.prometheus_url,
        capacity_metric=cfg.capacity_metric,
        rx_metric=cfg.rx_metric,
        tx_metric=cfg.tx_metric,
        usage_selector=cfg.usage_selector,
        timeout=cfg.request_timeout_seconds,
    )
    topology_source = StatusClient(
        cfg.status_url,
        cfg.uplinks,
        nic_config=cfg.nic_config,
        timeout=cfg.request_timeout_seconds,
    )
    actuator = RoutingActuator(cfg.actuator_url, timeout=cfg.request_timeout_seconds)
    return Rebalancer(
        topology_source,
        metrics_source,
        actuator,
        default_uplink=cfg.default_uplink,
        cooldown=cooldown_tracker,
        dry_run=dry_run,
    )


def reload_settings(config_path=CONFIG_PATH, nic_config_path=NIC_CONFIG_PATH):
    """
    Re-read config.yml and nic.json. The adapters are rebuilt on the next tick.
    An invalid file leaves the running settings untouched.
    """
    global settings, _rebalancer
    try:
        new_settings = load_settings(config_path, nic_config_path)
    except ConfigurationInconsistency as e:
        logger.error(f"[rebalance] Keeping previous settings, new config rejected: {e}")
        return False
    settings = new_settings
    _rebalancer = None
    logger.info(f"[rebalance] Settings loaded: uplinks={list(settings.uplinks)}, "
                f"default={settings.default_uplink}, interval={settings.tick_interval_seconds}s")
    return True


def get_rebalancer(dry_run=DRY_RUN):
    global _rebalancer
    if settings is None:
        raise ConfigurationInconsistency("Settings have not been loaded")
    if _rebalancer is None or _rebalancer.dry_run != dry_run:
        _rebalancer = build_rebalancer(settings, cooldown, dry_run=dry_run)
    return _rebalancer


def record_tick(report):
    """Fold a TickReport into the loop counters and publish it as the latest report."""
    global last_report, rebalance_ticks_total, rebalance_skipped_ticks_total
    global rebalance_moves_total, rebalance_failures_total
    global rebalance_overloaded_interfaces, rebalance_last_duration_seconds

    rebalance_ticks_total += 1
    if report.skipped:
        rebalance_skipped_ticks_total += 1
    rebalance_moves_total += len(report.moves)
    rebalance_failures_total += len(report.failures)
    rebalance_overloaded_interfaces = len(report.overloaded)
    rebalance_last_duration_seconds = report.duration_seconds
    last_report = report
    log_tick_report(report)


async def run_rebalance_loop(dry_run=DRY_RUN, run_once=RUN_ONCE):
    """
    Run ticks forever (or once). Ticks execute in a worker thread so the HTTP API
    stays responsive; the loop awaits each tick, so ticks never overlap.
    """
    global rebalance_tick_errors_total

    if settings is None and not reload_settings():
        raise ConfigurationInconsistency(f"Invalid configuration in {CONFIG_PATH}")

    if dry_run:
        logger.info("[rebalance] Dry-run mode: no flows will be moved.")

    while True:
        logger.debug("[rebalance] Checking bandwidth for rebalancing decisions...")
        try:
            rebalancer = get_rebalancer(dry_run=dry_run)
            report = await asyncio.to_thread(rebalancer.run_one_tick, time())
            record_tick(report)
        except Exception as e:
            rebalance_tick_errors_total += 1
            logger.exception(f"[rebalance] Unexpected error during tick: {e}")

        if run_once:
            return last_report
        await asyncio.sleep(settings.tick_interval_seconds)


async def run():
    """
    Start the bandwidth rebalance loop asynchronously.
    """
    await run_rebalance_loop()


if __name__ == "__main__":
    asyncio.run(run())
