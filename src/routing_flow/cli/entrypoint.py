#!/usr/bin/env python3
"""
entrypoint.py
- Manual entrypoint for routing-flow tasks.
- Usage:
    routing-flow run [--dry-run] [--debug]     Run the full service (loop + API + watcher)
    routing-flow once [--dry-run] [--debug]    Run a single tick and print its report
    routing-flow status [--debug]              Print the current uplink topology
"""

import argparse
import asyncio
import signal
import sys

from routing_flow.core import config
from routing_flow.core.config import configure_logging
from routing_flow.core.errors import TopologyFetchError
from routing_flow.lib.common.report import format_tick_report, format_topology
from routing_flow.lib.topology.status_client import StatusClient
from routing_flow.runner import rebalance


def handle_exit(signum, frame):
    print("Received shutdown signal. Exiting...")
    sys.exit(0)


def build_parser():
    parser = argparse.ArgumentParser(prog="routing-flow", description="Uplink flow rebalancer")
    parser.add_argument("command", choices=["run", "once", "status"])
    parser.add_argument("--dry-run", action="store_true", help="Report intended moves without applying them")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--config", default=config.CONFIG_PATH, help="Path to config.yml")
    parser.add_argument("--nic-config", default=config.NIC_CONFIG_PATH, help="Path to nic.json")
    return parser


def cmd_once(args):
    if not rebalance.reload_settings(args.config, args.nic_config):
        return 1
    report = asyncio.run(rebalance.run_rebalance_loop(dry_run=args.dry_run, run_once=True))
    if report is None:
        print("Tick failed; see log output.")
        return 1
    rebalancer = rebalance.get_rebalancer(dry_run=args.dry_run)
    topology = rebalancer.last_topology
    print(format_tick_report(
        report,
        cooldown=rebalance.cooldown,
        uplink_to_interface=topology.uplink_to_interface if topology else None,
    ))
    return 1 if report.skipped else 0


def cmd_status(args):
    if not rebalance.reload_settings(args.config, args.nic_config):
        return 1
    cfg = rebalance.settings
    client = StatusClient(cfg.status_url, cfg.uplinks, nic_config=cfg.nic_config,
                          timeout=cfg.request_timeout_seconds)
    try:
        payload = client.fetch_status()
        topology = client.topology_from_status(payload)
    except TopologyFetchError as e:
        print(f"Failed to fetch topology: {e}")
        return 1
    lan = (payload.get("config") or {}).get("lan") or cfg.nic_config.get("lan")
    print(format_topology(topology, lan=lan))
    return 0


def main(argv=None):
    signal.signal(signal.SIGINT, handle_exit)
    signal.signal(signal.SIGTERM, handle_exit)

    args = build_parser().parse_args(argv)
    configure_logging("DEBUG" if args.debug or config.DEBUG else None)
    dry_run = args.dry_run or config.DRY_RUN
    args.dry_run = dry_run

    if args.command == "run":
        from routing_flow import main as service

        service.run(args.config, args.nic_config, dry_run=dry_run)
        return 0
    if args.command == "once":
        return cmd_once(args)
    return cmd_status(args)


if __name__ == "__main__":
    sys.exit(main())
