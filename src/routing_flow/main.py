#!/usr/bin/env python3
"""
main.py
- Main asynchronous entrypoint for the routing-flow service.
- Launches:
    - HTTP API (health, metrics, last report, cooldowns) in a background thread
    - Config file watcher in a background thread
    - Rebalance loop: bandwidth-aware flow redistribution across uplinks
"""

import asyncio
from threading import Thread

import sentry_sdk
import uvicorn
from loguru import logger

from routing_flow.api import api
from routing_flow.core.config import (
    API_HOST,
    API_PORT,
    CONFIG_PATH,
    DRY_RUN,
    NIC_CONFIG_PATH,
    SENTRY_DSN,
    configure_logging,
)
from routing_flow.core.config_loader import preview_yaml
from routing_flow.runner import change_detection, rebalance


def init_sentry():
    if SENTRY_DSN:
        sentry_sdk.init(dsn=SENTRY_DSN, traces_sample_rate=1.0)
        logger.info("[routing-flow] Sentry error reporting enabled.")


def start_api():
    uvicorn.run(api, host=API_HOST, port=API_PORT, log_level="warning")


async def main(dry_run=DRY_RUN):
    try:
        await rebalance.run_rebalance_loop(dry_run=dry_run, run_once=False)
    except asyncio.CancelledError:
        logger.info("[routing-flow] Shutting down rebalance loop cleanly...")


def run(config_path=CONFIG_PATH, nic_config_path=NIC_CONFIG_PATH, dry_run=DRY_RUN):
    init_sentry()
    preview_yaml(config_path, name="config.yml")

    if not rebalance.reload_settings(config_path, nic_config_path):
        raise SystemExit(1)

    watched = change_detection.default_watched_files(config_path, nic_config_path)
    Thread(target=start_api, daemon=True, name="api").start()
    Thread(target=change_detection.run, args=(watched,), daemon=True, name="watcher").start()

    try:
        asyncio.run(main(dry_run=dry_run))
    except KeyboardInterrupt:
        logger.info("[routing-flow] KeyboardInterrupt received. Exiting.")


if __name__ == "__main__":
    configure_logging()
    run()
