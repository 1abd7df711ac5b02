#!/usr/bin/env python3
"""
change_detection.py
- Watches config.yml and nic.json for changes.
- Reloads rebalance settings when either file is modified.
- Includes debouncing to avoid rapid repeated reloads.
"""

import time
from pathlib import Path
from threading import Lock

from loguru import logger
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from routing_flow.core.config import CONFIG_PATH, NIC_CONFIG_PATH
from routing_flow.core.constants import DEBOUNCE_TIME
from routing_flow.runner import rebalance


def default_watched_files(config_path=CONFIG_PATH, nic_config_path=NIC_CONFIG_PATH):
    reload = lambda: rebalance.reload_settings(config_path, nic_config_path)
    return {
        Path(config_path).resolve(): reload,
        Path(nic_config_path).resolve(): reload,
    }


class ConfigChangeHandler(FileSystemEventHandler):
    def __init__(self, watched_files, debounce_seconds=DEBOUNCE_TIME, clock=time.time):
        super().__init__()
        self.watched_files = watched_files
        self.debounce_seconds = debounce_seconds
        self.clock = clock
        self.debounce_tracker = {}
        self.debounce_lock = Lock()

    def on_modified(self, event):
        path = Path(event.src_path).resolve()
        if path not in self.watched_files:
            return

        now = self.clock()
        with self.debounce_lock:
            last_trigger = self.debounce_tracker.get(path, 0)
            if now - last_trigger < self.debounce_seconds:
                logger.debug(f"[watcher] Debounced {path.name} (last trigger {now - last_trigger:.2f}s ago)")
                return
            self.debounce_tracker[path] = now

        logger.info(f"[watcher] Detected change in {path.name}, triggering handler.")
        try:
            self.watched_files[path]()
        except Exception as e:
            logger.error(f"[watcher] Failed to handle {path.name}: {e}")

    on_created = on_modified


def run(watched_files=None):
    watched_files = watched_files or default_watched_files()
    observer = Observer()
    handler = ConfigChangeHandler(watched_files)
    for directory in {p.parent for p in watched_files}:
        if directory.is_dir():
            observer.schedule(handler, str(directory), recursive=False)
        else:
            logger.warning(f"[watcher] Config directory {directory} not found, not watching it")
    observer.start()
    logger.info("[watcher] Watching config files for changes...")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        observer.stop()
    observer.join()
