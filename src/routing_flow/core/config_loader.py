"""
config_loader.py
- Loads and previews the configuration files used by routing-flow.
- Supports config.yml (loop settings, endpoints, metric names) and nic.json
  (uplink -> physical interface table).
"""

import json
import os
from dataclasses import dataclass, field

import yaml
from loguru import logger

from routing_flow.core import constants
from routing_flow.core.errors import ConfigurationInconsistency


@dataclass(frozen=True)
class Settings:
    prometheus_url: str = constants.DEFAULT_PROMETHEUS_URL
    status_url: str = constants.DEFAULT_STATUS_URL
    actuator_url: str = constants.DEFAULT_ACTUATOR_URL
    uplinks: tuple = tuple(constants.DEFAULT_UPLINKS)
    default_uplink: str = constants.DEFAULT_UPLINK
    tick_interval_seconds: float = constants.DEFAULT_TICK_INTERVAL_SECONDS
    request_timeout_seconds: float = constants.DEFAULT_REQUEST_TIMEOUT_SECONDS
    capacity_metric: str = constants.CAPACITY_METRIC
    rx_metric: str = constants.RX_METRIC
    tx_metric: str = constants.TX_METRIC
    usage_selector: str = ""
    nic_config: dict = field(default_factory=dict)


def load_yaml(path):
    """Safely load a YAML file and return a parsed dict. Returns {} on failure."""
    try:
        with open(path, "r") as f:
            return yaml.safe_load(f) or {}
    except Exception as e:
        logger.error(f"[config] Failed to load {path}: {e}")
        return {}


def load_nic_config(path):
    """
    Load the uplink -> NIC table from nic.json.

    Args:
        path (str): Path to a JSON object such as {"lan": "br0", "wan0": "eth0", "wan1": "eth1"}.

    Returns:
        dict[str, str]: Parsed table, or {} if the file is missing or malformed.
    """
    if not os.path.exists(path):
        logger.warning(f"[config] NIC table not found: {path}")
        return {}
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"[config] Failed to parse {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.error(f"[config] {path} must contain a JSON object, got {type(data).__name__}")
        return {}
    return {str(k): str(v) for k, v in data.items() if v}


def _text(raw, key, default, path):
    value = raw.get(key, default)
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationInconsistency(f"{path}: {key} must be a non-empty string, got {value!r}")
    return value.strip()


def _seconds(raw, key, default, path):
    value = raw.get(key, default)
    if isinstance(value, bool):
        raise ConfigurationInconsistency(f"{path}: {key} must be a number of seconds, got {value!r}")
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise ConfigurationInconsistency(f"{path}: {key} must be a number of seconds, got {value!r}") from None
    if not seconds > 0:
        raise ConfigurationInconsistency(f"{path}: {key} must be positive, got {value!r}")
    return seconds


def _uplinks(raw, path):
    value = raw.get("uplinks", constants.DEFAULT_UPLINKS)
    if not isinstance(value, (list, tuple)):
        raise ConfigurationInconsistency(f"{path}: uplinks must be a list of uplink names, got {value!r}")
    if not all(isinstance(u, str) and u for u in value):
        raise ConfigurationInconsistency(f"{path}: uplinks must be a list of uplink names, got {value!r}")
    if not value:
        raise ConfigurationInconsistency(f"{path}: at least one uplink must be configured")
    return tuple(value)


def load_settings(path, nic_config_path=None):
    """
    Build Settings from a YAML file, falling back to defaults for missing keys.

    Raises:
        ConfigurationInconsistency: if no uplinks are configured, the default
            uplink is not one of them, or a value has the wrong type.
    """
    raw = load_yaml(path) if path else {}
    if not isinstance(raw, dict):
        logger.error(f"[config] {path} must contain a mapping, using defaults")
        raw = {}
    metrics = raw.get("metrics") or {}
    if not isinstance(metrics, dict):
        raise ConfigurationInconsistency(f"{path}: metrics must be a mapping, got {metrics!r}")

    uplinks = _uplinks(raw, path)
    default_uplink = raw.get("default_uplink", uplinks[0])
    if default_uplink not in uplinks:
        raise ConfigurationInconsistency(
            f"{path}: default_uplink {default_uplink!r} is not one of {list(uplinks)}"
        )

    usage_selector = metrics.get("usage_selector") or ""
    if not isinstance(usage_selector, str):
        raise ConfigurationInconsistency(f"{path}: metrics.usage_selector must be a string, got {usage_selector!r}")

    return Settings(
        prometheus_url=_text(raw, "prometheus_url", constants.DEFAULT_PROMETHEUS_URL, path).rstrip("/"),
        status_url=_text(raw, "status_url", constants.DEFAULT_STATUS_URL, path),
        actuator_url=_text(raw, "actuator_url", constants.DEFAULT_ACTUATOR_URL, path),
        uplinks=uplinks,
        default_uplink=default_uplink,
        tick_interval_seconds=_seconds(raw, "tick_interval_seconds", constants.DEFAULT_TICK_INTERVAL_SECONDS, path),
        request_timeout_seconds=_seconds(raw, "request_timeout_seconds", constants.DEFAULT_REQUEST_TIMEOUT_SECONDS, path),
        capacity_metric=_text(metrics, "capacity", constants.CAPACITY_METRIC, f"{path} metrics"),
        rx_metric=_text(metrics, "rx", constants.RX_METRIC, f"{path} metrics"),
        tx_metric=_text(metrics, "tx", constants.TX_METRIC, f"{path} metrics"),
        usage_selector=usage_selector,
        nic_config=load_nic_config(nic_config_path) if nic_config_path else {},
    )


def preview_yaml(path, name=None):
    """
    Log a human-readable preview of the YAML file contents for debugging.
    Typically used during startup to verify config presence and structure.
    """
    if not os.path.exists(path):
        logger.warning(f"[config] File not found: {path}")
        return

    try:
        with open(path, "r") as f:
            contents = f.read()
        logger.info(f"\nLoaded {name or path}:\n" + "\n".join(f"| {line}" for line in contents.strip().splitlines()))
    except OSError as e:
        logger.error(f"[config] Could not preview {path}: {e}")
