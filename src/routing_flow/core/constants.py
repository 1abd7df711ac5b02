"""
constants.py
- Project-wide constants shared across decision logic, adapters and runners.
- Includes the cooldown window, polling defaults, and Prometheus metric names.
"""

# --- Anti-flap Window ---
COOLDOWN_SECONDS = 30  # a moved flow is ineligible for another move for this long

# --- Loop Timing Defaults ---
DEFAULT_TICK_INTERVAL_SECONDS = 10
DEFAULT_REQUEST_TIMEOUT_SECONDS = 5

# --- Config Watcher Debounce ---
DEBOUNCE_TIME = 5  # seconds between reloads of the same file

# --- Topology Defaults ---
DEFAULT_UPLINKS = ["wan0", "wan1"]
DEFAULT_UPLINK = "wan0"

# --- Endpoints ---
DEFAULT_PROMETHEUS_URL = "http://localhost:9090"
DEFAULT_STATUS_URL = "http://localhost:32599/status"
DEFAULT_ACTUATOR_URL = "http://localhost:32599/assign"

# --- Prometheus Metric Names ---
CAPACITY_METRIC = "tcp_traffic_scan_tcp_bandwidth_avg_bps"
RX_METRIC = "network_ip_rx_bps"
TX_METRIC = "network_ip_tx_bps"

# --- Prometheus Query Retries ---
QUERY_ATTEMPTS = 3
QUERY_RETRY_WAIT_SECONDS = 1
