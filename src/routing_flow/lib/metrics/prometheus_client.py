"""
prometheus_client.py
- Queries the Prometheus HTTP API for the two bandwidth signals:
    - estimated capacity per interface (tcp_traffic_scan_tcp_bandwidth_avg_bps)
    - actual RX/TX rate per source IP (network_ip_rx_bps / network_ip_tx_bps)
- Transient connection errors are retried; everything else surfaces as MetricsFetchError.
"""

import requests
from loguru import logger
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from routing_flow.core import constants
from routing_flow.core.errors import MetricsFetchError
from routing_flow.lib.rebalance.models import DIRECTIONS, RX, TX, UsageSample


def _sample_value(result):
    """Return the string value of an instant-vector sample, e.g. [1700000000.1, "12.5"]."""
    value = result.get("value")
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return value[1]
    return None


def _parse_float(raw):
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


class PrometheusClient:
    def __init__(self, base_url, capacity_metric=constants.CAPACITY_METRIC,
                 rx_metric=constants.RX_METRIC, tx_metric=constants.TX_METRIC,
                 usage_selector="", timeout=5, session=None):
        self.base_url = base_url.rstrip("/")
        self.capacity_metric = capacity_metric
        self.usage_metrics = {RX: rx_metric, TX: tx_metric}
        self.usage_selector = usage_selector
        self.timeout = timeout
        self.session = session or requests.Session()

    @retry(
        reraise=True,
        stop=stop_after_attempt(constants.QUERY_ATTEMPTS),
        wait=wait_fixed(constants.QUERY_RETRY_WAIT_SECONDS),
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
    )
    def _get(self, query):
        response = self.session.get(
            f"{self.base_url}/api/v1/query",
            params={"query": query},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    def query(self, query):
        """
        Run an instant query and return its result vector.

        Raises:
            MetricsFetchError: on transport errors, non-2xx responses, or a
                non-success / non-vector response body.
        """
        logger.debug(f"[prometheus] Query: {query}")
        try:
            payload = self._get(query)
        except requests.RequestException as e:
            raise MetricsFetchError(f"Prometheus query {query!r} failed: {e}") from e
        except ValueError as e:
            raise MetricsFetchError(f"Prometheus query {query!r} returned invalid JSON: {e}") from e

        if not isinstance(payload, dict) or payload.get("status") != "success":
            error = payload.get("error") if isinstance(payload, dict) else payload
            raise MetricsFetchError(f"Prometheus query {query!r} failed: {error}")

        results = (payload.get("data") or {}).get("result") or []
        logger.debug(f"[prometheus] Result count: {len(results)}")
        if not results:
            logger.debug(f"[prometheus] No results found for query: {query}")
        return results

    def fetch_capacity(self):
        """
        Returns:
            dict[str, float | None]: Estimated capacity per interface. Unparsable
            values are kept as None so the interface is still reported.
        """
        capacity = {}
        for result in self.query(self.capacity_metric):
            interface = (result.get("metric") or {}).get("interface")
            if not interface:
                continue
            capacity[interface] = _parse_float(_sample_value(result))
        return capacity

    def fetch_usage(self):
        """
        Returns:
            list[UsageSample]: One sample per (ip, direction) series. Series without
            an ip label or with an unparsable value are dropped.
        """
        samples = []
        for direction in DIRECTIONS:
            metric = self.usage_metrics[direction]
            for result in self.query(f"{metric}{self.usage_selector}"):
                ip = (result.get("metric") or {}).get("ip")
                bps = _parse_float(_sample_value(result))
                if not ip or bps is None:
                    continue
                samples.append(UsageSample(flow=ip, direction=direction, bps=bps))
        return samples
