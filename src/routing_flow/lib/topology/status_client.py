"""
status_client.py
- Fetches the current flow -> uplink assignments from the routing service status endpoint.
- Builds the uplink -> NIC table for the configured uplinks, falling back to the
  local nic.json for uplinks the status payload does not describe.

Expected payload:
    {
      "config": {"lan": "br0", "wan0": "eth0", "wan1": "eth1"},
      "mappings": {"192.168.1.20": "wan0", "192.168.1.21": "wan1"}
    }
"""

import requests
from loguru import logger

from routing_flow.core.errors import TopologyFetchError
from routing_flow.lib.topology.topology_resolver import Topology


class StatusClient:
    def __init__(self, status_url, uplinks, nic_config=None, timeout=5, session=None):
        self.status_url = status_url
        self.uplinks = list(uplinks)
        self.nic_config = dict(nic_config or {})
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch_status(self):
        """
        GET the raw status payload.

        Raises:
            TopologyFetchError: on transport errors, non-2xx responses or non-JSON bodies.
        """
        try:
            response = self.session.get(self.status_url, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise TopologyFetchError(f"Failed to fetch status from {self.status_url}: {e}") from e
        except ValueError as e:
            raise TopologyFetchError(f"Failed to parse status response from {self.status_url}: {e}") from e

        if not isinstance(payload, dict):
            raise TopologyFetchError(f"Unexpected status payload type: {type(payload).__name__}")
        return payload

    def fetch_topology(self):
        return self.topology_from_status(self.fetch_status())

    def topology_from_status(self, payload):
        """Build the Topology from a status payload already returned by fetch_status()."""
        nic_block = payload.get("config") or {}
        mappings = payload.get("mappings") or {}
        if not isinstance(nic_block, dict) or not isinstance(mappings, dict):
            raise TopologyFetchError("Status payload 'config' and 'mappings' must be objects")

        uplink_to_interface = {}
        for uplink in self.uplinks:
            nic = nic_block.get(uplink) or self.nic_config.get(uplink)
            if nic:
                uplink_to_interface[uplink] = str(nic)
            else:
                logger.warning(f"[topology] No interface known for uplink {uplink}")

        flow_to_uplink = {str(ip): str(wan) for ip, wan in mappings.items() if wan}

        logger.debug(f"[topology] {len(flow_to_uplink)} flow mapping(s), uplinks: {uplink_to_interface}")
        return Topology(flow_to_uplink=flow_to_uplink, uplink_to_interface=uplink_to_interface)
