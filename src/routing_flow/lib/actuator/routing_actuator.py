"""
routing_actuator.py
- Tells the routing service to reassign a source IP to a WAN uplink.
- Single attempt per call: a failed move is simply reconsidered on the next tick.
"""

import requests
from loguru import logger

from routing_flow.core.errors import ActuationError


class RoutingActuator:
    def __init__(self, actuator_url, timeout=5, session=None):
        self.actuator_url = actuator_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def assign(self, flow, uplink):
        """
        POST {"ip": flow, "wan": uplink} to the routing service.

        Raises:
            ActuationError: on transport errors or a non-2xx response.
        """
        try:
            response = self.session.post(
                self.actuator_url,
                json={"ip": flow, "wan": uplink},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ActuationError(flow, uplink, str(e)) from e

        if not response.ok:
            body = (response.text or "").strip()[:200]
            raise ActuationError(flow, uplink, f"HTTP {response.status_code} {body}".strip())

        logger.info(f"[actuator] {flow} assigned to {uplink}")
