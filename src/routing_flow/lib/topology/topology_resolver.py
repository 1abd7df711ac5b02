"""
topology_resolver.py
- Two-level lookup from a flow (source IP) to the physical interface carrying it:
    flow -> logical uplink -> physical interface
- Inverse lookup from a physical interface back to its logical uplink.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(frozen=True)
class Topology:
    flow_to_uplink: Dict[str, str] = field(default_factory=dict)
    uplink_to_interface: Dict[str, str] = field(default_factory=dict)

    def uplink_for_flow(self, flow: str) -> Optional[str]:
        return self.flow_to_uplink.get(flow)

    def resolve_interface(self, flow: str) -> Optional[str]:
        """
        Return the physical interface currently carrying a flow.

        Returns None when the flow has no uplink mapping, or its uplink has no
        backing interface. Such flows are excluded from rebalancing.
        """
        uplink = self.flow_to_uplink.get(flow)
        if uplink is None:
            return None
        return self.uplink_to_interface.get(uplink)

    def uplink_for_interface(self, interface: str) -> Optional[str]:
        """
        Return the logical uplink backed by a physical interface, or None.

        If several uplinks point at the same interface the smallest uplink id wins.
        """
        matches = sorted(u for u, nic in self.uplink_to_interface.items() if nic == interface)
        return matches[0] if matches else None
