'''
cooldown_state.py
- In-memory cooldown tracking for recently moved flows.
- Suppresses re-selection of a flow for COOLDOWN_SECONDS after a successful move,
  and evicts records once the window has elapsed.
- Process-lifetime only: state resets on restart.
'''

from collections import defaultdict
from dataclasses import dataclass

from loguru import logger

from routing_flow.core.constants import COOLDOWN_SECONDS


@dataclass(frozen=True)
class SwitchRecord:
    flow: str
    target_uplink: str
    moved_at: float


class CooldownTracker:
    """
    Records of recent moves, indexed by flow.

    Records are only mutated from the rebalance tick. If ticks ever process
    interfaces in parallel, guard this object with a lock.
    """

    def __init__(self, window_seconds=COOLDOWN_SECONDS):
        self.window_seconds = window_seconds
        # {flow: [SwitchRecord, ...]}
        self._by_flow = defaultdict(list)

    def _active(self, record, now):
        return now - record.moved_at <= self.window_seconds

    def is_suppressed(self, flow, now):
        """
        Return True if the flow was moved within the cooldown window.

        Args:
            flow (str): Flow identifier (source IP).
            now (float): Unix timestamp of the current tick.
        """
        records = self._by_flow.get(flow)
        if not records:
            return False
        return any(self._active(r, now) for r in records)

    def record(self, flow, target_uplink, now):
        """Append a SwitchRecord. Existing records for the flow are kept until evicted."""
        entry = SwitchRecord(flow=flow, target_uplink=target_uplink, moved_at=now)
        self._by_flow[flow].append(entry)
        logger.debug(f"[cooldown] Recorded move of {flow} to {target_uplink} at {now:.3f}")
        return entry

    def evict_expired(self, now):
        """
        Remove every record older than the cooldown window.

        Returns:
            int: Number of records evicted.
        """
        evicted = 0
        for flow in list(self._by_flow):
            kept = [r for r in self._by_flow[flow] if self._active(r, now)]
            evicted += len(self._by_flow[flow]) - len(kept)
            if kept:
                self._by_flow[flow] = kept
            else:
                del self._by_flow[flow]
        if evicted:
            logger.debug(f"[cooldown] Evicted {evicted} expired record(s)")
        return evicted

    def recent_for_interface(self, interface, now, uplink_to_interface):
        """
        Return active records whose target uplink is backed by the given interface.
        Used for reporting only.
        """
        return [
            r for r in self.records()
            if self._active(r, now) and uplink_to_interface.get(r.target_uplink) == interface
        ]

    def records(self):
        """Snapshot of all stored records, oldest first."""
        return sorted((r for records in list(self._by_flow.values()) for r in records), key=lambda r: r.moved_at)

    def clear(self):
        self._by_flow.clear()

    def __len__(self):
        return sum(len(records) for records in self._by_flow.values())
