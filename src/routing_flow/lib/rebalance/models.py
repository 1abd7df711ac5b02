"""
models.py
- Per-tick data records for the rebalance engine: usage samples, interface stats,
  and the tick report handed to loggers and the HTTP API.
"""

from dataclasses import asdict, dataclass, field
from typing import List, Optional, Tuple

RX = "rx"
TX = "tx"
DIRECTIONS = (RX, TX)

# --- Per-interface Outcomes ---
NOT_OVERLOADED = "not_overloaded"
NO_CANDIDATE = "no_candidate"
NO_TARGET = "no_target"
MOVED = "moved"
FAILED = "failed"
DRY_RUN = "dry_run"


@dataclass(frozen=True)
class UsageSample:
    flow: str
    direction: str
    bps: float


@dataclass(frozen=True)
class InterfaceStats:
    interface: str
    estimated_capacity_bps: float = 0.0
    actual_rx_bps: float = 0.0
    actual_tx_bps: float = 0.0
    flows: Tuple[Tuple[str, float], ...] = ()  # (flow, rx_bps), one entry per RX sample
    tx_flows: Tuple[Tuple[str, float], ...] = ()  # (flow, tx_bps), reporting only

    @property
    def actual_total_bps(self):
        return self.actual_rx_bps + self.actual_tx_bps


@dataclass
class InterfaceReport:
    interface: str
    estimated_capacity_bps: float
    actual_rx_bps: float
    actual_tx_bps: float
    overloaded: bool
    outcome: str
    candidate: Optional[str] = None
    candidate_rx_bps: Optional[float] = None
    target_interface: Optional[str] = None
    target_uplink: Optional[str] = None
    top_tx_flow: Optional[str] = None
    top_tx_bps: Optional[float] = None
    reason: Optional[str] = None

    @property
    def actual_total_bps(self):
        return self.actual_rx_bps + self.actual_tx_bps


@dataclass
class TickReport:
    now: float
    skipped: bool = False
    error: Optional[str] = None
    interfaces: List[InterfaceReport] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def moves(self):
        return [r for r in self.interfaces if r.outcome == MOVED]

    @property
    def failures(self):
        return [r for r in self.interfaces if r.outcome == FAILED]

    @property
    def overloaded(self):
        return [r for r in self.interfaces if r.overloaded]

    def to_dict(self):
        return asdict(self)
