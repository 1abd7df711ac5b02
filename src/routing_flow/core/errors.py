"""
errors.py
- Exception taxonomy shared by the adapters and the rebalance orchestrator.
- Adapters translate transport failures into these types; the orchestrator decides
  how far each one reaches (whole tick, one signal, or one flow).
"""


class RoutingFlowError(Exception):
    """Base class for every error raised by routing-flow."""


class TopologyFetchError(RoutingFlowError):
    """The flow/uplink topology could not be fetched. The tick is skipped."""


class MetricsFetchError(RoutingFlowError):
    """A capacity or usage query failed. Only the affected signal is lost."""


class ActuationError(RoutingFlowError):
    """The actuator refused or failed to move a flow."""

    def __init__(self, flow, uplink, reason):
        super().__init__(f"failed to move {flow} to {uplink}: {reason}")
        self.flow = flow
        self.uplink = uplink
        self.reason = reason


class ConfigurationInconsistency(RoutingFlowError):
    """Configuration or topology tables disagree with each other."""
