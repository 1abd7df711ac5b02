"""
api.py
- FastAPI app exposing health, Prometheus-style loop metrics, the latest tick
  report, and the active cooldown records.
"""

from dataclasses import asdict
from time import time

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from routing_flow.runner import rebalance

api = FastAPI(title="routing-flow")


@api.get("/healthz")
async def health():
    return {"status": "ok"}


@api.get("/report")
async def report():
    if rebalance.last_report is None:
        return {"status": "pending", "report": None}
    return {"status": "ok", "report": rebalance.last_report.to_dict()}


@api.get("/cooldowns")
async def cooldowns():
    now = time()
    return {
        "window_seconds": rebalance.cooldown.window_seconds,
        "records": [
            dict(asdict(r), age_seconds=round(now - r.moved_at, 3))
            for r in rebalance.cooldown.records()
        ],
    }


@api.get("/metrics")
async def metrics():
    return PlainTextResponse(
        f"""# HELP rebalance_ticks_total Total rebalance ticks completed
# TYPE rebalance_ticks_total counter
rebalance_ticks_total {rebalance.rebalance_ticks_total}
# HELP rebalance_skipped_ticks_total Ticks skipped because topology was unavailable
# TYPE rebalance_skipped_ticks_total counter
rebalance_skipped_ticks_total {rebalance.rebalance_skipped_ticks_total}
# HELP rebalance_tick_errors_total Ticks aborted by an unexpected error
# TYPE rebalance_tick_errors_total counter
rebalance_tick_errors_total {rebalance.rebalance_tick_errors_total}
# HELP rebalance_moves_total Flows successfully moved to another uplink
# TYPE rebalance_moves_total counter
rebalance_moves_total {rebalance.rebalance_moves_total}
# HELP rebalance_failures_total Flow moves rejected by the actuator
# TYPE rebalance_failures_total counter
rebalance_failures_total {rebalance.rebalance_failures_total}
# HELP rebalance_overloaded_interfaces Interfaces overloaded in the last tick
# TYPE rebalance_overloaded_interfaces gauge
rebalance_overloaded_interfaces {rebalance.rebalance_overloaded_interfaces}
# HELP rebalance_last_duration_seconds Duration of the last tick in seconds
# TYPE rebalance_last_duration_seconds gauge
rebalance_last_duration_seconds {rebalance.rebalance_last_duration_seconds}
# HELP rebalance_cooldown_records Flows currently held in cooldown
# TYPE rebalance_cooldown_records gauge
rebalance_cooldown_records {len(rebalance.cooldown)}
""",
        media_type="text/plain",
    )
