"""
report.py
- Renders tick reports and topology snapshots as human-readable text.
- Used by the rebalance loop (log output) and the CLI (`once`, `status`).
"""

from loguru import logger

from routing_flow.lib.rebalance import models


def format_tick_report(report, cooldown=None, uplink_to_interface=None):
    """
    Build the bandwidth comparison report for one tick.

    Args:
        report (TickReport): Result of Rebalancer.run_one_tick().
        cooldown (CooldownTracker): Optional; lists recent moves per interface.
        uplink_to_interface (dict[str, str]): Needed alongside `cooldown`.
    """
    lines = ["=== Bandwidth Monitoring Report ==="]
    if report.skipped:
        lines.append(f"Tick skipped: {report.error}")
        lines.append("=== End of Report ===")
        return "\n".join(lines)

    if not report.interfaces:
        lines.append("No interface data available.")

    for entry in report.interfaces:
        lines.append("")
        lines.append(f"  Interface: {entry.interface}")
        lines.append(f"    Estimated Bandwidth: {entry.estimated_capacity_bps:.2f} bps")
        lines.append(f"    Actual RX: {entry.actual_rx_bps:.2f} bps")
        lines.append(f"    Actual TX: {entry.actual_tx_bps:.2f} bps")
        lines.append(f"    Actual Total: {entry.actual_total_bps:.2f} bps")
        lines.append(f"    Exceeded: {'YES' if entry.overloaded else 'NO'}")

        if entry.candidate:
            lines.append(f"    Top RX IP: {entry.candidate} ({entry.candidate_rx_bps:.2f} bps)")
        if entry.top_tx_flow:
            lines.append(f"    Top TX IP: {entry.top_tx_flow} ({entry.top_tx_bps:.2f} bps)")
        if entry.target_interface:
            lines.append(f"    Target: {entry.target_interface} ({entry.target_uplink})")
        if entry.overloaded:
            outcome = entry.outcome if not entry.reason else f"{entry.outcome}: {entry.reason}"
            lines.append(f"    Outcome: {outcome}")

        if cooldown is not None and uplink_to_interface:
            for record in cooldown.recent_for_interface(entry.interface, report.now, uplink_to_interface):
                age = report.now - record.moved_at
                lines.append(f"    Recently moved here: {record.flow} ({age:.0f}s ago)")

    lines.append("")
    lines.append(f"Moves: {len(report.moves)}  Failures: {len(report.failures)}  "
                 f"Duration: {report.duration_seconds:.3f}s")
    lines.append("=== End of Report ===")
    return "\n".join(lines)


def format_topology(topology, lan=None):
    lines = ["Network Configuration:"]
    if lan:
        lines.append(f"  LAN: {lan}")
    for uplink, nic in sorted(topology.uplink_to_interface.items()):
        lines.append(f"  {uplink.upper()}: {nic}")
    lines.append("")
    lines.append("IP Mappings:")
    for ip, wan in sorted(topology.flow_to_uplink.items()):
        lines.append(f"  {ip} -> {wan}")
    return "\n".join(lines)


def log_tick_report(report):
    """Log a one-line summary, plus the full report at DEBUG."""
    if report.skipped:
        logger.warning(f"[rebalance] Tick skipped: {report.error}")
        return

    overloaded = [r.interface for r in report.overloaded]
    logger.info(
        f"[rebalance] Tick done: {len(report.interfaces)} interface(s), "
        f"overloaded={overloaded}, moves={len(report.moves)}, failures={len(report.failures)}"
    )
    for entry in report.interfaces:
        if entry.outcome == models.FAILED:
            logger.warning(f"[rebalance] {entry.interface}: move of {entry.candidate} failed ({entry.reason})")
    logger.debug("\n" + format_tick_report(report))
