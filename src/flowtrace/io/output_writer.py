from __future__ import annotations

import datetime as dt
import json
from pathlib import Path

from flowtrace.core.chains import chain_id_for, explorer_tx_url
from flowtrace.core.models import FlowResult
from flowtrace.io.schemas import flow_result_to_dict


def write_flow_json(result: FlowResult, out_dir: str, filename: str = "flow.json") -> str:
    p = Path(out_dir)
    p.mkdir(parents=True, exist_ok=True)

    out_path = p / filename
    with out_path.open("w", encoding="utf-8") as f:
        json.dump(flow_result_to_dict(result), f, indent=2)

    return str(out_path)


def render_flow_summary(result: FlowResult) -> str:
    """
    Investigator-friendly markdown view of a flow result: one section per path,
    each hop with its amount, time and explorer link.
    """
    chain_id = chain_id_for(result.chain)

    def fmt_amount(x: float) -> str:
        return f"{x:.4f}"

    def short(addr: str) -> str:
        return addr if len(addr) <= 20 else f"{addr[:10]}...{addr[-8:]}"

    def fmt_ts(ts: int) -> str:
        return dt.datetime.fromtimestamp(ts, tz=dt.timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")

    lines = []
    lines.append("# Money Flow Trace\n\n")
    lines.append(f"- From: **{result.from_address}**\n")
    lines.append(f"- To: **{result.to_address}**\n")
    lines.append(f"- Chain: **{result.chain}** (id {chain_id})\n")
    lines.append(f"- Search depth: **{result.search_depth} hops**\n")
    lines.append(f"- Paths found: **{len(result.paths)}**\n")
    lines.append(f"- Total amount: **{fmt_amount(result.total_amount)}** (native units)\n")
    lines.append(f"- Execution time: {result.execution_time_ms} ms\n\n")

    if not result.found:
        lines.append("## Result\n\n")
        lines.append(
            f"_No transaction path found within {result.search_depth} hops. "
            "Funds may have taken a longer route or never reached the destination._\n\n"
        )
    else:
        for idx, path in enumerate(result.paths, start=1):
            plural = "" if path.hop_count == 1 else "s"
            lines.append(
                f"## Path {idx} • {path.hop_count} hop{plural} • "
                f"{fmt_amount(path.total_amount)}\n\n"
            )
            for i in range(path.hop_count):
                lines.append(
                    f"{i + 1}. {short(path.wallets[i])} -> {short(path.wallets[i + 1])} "
                    f"| **{fmt_amount(path.amounts[i])}** "
                    f"| {fmt_ts(path.timestamps[i])} "
                    f"| [tx]({explorer_tx_url(chain_id, path.tx_hashes[i])})\n"
                )
            lines.append("\n")

    lines.append("## Limitations\n\n")
    lines.append("- Only native-value transfers are followed (no ERC-20, no internal txs).\n")
    lines.append("- Each address contributes its 50 most recent transactions.\n")
    lines.append("- An intermediate address is explored once, so alternative routes through it are not listed.\n")
    lines.append("- At most 10 paths are reported.\n")

    return "".join(lines)


def write_flow_summary_md(result: FlowResult, out_dir: str, filename: str = "flow_summary.md") -> str:
    p = Path(out_dir)
    p.mkdir(parents=True, exist_ok=True)

    out_path = p / filename
    with out_path.open("w", encoding="utf-8") as f:
        f.write(render_flow_summary(result))

    return str(out_path)
