from __future__ import annotations

import argparse
import datetime as dt
import json
import logging
import os
import sys

from flowtrace.config import settings
from flowtrace.core.errors import InvalidFlowRequest, TracerError
from flowtrace.io.output_writer import write_flow_json, write_flow_summary_md
from flowtrace.io.schemas import flow_result_to_dict
from flowtrace.services.flow_request import run_flow_request

from flowtrace.adapters.chain.etherscan_history_adapter import EtherscanHistoryAdapter
from flowtrace.adapters.chain.static_history_adapter import StaticHistoryAdapter


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="flowtrace", description="Money-flow tracer (native transfers, BFS)")
    p.add_argument("--from", dest="from_address", required=True, help="Source address")
    p.add_argument("--to", dest="to_address", required=True, help="Destination address")
    p.add_argument("--chain", default=settings.FLOW_DEFAULT_CHAIN, help="ethereum, arbitrum, base, optimism, polygon or bsc")
    p.add_argument("--max-hops", type=int, default=settings.FLOW_DEFAULT_HOPS, help="Hop budget (clamped to 1-5)")
    p.add_argument("--out", default="out", help="Output folder")
    p.add_argument("--workers", type=int, default=settings.FLOW_FETCH_WORKERS, help="Parallel history fetches per hop (1=sequential)")
    p.add_argument("--timeout", type=float, default=settings.FLOW_TRACE_TIMEOUT_SEC, help="Abort the trace after this many seconds")
    p.add_argument("--static-file", help="Trace against a JSON fixture of txlist rows instead of Etherscan (dev/testing)")
    p.add_argument("--print-json", action="store_true", help="Also print the result JSON to stdout")
    return p


def _ts() -> str:
    return dt.datetime.now().strftime("%H:%M:%S")


def main(argv=None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")

    # Ports
    if args.static_file:
        history = StaticHistoryAdapter.from_json_file(args.static_file)
        adapter_label = "StaticHistoryAdapter (dev/testing)"
    else:
        # Etherscan key should come from env or .env
        if not os.getenv("ETHERSCAN_API_KEY"):
            print(f"[{_ts()}] Error: Missing ETHERSCAN_API_KEY environment variable", file=sys.stderr)
            return 2
        history = EtherscanHistoryAdapter()
        adapter_label = "EtherscanHistoryAdapter"

    payload = {
        "from": args.from_address,
        "to": args.to_address,
        "chain": args.chain,
        "maxHops": args.max_hops,
    }

    print(f"Adapter: {adapter_label}")
    print(f"[{_ts()}] Tracing {args.from_address} -> {args.to_address} • {args.chain} • up to {args.max_hops} hop(s)")
    try:
        result = run_flow_request(payload, history, timeout_sec=args.timeout, fetch_workers=args.workers)
    except InvalidFlowRequest as exc:
        print(f"[{_ts()}] Error: {exc}", file=sys.stderr)
        return 2
    except TracerError as exc:
        print(f"[{_ts()}] Error: {exc.__class__.__name__}: {exc}", file=sys.stderr)
        return 1

    if result.found:
        print(f"[{_ts()}] Found {len(result.paths)} path(s) • total {result.total_amount:.4f} in {result.execution_time_ms}ms")
    else:
        print(f"[{_ts()}] No path found within {result.search_depth} hop(s)")

    # Outputs
    flow_path = write_flow_json(result, args.out)
    summary_path = write_flow_summary_md(result, args.out)
    print(f"Wrote: {flow_path}")
    print(f"Wrote: {summary_path}")

    if args.print_json:
        print(json.dumps(flow_result_to_dict(result), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
