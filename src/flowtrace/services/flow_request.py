from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional

from flowtrace.config import settings
from flowtrace.core.chains import chain_id_for, clamp_hops, normalize_address, same_address
from flowtrace.core.errors import InvalidFlowRequest
from flowtrace.core.models import FlowQuery, FlowResult
from flowtrace.ports.transaction_history_port import TransactionHistoryPort
from flowtrace.services.flow_tracer import FlowTracer

logger = logging.getLogger(__name__)


def build_flow_query(payload: Mapping[str, Any]) -> FlowQuery:
    """
    Validate a raw {from, to, chain?, maxHops?} request into a FlowQuery.

    Missing addresses and self-traces are rejected; hops outside [1, 5] are clamped,
    not rejected; unknown chain names resolve to Ethereum mainnet.
    """
    from_raw = payload.get("from")
    to_raw = payload.get("to")
    if not isinstance(from_raw, str) or not isinstance(to_raw, str) or not from_raw.strip() or not to_raw.strip():
        raise InvalidFlowRequest("Both 'from' and 'to' addresses are required")

    if same_address(from_raw, to_raw):
        raise InvalidFlowRequest("Source and destination cannot be the same")
    from_address = normalize_address(from_raw)
    to_address = normalize_address(to_raw)

    chain = payload.get("chain")
    if not isinstance(chain, str) or not chain.strip():
        chain = settings.FLOW_DEFAULT_CHAIN

    raw_hops = payload.get("maxHops")
    if raw_hops is None:
        raw_hops = settings.FLOW_DEFAULT_HOPS
    # bools are ints, and int() would truncate 2.9 to 2
    if isinstance(raw_hops, bool) or (
        isinstance(raw_hops, float) and (not math.isfinite(raw_hops) or not raw_hops.is_integer())
    ):
        raise InvalidFlowRequest(f"'maxHops' must be an integer, got {raw_hops!r}")
    try:
        hops = clamp_hops(int(raw_hops))
    except (TypeError, ValueError, OverflowError) as exc:
        raise InvalidFlowRequest(f"'maxHops' must be an integer, got {raw_hops!r}") from exc

    return FlowQuery(
        from_address=from_address,
        to_address=to_address,
        chain=chain,
        chain_id=chain_id_for(chain),
        max_hops=hops,
    )


def run_flow_request(
    payload: Mapping[str, Any],
    history: TransactionHistoryPort,
    timeout_sec: Optional[float] = settings.FLOW_TRACE_TIMEOUT_SEC,
    fetch_workers: int = settings.FLOW_FETCH_WORKERS,
) -> FlowResult:
    query = build_flow_query(payload)
    tracer = FlowTracer(history, fetch_workers=fetch_workers)
    return tracer.trace(query, timeout_sec=timeout_sec)
