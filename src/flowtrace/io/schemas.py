from __future__ import annotations

from typing import Any, Dict

from flowtrace.core.models import FlowPath, FlowResult


def flow_path_to_dict(p: FlowPath) -> Dict[str, Any]:
    return {
        "hops": p.hop_count,
        "wallets": list(p.wallets),
        "amounts": list(p.amounts),
        "timestamps": list(p.timestamps),
        "txHashes": list(p.tx_hashes),
    }


def flow_result_to_dict(r: FlowResult) -> Dict[str, Any]:
    # camelCase keys: this is what the dashboard's flow panel reads
    return {
        "success": True,
        "from": r.from_address,
        "to": r.to_address,
        "chain": r.chain,
        "paths": [flow_path_to_dict(p) for p in r.paths],
        "totalAmount": r.total_amount,
        "found": r.found,
        "searchDepth": r.search_depth,
        "executionTime": r.execution_time_ms,
    }


def error_to_dict(message: str) -> Dict[str, Any]:
    return {"success": False, "error": message}
