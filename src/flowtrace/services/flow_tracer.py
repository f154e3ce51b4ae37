from __future__ import annotations

import logging
import time
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from typing import Deque, Dict, List, Optional, Set

from flowtrace.config import settings
from flowtrace.core.chains import clamp_hops, normalize_address, wei_to_native
from flowtrace.core.errors import TraceTimeoutError
from flowtrace.core.models import FlowPath, FlowQuery, FlowResult, SearchNode, TransactionEdge
from flowtrace.ports.transaction_history_port import TransactionHistoryPort

logger = logging.getLogger(__name__)


class FlowTracer:
    """
    Finds whether and how funds moved from one address to another within a hop budget.

    - Traversal: breadth-first over native-value transfers, newest transactions first
    - Bounds: hops clamped to [1, 5], 50 transactions per address, 10 paths per result
    - Ignores: zero-value transfers, contract creations (no recipient)

    Each intermediate address is expanded at most once. The returned paths are the
    first ones discovered through each distinct address, not every path that exists.
    """

    def __init__(
        self,
        history: TransactionHistoryPort,
        max_paths: int = settings.FLOW_MAX_PATHS,
        tx_fetch_limit: int = settings.FLOW_TX_FETCH_LIMIT,
        fetch_workers: int = settings.FLOW_FETCH_WORKERS,
    ) -> None:
        self.history = history
        self._max_paths = int(max_paths)
        self._tx_limit = int(tx_fetch_limit)
        self._workers = max(1, int(fetch_workers))

    def trace(self, query: FlowQuery, timeout_sec: Optional[float] = None) -> FlowResult:
        started = time.monotonic()
        deadline = started + timeout_sec if timeout_sec else None

        source = normalize_address(query.from_address)
        target = normalize_address(query.to_address)
        max_hops = clamp_hops(query.max_hops)

        logger.info("Tracing %s -> %s on %s (max %d hops)", source, target, query.chain, max_hops)

        paths: List[FlowPath] = []
        q: Deque[SearchNode] = deque([SearchNode(address=source)])
        visited: Set[str] = {source}
        prefetched: Dict[str, List[TransactionEdge]] = {}

        while q and len(paths) < self._max_paths:
            node = q.popleft()

            # frontier: never fetch beyond the hop budget
            if node.depth >= max_hops:
                continue

            # per node, prefetched or not
            self._check_deadline(deadline)

            edges = prefetched.pop(node.address, None)
            if edges is None:
                if self._workers > 1:
                    level = [node] + [n for n in q if n.depth == node.depth]
                    prefetched.update(self._prefetch(level, query.chain_id))
                    edges = prefetched.pop(node.address)
                else:
                    edges = self._edges_for(node, query.chain_id)

            for edge in edges:
                extended = node.path + (edge,)

                if edge.counterparty == target:
                    paths.append(FlowPath.from_edges(source, extended))
                    if len(paths) >= self._max_paths:
                        break
                elif edge.counterparty not in visited and node.depth + 1 < max_hops:
                    visited.add(edge.counterparty)
                    q.append(SearchNode(address=edge.counterparty, path=extended, depth=node.depth + 1))

        total_amount = sum((p.total_amount for p in paths), 0.0)
        elapsed_ms = int((time.monotonic() - started) * 1000)

        logger.info("Found %d path(s) in %dms (%d address(es) visited)", len(paths), elapsed_ms, len(visited))

        return FlowResult(
            from_address=query.from_address,
            to_address=query.to_address,
            chain=query.chain,
            paths=tuple(paths),
            total_amount=total_amount,
            search_depth=max_hops,
            execution_time_ms=elapsed_ms,
        )

    # -------------------------
    # Edge builders
    # -------------------------

    def _edges_for(self, node: SearchNode, chain_id: int) -> List[TransactionEdge]:
        try:
            txs = self.history.fetch_transactions(node.address, chain_id, limit=self._tx_limit)
        except Exception as exc:
            # the seed must be fetchable, otherwise "not found" would be misleading
            if node.depth == 0:
                raise
            logger.warning("History fetch failed for %s, treating as dead end: %s", node.address, exc)
            return []

        edges: List[TransactionEdge] = []
        for tx in txs[: self._tx_limit]:
            counterparty = normalize_address(tx.to_address)
            if not counterparty:
                continue

            try:
                amount = wei_to_native(tx.value_raw)
            except ValueError:
                logger.debug("Skipping tx %s with unparseable value %r", tx.tx_hash, tx.value_raw)
                continue
            if amount == 0:
                continue

            edges.append(
                TransactionEdge(
                    counterparty=counterparty,
                    amount=amount,
                    timestamp=int(tx.timestamp),
                    tx_hash=tx.tx_hash,
                )
            )

        return edges

    def _prefetch(self, nodes: List[SearchNode], chain_id: int) -> Dict[str, List[TransactionEdge]]:
        with ThreadPoolExecutor(max_workers=min(self._workers, len(nodes))) as pool:
            futures = {n.address: pool.submit(self._edges_for, n, chain_id) for n in nodes}
            return {addr: f.result() for addr, f in futures.items()}

    # -------------------------
    # Helpers
    # -------------------------

    @staticmethod
    def _check_deadline(deadline: Optional[float]) -> None:
        if deadline is not None and time.monotonic() > deadline:
            raise TraceTimeoutError("Flow trace exceeded its time budget")
