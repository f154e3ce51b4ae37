from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple


# Query model

@dataclass(frozen=True)
class FlowQuery:
    """
    A validated trace request: addresses normalized, hops clamped, chain resolved.
    """

    from_address: str
    to_address: str
    chain: str = "ethereum"
    chain_id: int = 1
    max_hops: int = 3


# Graph models

@dataclass(frozen=True)
class TransactionEdge:

    counterparty: str
    amount: float              # native units (value / 10**18)
    timestamp: int
    tx_hash: str


@dataclass(frozen=True)
class SearchNode:

    address: str
    path: Tuple[TransactionEdge, ...] = ()
    depth: int = 0


# Result models

@dataclass(frozen=True)
class FlowPath:

    hop_count: int
    wallets: Tuple[str, ...]
    amounts: Tuple[float, ...]
    timestamps: Tuple[int, ...]
    tx_hashes: Tuple[str, ...]

    @classmethod
    def from_edges(cls, source: str, edges: Sequence[TransactionEdge]) -> "FlowPath":
        return cls(
            hop_count=len(edges),
            wallets=(source,) + tuple(e.counterparty for e in edges),
            amounts=tuple(e.amount for e in edges),
            timestamps=tuple(e.timestamp for e in edges),
            tx_hashes=tuple(e.tx_hash for e in edges),
        )

    @property
    def total_amount(self) -> float:
        return sum(self.amounts)


@dataclass(frozen=True)
class FlowResult:

    from_address: str
    to_address: str
    chain: str
    paths: Tuple[FlowPath, ...] = ()
    total_amount: float = 0.0
    search_depth: int = 0
    execution_time_ms: int = 0

    @property
    def found(self) -> bool:
        return len(self.paths) > 0
