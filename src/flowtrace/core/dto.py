from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RawTransaction:
    tx_hash: str
    timestamp: int
    from_address: str
    to_address: Optional[str]   # None for contract creation
    value_raw: str              # native value in smallest unit (wei), as returned by the explorer
