import json
from pathlib import Path
from typing import Iterable, List, Optional, Set, Tuple

from flowtrace.config import settings
from flowtrace.core.dto import RawTransaction
from flowtrace.core.errors import DataSourceError
from flowtrace.ports.transaction_history_port import TransactionHistoryPort


class StaticHistoryAdapter(TransactionHistoryPort):
    def __init__(self,
                 transactions: Optional[Iterable[RawTransaction]] = None,
                 failing_addresses: Optional[Iterable[str]] = None,
                 ):
        self._txs = list(transactions or [])
        self._failing: Set[str] = {a.lower() for a in (failing_addresses or [])}
        self.calls: List[Tuple[str, int]] = []

    @classmethod
    def from_json_file(cls, path: str) -> "StaticHistoryAdapter":
        """
        Load a fixture: a list of {hash, timeStamp, from, to, value} rows (explorer field names).
        """
        rows = json.loads(Path(path).read_text(encoding="utf-8"))
        txs = [
            RawTransaction(
                tx_hash=str(r.get("hash", "")),
                timestamp=int(r.get("timeStamp", 0)),
                from_address=(r.get("from") or "").lower(),
                to_address=(r.get("to") or "").lower() or None,
                value_raw=str(r.get("value", "0")),
            )
            for r in rows
        ]
        return cls(transactions=txs)

    def fetch_transactions(self, address, chain_id, limit=settings.FLOW_TX_FETCH_LIMIT):
        ad = address.lower()
        self.calls.append((ad, int(chain_id)))
        if ad in self._failing:
            raise DataSourceError(f"static failure for {ad}")
        items = [
            t for t in self._txs
            if t.from_address.lower() == ad or (t.to_address or "").lower() == ad
        ]
        # newest first; stable for equal timestamps
        items.sort(key=lambda x: x.timestamp, reverse=True)
        return items[:limit]
