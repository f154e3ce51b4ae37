from __future__ import annotations

from typing import Any, Optional

from flowtrace.config import settings


WEI_PER_NATIVE = 10 ** 18


def normalize_address(address: Optional[str]) -> str:
    return (address or "").strip().lower()


def same_address(a: Optional[str], b: Optional[str]) -> bool:
    return normalize_address(a) == normalize_address(b)


def chain_id_for(chain_name: Optional[str]) -> int:
    # unknown names fall back to mainnet
    name = (chain_name or "").strip().lower()
    return settings.CHAIN_IDS.get(name, settings.DEFAULT_CHAIN_ID)


def clamp_hops(max_hops: int) -> int:
    return min(max(int(max_hops), settings.FLOW_MIN_HOPS), settings.FLOW_MAX_HOPS)


def wei_to_native(value_raw: Any) -> float:
    """
    Raw smallest-unit value (int or decimal string) to a float in native units.
    Raises ValueError for anything that is not an integer.
    """
    return int(str(value_raw).strip() or "0") / WEI_PER_NATIVE


def explorer_tx_url(chain_id: int, tx_hash: str) -> str:
    base = settings.EXPLORER_TX_URLS.get(chain_id, settings.EXPLORER_TX_URLS[settings.DEFAULT_CHAIN_ID])
    return f"{base}{tx_hash}"
