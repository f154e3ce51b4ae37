import logging
from typing import Any, Dict, List, Optional

import requests

from flowtrace.config.settings import (
    ETHERSCAN_API_KEY,
    ETHERSCAN_BASE_URL,
    ETHERSCAN_REQUESTS_PER_SEC,
    ETHERSCAN_TIMEOUT_SEC,
    ETHERSCAN_MAX_RETRIES,
    FLOW_TX_FETCH_LIMIT,
)

from flowtrace.adapters.chain.rate_limiter import SimpleRateLimiter, backoff_sleep
from flowtrace.core.errors import DataSourceError, RateLimitError
from flowtrace.ports.transaction_history_port import TransactionHistoryPort
from flowtrace.core.dto import RawTransaction

logger = logging.getLogger(__name__)


class EtherscanHistoryAdapter(TransactionHistoryPort):

    def __init__(
        self,
        api_key: Optional[str] = ETHERSCAN_API_KEY,
        base_url: str = ETHERSCAN_BASE_URL,
        requests_per_sec: float = ETHERSCAN_REQUESTS_PER_SEC,
        timeout_sec: int = ETHERSCAN_TIMEOUT_SEC,
        max_retries: int = ETHERSCAN_MAX_RETRIES,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout_sec
        self._max_retries = max(1, int(max_retries))

        self._rl = SimpleRateLimiter(requests_per_sec)
        self._session = session or requests.Session()

    # ---------- internal ----------

    def _call(self, chain_id: int, params: Dict[str, Any]) -> Dict[str, Any]:
        req = dict(params)
        req["chainid"] = str(chain_id)
        if self._api_key:
            req["apikey"] = self._api_key

        last_err: Optional[Exception] = None

        for attempt in range(self._max_retries):
            try:
                self._rl.wait()
                resp = self._session.get(
                    self._base_url,
                    params=req,
                    timeout=self._timeout,
                )
                resp.raise_for_status()
                data = resp.json()
            except (requests.RequestException, ValueError) as e:
                last_err = e
                logger.debug("Etherscan attempt %d failed: %s", attempt + 1, e)
                backoff_sleep(attempt)
                continue

            if not isinstance(data, dict):
                raise DataSourceError(f"Invalid Etherscan response: {data!r}")

            status = str(data.get("status", "1"))
            message = str(data.get("message", "OK"))
            result = data.get("result")

            # rate limit shows up either in message or in result text
            if status == "0" and "rate limit" in f"{message} {result}".lower():
                last_err = RateLimitError(f"{message}: {result}")
                backoff_sleep(attempt)
                continue

            return data

        if isinstance(last_err, RateLimitError):
            raise last_err
        raise DataSourceError(f"Etherscan failed after retries: {last_err}")

    @staticmethod
    def _to_raw(r: Dict[str, Any]) -> RawTransaction:
        return RawTransaction(
            tx_hash=str(r.get("hash") or ""),
            timestamp=int(r.get("timeStamp") or 0),
            from_address=(r.get("from") or "").lower(),
            to_address=(r.get("to") or "").lower() or None,
            value_raw=str(r.get("value") or "0"),
        )

    # ---------- port methods ----------

    def fetch_transactions(
        self,
        address: str,
        chain_id: int,
        limit: int = FLOW_TX_FETCH_LIMIT,
    ) -> List[RawTransaction]:
        data = self._call(chain_id, {
            "module": "account",
            "action": "txlist",
            "address": address,
            "startblock": 0,
            "endblock": 99999999,
            "page": 1,
            "offset": int(limit),
            "sort": "desc",
        })

        rows = data.get("result")
        if str(data.get("status", "1")) == "0":
            message = str(data.get("message", ""))
            if "no transactions" in message.lower():
                return []
            raise DataSourceError(f"Etherscan error for {address}: {message}: {rows}")

        if not isinstance(rows, list):
            raise DataSourceError(f"Invalid txlist result for {address}: {rows!r}")

        out: List[RawTransaction] = []
        for r in rows[: int(limit)]:
            if not isinstance(r, dict):
                continue
            try:
                out.append(self._to_raw(r))
            except (TypeError, ValueError):
                logger.debug("Skipping malformed txlist row for %s: %r", address, r)
        return out
