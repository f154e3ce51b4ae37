from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from flowtrace.config import settings
from flowtrace.core.dto import RawTransaction


class TransactionHistoryPort(ABC):
    """
    Abstract Class for fetching an address's recent transaction history.
    """

    # --- Normal transactions, most recent first ---

    @abstractmethod
    def fetch_transactions(
        self,
        address: str,
        chain_id: int,
        limit: int = settings.FLOW_TX_FETCH_LIMIT,
    ) -> List[RawTransaction]:
        """
        Return at most `limit` transactions touching `address` (in or out), newest first.
        An address with no history returns an empty list; transport failures raise DataSourceError.
        """
        raise NotImplementedError
