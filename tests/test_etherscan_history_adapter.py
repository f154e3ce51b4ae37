import unittest
from unittest import mock

import requests

from flowtrace.adapters.chain.etherscan_history_adapter import EtherscanHistoryAdapter
from flowtrace.core.errors import DataSourceError, RateLimitError


def _resp(payload):
    r = mock.Mock()
    r.raise_for_status.return_value = None
    r.json.return_value = payload
    return r


class EtherscanHistoryAdapterTests(unittest.TestCase):
    def setUp(self) -> None:
        patcher = mock.patch("flowtrace.adapters.chain.etherscan_history_adapter.backoff_sleep")
        self.backoff = patcher.start()
        self.addCleanup(patcher.stop)
        self.session = mock.Mock()

    def _adapter(self, **overrides) -> EtherscanHistoryAdapter:
        kwargs = dict(api_key="KEY", requests_per_sec=1000.0, max_retries=3, session=self.session)
        kwargs.update(overrides)
        return EtherscanHistoryAdapter(**kwargs)

    def test_parses_txlist_rows(self) -> None:
        self.session.get.return_value = _resp({
            "status": "1",
            "message": "OK",
            "result": [
                {"hash": "0x1", "timeStamp": "1700000000", "from": "0xAAAA", "to": "0xBBBB", "value": "5"},
                {"hash": "0x2", "timeStamp": "1600000000", "from": "0xaaaa", "to": "", "value": "0"},
            ],
        })
        txs = self._adapter().fetch_transactions("0xaaaa", 8453)

        self.assertEqual(len(txs), 2)
        self.assertEqual(txs[0].to_address, "0xbbbb")
        self.assertEqual(txs[0].from_address, "0xaaaa")
        self.assertEqual(txs[0].timestamp, 1700000000)
        self.assertEqual(txs[0].value_raw, "5")
        self.assertIsNone(txs[1].to_address)

        params = self.session.get.call_args.kwargs["params"]
        self.assertEqual(params["chainid"], "8453")
        self.assertEqual(params["action"], "txlist")
        self.assertEqual(params["offset"], 50)
        self.assertEqual(params["page"], 1)
        self.assertEqual(params["sort"], "desc")
        self.assertEqual(params["apikey"], "KEY")

    def test_no_transactions_is_empty(self) -> None:
        self.session.get.return_value = _resp({"status": "0", "message": "No transactions found", "result": []})
        self.assertEqual(self._adapter().fetch_transactions("0xaaaa", 1), [])

    def test_rate_limit_is_retried(self) -> None:
        self.session.get.side_effect = [
            _resp({"status": "0", "message": "NOTOK", "result": "Max rate limit reached"}),
            _resp({"status": "1", "message": "OK", "result": []}),
        ]
        self.assertEqual(self._adapter().fetch_transactions("0xaaaa", 1), [])
        self.assertEqual(self.session.get.call_count, 2)
        self.backoff.assert_called_once_with(0)

    def test_persistent_rate_limit_raises(self) -> None:
        self.session.get.return_value = _resp({"status": "0", "message": "NOTOK", "result": "Max rate limit reached"})
        with self.assertRaises(RateLimitError):
            self._adapter().fetch_transactions("0xaaaa", 1)
        self.assertEqual(self.session.get.call_count, 3)

    def test_api_error_raises_without_retry(self) -> None:
        self.session.get.return_value = _resp({"status": "0", "message": "NOTOK", "result": "Invalid API Key"})
        with self.assertRaises(DataSourceError):
            self._adapter().fetch_transactions("0xaaaa", 1)
        self.assertEqual(self.session.get.call_count, 1)

    def test_transport_failure_raises_after_retries(self) -> None:
        self.session.get.side_effect = requests.ConnectionError("down")
        with self.assertRaises(DataSourceError):
            self._adapter(max_retries=2).fetch_transactions("0xaaaa", 1)
        self.assertEqual(self.session.get.call_count, 2)

    def test_malformed_rows_skipped(self) -> None:
        self.session.get.return_value = _resp({
            "status": "1",
            "message": "OK",
            "result": [
                "garbage",
                {"hash": "0x1", "timeStamp": "soon", "from": "0xa", "to": "0xb", "value": "1"},
                {"hash": "0x2", "timeStamp": "10", "from": "0xa", "to": "0xb", "value": "1"},
            ],
        })
        txs = self._adapter().fetch_transactions("0xa", 1)
        self.assertEqual([t.tx_hash for t in txs], ["0x2"])


if __name__ == "__main__":
    unittest.main()
