import contextlib
import io
import json
import tempfile
import unittest
from pathlib import Path

from flowtrace.cli.main import main
from flowtrace.core.models import FlowPath, FlowResult, TransactionEdge
from flowtrace.io.output_writer import render_flow_summary, write_flow_json, write_flow_summary_md


def _result(found=True) -> FlowResult:
    paths = ()
    if found:
        paths = (
            FlowPath.from_edges("0xaaaa", [
                TransactionEdge("0xbbbb", 2.0, 1700000000, "0x1"),
                TransactionEdge("0xcccc", 1.5, 1700000100, "0x2"),
            ]),
        )
    return FlowResult(
        from_address="0xaaaa",
        to_address="0xcccc",
        chain="base",
        paths=paths,
        total_amount=sum(sum(p.amounts) for p in paths),
        search_depth=2,
        execution_time_ms=12,
    )


class OutputWriterTests(unittest.TestCase):
    def test_flow_json(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            path = write_flow_json(_result(), d)
            data = json.loads(Path(path).read_text(encoding="utf-8"))

        self.assertEqual(data["from"], "0xaaaa")
        self.assertEqual(data["totalAmount"], 3.5)
        self.assertEqual(data["paths"][0]["hops"], 2)
        self.assertEqual(data["paths"][0]["wallets"], ["0xaaaa", "0xbbbb", "0xcccc"])
        self.assertEqual(data["paths"][0]["txHashes"], ["0x1", "0x2"])

    def test_summary_lists_hops_with_explorer_links(self) -> None:
        md = render_flow_summary(_result())

        self.assertIn("## Path 1 • 2 hops • 3.5000", md)
        self.assertIn("https://basescan.org/tx/0x1", md)
        self.assertIn("2023-11-14 22:13:20 UTC", md)
        self.assertIn("**3.5000**", md)

    def test_summary_when_nothing_found(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            path = write_flow_summary_md(_result(found=False), d)
            md = Path(path).read_text(encoding="utf-8")

        self.assertIn("No transaction path found within 2 hops", md)
        self.assertNotIn("## Path 1", md)


class CliTests(unittest.TestCase):
    def test_trace_against_static_fixture(self) -> None:
        rows = [
            {"hash": "0x1", "timeStamp": "1000", "from": "0xaaaa", "to": "0xbbbb", "value": str(2 * 10**18)},
            {"hash": "0x2", "timeStamp": "1100", "from": "0xbbbb", "to": "0xcccc", "value": str(10**18)},
        ]
        with tempfile.TemporaryDirectory() as d:
            fixture = Path(d) / "txs.json"
            fixture.write_text(json.dumps(rows), encoding="utf-8")
            out_dir = Path(d) / "out"

            buf = io.StringIO()
            with contextlib.redirect_stdout(buf):
                code = main([
                    "--from", "0xaaaa",
                    "--to", "0xcccc",
                    "--max-hops", "2",
                    "--static-file", str(fixture),
                    "--out", str(out_dir),
                ])

            self.assertEqual(code, 0)
            data = json.loads((out_dir / "flow.json").read_text(encoding="utf-8"))
            self.assertTrue((out_dir / "flow_summary.md").exists())

        self.assertTrue(data["found"])
        self.assertEqual(data["totalAmount"], 3.0)
        self.assertIn("Found 1 path(s)", buf.getvalue())

    def test_same_address_exits_with_usage_error(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            fixture = Path(d) / "txs.json"
            fixture.write_text("[]", encoding="utf-8")
            with contextlib.redirect_stdout(io.StringIO()), contextlib.redirect_stderr(io.StringIO()):
                code = main(["--from", "0xaaaa", "--to", "0xAAAA", "--static-file", str(fixture), "--out", d])

        self.assertEqual(code, 2)


if __name__ == "__main__":
    unittest.main()
