# tests/test_runner.py

"""Tests for the headless CLI commands and entry point."""

import io
import json
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest.mock import MagicMock, patch

from bs4 import BeautifulSoup

from goldwatch.cli.runner import run_health_check, run_once, serve
from goldwatch.scrapers.errors import FetchError
from goldwatch.services.health_checker import HealthResult
from main import main

FIXTURES_DIR = Path(__file__).parent / "fixtures"
URL = "https://www.goldtraders.or.th/"


def _page() -> BeautifulSoup:
    html = (FIXTURES_DIR / "goldtraders_home.html").read_text(
        encoding="utf-8"
    )
    return BeautifulSoup(html, "lxml")


@patch("goldwatch.cli.runner.PageFetcher")
class TestRunOnce(unittest.TestCase):
    """--once fetches a single record and prints it."""

    def test_json_output(self, mock_fetcher_cls: MagicMock) -> None:
        mock_fetcher_cls.return_value.fetch.return_value = _page()
        out = io.StringIO()
        with redirect_stdout(out):
            code = run_once(URL, "json")
        self.assertEqual(code, 0)
        data = json.loads(out.getvalue())
        self.assertEqual(data["bar"]["sell"], 59450.0)
        mock_fetcher_cls.return_value.close.assert_called_once()

    def test_table_output(self, mock_fetcher_cls: MagicMock) -> None:
        mock_fetcher_cls.return_value.fetch.return_value = _page()
        with patch("goldwatch.cli.runner.Console") as mock_console:
            code = run_once(URL, "table")
        self.assertEqual(code, 0)
        mock_console.return_value.print.assert_called_once()

    def test_failure_exit_code(self, mock_fetcher_cls: MagicMock) -> None:
        mock_fetcher_cls.return_value.fetch.side_effect = FetchError(
            URL, status=500
        )
        self.assertEqual(run_once(URL, "json"), 1)
        mock_fetcher_cls.return_value.close.assert_called_once()


@patch("goldwatch.cli.runner.Console")
@patch("goldwatch.cli.runner.probe_source")
class TestRunHealthCheck(unittest.TestCase):
    """--health maps the probe result onto an exit code."""

    def _result(self, status: str, parsed: bool) -> HealthResult:
        return HealthResult(
            url=URL, status=status, latency_ms=120.0,
            parsed=parsed, message="",
        )

    def test_ok(self, mock_probe: MagicMock, _console: MagicMock) -> None:
        mock_probe.return_value = self._result("ok", True)
        self.assertEqual(run_health_check(URL), 0)

    def test_slow_is_not_failure(
        self, mock_probe: MagicMock, _console: MagicMock,
    ) -> None:
        mock_probe.return_value = self._result("slow", True)
        self.assertEqual(run_health_check(URL), 0)

    def test_down(self, mock_probe: MagicMock, _console: MagicMock) -> None:
        mock_probe.return_value = self._result("down", False)
        self.assertEqual(run_health_check(URL), 1)

    def test_unparsed(
        self, mock_probe: MagicMock, _console: MagicMock,
    ) -> None:
        mock_probe.return_value = self._result("ok", False)
        self.assertEqual(run_health_check(URL), 1)


class TestServe(unittest.TestCase):
    """serve() composes cache, poller and app for uvicorn."""

    @patch("goldwatch.scrapers.fetcher.curl_requests.Session")
    @patch("uvicorn.run")
    def test_wires_app(
        self, mock_run: MagicMock, _session: MagicMock,
    ) -> None:
        self.assertEqual(serve("0.0.0.0", 9000, URL, 2.5), 0)
        args, kwargs = mock_run.call_args
        self.assertEqual(kwargs["host"], "0.0.0.0")
        self.assertEqual(kwargs["port"], 9000)
        self.assertEqual(args[0].title, "goldwatch")

    @patch("goldwatch.config.settings.Settings.POLL_INTERVAL", 0.0)
    @patch("goldwatch.scrapers.fetcher.curl_requests.Session")
    @patch("uvicorn.run")
    def test_bad_configured_interval_exits_cleanly(
        self, mock_run: MagicMock, _session: MagicMock,
    ) -> None:
        """A non-positive GOLDWATCH_POLL_INTERVAL returns 1, no traceback."""
        self.assertEqual(serve(None, None, URL, None), 1)
        mock_run.assert_not_called()


class TestMain(unittest.TestCase):
    """main() routes flags to the right command."""

    @patch("goldwatch.cli.runner.run_once", return_value=0)
    def test_once(self, mock_once: MagicMock) -> None:
        with self.assertRaises(SystemExit) as ctx:
            main(["--once", "-f", "table", "--url", URL])
        self.assertEqual(ctx.exception.code, 0)
        mock_once.assert_called_once_with(URL, "table")

    @patch("goldwatch.cli.runner.run_health_check", return_value=1)
    def test_health(self, mock_health: MagicMock) -> None:
        with self.assertRaises(SystemExit) as ctx:
            main(["--health"])
        self.assertEqual(ctx.exception.code, 1)
        mock_health.assert_called_once_with(None)

    @patch("goldwatch.cli.runner.serve", return_value=0)
    def test_default_serves(self, mock_serve: MagicMock) -> None:
        with self.assertRaises(SystemExit):
            main(["--port", "9001", "--interval", "10"])
        mock_serve.assert_called_once_with(None, 9001, None, 10.0)

    def test_interval_must_be_positive(self) -> None:
        """Zero, negative or non-numeric intervals exit with usage."""
        for value in ("0", "-5", "nan", "inf", "soon"):
            with self.subTest(value=value):
                with patch("goldwatch.cli.runner.serve") as mock_serve:
                    with redirect_stderr(io.StringIO()) as err:
                        with self.assertRaises(SystemExit) as ctx:
                            main(["--interval", value])
                self.assertEqual(ctx.exception.code, 2)
                self.assertIn("--interval", err.getvalue())
                mock_serve.assert_not_called()

    def test_once_and_health_exclusive(self) -> None:
        with redirect_stdout(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                main(["--once", "--health"])
        self.assertEqual(ctx.exception.code, 2)


if __name__ == "__main__":
    unittest.main()
