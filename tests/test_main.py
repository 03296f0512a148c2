import io
import json
import os
import sys
import unittest
from contextlib import redirect_stdout
from unittest.mock import patch

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from mail_to_calendar.__main__ import main


class TestMain(unittest.TestCase):

    @patch('mail_to_calendar.__main__.run_forever')
    @patch('mail_to_calendar.__main__.run')
    @patch('mail_to_calendar.__main__.get_ledger')
    def test_stats_prints_ledger_statistics(self, mock_get_ledger, mock_run, mock_run_forever):
        mock_get_ledger.return_value.stats.return_value = {
            "total": 2,
            "by_action": {"created": 1, "skipped": 1},
            "by_date": {"2024-03-01": 2},
        }

        out = io.StringIO()
        with redirect_stdout(out):
            main(["--stats"])

        self.assertEqual(json.loads(out.getvalue())["total"], 2)
        mock_get_ledger.return_value.stats.assert_called_once()
        mock_run.assert_not_called()
        mock_run_forever.assert_not_called()

    @patch('mail_to_calendar.__main__.run_forever')
    @patch('mail_to_calendar.__main__.run')
    def test_once_runs_single_pass(self, mock_run, mock_run_forever):
        main(["--once"])

        mock_run.assert_called_once_with()
        mock_run_forever.assert_not_called()

    @patch('mail_to_calendar.__main__.run_forever')
    def test_default_polls_with_interval(self, mock_run_forever):
        main(["--interval", "3"])

        mock_run_forever.assert_called_once_with(3)

    def test_once_and_stats_are_exclusive(self):
        with self.assertRaises(SystemExit):
            with redirect_stdout(io.StringIO()), patch('sys.stderr', new_callable=io.StringIO):
                main(["--once", "--stats"])


if __name__ == '__main__':
    unittest.main()
