import unittest
from unittest.mock import patch, MagicMock
import os
import sys
from datetime import datetime, timedelta, timezone

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pymongo.errors import PyMongoError

from mail_to_calendar.exceptions import UnavailableError
from mail_to_calendar.models import CalendarEvent, CorrelationResult, EmailMessage, EventDescriptor
from mail_to_calendar.services.ledger import OutcomeAction
from mail_to_calendar.workflows.event_pipeline import process_cancellation, process_confirmation, run

START = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


class PipelineTestCase(unittest.TestCase):

    def setUp(self):
        self.email = EmailMessage(id="m1", subject="Reserva", sender="club@example.com")
        self.descriptor = EventDescriptor(title="Pádel", start=START, end=START + timedelta(hours=1))
        self.existing = CalendarEvent(id="e1", title="Pádel", start=START)
        self.correlator = MagicMock()
        self.calendar = MagicMock()
        self.mailbox = MagicMock()
        self.ledger = MagicMock()
        self.deps = {
            "correlator": self.correlator,
            "calendar": self.calendar,
            "mailbox": self.mailbox,
            "ledger": self.ledger,
            "model": "test-model",
            "default_time_zone": "Europe/Madrid",
        }

    def recorded_action(self):
        self.ledger.record.assert_called_once()
        return self.ledger.record.call_args[0][0]


class TestProcessConfirmation(PipelineTestCase):

    @patch('mail_to_calendar.workflows.event_pipeline.extract_event_details')
    def test_creates_event_when_no_duplicate(self, mock_extract):
        mock_extract.return_value = self.descriptor
        self.correlator.find_duplicate.return_value = CorrelationResult.no_match()
        self.calendar.insert_event.return_value = CalendarEvent(id="new", title="Pádel", start=START)

        action = process_confirmation(self.email, **self.deps)

        self.assertEqual(action, OutcomeAction.CREATED)
        self.calendar.insert_event.assert_called_once_with(self.descriptor)
        self.assertEqual(self.recorded_action(), OutcomeAction.CREATED)
        self.mailbox.mark_as_read.assert_called_once_with("m1")
        mock_extract.assert_called_once_with(self.email, model="test-model", default_time_zone="Europe/Madrid")

    @patch('mail_to_calendar.workflows.event_pipeline.extract_event_details')
    def test_skips_duplicate(self, mock_extract):
        mock_extract.return_value = self.descriptor
        self.correlator.find_duplicate.return_value = CorrelationResult(event=self.existing, score=0.9)

        action = process_confirmation(self.email, **self.deps)

        self.assertEqual(action, OutcomeAction.SKIPPED)
        self.calendar.insert_event.assert_not_called()
        self.assertEqual(self.recorded_action(), OutcomeAction.SKIPPED)
        self.assertEqual(self.ledger.record.call_args.kwargs["calendar_event"]["id"], "e1")
        self.mailbox.mark_as_read.assert_called_once_with("m1")

    @patch('mail_to_calendar.workflows.event_pipeline.extract_event_details')
    def test_calendar_unavailable_records_failure(self, mock_extract):
        mock_extract.return_value = self.descriptor
        self.correlator.find_duplicate.side_effect = UnavailableError("timeout")

        action = process_confirmation(self.email, **self.deps)

        self.assertEqual(action, OutcomeAction.FAILED)
        self.calendar.insert_event.assert_not_called()
        self.assertEqual(self.recorded_action(), OutcomeAction.FAILED)
        self.mailbox.mark_as_read.assert_not_called()

    @patch('mail_to_calendar.workflows.event_pipeline.extract_event_details')
    def test_extraction_failure_leaves_email_unread(self, mock_extract):
        mock_extract.return_value = None

        self.assertIsNone(process_confirmation(self.email, **self.deps))
        self.correlator.find_duplicate.assert_not_called()
        self.ledger.record.assert_not_called()
        self.mailbox.mark_as_read.assert_not_called()


class TestProcessCancellation(PipelineTestCase):

    @patch('mail_to_calendar.workflows.event_pipeline.extract_cancellation_details')
    def test_deletes_matched_event(self, mock_extract):
        mock_extract.return_value = self.descriptor
        self.correlator.find_cancellation_target.return_value = CorrelationResult(event=self.existing, score=0.95)

        action = process_cancellation(self.email, **self.deps)

        self.assertEqual(action, OutcomeAction.DELETED)
        self.calendar.delete_event.assert_called_once_with(self.existing)
        self.assertEqual(self.recorded_action(), OutcomeAction.DELETED)
        self.mailbox.mark_as_read.assert_called_once_with("m1")

    @patch('mail_to_calendar.workflows.event_pipeline.extract_cancellation_details')
    def test_no_match_is_recorded(self, mock_extract):
        mock_extract.return_value = self.descriptor
        self.correlator.find_cancellation_target.return_value = CorrelationResult.no_match()

        action = process_cancellation(self.email, **self.deps)

        self.assertEqual(action, OutcomeAction.CANCELLATION_NOT_FOUND)
        self.calendar.delete_event.assert_not_called()
        self.assertEqual(self.recorded_action(), OutcomeAction.CANCELLATION_NOT_FOUND)
        self.mailbox.mark_as_read.assert_called_once_with("m1")

    @patch('mail_to_calendar.workflows.event_pipeline.extract_cancellation_details')
    def test_delete_failure(self, mock_extract):
        mock_extract.return_value = self.descriptor
        self.correlator.find_cancellation_target.return_value = CorrelationResult(event=self.existing, score=0.95)
        self.calendar.delete_event.side_effect = UnavailableError("gone")

        action = process_cancellation(self.email, **self.deps)

        self.assertEqual(action, OutcomeAction.DELETION_FAILED)
        self.assertEqual(self.recorded_action(), OutcomeAction.DELETION_FAILED)
        self.mailbox.mark_as_read.assert_not_called()

    @patch('mail_to_calendar.workflows.event_pipeline.extract_cancellation_details')
    def test_extraction_failure(self, mock_extract):
        mock_extract.return_value = None

        action = process_cancellation(self.email, **self.deps)

        self.assertEqual(action, OutcomeAction.CANCELLATION_ERROR)
        self.correlator.find_cancellation_target.assert_not_called()
        self.mailbox.mark_as_read.assert_called_once_with("m1")

    @patch('mail_to_calendar.workflows.event_pipeline.extract_cancellation_details')
    def test_unavailable_calendar_leaves_email_unread(self, mock_extract):
        mock_extract.return_value = self.descriptor
        self.correlator.find_cancellation_target.side_effect = UnavailableError("timeout")

        action = process_cancellation(self.email, **self.deps)

        self.assertEqual(action, OutcomeAction.CANCELLATION_ERROR)
        self.mailbox.mark_as_read.assert_not_called()


class TestRun(unittest.TestCase):

    @patch('mail_to_calendar.workflows.event_pipeline.GMAIL_CANCELLATION_QUERY', "subject:cancelada")
    @patch('mail_to_calendar.workflows.event_pipeline.GMAIL_QUERY', "subject:confirmada")
    @patch('mail_to_calendar.workflows.event_pipeline.process_cancellation')
    @patch('mail_to_calendar.workflows.event_pipeline.process_confirmation')
    @patch('mail_to_calendar.workflows.event_pipeline.get_ledger')
    @patch('mail_to_calendar.workflows.event_pipeline.Mailbox')
    @patch('mail_to_calendar.workflows.event_pipeline.get_calendar_service')
    @patch('mail_to_calendar.workflows.event_pipeline.get_gmail_service')
    def test_run_processes_both_queries(
        self,
        mock_get_gmail_service,
        mock_get_calendar_service,
        mock_mailbox_cls,
        mock_get_ledger,
        mock_process_confirmation,
        mock_process_cancellation,
    ):
        confirmation = EmailMessage(id="c1")
        cancellation = EmailMessage(id="x1")
        mock_mailbox_cls.return_value.fetch.side_effect = [[confirmation, EmailMessage(id="c2")], [cancellation]]
        mock_process_confirmation.side_effect = [OutcomeAction.CREATED, OutcomeAction.SKIPPED]
        mock_process_cancellation.return_value = OutcomeAction.DELETED

        outcomes = run()

        self.assertEqual(mock_process_confirmation.call_count, 2)
        mock_process_cancellation.assert_called_once()
        self.assertEqual(mock_process_cancellation.call_args[0][0], cancellation)
        self.assertEqual(outcomes[OutcomeAction.CREATED], 1)
        self.assertEqual(outcomes[OutcomeAction.SKIPPED], 1)
        self.assertEqual(outcomes[OutcomeAction.DELETED], 1)

    @patch('mail_to_calendar.workflows.event_pipeline.GMAIL_CANCELLATION_QUERY', None)
    @patch('mail_to_calendar.workflows.event_pipeline.GMAIL_QUERY', "subject:confirmada")
    @patch('mail_to_calendar.workflows.event_pipeline.process_cancellation')
    @patch('mail_to_calendar.workflows.event_pipeline.process_confirmation')
    @patch('mail_to_calendar.workflows.event_pipeline.get_ledger')
    @patch('mail_to_calendar.workflows.event_pipeline.Mailbox')
    @patch('mail_to_calendar.workflows.event_pipeline.get_calendar_service')
    @patch('mail_to_calendar.workflows.event_pipeline.get_gmail_service')
    def test_run_skips_unconfigured_query_and_survives_errors(
        self,
        mock_get_gmail_service,
        mock_get_calendar_service,
        mock_mailbox_cls,
        mock_get_ledger,
        mock_process_confirmation,
        mock_process_cancellation,
    ):
        mock_mailbox_cls.return_value.fetch.return_value = [EmailMessage(id="c1"), EmailMessage(id="c2")]
        mock_process_confirmation.side_effect = [UnavailableError("timeout"), OutcomeAction.CREATED]

        outcomes = run()

        mock_mailbox_cls.return_value.fetch.assert_called_once()
        mock_process_cancellation.assert_not_called()
        self.assertEqual(mock_process_confirmation.call_count, 2)
        self.assertEqual(outcomes[OutcomeAction.CREATED], 1)

    @patch('mail_to_calendar.workflows.event_pipeline.GMAIL_CANCELLATION_QUERY', None)
    @patch('mail_to_calendar.workflows.event_pipeline.GMAIL_QUERY', "subject:confirmada")
    @patch('mail_to_calendar.workflows.event_pipeline.extract_event_details')
    @patch('mail_to_calendar.workflows.event_pipeline.GoogleCalendar')
    @patch('mail_to_calendar.workflows.event_pipeline.get_ledger')
    @patch('mail_to_calendar.workflows.event_pipeline.Mailbox')
    @patch('mail_to_calendar.workflows.event_pipeline.get_calendar_service')
    @patch('mail_to_calendar.workflows.event_pipeline.get_gmail_service')
    def test_run_survives_ledger_storage_errors(
        self,
        mock_get_gmail_service,
        mock_get_calendar_service,
        mock_mailbox_cls,
        mock_get_ledger,
        mock_calendar_cls,
        mock_extract,
    ):
        mailbox = mock_mailbox_cls.return_value
        mailbox.fetch.return_value = [EmailMessage(id="c1"), EmailMessage(id="c2"), EmailMessage(id="c3")]
        mock_extract.return_value = EventDescriptor(title="Pádel", start=START, end=START + timedelta(hours=1))
        calendar = mock_calendar_cls.return_value
        calendar.list_events.return_value = []
        calendar.insert_event.return_value = CalendarEvent(id="new", title="Pádel", start=START)
        mock_get_ledger.return_value.record.side_effect = [OSError("disk full"), PyMongoError("down"), None]

        outcomes = run()

        self.assertEqual(calendar.insert_event.call_count, 3)
        mailbox.mark_as_read.assert_called_once_with("c3")
        self.assertEqual(outcomes[OutcomeAction.CREATED], 1)


if __name__ == '__main__':
    unittest.main()
