#!/usr/bin/env python3
"""
Tests for NotificationService fan-out and queueing.
"""

import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from redis.exceptions import ConnectionError as RedisConnectionError

from core.config_loader import NotificationConfig, NotificationChannelConfig
from core.enums import SelectionOutcome
from notification.service import NotificationService, ChannelDispatch, process_notification_task

PERIOD = SimpleNamespace(academic_year="2025/2026", announcement_date=None, reenrollment_deadline=None)


def registration(**overrides):
    values = dict(
        id=5,
        user_id=100,
        registration_number="REG-1-1-00005",
        student_name="Budi",
        student_nisn="0011223344",
        student_email="budi@example.com",
        selection_score=97.0,
        ranking=1,
        rejection_reason=None,
        path_id=3,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


class TestSyncDispatch(unittest.TestCase):

    def test_in_app_by_default(self):
        service = NotificationService()

        dispatches = service.notify_selection_result(registration(), "Jalur Zonasi", SelectionOutcome.ACCEPTED, PERIOD)

        self.assertEqual(len(dispatches), 1)
        self.assertIsInstance(dispatches[0], ChannelDispatch)
        self.assertEqual(dispatches[0].channel_type, 'in_app')
        self.assertEqual(dispatches[0].recipient, '100')
        self.assertTrue(dispatches[0].success)
        self.assertTrue(dispatches[0].notification_id)

    @patch('notification.service.process_notification_task')
    def test_channel_metadata(self, mock_task):
        mock_task.return_value = {'notification_id': 'n1', 'success': True, 'error': None}
        service = NotificationService(
            channels=['email', 'webhook'],
            channel_recipients={'webhook': 'https://hooks.example.com/ppdb'},
        )

        service.notify_selection_result(registration(), "Jalur Zonasi", SelectionOutcome.ACCEPTED, PERIOD)

        sent = {c.args[0]['channel_type']: c.args[0] for c in mock_task.call_args_list}
        self.assertEqual(sent['email']['recipient'], 'budi@example.com')
        self.assertIn('html_body', sent['email']['metadata'])
        self.assertEqual(sent['webhook']['recipient'], 'https://hooks.example.com/ppdb')
        self.assertEqual(sent['webhook']['metadata']['payload']['type'], 'selection_result')
        self.assertEqual(sent['email']['event_type'], 'selection_accepted')

    def test_missing_recipient_reported(self):
        service = NotificationService(channels=['email', 'in_app'])

        dispatches = service.notify_selection_result(
            registration(student_email=None), "Jalur Zonasi", SelectionOutcome.REJECTED, PERIOD
        )

        by_channel = {d.channel_type: d for d in dispatches}
        self.assertFalse(by_channel['email'].success)
        self.assertIn("No recipient", by_channel['email'].error)
        self.assertTrue(by_channel['in_app'].success)

    def test_unknown_channel_does_not_stop_others(self):
        service = NotificationService(channels=['pager', 'in_app'], channel_recipients={'pager': '555'})

        dispatches = service.notify_selection_result(registration(), "Jalur Zonasi", SelectionOutcome.ACCEPTED, PERIOD)

        self.assertFalse(dispatches[0].success)
        self.assertIn("Unknown channel type", dispatches[0].error)
        self.assertTrue(dispatches[1].success)

    def test_queue_status_in_sync_mode(self):
        self.assertEqual(NotificationService().get_queue_status()['status'], 'sync_mode')


class TestAsyncDispatch(unittest.TestCase):

    @patch('notification.service.Queue')
    @patch('notification.service.Redis')
    def test_enqueues_with_retry(self, mock_redis, mock_queue):
        queue = MagicMock()
        queue.enqueue.return_value = MagicMock(id='job-1')
        mock_queue.return_value = queue

        service = NotificationService(use_async_queue=True, redis_url='redis://cache:6379/0')
        dispatches = service.notify_selection_result(registration(), "Jalur Zonasi", SelectionOutcome.ACCEPTED, PERIOD)

        self.assertTrue(service.async_mode)
        mock_redis.from_url.assert_called_once_with('redis://cache:6379/0')
        self.assertEqual(dispatches[0].notification_id, 'job-1')
        args, kwargs = queue.enqueue.call_args
        self.assertIs(args[0], process_notification_task)
        self.assertEqual(kwargs['retry'].max, 3)

    @patch('notification.service.Redis')
    def test_falls_back_to_sync_when_redis_down(self, mock_redis):
        mock_redis.from_url.return_value.ping.side_effect = RedisConnectionError("refused")

        service = NotificationService(use_async_queue=True)

        self.assertFalse(service.async_mode)
        self.assertIsNone(service.queue)


class TestFromConfig(unittest.TestCase):

    def test_enabled_channels_and_recipients(self):
        config = NotificationConfig(
            enabled=True,
            base_url="https://ppdb.example.sch.id",
            channels={
                'in_app': NotificationChannelConfig(),
                'webhook': NotificationChannelConfig(recipient='https://hooks.example.com/ppdb'),
                'email': NotificationChannelConfig(enabled=False),
            },
        )

        service = NotificationService.from_config(config)

        self.assertEqual(service.channels, ['in_app', 'webhook'])
        self.assertEqual(service.channel_recipients, {'webhook': 'https://hooks.example.com/ppdb'})
        self.assertEqual(service.base_url, "https://ppdb.example.sch.id")
        self.assertFalse(service.async_mode)


class TestProcessNotificationTask(unittest.TestCase):

    @patch('notification.service.NotificationChannelFactory.get_channel')
    def test_failed_send(self, mock_get_channel):
        mock_get_channel.return_value.send.return_value = False

        result = process_notification_task({
            'channel_type': 'email', 'recipient': 'x@y.z', 'subject': 's', 'body': 'b', 'metadata': {}
        })

        self.assertFalse(result['success'])
        self.assertEqual(result['error'], "Send failed")


if __name__ == '__main__':
    unittest.main()
