import mock
import os
import requests
import unittest

from unittest.mock import MagicMock

from stolen_vehicles.models.message_event import MessageEvent
from stolen_vehicles.services.twitter_service import StolenVehicleTweeter

MEDIA_URL = 'https://ton.twitter.com/1.1/ton/data/dm/1/2/plate.jpg'


def direct_message(message_id: int,
                   sender_id: str,
                   created_timestamp: int,
                   media_url: str = None,
                   text: str = 'is this stolen?'):
    message_data = {'text': text, 'entities': {}}

    if media_url:
        message_data['attachment'] = {
            'type': 'media',
            'media': {'media_url_https': media_url}}

    return MagicMock(
        id=message_id,
        created_timestamp=str(created_timestamp),
        message_create={
            'message_data': message_data,
            'sender_id': sender_id},
        name=f'direct_message_{message_id}')


class TestStolenVehicleTweeter(unittest.TestCase):

    def setUp(self):
        self.orchestrator = MagicMock(name='orchestrator')

        with mock.patch.dict(os.environ, {'TWITTER_USER_ID': '999'}):
            self.tweeter = StolenVehicleTweeter(orchestrator=self.orchestrator)

        self.tweeter._api = MagicMock(name='api')

        self.log_patcher = mock.patch(
            'stolen_vehicles.services.twitter_service.LOG')
        self.mocked_log = self.log_patcher.start()

    def tearDown(self):
        self.tweeter.terminate_lookups()
        self.log_patcher.stop()

    def test_new_messages_skips_old_own_and_seen_messages(self):
        started_at = self.tweeter._started_at

        before_start = direct_message(1, '123', started_at - 1000)
        from_self = direct_message(2, '999', started_at + 1000)
        new_message = direct_message(3, '123', started_at + 2000)

        self.assertEqual(
            self.tweeter._new_messages([new_message, from_self, before_start]),
            [new_message])

        # already answered
        self.assertEqual(self.tweeter._new_messages([new_message]), [])

    def test_new_messages_forgets_ids_older_than_returned_page(self):
        started_at = self.tweeter._started_at

        self.tweeter._new_messages([
            direct_message(1, '123', started_at + 1000),
            direct_message(2, '123', started_at + 2000)])

        self.tweeter._new_messages([
            direct_message(2, '123', started_at + 2000),
            direct_message(3, '123', started_at + 3000)])

        self.assertEqual(self.tweeter._seen_message_ids, {'2', '3'})

    @mock.patch('stolen_vehicles.services.twitter_service.threading')
    def test_overlapping_poll_is_skipped(self, mocked_threading):
        self.tweeter._polling.acquire()

        try:
            self.tweeter.find_and_respond_to_requests()
        finally:
            self.tweeter._polling.release()

        mocked_threading.Timer.return_value.start.assert_called_with()
        self.tweeter._api.get_direct_messages.assert_not_called()
        self.mocked_log.warning.assert_called_once()

    @mock.patch('stolen_vehicles.services.twitter_service.threading')
    def test_only_pending_timer_is_kept(self, mocked_threading):
        self.tweeter._api.get_direct_messages.return_value = []

        self.tweeter.find_and_respond_to_requests()
        self.tweeter.find_and_respond_to_requests()

        self.assertEqual(len(self.tweeter._lookup_threads), 1)

    @mock.patch.dict(os.environ, {'ENV': 'development'})
    @mock.patch('stolen_vehicles.services.twitter_service.threading')
    def test_find_and_respond_to_requests(self, mocked_threading):
        message = direct_message(3, '123', self.tweeter._started_at + 1)
        self.tweeter._api.get_direct_messages.return_value = [message]

        self.tweeter.find_and_respond_to_requests()

        self.tweeter._api.get_direct_messages.assert_called_with(count=50)

        mocked_threading.Timer.assert_called_with(
            300.0, self.tweeter._find_and_respond_to_direct_messages)
        mocked_threading.Timer.return_value.start.assert_called_with()

        mocked_threading.Thread.assert_called_with(
            target=self.tweeter._process_direct_message, args=(message,))
        mocked_threading.Thread.return_value.start.assert_called_with()

    @mock.patch('stolen_vehicles.services.twitter_service.threading')
    def test_find_and_respond_to_requests_with_api_error(self, mocked_threading):
        self.tweeter._api.get_direct_messages.side_effect = Exception('rate limited')

        self.tweeter.find_and_respond_to_requests()

        self.mocked_log.exception.assert_called_once()
        mocked_threading.Thread.assert_not_called()
        self.assertFalse(self.tweeter._polling.locked())

    @mock.patch('stolen_vehicles.services.twitter_service.requests.get')
    def test_process_direct_message_with_media(self, mocked_get):
        mocked_get.return_value.content = b'image'

        message = direct_message(
            3, '123', self.tweeter._started_at + 1, media_url=MEDIA_URL)

        self.tweeter._process_direct_message(message)

        mocked_get.assert_called_with(
            MEDIA_URL,
            auth=self.tweeter._api.auth.apply_auth(),
            timeout=30.0)

        _, kwargs = self.orchestrator.handle_event.call_args
        self.assertEqual(kwargs['event'], MessageEvent(
            event_id='3',
            sender_id='123',
            text='is this stolen?',
            media=b'image',
            created_at=self.tweeter._started_at + 1))

        with mock.patch.object(self.tweeter, '_send_direct_message') as mocked_send:
            kwargs['reply']('Plate detected: ABC123 - Not reported stolen')

        mocked_send.assert_called_with(
            message='Plate detected: ABC123 - Not reported stolen',
            recipient_id='123')

    def test_process_direct_message_without_media(self):
        message = direct_message(3, '123', self.tweeter._started_at + 1)

        self.tweeter._process_direct_message(message)

        _, kwargs = self.orchestrator.handle_event.call_args
        self.assertIsNone(kwargs['event'].media)

    @mock.patch('stolen_vehicles.services.twitter_service.requests.get')
    def test_process_direct_message_with_failed_download(self, mocked_get):
        mocked_get.side_effect = requests.exceptions.ConnectionError('reset')

        message = direct_message(
            3, '123', self.tweeter._started_at + 1, media_url=MEDIA_URL)

        with mock.patch.object(self.tweeter, '_send_direct_message') as mocked_send:
            self.tweeter._process_direct_message(message)

        mocked_send.assert_called_with(
            message="Sorry, I couldn't process that image. Please try again later.",
            recipient_id='123')
        self.orchestrator.handle_event.assert_not_called()

    def test_process_direct_message_logs_unexpected_errors(self):
        self.orchestrator.handle_event.side_effect = RuntimeError('boom')

        self.tweeter._process_direct_message(
            direct_message(3, '123', self.tweeter._started_at + 1))

        self.mocked_log.exception.assert_called_once()

    @mock.patch.dict(os.environ, {'ENV': 'production'})
    def test_send_direct_message_in_production(self):
        self.tweeter._api.send_direct_message.return_value = MagicMock(id=42)

        self.assertEqual(
            self.tweeter._send_direct_message(message='hi', recipient_id='123'), 42)

        self.tweeter._api.send_direct_message.assert_called_with(
            recipient_id='123', text='hi')

    @mock.patch.dict(os.environ, {'ENV': 'development'})
    def test_send_direct_message_outside_production(self):
        self.assertIsNone(
            self.tweeter._send_direct_message(message='hi', recipient_id='123'))

        self.tweeter._api.send_direct_message.assert_not_called()
