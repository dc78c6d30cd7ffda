import logging
import os
import requests
import threading
import tweepy

from typing import Any, Dict, List, Optional, Set

from stolen_vehicles import settings
from stolen_vehicles.constants import L10N
from stolen_vehicles.constants.environment import (
    DEFAULT_HTTP_TIMEOUT_SECONDS, PRODUCTION, EnvironmentVariable)
from stolen_vehicles.constants.time import MILLISECONDS_PER_SECOND
from stolen_vehicles.lookup_orchestrator import LookupOrchestrator
from stolen_vehicles.models.message_event import MessageEvent
from stolen_vehicles.services.apis import twitter_api_wrapper
from stolen_vehicles.utils import time_utils

LOG = logging.getLogger(__name__)


class StolenVehicleTweeter:
    """Answers direct messages carrying a photo of a license plate."""

    PRODUCTION_DIRECT_MESSAGES_INTERVAL_IN_SECONDS = 60.0
    DEVELOPMENT_DIRECT_MESSAGES_INTERVAL_IN_SECONDS = 300.0

    MAX_DIRECT_MESSAGES_RETURNED = 50

    def __init__(self, orchestrator: LookupOrchestrator):

        self._api = None

        self.orchestrator = orchestrator

        # Log how many times we've called the api
        self._direct_messages_iteration = 0

        self._lookup_threads: List[threading.Timer] = []
        self._polling = threading.Lock()

        # Messages sent before we started are not ours to answer.
        self._started_at: int = int(
            time_utils.utc_now().timestamp() * MILLISECONDS_PER_SECOND)
        self._seen_message_ids: Set[str] = set()

        self._user_id: Optional[str] = os.getenv(
            EnvironmentVariable.TWITTER_USER_ID.value)

    def find_and_respond_to_requests(self) -> None:
        self._find_and_respond_to_direct_messages()

    def terminate_lookups(self) -> None:
        """Stop looking for direct messages to respond to."""
        for thread in self._lookup_threads:
            thread.cancel()

        self._lookup_threads = []

    def _attachment_url(self, message: Any) -> Optional[str]:
        message_data: Dict[str, Any] = message.message_create.get('message_data', {})
        attachment: Dict[str, Any] = message_data.get('attachment') or {}

        if attachment.get('type') != 'media':
            return None

        return attachment.get('media', {}).get('media_url_https')

    def _download_media(self, url: str) -> bytes:
        """Direct message media is only served to authenticated requests."""
        response = requests.get(
            url,
            auth=self._get_twitter_api().auth.apply_auth(),
            timeout=DEFAULT_HTTP_TIMEOUT_SECONDS)
        response.raise_for_status()

        return response.content

    def _find_and_respond_to_direct_messages(self) -> None:
        """Polls for direct messages that arrived since the last call and
        answers each on its own thread.
        """
        interval = (self.PRODUCTION_DIRECT_MESSAGES_INTERVAL_IN_SECONDS
            if self._is_production()
            else self.DEVELOPMENT_DIRECT_MESSAGES_INTERVAL_IN_SECONDS)

        self._direct_messages_iteration += 1
        LOG.debug(
            f'Looking up direct messages on iteration {self._direct_messages_iteration}')

        # set up timer
        direct_message_thread = threading.Timer(
            interval, self._find_and_respond_to_direct_messages)

        # keep only the pending timer
        self._lookup_threads = [direct_message_thread]

        # start timer
        direct_message_thread.start()

        # skip while a previous poll is still running
        if not self._polling.acquire(blocking=False):
            LOG.warning('Previous direct message poll still running, skipping.')
            return

        try:
            messages = self._get_twitter_api().get_direct_messages(
                count=self.MAX_DIRECT_MESSAGES_RETURNED)

            for message in self._new_messages(messages):
                lookup_thread = threading.Thread(
                    target=self._process_direct_message, args=(message,))
                lookup_thread.start()

        except Exception as e:
            LOG.exception(e)

        finally:
            self._polling.release()

    def _get_twitter_api(self) -> tweepy.API:
        """Set the api connection for this instance"""

        if not self._api:
            self._api = twitter_api_wrapper.build_api()

        return self._api

    def _is_production(self) -> bool:
        return os.getenv(EnvironmentVariable.ENV.value) == PRODUCTION

    def _new_messages(self, messages: List[Any]) -> List[Any]:
        new_messages = []

        for message in sorted(messages, key=lambda m: int(m.id)):
            message_id = str(message.id)
            sender_id = str(message.message_create['sender_id'])

            if message_id in self._seen_message_ids:
                continue

            self._seen_message_ids.add(message_id)

            if sender_id == self._user_id:
                continue

            if int(message.created_timestamp) < self._started_at:
                continue

            new_messages.append(message)

        if messages:
            # ids older than the returned page will not be seen again
            oldest_id = min(int(m.id) for m in messages)
            self._seen_message_ids = {
                message_id for message_id in self._seen_message_ids
                if int(message_id) >= oldest_id}

        LOG.debug(f'IDs of new direct messages: {[m.id for m in new_messages]}')

        return new_messages

    def _process_direct_message(self, message: Any) -> None:
        sender_id = str(message.message_create['sender_id'])

        def reply(text: str) -> None:
            self._send_direct_message(message=text, recipient_id=sender_id)

        try:
            media: Optional[bytes] = None
            media_url: Optional[str] = self._attachment_url(message)

            if media_url:
                try:
                    media = self._download_media(media_url)
                except requests.exceptions.RequestException as e:
                    LOG.error(f'Could not download media {media_url}: {e}')
                    reply(L10N.FAILED_LOOKUP_STRING)
                    return

            event = MessageEvent(
                event_id=str(message.id),
                sender_id=sender_id,
                text=message.message_create.get('message_data', {}).get('text'),
                media=media,
                created_at=int(message.created_timestamp))

            self.orchestrator.handle_event(event=event, reply=reply)

        except Exception as e:
            LOG.exception(f'An error occurred responding to {message.id}: {e}')

    def _send_direct_message(self, message: str, recipient_id: str) -> Optional[int]:
        """Send a direct message to a Twitter user."""

        if self._is_production():
            new_message = self._get_twitter_api().send_direct_message(
                recipient_id=recipient_id,
                text=message)
            return new_message.id
        else:
            LOG.debug(
                "This is where 'self._get_twitter_api()"
                ".send_direct_message(recipient_id=recipient_id, "
                "text=message)' would be called in production.")
            return None
