import logging
import os
import tempfile
import time

from typing import Callable, Optional

from stolen_vehicles import settings
from stolen_vehicles.constants.environment import EnvironmentVariable
from stolen_vehicles.models.message_event import MessageEvent
from stolen_vehicles.models.recognition_result import PlateCandidate
from stolen_vehicles.models.response.lookup_verdict import (ClearVerdict,
    FailedLookupVerdict, LookupVerdict, NoPlateDetectedVerdict, StolenVerdict)
from stolen_vehicles.models.response.recognition_response import (
    RecognitionResponse)
from stolen_vehicles.models.stolen_vehicle_record import StolenVehicleRecord
from stolen_vehicles.services.apis.plate_recognizer_service import (
    PlateRecognitionClient)
from stolen_vehicles.services.constants.exceptions import StorageError
from stolen_vehicles.services.dataset_store import DatasetStore
from stolen_vehicles.utils import time_utils

LOG = logging.getLogger(__name__)


class LookupOrchestrator:
    """Turns one inbound image into a verdict: recognize the plate, match
    it against the stolen vehicle list and note how fresh that list is.
    """

    MAX_RECOGNITION_ATTEMPTS = 3
    RETRY_BACKOFF_IN_SECONDS = 1.0

    TEMP_FILE_SUFFIX = '_image.png'

    def __init__(self,
                 dataset_store: DatasetStore,
                 recognition_client: Optional[PlateRecognitionClient] = None,
                 temp_dir: Optional[str] = None):

        self.dataset_store = dataset_store
        self.recognition_client = recognition_client or PlateRecognitionClient()
        self.temp_dir: Optional[str] = temp_dir or os.getenv(
            EnvironmentVariable.STOLEN_VEHICLES_TEMP_DIR.value)

    def handle_event(self,
                     event: MessageEvent,
                     reply: Callable[[str], None]) -> Optional[LookupVerdict]:
        """Look up the image attached to a message and send the verdict
        back through `reply`. Messages without media are ignored.
        """
        LOG.debug(f'Message received from: {event.sender_id}')

        if not event.has_media():
            return None

        verdict: LookupVerdict = self.look_up_image(
            image_bytes=event.media, sender_id=event.sender_id)

        reply(verdict.reply_message())

        return verdict

    def look_up_image(self,
                      image_bytes: bytes,
                      sender_id: Optional[str] = None) -> LookupVerdict:
        try:
            image_path: str = self._write_temp_image(
                image_bytes=image_bytes, sender_id=sender_id)
        except StorageError as exc:
            LOG.error(exc)
            return FailedLookupVerdict(error=exc)

        try:
            LOG.debug(f'Recognizing plate in {image_path}')

            recognition: RecognitionResponse = self._recognize(image_path=image_path)

            if not recognition.success:
                LOG.error(
                    f'Image processing failed for {sender_id}: {recognition.message}')
                return FailedLookupVerdict(error=recognition.error)

            candidate: Optional[PlateCandidate] = recognition.data.top_candidate()

            if not candidate:
                LOG.debug('No plate detected')
                return NoPlateDetectedVerdict()

            return self._match_plate(plate=candidate.plate)

        finally:
            self._delete_temp_image(image_path=image_path)

    def freshness(self) -> str:
        return time_utils.relative_time_string(
            self.dataset_store.last_refreshed_at())

    def _match_plate(self, plate: str) -> LookupVerdict:
        LOG.debug(f'Matching plate {plate}')

        record: Optional[StolenVehicleRecord] = self.dataset_store.find_by_plate(plate)

        if record:
            LOG.info(f'Plate {plate} is reported stolen')
            return StolenVerdict(
                plate=plate, record=record, freshness=self.freshness())

        return ClearVerdict(plate=plate, freshness=self.freshness())

    def _recognize(self, image_path: str) -> RecognitionResponse:
        """Rate limits and network errors are retried with exponential
        backoff; anything else fails the lookup at once.
        """
        attempt = 1

        while True:
            response: RecognitionResponse = self.recognition_client.recognize(
                image_path=image_path)

            if (response.success or not response.error.retryable
                    or attempt >= self.MAX_RECOGNITION_ATTEMPTS):
                return response

            delay = self.RETRY_BACKOFF_IN_SECONDS * (2 ** (attempt - 1))

            LOG.warning(
                f'Recognition attempt {attempt} failed ({response.message}), '
                f'retrying in {delay} seconds')

            time.sleep(delay)
            attempt += 1

    def _write_temp_image(self, image_bytes: bytes, sender_id: Optional[str]) -> str:
        prefix = f'{sender_id}_' if sender_id else None
        image_path: Optional[str] = None

        try:
            file_descriptor, image_path = tempfile.mkstemp(
                prefix=prefix, suffix=self.TEMP_FILE_SUFFIX, dir=self.temp_dir)

            with os.fdopen(file_descriptor, 'wb') as image_file:
                image_file.write(image_bytes)

        except OSError as e:
            if image_path:
                self._delete_temp_image(image_path=image_path)

            raise StorageError(f'Could not write temporary image: {e}') from e

        return image_path

    def _delete_temp_image(self, image_path: str) -> None:
        try:
            os.remove(image_path)
            LOG.debug(f'Deleted temporary image: {image_path}')
        except OSError as e:
            LOG.error(f'Error deleting image {image_path}: {e}')
