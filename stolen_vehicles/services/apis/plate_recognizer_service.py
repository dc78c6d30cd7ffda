import json
import logging
import os
import requests
import requests_futures.sessions

from typing import Any, Dict, List, Optional, Tuple, Union

from stolen_vehicles import settings
from stolen_vehicles.constants import endpoints
from stolen_vehicles.constants.environment import (
    DEFAULT_HTTP_TIMEOUT_SECONDS, EnvironmentVariable)
from stolen_vehicles.models.recognition_result import (PlateCandidate,
    RecognitionResult)
from stolen_vehicles.models.response.recognition_response import (
    RecognitionResponse)
from stolen_vehicles.services.constants.exceptions import (Forbidden,
    PayloadTooLarge, RateLimited, RecognitionError, TransportError,
    UnexpectedStatus)

LOG = logging.getLogger(__name__)


class PlateRecognitionClient:
    """Client for the Plate Recognizer snapshot api.

    Errors are classified but never retried here; callers decide whether a
    RateLimited or TransportError is worth another attempt.
    """

    RESULTS_KEY = 'results'

    STATUS_ERRORS = {
        403: (Forbidden, 'Forbidden: insufficient credits or invalid API key'),
        413: (PayloadTooLarge, 'Payload Too Large: image exceeds size limits'),
        429: (RateLimited, 'Too Many Requests: rate limit exceeded'),
    }

    def __init__(self,
                 api_key: Optional[str] = None,
                 regions: Optional[Union[str, List[str]]] = None,
                 base_url: str = endpoints.PLATE_RECOGNIZER_API_BASE_URL,
                 timeout: Optional[float] = None):

        self.api_key: str = api_key or os.getenv(
            EnvironmentVariable.PLATE_RECOGNIZER_API_KEY.value, '')

        self.regions: List[str] = []
        self.set_regions(regions if regions is not None else os.getenv(
            EnvironmentVariable.PLATE_RECOGNIZER_REGIONS.value, ''))

        self.base_url = base_url

        self.timeout: float = timeout or float(os.getenv(
            EnvironmentVariable.HTTP_TIMEOUT_SECONDS.value,
            DEFAULT_HTTP_TIMEOUT_SECONDS))

        self.api = requests_futures.sessions.FuturesSession(max_workers=4)

    def set_api_key(self, api_key: str) -> 'PlateRecognitionClient':
        self.api_key = api_key

        return self

    def set_regions(self, regions: Union[str, List[str]]) -> 'PlateRecognitionClient':
        """Accepts a list of region codes or a comma-separated string."""
        if isinstance(regions, str):
            self.regions = [region.strip() for region in regions.split(',')
                            if region.strip()]
        elif isinstance(regions, (list, tuple)):
            self.regions = list(regions)

        return self

    def recognize(self,
                  image_bytes: Optional[bytes] = None,
                  image_path: Optional[str] = None,
                  image_url: Optional[str] = None,
                  mmc: bool = False,
                  direction: bool = False,
                  engine_config: Optional[Dict[str, Any]] = None,
                  camera_id: Optional[str] = None,
                  timestamp: Optional[str] = None) -> RecognitionResponse:
        """Read the license plates in an image.

        :param image_bytes: bytes: raw image content
        :param image_path: str: path to an image file
        :param image_url: str: url of an image the provider should fetch
        :param mmc: bool: predict vehicle make, model and colour
        :param direction: bool: predict direction of travel
        :param engine_config: dict: additional engine configuration
        :param camera_id: str: unique camera identifier
        :param timestamp: str: ISO 8601 capture time
        """
        if image_bytes is None and image_path is None and image_url is None:
            raise ValueError(
                'Either image_bytes, image_path or image_url must be provided')

        data: List[Tuple[str, str]] = [('regions', region) for region in self.regions]

        if mmc:
            data.append(('mmc', 'true'))
        if direction:
            data.append(('direction', 'true'))
        if engine_config:
            data.append(('config', json.dumps(engine_config)))
        if camera_id:
            data.append(('camera_id', camera_id))
        if timestamp:
            data.append(('timestamp', timestamp))

        try:
            if image_bytes is not None:
                response_json = self._perform_query(
                    endpoints.PLATE_RECOGNIZER_PLATE_READER_PATH,
                    data=data,
                    files={'upload': ('image', image_bytes)})

            elif image_path is not None:
                with open(image_path, 'rb') as image_file:
                    response_json = self._perform_query(
                        endpoints.PLATE_RECOGNIZER_PLATE_READER_PATH,
                        data=data,
                        files={'upload': (os.path.basename(image_path), image_file)})

            else:
                # a (None, value) part is sent as a plain multipart field
                response_json = self._perform_query(
                    endpoints.PLATE_RECOGNIZER_PLATE_READER_PATH,
                    data=data,
                    files={'upload_url': (None, image_url)})

            return RecognitionResponse(
                data=self._parse_recognition_result(response_json),
                success=True)

        except RecognitionError as exc:
            LOG.error(str(exc))

            return RecognitionResponse(
                error=exc,
                message=str(exc),
                success=False)

    def get_statistics(self) -> Dict[str, Any]:
        """Account usage and remaining calls for the api key."""
        return self._perform_query(
            endpoints.PLATE_RECOGNIZER_STATISTICS_PATH, method='get')

    def _headers(self) -> Dict[str, str]:
        return {'Authorization': f'Token {self.api_key}'}

    def _parse_recognition_result(self, response_json: Dict[str, Any]) -> RecognitionResult:
        results: List[Dict[str, Any]] = response_json.get(self.RESULTS_KEY) or []

        candidates: List[PlateCandidate] = [
            PlateCandidate(plate=result['plate'], score=result.get('score'))
            for result in results if result.get('plate')]

        LOG.debug(f'Provider returned {len(candidates)} plate candidates')

        return RecognitionResult(
            candidates=candidates,
            processing_time=response_json.get('processing_time'),
            raw=response_json)

    def _perform_query(self,
                       path: str,
                       method: str = 'post',
                       data: Optional[List[Tuple[str, str]]] = None,
                       files: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f'{self.base_url}{path}'

        try:
            if method == 'post':
                response = self.api.post(url,
                                         data=data,
                                         files=files,
                                         headers=self._headers(),
                                         timeout=self.timeout).result()
            else:
                response = self.api.get(url,
                                        headers=self._headers(),
                                        timeout=self.timeout).result()

        except requests.exceptions.RequestException as e:
            raise TransportError(f'Request to {url} failed: {e}') from e

        if not response.ok:
            error_class, message = self.STATUS_ERRORS.get(
                response.status_code,
                (UnexpectedStatus,
                 f'Request failed with status code {response.status_code}'))

            raise error_class(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise UnexpectedStatus(
                f'Could not decode response from {url}: {e}',
                status_code=response.status_code) from e
