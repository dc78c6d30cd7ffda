import csv
import io
import logging
import os
import requests
import requests_futures.sessions

from requests.adapters import HTTPAdapter
from typing import List, Optional, Tuple
from urllib3.util.retry import Retry

from stolen_vehicles import settings
from stolen_vehicles.constants import endpoints
from stolen_vehicles.constants.environment import (
    DEFAULT_HTTP_TIMEOUT_SECONDS, EnvironmentVariable)
from stolen_vehicles.constants.registry import FEED_COLUMNS
from stolen_vehicles.models.stolen_vehicle_record import StolenVehicleRecord
from stolen_vehicles.services.constants.exceptions import FetchError, ParseError

LOG = logging.getLogger(__name__)


class PoliceFeedService:
    """Downloads and parses the stolen vehicle list published as a
    headerless CSV file.
    """

    FEED_ENCODING = 'utf-8-sig'

    def __init__(self,
                 feed_url: Optional[str] = None,
                 timeout: Optional[float] = None):

        self.feed_url: str = feed_url or os.getenv(
            EnvironmentVariable.STOLEN_VEHICLES_FEED_URL.value,
            endpoints.STOLEN_VEHICLES_FEED_URL)

        self.timeout: float = timeout or float(os.getenv(
            EnvironmentVariable.HTTP_TIMEOUT_SECONDS.value,
            DEFAULT_HTTP_TIMEOUT_SECONDS))

        # Set up retry ability
        s_req = requests_futures.sessions.FuturesSession(max_workers=1)

        retries = Retry(total=3,
                        backoff_factor=0.5,
                        status_forcelist=[500, 502, 503, 504],
                        raise_on_status=False)

        s_req.mount('https://', HTTPAdapter(max_retries=retries))

        self.api = s_req

    def fetch_records(self) -> Tuple[List[StolenVehicleRecord], int]:
        """Download the feed and return its records along with the number
        of rows that had to be dropped.
        """
        LOG.debug(f'Downloading stolen vehicle feed from {self.feed_url}')

        payload: str = self._perform_query()

        return self.parse_feed(payload)

    def parse_feed(self, payload: str) -> Tuple[List[StolenVehicleRecord], int]:
        records: List[StolenVehicleRecord] = []
        skipped_rows = 0

        reader = csv.reader(io.StringIO(payload))
        line_number = 0

        while True:
            line_number += 1

            try:
                row = self._next_row(reader=reader, line_number=line_number)
                if row is None:
                    break

                if not any(value.strip() for value in row):
                    continue

                records.append(self._parse_row(row=row, line_number=line_number))

            except ParseError as e:
                skipped_rows += 1
                LOG.warning(str(e))

        LOG.debug(
            f'CSV parsing complete. Processed {len(records)} records, '
            f'skipped {skipped_rows}.')

        return records, skipped_rows

    def _parse_row(self, row: List[str], line_number: int) -> StolenVehicleRecord:
        if len(row) != len(FEED_COLUMNS):
            raise ParseError(
                f'Skipping row {line_number}: expected {len(FEED_COLUMNS)} '
                f'columns, found {len(row)}',
                line_number=line_number)

        return StolenVehicleRecord.from_row(row)

    def _next_row(self, reader, line_number: int) -> Optional[List[str]]:
        try:
            return next(reader)

        except StopIteration:
            return None

        except csv.Error as e:
            raise ParseError(
                f'Skipping row {line_number}: {e}',
                line_number=line_number) from e

    def _perform_query(self) -> str:
        try:
            response = self.api.get(self.feed_url, timeout=self.timeout).result()

        except requests.exceptions.RequestException as e:
            raise FetchError(f'Could not download stolen vehicle feed: {e}') from e

        if not response.ok:
            raise FetchError(
                f'Stolen vehicle feed returned status code {response.status_code}')

        try:
            return response.content.decode(self.FEED_ENCODING)

        except UnicodeDecodeError as e:
            LOG.warning(
                f'Stolen vehicle feed is not valid UTF-8, replacing bad bytes: {e}')

            return response.content.decode(self.FEED_ENCODING, errors='replace')
