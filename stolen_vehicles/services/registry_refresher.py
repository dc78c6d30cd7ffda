import logging
import threading

from typing import List, Optional

from stolen_vehicles.constants.registry import REFRESH_INTERVAL_IN_SECONDS
from stolen_vehicles.models.response.refresh_response import RefreshResponse
from stolen_vehicles.models.stolen_vehicle_record import StolenVehicleRecord
from stolen_vehicles.services.apis.police_feed_service import PoliceFeedService
from stolen_vehicles.services.constants.exceptions import (FetchError,
    StorageError)
from stolen_vehicles.services.dataset_store import DatasetStore

LOG = logging.getLogger(__name__)


class RegistryRefresher:
    """Keeps the DatasetStore in step with the published stolen vehicle
    list. Refreshes never overlap: a tick that fires while one is still
    running is skipped.
    """

    def __init__(self,
                 dataset_store: DatasetStore,
                 feed_service: Optional[PoliceFeedService] = None,
                 interval: float = REFRESH_INTERVAL_IN_SECONDS):

        self.dataset_store = dataset_store
        self.feed_service = feed_service or PoliceFeedService()
        self.interval = interval

        self._in_flight = threading.Lock()

        self._refresh_iteration = 0
        self._refresh_threads: List[threading.Timer] = []
        self._stopped = False

    def refresh(self) -> RefreshResponse:
        """Download, parse and persist the list, then swap it into the store.

        On any failure the store keeps its current snapshot.
        """
        if not self._in_flight.acquire(blocking=False):
            LOG.warning('Refresh already in progress, skipping.')

            return RefreshResponse(
                success=False,
                message='Refresh already in progress')

        try:
            LOG.info('Updating stolen vehicles database...')

            records: List[StolenVehicleRecord]
            records, skipped_rows = self.feed_service.fetch_records()

            self.dataset_store.save_snapshot(records)
            self.dataset_store.replace(records)

            LOG.info(f'Successfully processed {len(records)} vehicle records')

            return RefreshResponse(
                success=True,
                count=len(records),
                skipped_rows=skipped_rows)

        except (FetchError, StorageError) as exc:
            LOG.error(f'Failed to process data: {exc}')

            return RefreshResponse(
                success=False,
                message=str(exc))

        finally:
            self._in_flight.release()

    def start(self) -> None:
        """Load the last snapshot so lookups have data straight away, then
        refresh now and every `interval` seconds after.
        """
        try:
            self.dataset_store.load_snapshot()
        except StorageError as exc:
            LOG.error(exc)

        self._stopped = False
        self._refresh_on_schedule()

    def stop(self) -> None:
        self._stopped = True

        for thread in self._refresh_threads:
            thread.cancel()

        self._refresh_threads = []

    def _refresh_on_schedule(self) -> None:
        if self._stopped:
            return

        self._refresh_iteration += 1
        LOG.debug(f'Refreshing registry on iteration {self._refresh_iteration}')

        # set up timer
        refresh_thread = threading.Timer(self.interval, self._refresh_on_schedule)
        refresh_thread.daemon = True

        # keep only the pending timer
        self._refresh_threads = [refresh_thread]

        # start timer
        refresh_thread.start()

        try:
            self.refresh()
        except Exception as e:
            LOG.exception(e)
