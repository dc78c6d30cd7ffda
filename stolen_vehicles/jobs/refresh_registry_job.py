import argparse
import logging

from typing import List

from stolen_vehicles.jobs.base_job import BaseJob
from stolen_vehicles.models.response.refresh_response import RefreshResponse
from stolen_vehicles.models.stolen_vehicle_record import StolenVehicleRecord
from stolen_vehicles.services.apis.police_feed_service import PoliceFeedService
from stolen_vehicles.services.constants.exceptions import FetchError
from stolen_vehicles.services.dataset_store import DatasetStore
from stolen_vehicles.services.registry_refresher import RegistryRefresher

LOG = logging.getLogger(__name__)


class RefreshRegistryJob(BaseJob):
    """ Download the stolen vehicle list once and save the snapshot. """

    def perform(self, *args, **kwargs) -> RefreshResponse:
        is_dry_run: bool = kwargs.get('is_dry_run') or False
        snapshot_path: str = kwargs.get('snapshot_path')

        if is_dry_run:
            try:
                records: List[StolenVehicleRecord]
                records, skipped_rows = PoliceFeedService().fetch_records()
            except FetchError as exc:
                LOG.error(exc)
                return RefreshResponse(success=False, message=str(exc))

            LOG.info(
                f'Dry run: parsed {len(records)} records, skipped {skipped_rows}.')

            return RefreshResponse(
                success=True, count=len(records), skipped_rows=skipped_rows)

        refresher = RegistryRefresher(
            dataset_store=DatasetStore(snapshot_path=snapshot_path))

        return refresher.refresh()


def parse_args():
    parser = argparse.ArgumentParser(
        description='Refresh the stolen vehicle snapshot.')

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help="Parse the feed but don't save the snapshot")

    BaseJob.add_snapshot_path_argument(
        parser, help_text='Where to write the snapshot')

    return parser.parse_args()

if __name__ == '__main__':
    BaseJob.configure_logging()

    arguments = parse_args()

    job = RefreshRegistryJob()
    job.run(is_dry_run=arguments.dry_run, snapshot_path=arguments.snapshot_path)
