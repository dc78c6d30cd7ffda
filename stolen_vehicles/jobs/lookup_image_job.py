import argparse
import logging

from stolen_vehicles.jobs.base_job import BaseJob
from stolen_vehicles.lookup_orchestrator import LookupOrchestrator
from stolen_vehicles.models.response.lookup_verdict import LookupVerdict
from stolen_vehicles.services.constants.exceptions import StorageError
from stolen_vehicles.services.dataset_store import DatasetStore

LOG = logging.getLogger(__name__)


class LookupImageJob(BaseJob):
    """ Check a local photo against the saved stolen vehicle snapshot. """

    def perform(self, *args, **kwargs) -> LookupVerdict:
        image_path: str = kwargs['image_path']
        snapshot_path: str = kwargs.get('snapshot_path')

        dataset_store = DatasetStore(snapshot_path=snapshot_path)

        try:
            dataset_store.load_snapshot()
        except StorageError as exc:
            LOG.error(exc)

        with open(image_path, 'rb') as image_file:
            image_bytes: bytes = image_file.read()

        orchestrator = LookupOrchestrator(dataset_store=dataset_store)

        verdict: LookupVerdict = orchestrator.look_up_image(image_bytes=image_bytes)

        print(verdict.reply_message())

        return verdict


def parse_args():
    parser = argparse.ArgumentParser(
        description='Look up the license plate in a photo.')

    parser.add_argument(
        'image_path',
        help='Photo of a license plate')

    BaseJob.add_snapshot_path_argument(
        parser, help_text='Stolen vehicle snapshot to match against')

    return parser.parse_args()

if __name__ == '__main__':
    BaseJob.configure_logging()

    arguments = parse_args()

    job = LookupImageJob()
    job.run(image_path=arguments.image_path, snapshot_path=arguments.snapshot_path)
