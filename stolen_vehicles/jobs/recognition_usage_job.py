import argparse
import json
import logging

from typing import Any, Dict, Optional

from stolen_vehicles.jobs.base_job import BaseJob
from stolen_vehicles.services.apis.plate_recognizer_service import (
    PlateRecognitionClient)
from stolen_vehicles.services.constants.exceptions import RecognitionError

LOG = logging.getLogger(__name__)


class RecognitionUsageJob(BaseJob):
    """ Print how many recognition calls the api key has used. """

    def perform(self, *args, **kwargs) -> Optional[Dict[str, Any]]:
        client = PlateRecognitionClient()

        try:
            statistics: Dict[str, Any] = client.get_statistics()
        except RecognitionError as exc:
            LOG.error(f'Could not fetch usage statistics: {exc}')
            return None

        print(json.dumps(statistics, indent=2, sort_keys=True))

        return statistics


def parse_args():
    parser = argparse.ArgumentParser(
        description='Show plate recognition api usage.')

    return parser.parse_args()

if __name__ == '__main__':
    BaseJob.configure_logging()

    parse_args()

    job = RecognitionUsageJob()
    job.run()
