import argparse
import logging

from stolen_vehicles.lookup_orchestrator import LookupOrchestrator
from stolen_vehicles.services.dataset_store import DatasetStore
from stolen_vehicles.services.registry_refresher import RegistryRefresher
from stolen_vehicles.services.twitter_service import StolenVehicleTweeter

LOGGING_LEVELS = {'critical': logging.CRITICAL,
                  'error': logging.ERROR,
                  'warning': logging.WARNING,
                  'info': logging.INFO,
                  'debug': logging.DEBUG}

LOG = logging.getLogger(__name__)

def run(snapshot_path=None):
    dataset_store = DatasetStore(snapshot_path=snapshot_path)

    # loads the saved snapshot before the first lookup can arrive
    refresher = RegistryRefresher(dataset_store=dataset_store)
    refresher.start()

    orchestrator = LookupOrchestrator(dataset_store=dataset_store)

    tweeter = StolenVehicleTweeter(orchestrator=orchestrator)
    tweeter.find_and_respond_to_requests()

def parse_args():
    parser = argparse.ArgumentParser(
        description='Run the stolen vehicle plate lookup bot')
    parser.add_argument(
        '-l',
        '--log-level',
        help='Log level')
    parser.add_argument(
        '-f',
        '--log-file',
        help='Log file name')
    parser.add_argument(
        '-s',
        '--snapshot-path',
        help='Stolen vehicle snapshot file')
    return parser.parse_args()

if __name__ == '__main__':
    args = parse_args()

    logging_level: int = LOGGING_LEVELS.get(
        args.log_level, logging.NOTSET)
    logging.basicConfig(level=logging_level, filename=args.log_file,
                        format='%(asctime)s %(levelname)s: %(message)s',
                        datefmt='%Y-%m-%d %H:%M:%S')

    run(snapshot_path=args.snapshot_path)
