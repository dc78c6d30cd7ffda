import argparse
import logging

LOG = logging.getLogger(__name__)

class BaseJob:

    def perform(self, *args, **kwargs):
        raise NotImplementedError(
            'Subclassed job must implement this method.')

    def run(self, *args, **kwargs):
        try:
            return self.perform(*args, **kwargs)
        except NotImplementedError as ex:
            LOG.error(ex)

    @staticmethod
    def add_snapshot_path_argument(parser: argparse.ArgumentParser,
                                   help_text: str) -> argparse.ArgumentParser:
        """Jobs fall back to STOLEN_VEHICLES_SNAPSHOT_PATH when omitted."""
        parser.add_argument(
            '--snapshot-path',
            default=None,
            help=help_text)

        return parser

    @staticmethod
    def configure_logging(level: int = logging.INFO) -> None:
        logging.basicConfig(level=level,
                            format='%(asctime)s %(levelname)s: %(message)s',
                            datefmt='%Y-%m-%d %H:%M:%S')
