import json
import logging
import os
import tempfile
import threading

from datetime import datetime
from typing import Iterable, List, Optional

from stolen_vehicles import settings
from stolen_vehicles.constants.environment import EnvironmentVariable
from stolen_vehicles.constants.registry import DEFAULT_SNAPSHOT_PATH
from stolen_vehicles.models.registry import Registry
from stolen_vehicles.models.stolen_vehicle_record import StolenVehicleRecord
from stolen_vehicles.services.constants.exceptions import StorageError
from stolen_vehicles.utils import string_utils, time_utils

LOG = logging.getLogger(__name__)


class DatasetStore:
    """Holds the active stolen vehicle registry.

    Lookups read whichever Registry `self._registry` points to at the time.
    A refresh builds a complete new Registry and swaps the reference, so a
    reader sees either the old snapshot or the new one, never a mix.
    """

    def __init__(self, snapshot_path: Optional[str] = None):
        self.snapshot_path: str = snapshot_path or os.getenv(
            EnvironmentVariable.STOLEN_VEHICLES_SNAPSHOT_PATH.value,
            DEFAULT_SNAPSHOT_PATH)

        self._registry: Registry = Registry()

        # writers only; readers never take this lock
        self._write_lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._registry.records)

    def find_by_plate(self, plate: str) -> Optional[StolenVehicleRecord]:
        normalized_plate: str = string_utils.normalize_plate(plate)

        if not normalized_plate:
            return None

        return self._registry.find(normalized_plate)

    def last_refreshed_at(self) -> Optional[datetime]:
        return self._registry.last_refreshed_at

    def records(self) -> List[StolenVehicleRecord]:
        return list(self._registry.records)

    def replace(self,
                records: Iterable[StolenVehicleRecord],
                refreshed_at: Optional[datetime] = None) -> None:
        """Swap in a new registry built from `records`."""
        registry = Registry(
            records=tuple(records),
            last_refreshed_at=refreshed_at or time_utils.utc_now())

        with self._write_lock:
            self._registry = registry

        LOG.debug(f'Registry replaced with {len(registry.records)} records')

    def load_snapshot(self) -> int:
        """Load the on-disk snapshot into the store, if there is one.

        The snapshot's modification time becomes the refresh time, since
        that is when its contents were last fetched.
        """
        if not os.path.exists(self.snapshot_path):
            LOG.info(f'No snapshot found at {self.snapshot_path}')
            return 0

        try:
            with open(self.snapshot_path, 'r', encoding='utf-8') as snapshot_file:
                data = json.load(snapshot_file)

            modified_at = datetime.fromtimestamp(
                os.path.getmtime(self.snapshot_path), time_utils.UTC)

        except (OSError, ValueError) as e:
            raise StorageError(
                f'Could not read snapshot {self.snapshot_path}: {e}') from e

        if not isinstance(data, list):
            raise StorageError(
                f'Snapshot {self.snapshot_path} does not contain a list of records')

        records = [StolenVehicleRecord.from_dict(item) for item in data
                   if isinstance(item, dict)]

        self.replace(records, refreshed_at=modified_at)

        LOG.info(f'Loaded {len(records)} records from {self.snapshot_path}')

        return len(records)

    def save_snapshot(self, records: Iterable[StolenVehicleRecord]) -> None:
        """Write `records` to the snapshot file, replacing it whole."""
        directory = os.path.dirname(os.path.abspath(self.snapshot_path))
        temp_path: Optional[str] = None

        try:
            with tempfile.NamedTemporaryFile(mode='w',
                                             encoding='utf-8',
                                             dir=directory,
                                             suffix='.tmp',
                                             delete=False) as temp_file:
                temp_path = temp_file.name
                json.dump([record.to_dict() for record in records],
                          temp_file,
                          indent=2)

            os.replace(temp_path, self.snapshot_path)

        except OSError as e:
            if temp_path and os.path.exists(temp_path):
                os.remove(temp_path)

            raise StorageError(
                f'Could not write snapshot {self.snapshot_path}: {e}') from e

        LOG.debug(f'Data saved to {self.snapshot_path}')
