from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Tuple

from stolen_vehicles.models.stolen_vehicle_record import StolenVehicleRecord
from stolen_vehicles.utils import string_utils


@dataclass(frozen=True)
class Registry:
    """ An immutable snapshot of the stolen vehicle list.

    The index maps each normalized plate to the first record carrying it,
    so lookups return the same record an in-order scan would.
    """
    records: Tuple[StolenVehicleRecord, ...] = ()
    last_refreshed_at: Optional[datetime] = None

    index: Dict[str, StolenVehicleRecord] = field(
        default_factory=dict, init=False, compare=False, repr=False)

    def __post_init__(self):
        for record in self.records:
            normalized_plate = string_utils.normalize_plate(record.plate)

            if normalized_plate:
                self.index.setdefault(normalized_plate, record)

    def find(self, normalized_plate: str) -> Optional[StolenVehicleRecord]:
        return self.index.get(normalized_plate)
