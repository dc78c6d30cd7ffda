from dataclasses import dataclass
from typing import Any, Dict

from stolen_vehicles.constants.registry import FEED_COLUMNS

@dataclass(frozen=True)
class StolenVehicleRecord:
    """ Represents one row of the stolen vehicle registry """
    plate: str
    colour: str
    brand: str
    model: str
    year: str
    vehicle_type: str
    report_date: str
    place: str

    @classmethod
    def from_row(cls, row: list[str]) -> 'StolenVehicleRecord':
        return cls(*row)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StolenVehicleRecord':
        return cls(*[str(data.get(column, '')) for column in FEED_COLUMNS])

    def to_dict(self) -> Dict[str, str]:
        return dict(zip(FEED_COLUMNS, [
            self.plate,
            self.colour,
            self.brand,
            self.model,
            self.year,
            self.vehicle_type,
            self.report_date,
            self.place]))
