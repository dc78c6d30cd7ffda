from dataclasses import dataclass
from typing import Optional

from stolen_vehicles.constants import L10N
from stolen_vehicles.models.stolen_vehicle_record import StolenVehicleRecord
from stolen_vehicles.services.constants.exceptions import StolenVehiclesException


@dataclass
class LookupVerdict:
    """ Represents the outcome of looking up one image."""

    freshness: Optional[str] = None

    def reply_message(self) -> str:
        raise NotImplementedError(
            'Subclassed verdict must implement this method.')


@dataclass
class StolenVerdict(LookupVerdict):
    """ The detected plate is on the stolen vehicle list."""

    plate: str = ''
    record: Optional[StolenVehicleRecord] = None

    def reply_message(self) -> str:
        return L10N.STOLEN_VERDICT_STRING.format(
            plate=self.plate,
            brand=self.record.brand,
            model=self.record.model,
            year=self.record.year,
            colour=self.record.colour,
            place=self.record.place,
            date=self.record.report_date,
            freshness=self.freshness)


@dataclass
class ClearVerdict(LookupVerdict):
    """ The detected plate is not on the stolen vehicle list."""

    plate: str = ''

    def reply_message(self) -> str:
        return L10N.CLEAR_VERDICT_STRING.format(self.plate, self.freshness)


@dataclass
class NoPlateDetectedVerdict(LookupVerdict):

    def reply_message(self) -> str:
        return L10N.NO_PLATE_DETECTED_STRING


@dataclass
class FailedLookupVerdict(LookupVerdict):
    """ The image could not be processed.

    The error is kept for logging; the requester only sees a generic reply.
    """

    error: Optional[StolenVehiclesException] = None

    def reply_message(self) -> str:
        return L10N.FAILED_LOOKUP_STRING
