from dataclasses import dataclass
from typing import Optional

from stolen_vehicles.models.recognition_result import RecognitionResult
from stolen_vehicles.services.constants.exceptions import RecognitionError


@dataclass(frozen=True)
class RecognitionResponse:
    """ Represents a response from the plate recognition provider """
    success: bool

    data: Optional[RecognitionResult] = None
    error: Optional[RecognitionError] = None
    message: Optional[str] = None
