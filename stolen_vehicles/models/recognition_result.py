from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class PlateCandidate:
    """ A plate string read by the recognition provider """
    plate: str
    score: Optional[float] = None


@dataclass(frozen=True)
class RecognitionResult:
    """ Represents the plates found in one image, in the order the
        provider ranked them.
    """
    candidates: List[PlateCandidate] = field(default_factory=list)

    processing_time: Optional[float] = None
    raw: Optional[Dict[str, Any]] = field(default=None, compare=False, repr=False)

    def top_candidate(self) -> Optional[PlateCandidate]:
        return self.candidates[0] if self.candidates else None
