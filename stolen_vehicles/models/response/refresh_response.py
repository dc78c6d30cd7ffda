from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RefreshResponse:
    """ Represents the outcome of one stolen vehicle list refresh """
    success: bool

    count: int = 0
    skipped_rows: int = 0
    message: Optional[str] = None
