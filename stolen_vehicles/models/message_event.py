from dataclasses import dataclass, field
from typing import Optional

@dataclass(frozen=True)
class MessageEvent:
    """ An inbound message handed over by the messaging channel """
    event_id: str
    sender_id: str

    text: Optional[str] = None
    media: Optional[bytes] = field(default=None, repr=False)
    created_at: Optional[int] = None

    def has_media(self) -> bool:
        return bool(self.media)
