from dataclasses import dataclass
from enum import Enum

from scalardisco.domain.device import ScalarDevice


class DiscoveryEventType(str, Enum):
    DESCRIPTION_OBTAINED = "description_obtained"
    DEVICE_DISCOVERED = "device_discovered"
    SEARCH_FINISHED = "search_finished"


@dataclass(frozen=True)
class DiscoveryEvent:
    kind: DiscoveryEventType
    location: str = ""
    local_address: str = ""
    remote_address: str = ""
    description: str | None = None
    device: ScalarDevice | None = None


@dataclass(frozen=True)
class RawReply:
    text: str
    local_address: str
    remote_address: str = ""
