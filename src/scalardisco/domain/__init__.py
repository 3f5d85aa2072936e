from .description import DescriptionError, parse_description
from .device import ScalarDevice
from .events import DiscoveryEvent, DiscoveryEventType, RawReply
from .ssdp import ST_ALL, ST_SCALAR_WEBAPI, build_msearch, parse_location

__all__ = [
    "DescriptionError",
    "parse_description",
    "ScalarDevice",
    "DiscoveryEvent",
    "DiscoveryEventType",
    "RawReply",
    "ST_ALL",
    "ST_SCALAR_WEBAPI",
    "build_msearch",
    "parse_location",
]
