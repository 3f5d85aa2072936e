from typing import List

from scalardisco.api import ScalarDiscovery
from scalardisco.domain.device import ScalarDevice


def discover(timeout_s: float = 5.0, adapters: list[str] | None = None) -> List[ScalarDevice]:
    """Search ScalarWebAPI devices once and return one record per UDN."""
    found = ScalarDiscovery(adapters=adapters).search_scalar_devices(timeout_s=timeout_s)
    uniq: dict[str, ScalarDevice] = {}
    for event in found:
        if event.device is not None and event.device.udn not in uniq:
            uniq[event.device.udn] = event.device
    return list(uniq.values())
