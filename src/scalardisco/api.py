import asyncio
from dataclasses import dataclass, field
from typing import Callable

from scalardisco.application.cache import DescriptionCache
from scalardisco.application.coordinator import DiscoveryCoordinator
from scalardisco.domain.events import DiscoveryEvent
from scalardisco.domain.ssdp import DEFAULT_MX, ST_ALL
from scalardisco.infrastructure.adapters import PsutilAdapterProvider, resolve_adapters
from scalardisco.infrastructure.http_fetcher import HttpDescriptionFetcher
from scalardisco.infrastructure.multicast import UdpMulticastChannel


@dataclass
class ScalarDiscovery:
    """Blocking front end over ``DiscoveryCoordinator``.

    The description cache lives as long as this object, so repeated searches
    reuse already fetched documents until ``clear_cache()`` is called.
    """

    mx: int = DEFAULT_MX
    http_timeout_s: float = 3.0
    strict: bool = False
    max_concurrent_fetches: int = 8
    adapters: list[str] | None = None
    cache: DescriptionCache = field(default_factory=DescriptionCache)

    def __post_init__(self) -> None:
        self._coordinator = DiscoveryCoordinator(
            channel_factory=UdpMulticastChannel,
            fetcher=HttpDescriptionFetcher(timeout_s=self.http_timeout_s),
            adapter_provider=PsutilAdapterProvider(),
            cache=self.cache,
            mx=self.mx,
            strict=self.strict,
            max_concurrent_fetches=self.max_concurrent_fetches,
            target_adapters=(
                resolve_adapters(self.adapters) if self.adapters is not None else None
            ),
        )

    @staticmethod
    def _run(coro):
        return asyncio.run(coro)

    def search_scalar_devices(
        self,
        timeout_s: float | None = None,
        on_event: Callable[[DiscoveryEvent], None] | None = None,
    ) -> list[DiscoveryEvent]:
        return self._run(self._coordinator.search_scalar_devices(timeout_s, on_event))

    def search_upnp_devices(
        self,
        st: str | None = ST_ALL,
        timeout_s: float | None = None,
        on_event: Callable[[DiscoveryEvent], None] | None = None,
    ) -> list[DiscoveryEvent]:
        return self._run(self._coordinator.search_upnp_devices(st, timeout_s, on_event))

    def clear_cache(self) -> None:
        self._coordinator.clear_cache()
