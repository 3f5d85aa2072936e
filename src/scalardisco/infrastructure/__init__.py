from .adapters import PsutilAdapterProvider, resolve_adapters
from .config import DiscoveryConfig, SearchConfig, load_config
from .http_fetcher import HttpDescriptionFetcher
from .multicast import UdpMulticastChannel

__all__ = [
    "PsutilAdapterProvider",
    "resolve_adapters",
    "DiscoveryConfig",
    "SearchConfig",
    "load_config",
    "HttpDescriptionFetcher",
    "UdpMulticastChannel",
]
