from dataclasses import dataclass
from typing import Callable, Protocol


@dataclass(frozen=True)
class NetworkAdapter:
    name: str
    address: str


DatagramHandler = Callable[[bytes, tuple], None]


class DescriptionFetchError(RuntimeError):
    pass


class DatagramChannel(Protocol):
    local_address: str

    def bind(self) -> None:
        ...

    def join_group(self) -> None:
        ...

    def send(self, payload: bytes) -> None:
        ...

    async def listen(self, handler: DatagramHandler) -> None:
        ...

    def close(self) -> None:
        ...


class ChannelFactory(Protocol):
    def __call__(self, adapter: NetworkAdapter) -> DatagramChannel:
        ...


class DescriptionFetcher(Protocol):
    async def fetch(self, url: str) -> str:
        ...


class AdapterProvider(Protocol):
    def active_adapters(self) -> list[NetworkAdapter]:
        ...
