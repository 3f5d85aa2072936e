from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class ScalarDevice:
    udn: str
    model_name: str
    friendly_name: str
    endpoints: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze a private copy so callers cannot mutate a shared record.
        object.__setattr__(self, "endpoints", MappingProxyType(dict(self.endpoints)))

    @property
    def service_types(self) -> list[str]:
        return sorted(self.endpoints)

    def endpoint(self, service_type: str) -> str | None:
        return self.endpoints.get(service_type)
