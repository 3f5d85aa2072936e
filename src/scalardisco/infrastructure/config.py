import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from scalardisco.domain.ssdp import DEFAULT_MX, DEFAULT_TIMEOUT_S, ST_ALL

try:
    import tomllib
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib


@dataclass(frozen=True)
class SearchConfig:
    target: str = ST_ALL
    timeout_s: float = DEFAULT_TIMEOUT_S
    mx: int = DEFAULT_MX
    adapters: tuple[str, ...] | None = None


@dataclass(frozen=True)
class DiscoveryConfig:
    search: SearchConfig = field(default_factory=SearchConfig)
    http_timeout_s: float = 3.0
    max_concurrent_fetches: int = 8
    strict_endpoints: bool = False
    log_level: str = "INFO"


def _toml_error_type():
    return getattr(tomllib, "TOMLDecodeError", ValueError)


def _reject_bool(value):
    if isinstance(value, bool):
        raise ValueError("boolean values are not valid for numeric fields")
    return value


class _SearchConfigModel(BaseModel):
    target: str = ST_ALL
    timeout_s: float = Field(default=DEFAULT_TIMEOUT_S, gt=0)
    mx: int = Field(default=DEFAULT_MX, ge=0)
    adapters: list[str] | None = None

    @field_validator("timeout_s", "mx", mode="before")
    @classmethod
    def _reject_bool_numbers(cls, value):
        return _reject_bool(value)

    @field_validator("target", mode="before")
    @classmethod
    def _default_blank_target(cls, value):
        return str(value or "").strip() or ST_ALL

    @field_validator("adapters", mode="before")
    @classmethod
    def _split_adapters(cls, value):
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value


class _DiscoveryConfigModel(BaseModel):
    search: _SearchConfigModel = Field(default_factory=_SearchConfigModel)
    http_timeout_s: float = Field(default=3.0, gt=0)
    max_concurrent_fetches: int = Field(default=8, ge=1)
    strict_endpoints: bool = False
    log_level: str = "INFO"

    @field_validator("http_timeout_s", "max_concurrent_fetches", mode="before")
    @classmethod
    def _reject_bool_numbers(cls, value):
        return _reject_bool(value)

    @field_validator("log_level", mode="before")
    @classmethod
    def _uppercase_log_level(cls, value):
        return str(value).upper()


def _default_config_path() -> Path:
    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "scalardisco" / "config.toml"
    return Path.home() / ".config" / "scalardisco" / "config.toml"


def _load_toml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    if not path.is_file():
        raise ValueError(f"Config path is not a file: {path}")
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except OSError as exc:
        raise ValueError(f"Cannot read config file: {path}") from exc
    except _toml_error_type() as exc:
        raise ValueError(f"Invalid TOML in config file: {path}") from exc
    return data if isinstance(data, dict) else {}


def _merge_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    merged = dict(data)
    search_data = dict(merged.get("search")) if isinstance(merged.get("search"), dict) else {}

    env_target = os.getenv("SCALARDISCO_SEARCH_TARGET")
    env_timeout = os.getenv("SCALARDISCO_TIMEOUT")
    env_mx = os.getenv("SCALARDISCO_MX")
    env_adapters = os.getenv("SCALARDISCO_ADAPTERS")
    env_http_timeout = os.getenv("SCALARDISCO_HTTP_TIMEOUT")
    env_log_level = os.getenv("SCALARDISCO_LOG_LEVEL")
    if env_target is not None:
        search_data["target"] = env_target
    if env_timeout is not None:
        search_data["timeout_s"] = env_timeout
    if env_mx is not None:
        search_data["mx"] = env_mx
    if env_adapters is not None:
        search_data["adapters"] = env_adapters
    if env_http_timeout is not None:
        merged["http_timeout_s"] = env_http_timeout
    if env_log_level is not None:
        merged["log_level"] = env_log_level

    merged["search"] = search_data
    return merged


def load_config(path: str | None = None) -> DiscoveryConfig:
    cfg_path = Path(path) if path else _default_config_path()
    data = _merge_env_overrides(_load_toml(cfg_path))
    try:
        parsed = _DiscoveryConfigModel.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid config values: {exc}") from exc

    search = SearchConfig(
        target=parsed.search.target,
        timeout_s=parsed.search.timeout_s,
        mx=parsed.search.mx,
        adapters=tuple(parsed.search.adapters) if parsed.search.adapters is not None else None,
    )
    return DiscoveryConfig(
        search=search,
        http_timeout_s=parsed.http_timeout_s,
        max_concurrent_fetches=parsed.max_concurrent_fetches,
        strict_endpoints=parsed.strict_endpoints,
        log_level=parsed.log_level,
    )
