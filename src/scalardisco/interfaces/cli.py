import argparse
import json
import logging
import os
import sys

from scalardisco.api import ScalarDiscovery
from scalardisco.domain.events import DiscoveryEvent, DiscoveryEventType
from scalardisco.infrastructure.adapters import PsutilAdapterProvider
from scalardisco.infrastructure.config import DiscoveryConfig, load_config

LOG = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        force=True,
    )


def _build_discovery(cfg: DiscoveryConfig, args) -> ScalarDiscovery:
    adapters = args.adapter if args.adapter else cfg.search.adapters
    return ScalarDiscovery(
        mx=args.mx if args.mx is not None else cfg.search.mx,
        http_timeout_s=cfg.http_timeout_s,
        strict=args.strict or cfg.strict_endpoints,
        max_concurrent_fetches=cfg.max_concurrent_fetches,
        adapters=list(adapters) if adapters is not None else None,
    )


def _device_rows(found: list[DiscoveryEvent]) -> list[dict]:
    rows: list[dict] = []
    for event in found:
        device = event.device
        if device is None:
            continue
        rows.append(
            {
                "udn": device.udn,
                "friendly_name": device.friendly_name,
                "model_name": device.model_name,
                "location": event.location,
                "local_address": event.local_address,
                "endpoints": {t: device.endpoint(t) for t in device.service_types},
            }
        )
    return rows


def _render_device_lines(rows: list[dict]) -> list[str]:
    lines: list[str] = []
    for i, row in enumerate(rows):
        lines.append(
            f"[{i}] {row['friendly_name']} model={row['model_name']} udn={row['udn']}"
            f" via {row['local_address']} -> {row['location']}"
        )
        for service_type, url in row["endpoints"].items():
            lines.append(f"    {service_type}: {url}")
    return lines


def main() -> None:
    p = argparse.ArgumentParser(
        prog="scalardisco", description="SSDP discovery of ScalarWebAPI cameras"
    )
    p.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Override log level (e.g. DEBUG, INFO, WARNING).",
    )
    p.add_argument("--config", type=str, default=None)
    p.add_argument("--timeout", type=float, default=None, help="Search window in seconds (min 2)")
    p.add_argument("--mx", type=int, default=None)
    p.add_argument(
        "--adapter",
        action="append",
        default=None,
        help="Interface name or IPv4 address to search on (repeatable)",
    )
    p.add_argument("--strict", action="store_true", help="Report malformed descriptions")

    sub = p.add_subparsers(dest="cmd", required=True)
    cameras = sub.add_parser("cameras")
    cameras.add_argument("--json", action="store_true", dest="as_json")
    upnp = sub.add_parser("upnp")
    upnp.add_argument("--st", type=str, default=None)
    upnp.add_argument("--json", action="store_true", dest="as_json")
    sub.add_parser("adapters")

    args = p.parse_args()
    requested_log_level = args.log_level or os.getenv("SCALARDISCO_LOG_LEVEL")
    if requested_log_level is not None:
        _configure_logging(requested_log_level)

    try:
        cfg = load_config(args.config)
        if requested_log_level is None:
            _configure_logging(cfg.log_level)
        timeout_s = args.timeout if args.timeout is not None else cfg.search.timeout_s
        LOG.debug("cli command=%s timeout_s=%.2f", args.cmd, timeout_s)

        if args.cmd == "adapters":
            adapters = PsutilAdapterProvider().active_adapters()
            if not adapters:
                print("No active adapter.")
                return
            for adapter in adapters:
                print(f"{adapter.name} {adapter.address}")
            return

        discovery = _build_discovery(cfg, args)
        if args.cmd == "cameras":
            rows = _device_rows(discovery.search_scalar_devices(timeout_s=timeout_s))
            if args.as_json:
                print(json.dumps(rows, indent=2, ensure_ascii=False))
                return
            if not rows:
                print("No device detected.")
                return
            for line in _render_device_lines(rows):
                print(line)
            return

        if args.cmd == "upnp":
            descriptions: list[DiscoveryEvent] = []

            def _collect(event: DiscoveryEvent) -> None:
                if event.kind == DiscoveryEventType.DESCRIPTION_OBTAINED:
                    descriptions.append(event)

            discovery.search_upnp_devices(
                st=args.st or cfg.search.target, timeout_s=timeout_s, on_event=_collect
            )
            seen: dict[str, str] = {}
            for event in descriptions:
                seen.setdefault(event.location, event.local_address)
            if args.as_json:
                print(
                    json.dumps(
                        [{"location": k, "local_address": v} for k, v in seen.items()],
                        indent=2,
                    )
                )
                return
            if not seen:
                print("No device detected.")
                return
            for location, local_address in seen.items():
                print(f"{location} via {local_address}")
    except KeyboardInterrupt:
        return
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(2)
