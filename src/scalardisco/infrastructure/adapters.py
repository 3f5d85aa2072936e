import ipaddress
import logging
import socket
from typing import Iterable

import psutil

from scalardisco.application.ports import NetworkAdapter

LOG = logging.getLogger(__name__)


def _ipv4_addresses(entries) -> list[str]:
    return [e.address for e in entries if e.family == socket.AF_INET and e.address]


def _is_ipv4_literal(value: str) -> bool:
    try:
        ipaddress.IPv4Address(value)
    except ValueError:
        return False
    return True


class PsutilAdapterProvider:
    def active_adapters(self) -> list[NetworkAdapter]:
        stats = psutil.net_if_stats()
        adapters: list[NetworkAdapter] = []
        for name, entries in psutil.net_if_addrs().items():
            stat = stats.get(name)
            if stat is None or not stat.isup:
                LOG.debug("adapter skipped name=%s reason=down", name)
                continue
            usable = [a for a in _ipv4_addresses(entries) if not a.startswith("127.")]
            if not usable:
                LOG.debug("adapter skipped name=%s reason=no_ipv4", name)
                continue
            adapters.append(NetworkAdapter(name=name, address=usable[0]))
            LOG.debug("active adapter name=%s address=%s", name, usable[0])
        return adapters


def resolve_adapters(selectors: Iterable[str]) -> list[NetworkAdapter]:
    """Map interface names or IPv4 addresses to adapters.

    Unknown names are dropped with a warning; an IPv4 literal that no local
    interface carries is kept as-is.
    """
    known: list[NetworkAdapter] = []
    for name, entries in psutil.net_if_addrs().items():
        for address in _ipv4_addresses(entries):
            known.append(NetworkAdapter(name=name, address=address))

    resolved: list[NetworkAdapter] = []
    for raw in selectors:
        selector = raw.strip()
        if not selector:
            continue
        matches = [a for a in known if selector in (a.name, a.address)]
        if matches:
            picked = matches[0]
        elif _is_ipv4_literal(selector):
            picked = NetworkAdapter(name=selector, address=selector)
        else:
            LOG.warning("adapter not found: %s", selector)
            continue
        if picked not in resolved:
            resolved.append(picked)
    return resolved
