import asyncio
import logging
import socket

from scalardisco.application.ports import DatagramHandler, NetworkAdapter
from scalardisco.domain.ssdp import RESULT_BUFFER, SSDP_ADDR, SSDP_GROUP

LOG = logging.getLogger(__name__)
_MULTICAST_TTL = 2


class _SsdpDatagramProtocol(asyncio.DatagramProtocol):
    def __init__(self, handler: DatagramHandler) -> None:
        self.handler: DatagramHandler | None = handler

    def datagram_received(self, data: bytes, addr: tuple) -> None:
        handler = self.handler
        if handler is None:
            return
        handler(data[:RESULT_BUFFER], addr)

    def error_received(self, exc: Exception) -> None:
        LOG.debug("SSDP socket error: %s", exc)


class UdpMulticastChannel:
    """UDP socket scoped to the IPv4 address of one adapter."""

    def __init__(self, adapter: NetworkAdapter) -> None:
        self.adapter = adapter
        self.local_address = adapter.address
        self._sock: socket.socket | None = None
        self._transport: asyncio.DatagramTransport | None = None
        self._protocol: _SsdpDatagramProtocol | None = None

    def bind(self) -> None:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        try:
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, _MULTICAST_TTL)
            sock.setsockopt(
                socket.IPPROTO_IP,
                socket.IP_MULTICAST_IF,
                socket.inet_aton(self.local_address),
            )
            sock.bind((self.local_address, 0))
            sock.setblocking(False)
        except OSError:
            sock.close()
            raise
        self._sock = sock

    def join_group(self) -> None:
        mreq = socket.inet_aton(SSDP_GROUP) + socket.inet_aton(self.local_address)
        self._require_socket().setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, mreq)

    def send(self, payload: bytes) -> None:
        self._require_socket().sendto(payload, SSDP_ADDR)

    async def listen(self, handler: DatagramHandler) -> None:
        sock = self._require_socket()
        loop = asyncio.get_running_loop()
        transport, protocol = await loop.create_datagram_endpoint(
            lambda: _SsdpDatagramProtocol(handler), sock=sock
        )
        self._transport = transport
        self._protocol = protocol

    def close(self) -> None:
        if self._protocol is not None:
            self._protocol.handler = None
        if self._transport is not None:
            self._transport.close()
        elif self._sock is not None:
            self._sock.close()
        self._transport = None
        self._protocol = None
        self._sock = None

    def _require_socket(self) -> socket.socket:
        if self._sock is None:
            raise OSError("SSDP channel is not bound")
        return self._sock
