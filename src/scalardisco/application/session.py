import asyncio
import logging
import time
from enum import Enum
from typing import Callable

from scalardisco.application.ports import ChannelFactory, DatagramChannel, NetworkAdapter
from scalardisco.domain.events import RawReply

LOG = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    BOUND = "bound"
    SENT = "sent"
    LISTENING = "listening"
    CLOSED = "closed"


class SearchSession:
    """One M-SEARCH on one network adapter.

    ``run()`` walks Idle -> Bound -> Sent -> Listening -> Closed. A bind or
    send failure closes the session early; either way the channel is closed
    and the coroutine returns, so the caller can join on it.
    """

    def __init__(
        self,
        adapter: NetworkAdapter,
        query: bytes,
        timeout_s: float,
        channel_factory: ChannelFactory,
        sink: Callable[[RawReply], None],
    ) -> None:
        self.adapter = adapter
        self.query = query
        self.timeout_s = timeout_s
        self.state = SessionState.IDLE
        self.sent_at: float | None = None
        self.deadline: float | None = None
        self.replies = 0
        self._channel_factory = channel_factory
        self._sink = sink
        self._channel: DatagramChannel | None = None

    @property
    def is_open(self) -> bool:
        return self.state not in {SessionState.IDLE, SessionState.CLOSED}

    async def run(self) -> None:
        try:
            self._channel = self._channel_factory(self.adapter)
            try:
                self._channel.bind()
            except OSError as exc:
                LOG.warning("SSDP bind failed adapter=%s err=%s", self.adapter.name, exc)
                return
            self.state = SessionState.BOUND

            try:
                self._channel.join_group()
                self._channel.send(self.query)
            except OSError as exc:
                LOG.warning("SSDP send failed adapter=%s err=%s", self.adapter.name, exc)
                return
            self.sent_at = time.monotonic()
            self.deadline = self.sent_at + self.timeout_s
            self.state = SessionState.SENT
            LOG.debug(
                "SSDP M-SEARCH sent adapter=%s local=%s",
                self.adapter.name,
                self._channel.local_address,
            )

            self.state = SessionState.LISTENING
            try:
                await self._channel.listen(self._on_datagram)
            except OSError as exc:
                LOG.warning("SSDP listen failed adapter=%s err=%s", self.adapter.name, exc)
                return
            await asyncio.sleep(max(0.0, self.deadline - time.monotonic()))
            LOG.debug(
                "SSDP search timeout adapter=%s replies=%d", self.adapter.name, self.replies
            )
        finally:
            self._close()

    def _on_datagram(self, data: bytes, addr: tuple) -> None:
        if self.state != SessionState.LISTENING or self._channel is None:
            return
        if self.deadline is not None and time.monotonic() > self.deadline:
            return
        self.replies += 1
        remote = str(addr[0]) if addr else ""
        LOG.debug("SSDP reply adapter=%s remote=%s bytes=%d", self.adapter.name, remote, len(data))
        self._sink(
            RawReply(
                text=data.decode("utf-8", errors="ignore"),
                local_address=self._channel.local_address,
                remote_address=remote,
            )
        )

    def _close(self) -> None:
        channel = self._channel
        self._channel = None
        self.state = SessionState.CLOSED
        if channel is not None:
            channel.close()
